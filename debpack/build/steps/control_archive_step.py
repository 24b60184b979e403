"""
控制归档步骤模块

数据归档的大小决定 Installed-Size，因此本步骤必须在数据归档之后执行。
"""

from typing import Optional, Tuple

from ...utils.logging import LogStage, success
from ...utils.variables import TokenConfig, VariableResolver
from ..build_context import BuildContext, PackagingError
from ..control_builder import ControlArchiveBuilder, MaintainerInfo
from .build_step import BuildStep


class ControlArchiveStep(BuildStep):
    """控制归档步骤"""

    def __init__(
        self,
        resolver: Optional[VariableResolver] = None,
        tokens: TokenConfig = TokenConfig(),
        maintainer: Optional[MaintainerInfo] = None,
    ):
        super().__init__("control", "构建控制归档")
        self.builder = ControlArchiveBuilder(resolver, tokens, maintainer)

    def get_progress_range(self) -> Tuple[int, int]:
        return (50, 70)

    def execute(self, context: BuildContext) -> None:
        if context.data_result is None:
            raise PackagingError("缺少数据归档结果，无法构建控制归档")

        start, end = self.get_progress_range()
        context.report("控制归档", start, "生成 control / md5sums...")

        context.package_descriptor = self.builder.build(
            context.control_files,
            context.data_result.size,
            context.data_result.checksums_text(),
            context.temp_control,
        )
        context.build_stats['control_archive_size'] = context.temp_control.stat().st_size

        context.report("控制归档", end, "控制归档完成")
        success("控制归档完成", stage=LogStage.CONTROL)
