"""
数据归档步骤模块

负责把所有数据源写入临时数据归档。
"""

from typing import Optional, Tuple

from ...utils.logging import ConsoleSink, LogStage, success
from ..build_context import BuildContext
from ..data_builder import DataArchiveBuilder
from .build_step import BuildStep


class DataArchiveStep(BuildStep):
    """数据归档步骤"""

    def __init__(self, console: Optional[ConsoleSink] = None):
        super().__init__("data", "构建数据归档")
        self.builder = DataArchiveBuilder(console)

    def get_progress_range(self) -> Tuple[int, int]:
        return (0, 50)

    def execute(self, context: BuildContext) -> None:
        start, end = self.get_progress_range()
        context.report("数据归档", start, f"数据源: {len(context.sources)}")

        result = self.builder.build(context.sources, context.temp_data, context.compression)
        context.data_result = result
        context.build_stats['total_files'] = len(result.checksums)
        context.build_stats['total_size'] = result.size
        context.build_stats['data_archive_size'] = context.temp_data.stat().st_size

        context.report("数据归档", end, f"{len(result.checksums)} 个文件")
        success("数据归档完成", stage=LogStage.DATA)
