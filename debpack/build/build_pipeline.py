"""
构建管道模块

使用管道模式协调构建步骤的执行：数据归档 → 控制归档 → 组装软件包。
"""

import time
from typing import List, Optional

from ..descriptors import InvalidDescriptorError
from ..utils import format_size
from ..utils.logging import ConsoleSink, LogStage, debug, error, info, success
from ..utils.variables import TokenConfig, VariableResolver
from .build_context import BuildContext, PackagingError
from .control_builder import MaintainerInfo
from .steps.build_step import BuildStep
from .steps.control_archive_step import ControlArchiveStep
from .steps.data_archive_step import DataArchiveStep
from .steps.package_assembly_step import PackageAssemblyStep


class BuildPipeline:
    """构建管道，负责协调构建步骤的执行"""

    def __init__(
        self,
        resolver: Optional[VariableResolver] = None,
        tokens: TokenConfig = TokenConfig(),
        maintainer: Optional[MaintainerInfo] = None,
        console: Optional[ConsoleSink] = None,
    ):
        self._steps: List[BuildStep] = [
            DataArchiveStep(console),
            ControlArchiveStep(resolver, tokens, maintainer),
            PackageAssemblyStep(),
        ]

    def add_step(self, step: BuildStep, position: Optional[int] = None) -> None:
        """添加构建步骤"""
        if position is None:
            self._steps.append(step)
        else:
            self._steps.insert(position, step)

    def remove_step(self, step_name: str) -> None:
        """移除构建步骤"""
        self._steps = [step for step in self._steps if step.name != step_name]

    def get_steps(self) -> List[BuildStep]:
        """获取所有构建步骤"""
        return self._steps.copy()

    def execute(self, context: BuildContext) -> BuildContext:
        """执行构建管道

        Args:
            context: 构建上下文

        Returns:
            BuildContext: 构建上下文，包含所有构建结果

        Raises:
            InvalidDescriptorError: 描述文件校验失败（不包装）
            PackagingError: 其他任何构建失败
        """
        context.build_stats['start_time'] = time.time()

        try:
            info(f"开始构建软件包: {context.output_path}", stage=LogStage.BUILD)
            debug(
                f"构建配置: compression={context.compression.value} "
                f"sources={len(context.sources)} control_files={len(context.control_files)}",
                stage=LogStage.BUILD,
            )

            for step in self._steps:
                info(f"执行步骤: {step.description}", stage=LogStage.BUILD)
                step.execute(context)

            context.build_stats['end_time'] = time.time()
            build_time = context.build_stats['end_time'] - context.build_stats['start_time']

            success(f"软件包构建成功: {context.output_path}", stage=LogStage.BUILD)
            info(f"构建时间: {build_time:.1f}秒")
            info(f"安装大小: {format_size(context.build_stats['total_size'])}")
            info(f"最终大小: {format_size(context.output_size)}")

            return context

        except InvalidDescriptorError as e:
            context.build_stats['end_time'] = time.time()
            error(f"描述文件无效: {e}", stage=LogStage.BUILD)
            raise
        except PackagingError as e:
            context.build_stats['end_time'] = time.time()
            error(f"构建失败: {e}", stage=LogStage.BUILD)
            raise
        except Exception as e:
            context.build_stats['end_time'] = time.time()
            error(f"构建失败: {e}", stage=LogStage.BUILD)
            raise PackagingError(f"无法创建 deb 软件包: {e}", e) from e

    def validate_pipeline(self) -> List[str]:
        """验证构建管道的完整性

        Returns:
            List[str]: 验证错误列表，空列表表示验证通过
        """
        errors = []

        if not self._steps:
            errors.append("构建管道中没有步骤")
            return errors

        prev_end = 0
        for step in self._steps:
            start, end = step.get_progress_range()
            if start != prev_end:
                errors.append(f"步骤 '{step.name}' 的进度范围不连续: 期望起始 {prev_end}%, 实际 {start}%")
            if start >= end:
                errors.append(f"步骤 '{step.name}' 的进度范围无效: {start}% - {end}%")
            prev_end = end

        if prev_end != 100:
            errors.append(f"构建管道的总进度范围不是100%: {prev_end}%")

        return errors
