"""
构建上下文模块

定义构建过程中的共享数据结构和异常类。
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence

from .compression import DataCompression

if TYPE_CHECKING:
    from ..descriptors import PackageDescriptor
    from .entry_sink import DataArchiveResult
    from .sources import DataSource

# 进度回调类型: (阶段, 当前进度, 总进度, 消息)
ProgressCallback = Callable[[str, int, int, str], None]


class PackagingError(Exception):
    """打包错误

    除描述文件校验错误外，构建过程中的所有失败都以此错误抛出，
    原始异常保存在 ``cause`` 中（同时也是 ``__cause__``）。
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class MissingControlError(FileNotFoundError):
    """控制文件列表中没有名为 ``control`` 的文件"""
    pass


@dataclass
class BuildContext:
    """构建上下文，包含一次构建过程中的共享数据"""
    control_files: Sequence[Path]
    sources: Sequence['DataSource']
    output_path: Path
    compression: DataCompression
    temp_data: Path
    temp_control: Path
    progress_callback: Optional[ProgressCallback] = None

    # 构建过程中生成的数据
    data_result: Optional['DataArchiveResult'] = None
    package_descriptor: Optional['PackageDescriptor'] = None
    digests: Dict[str, str] = field(default_factory=dict)
    output_size: int = 0

    # 统计信息
    build_stats: Dict[str, Any] = field(default_factory=lambda: {
        'start_time': 0,
        'end_time': 0,
        'total_files': 0,
        'total_size': 0,
        'data_archive_size': 0,
        'control_archive_size': 0,
    })

    def report(self, stage: str, current: int, message: str = "") -> None:
        if self.progress_callback:
            self.progress_callback(stage, current, 100, message)
