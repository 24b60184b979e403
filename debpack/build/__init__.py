"""构建模块

数据/控制归档构建、ar 容器组装与链式哈希。
"""

from .build_context import BuildContext, PackagingError, MissingControlError, ProgressCallback
from .build_pipeline import BuildPipeline
from .compression import DataCompression
from .control_builder import ControlArchiveBuilder, MaintainerInfo
from .data_builder import DataArchiveBuilder
from .entry_sink import ArchiveEntrySink, DataArchiveResult
from .processor import Processor, read_control
from .sources import (
    ArchiveEntry,
    ArchiveSource,
    DataSource,
    DirectorySource,
    EntrySink,
    FileSource,
    LiteralPathsSource,
    PermMapper,
    create_source,
)
from .ar import read_members

__all__ = [
    # 处理器
    "Processor",
    "read_control",
    "read_members",

    # 构建管道
    "BuildPipeline",
    "BuildContext",
    "ProgressCallback",
    "DataCompression",
    "DataArchiveBuilder",
    "ControlArchiveBuilder",
    "MaintainerInfo",
    "ArchiveEntrySink",
    "DataArchiveResult",

    # 数据源
    "ArchiveEntry",
    "EntrySink",
    "DataSource",
    "DirectorySource",
    "FileSource",
    "ArchiveSource",
    "LiteralPathsSource",
    "PermMapper",
    "create_source",

    # 异常类
    "PackagingError",
    "MissingControlError",
]
