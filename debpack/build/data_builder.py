"""
数据归档构建器

把一组数据源依次送入同一个条目接收器，目录去重与排序在所有数据源之间全局生效。
"""

import tarfile
from pathlib import Path
from typing import Optional, Sequence

from ..utils.logging import ConsoleSink, data_logger
from ..utils.paths import format_size
from .compression import DataCompression
from .entry_sink import ArchiveEntrySink, DataArchiveResult
from .sources import DataSource


class DataArchiveBuilder:
    """数据归档（``data.tar[.gz|.bz2]``）构建器"""

    def __init__(self, console: Optional[ConsoleSink] = None):
        self.console = console

    def build(
        self,
        sources: Sequence[DataSource],
        output_path: Path,
        compression: DataCompression = DataCompression.GZIP,
    ) -> DataArchiveResult:
        """构建数据归档

        Args:
            sources: 数据源列表，按顺序各调用一次
            output_path: 输出文件路径
            compression: 压缩方式

        Returns:
            DataArchiveResult: 文件总字节数与校验和清单

        Raises:
            OSError: 读取数据源或写入归档失败
        """
        data_logger.info(f"构建数据归档 - 压缩: {compression.value}")

        with open(output_path, 'wb') as raw:
            with tarfile.open(fileobj=raw, mode=compression.tar_mode, format=tarfile.GNU_FORMAT) as tar:
                sink = ArchiveEntrySink(tar, self.console)
                for source in sources:
                    source.produce(sink)

        result = sink.result()
        data_logger.info(f"数据总大小: {result.size} ({format_size(result.size)})")
        data_logger.debug(f"文件数: {len(result.checksums)}, 目录数: {len(sink.directories)}")
        return result
