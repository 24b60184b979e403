"""
归档条目接收器

接收数据源产生的目录/文件条目，规范化路径、补齐父目录、目录去重，
写入 tar 条目并逐文件计算 MD5，累计校验和清单与总字节数。
"""

import hashlib
import tarfile
import time
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional, Tuple

from ..utils.logging import ConsoleSink, data_logger
from ..utils.paths import normalize_archive_path
from .sources import ArchiveEntry

# 自动补齐的父目录使用的权限，保证所有用户可遍历
SYNTHESIZED_DIR_MODE = 0o755


@dataclass
class DataArchiveResult:
    """数据归档构建结果"""
    size: int = 0
    checksums: List[Tuple[str, str]] = field(default_factory=list)

    def checksums_text(self) -> str:
        """序列化为 ``md5sums`` 文本，每行 ``hex<两个空格>path``"""
        return "".join(f"{digest}  {path}\n" for digest, path in self.checksums)


class _DigestingReader:
    """读取时同步更新哈希的流包装"""

    def __init__(self, stream: BinaryIO, hasher):
        self._stream = stream
        self._hasher = hasher

    def read(self, size: int = -1) -> bytes:
        data = self._stream.read(size)
        if data:
            self._hasher.update(data)
        return data


class ArchiveEntrySink:
    """数据归档条目接收器

    仅通过 :meth:`on_directory` 和 :meth:`on_file` 两个入口写入。
    每次构建创建一个新实例，不在多次构建之间保留状态。
    """

    def __init__(
        self,
        tar: tarfile.TarFile,
        console: Optional[ConsoleSink] = None,
        mtime: Optional[float] = None,
    ):
        self._tar = tar
        self._console = console or data_logger.debug
        self._mtime = int(time.time() if mtime is None else mtime)
        # 字典保持插入顺序，作为有序集合使用
        self._directories: Dict[str, None] = {}
        self._checksums: List[Tuple[str, str]] = []
        self._size = 0

    @property
    def directories(self) -> List[str]:
        return list(self._directories)

    @property
    def checksums(self) -> List[Tuple[str, str]]:
        return list(self._checksums)

    @property
    def size(self) -> int:
        return self._size

    def result(self) -> DataArchiveResult:
        return DataArchiveResult(size=self._size, checksums=list(self._checksums))

    def on_directory(self, entry: ArchiveEntry) -> None:
        """写入调用方显式请求的目录（保留其权限）"""
        path = normalize_archive_path(entry.path)
        self._create_parent_directories(path, entry)
        self._create_directory(path, entry, entry.mode)

    def on_file(self, entry: ArchiveEntry, stream: BinaryIO) -> None:
        """写入文件条目并计算内容 MD5

        Raises:
            OSError: 读取内容或写入归档失败
        """
        path = normalize_archive_path(entry.path)
        self._create_parent_directories(path, entry)

        info = self._tar_info(path, entry, entry.mode)
        info.type = tarfile.REGTYPE
        info.size = entry.size

        hasher = hashlib.md5()
        self._tar.addfile(info, _DigestingReader(stream, hasher))
        digest = hasher.hexdigest()

        self._size += entry.size
        self._checksums.append((digest, path))

        self._console(
            f"file:{path} size:{entry.size} mode:{entry.mode:o} linkname:{entry.link_name}"
            f" username:{entry.user} userid:{entry.uid} groupname:{entry.group}"
            f" groupid:{entry.gid} modtime:{self._mtime} md5:{digest}"
        )

    def _tar_info(self, path: str, entry: ArchiveEntry, mode: int) -> tarfile.TarInfo:
        info = tarfile.TarInfo(path)
        info.uname = entry.user
        info.uid = entry.uid
        info.gname = entry.group
        info.gid = entry.gid
        info.mode = mode
        info.mtime = self._mtime
        return info

    def _create_directory(self, path: str, entry: ArchiveEntry, mode: int) -> None:
        # 统一以 "/" 结尾，去重判断依赖这一点
        if not path.endswith('/'):
            path += '/'
        if path in self._directories:
            return

        info = self._tar_info(path, entry, mode)
        info.type = tarfile.DIRTYPE
        info.size = 0
        self._tar.addfile(info)
        self._directories[path] = None

        self._console(f"dir: {path}")

    def _create_parent_directories(self, path: str, entry: ArchiveEntry) -> None:
        """按从根到叶的顺序补齐所有父目录（包括 ``./``）"""
        stripped = path.rstrip('/')
        if '/' not in stripped:
            return

        parent = stripped.rsplit('/', 1)[0]
        parts = parent.split('/')

        current = "./"
        self._create_directory(current, entry, SYNTHESIZED_DIR_MODE)
        for part in parts[1:]:
            if not part:
                continue
            current += part + "/"
            self._create_directory(current, entry, SYNTHESIZED_DIR_MODE)
