"""
数据源

每种数据源只有一个能力：把目录/文件条目依次送入接收器。
支持目录树、单个文件、嵌套归档（tar/zip）和字面路径列表四种来源。
"""

import stat
import tarfile
import zipfile
from dataclasses import dataclass, replace
from pathlib import Path
from typing import BinaryIO, List, Optional, Protocol, Sequence, Union

from ..utils.paths import perm_to_mode

DEFAULT_USER = "root"
DEFAULT_GROUP = "root"
DEFAULT_DIR_MODE = 0o755
DEFAULT_FILE_MODE = 0o644


@dataclass
class ArchiveEntry:
    """归档条目描述"""
    path: str
    user: str = DEFAULT_USER
    uid: int = 0
    group: str = DEFAULT_GROUP
    gid: int = 0
    mode: int = DEFAULT_FILE_MODE
    size: int = 0
    link_name: str = ""


class EntrySink(Protocol):
    """条目接收器协议"""

    def on_directory(self, entry: ArchiveEntry) -> None:
        ...

    def on_file(self, entry: ArchiveEntry, stream: BinaryIO) -> None:
        ...


class DataSource(Protocol):
    """数据源协议"""

    def produce(self, sink: EntrySink) -> None:
        ...


@dataclass
class PermMapper:
    """条目映射：裁剪/添加路径前缀并覆盖属主与权限"""
    prefix: str = ""
    strip: int = 0
    user: Optional[str] = None
    uid: Optional[int] = None
    group: Optional[str] = None
    gid: Optional[int] = None
    file_mode: Optional[int] = None
    dir_mode: Optional[int] = None

    def map(self, entry: ArchiveEntry, is_directory: bool) -> ArchiveEntry:
        path = entry.path.replace('\\', '/')
        if self.strip > 0:
            parts = [p for p in path.split('/') if p and p != '.']
            path = '/'.join(parts[self.strip:])
        if self.prefix:
            path = self.prefix.rstrip('/') + '/' + path.lstrip('/')

        mode = self.dir_mode if is_directory else self.file_mode
        return replace(
            entry,
            path=path,
            user=self.user if self.user is not None else entry.user,
            uid=self.uid if self.uid is not None else entry.uid,
            group=self.group if self.group is not None else entry.group,
            gid=self.gid if self.gid is not None else entry.gid,
            mode=mode if mode is not None else entry.mode,
        )


def _apply(mapper: Optional[PermMapper], entry: ArchiveEntry, is_directory: bool) -> ArchiveEntry:
    if mapper is None:
        return entry
    return mapper.map(entry, is_directory)


def _source_exists(src: Path, fail_on_missing: bool) -> bool:
    """检查数据源是否存在；允许缺失时静默跳过

    Raises:
        FileNotFoundError: 数据源不存在且 fail_on_missing 为 True
    """
    if src.exists():
        return True
    if fail_on_missing:
        raise FileNotFoundError(f"数据源不存在: {src}")
    return False


def _file_mode(st_mode: int) -> int:
    # 保留可执行位，其余统一为 644
    return 0o755 if st_mode & 0o111 else DEFAULT_FILE_MODE


class DirectorySource:
    """目录树数据源

    按名称排序遍历，子目录在其内容之前送出；根目录本身不送出。
    """

    def __init__(self, src: Union[str, Path], mapper: Optional[PermMapper] = None,
                 fail_on_missing_src: bool = True):
        self.src = Path(src)
        self.mapper = mapper
        self.fail_on_missing_src = fail_on_missing_src

    def produce(self, sink: EntrySink) -> None:
        if not _source_exists(self.src, self.fail_on_missing_src):
            return
        if not self.src.is_dir():
            raise NotADirectoryError(f"数据源不是目录: {self.src}")
        self._walk(self.src, sink)

    def _walk(self, directory: Path, sink: EntrySink) -> None:
        for item in sorted(directory.iterdir(), key=lambda p: p.name):
            relative = item.relative_to(self.src).as_posix()
            if item.is_dir():
                entry = ArchiveEntry(path=relative, mode=DEFAULT_DIR_MODE)
                sink.on_directory(_apply(self.mapper, entry, True))
                self._walk(item, sink)
            elif item.is_file():
                st = item.stat()
                entry = ArchiveEntry(path=relative, mode=_file_mode(st.st_mode), size=st.st_size)
                with open(item, 'rb') as stream:
                    sink.on_file(_apply(self.mapper, entry, False), stream)


class FileSource:
    """单文件数据源，归档内名称为文件名"""

    def __init__(self, src: Union[str, Path], mapper: Optional[PermMapper] = None,
                 fail_on_missing_src: bool = True):
        self.src = Path(src)
        self.mapper = mapper
        self.fail_on_missing_src = fail_on_missing_src

    def produce(self, sink: EntrySink) -> None:
        if not _source_exists(self.src, self.fail_on_missing_src):
            return
        st = self.src.stat()
        entry = ArchiveEntry(path=self.src.name, mode=_file_mode(st.st_mode), size=st.st_size)
        with open(self.src, 'rb') as stream:
            sink.on_file(_apply(self.mapper, entry, False), stream)


class ArchiveSource:
    """嵌套归档数据源

    重新送出 tar（任意 :mod:`tarfile` 可读的压缩）或 zip 归档中的目录与普通文件，
    保留其属主与权限；其他类型的成员（链接、设备等）被忽略。
    """

    def __init__(self, src: Union[str, Path], mapper: Optional[PermMapper] = None,
                 fail_on_missing_src: bool = True):
        self.src = Path(src)
        self.mapper = mapper
        self.fail_on_missing_src = fail_on_missing_src

    def produce(self, sink: EntrySink) -> None:
        if not _source_exists(self.src, self.fail_on_missing_src):
            return
        if zipfile.is_zipfile(self.src):
            self._produce_zip(sink)
        elif tarfile.is_tarfile(self.src):
            self._produce_tar(sink)
        else:
            raise ValueError(f"不支持的归档格式: {self.src}")

    def _produce_tar(self, sink: EntrySink) -> None:
        with tarfile.open(self.src, 'r:*') as archive:
            for member in archive:
                entry = ArchiveEntry(
                    path=member.name,
                    user=member.uname or DEFAULT_USER,
                    uid=member.uid,
                    group=member.gname or DEFAULT_GROUP,
                    gid=member.gid,
                    mode=member.mode,
                    size=member.size if member.isfile() else 0,
                )
                if member.isdir():
                    sink.on_directory(_apply(self.mapper, entry, True))
                elif member.isfile():
                    stream = archive.extractfile(member)
                    with stream:
                        sink.on_file(_apply(self.mapper, entry, False), stream)

    def _produce_zip(self, sink: EntrySink) -> None:
        with zipfile.ZipFile(self.src) as archive:
            for info in archive.infolist():
                unix_mode = stat.S_IMODE(info.external_attr >> 16)
                if info.is_dir():
                    entry = ArchiveEntry(path=info.filename, mode=unix_mode or DEFAULT_DIR_MODE)
                    sink.on_directory(_apply(self.mapper, entry, True))
                else:
                    entry = ArchiveEntry(
                        path=info.filename,
                        mode=unix_mode or DEFAULT_FILE_MODE,
                        size=info.file_size,
                    )
                    with archive.open(info) as stream:
                        sink.on_file(_apply(self.mapper, entry, False), stream)


class LiteralPathsSource:
    """字面路径数据源：每个路径作为 ``root:root`` 755 目录送出"""

    def __init__(self, paths: Sequence[str], mapper: Optional[PermMapper] = None):
        self.paths: List[str] = list(paths)
        self.mapper = mapper

    def produce(self, sink: EntrySink) -> None:
        for path in self.paths:
            entry = ArchiveEntry(path=path, mode=DEFAULT_DIR_MODE, size=0)
            sink.on_directory(_apply(self.mapper, entry, True))



def create_mapper(model) -> Optional[PermMapper]:
    """从配置模型创建条目映射，权限以八进制字符串给出"""
    if model is None:
        return None
    return PermMapper(
        prefix=model.prefix or "",
        strip=model.strip,
        user=model.user,
        uid=model.uid,
        group=model.group,
        gid=model.gid,
        file_mode=perm_to_mode(model.filemode) if model.filemode else None,
        dir_mode=perm_to_mode(model.dirmode) if model.dirmode else None,
    )


def create_source(model) -> DataSource:
    """根据配置模型创建数据源

    Args:
        model: 数据源配置（``type`` / ``src`` / ``paths`` / ``fail_on_missing_src`` / ``mapper``）

    Raises:
        ValueError: 未知的数据源类型
    """
    mapper = create_mapper(model.mapper)

    if model.type == "directory":
        return DirectorySource(model.src, mapper, model.fail_on_missing_src)
    if model.type == "file":
        return FileSource(model.src, mapper, model.fail_on_missing_src)
    if model.type == "archive":
        return ArchiveSource(model.src, mapper, model.fail_on_missing_src)
    if model.type == "literal":
        return LiteralPathsSource(model.paths, mapper)

    raise ValueError(f"未知的数据源类型: {model.type}")
