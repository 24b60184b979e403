"""
ar 归档读写

只实现 ``.deb`` 外层容器所需的通用 ar 格式：8 字节全局头，
每个成员 60 字节头部，成员数据按 2 字节对齐。
"""

import time
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

AR_MAGIC = b"!<arch>\n"
AR_HEADER_SIZE = 60
AR_MEMBER_MODE = "100644"

COPY_CHUNK_SIZE = 64 * 1024


class ArFormatError(ValueError):
    """ar 归档格式错误"""
    pass


class ArWriter:
    """ar 归档写入器"""

    def __init__(self, output: BinaryIO, mtime: Optional[float] = None):
        self._output = output
        self._mtime = int(time.time() if mtime is None else mtime)
        self._output.write(AR_MAGIC)
        self.members: List[Tuple[str, int]] = []

    def _write_header(self, name: str, size: int) -> None:
        if len(name) > 16:
            raise ArFormatError(f"成员名过长（最多 16 字符）: {name}")
        header = (
            name.ljust(16)
            + str(self._mtime).ljust(12)
            + "0".ljust(6)
            + "0".ljust(6)
            + AR_MEMBER_MODE.ljust(8)
            + str(size).ljust(10)
            + "`\n"
        ).encode("ascii")
        self._output.write(header)

    def _finish_member(self, name: str, size: int) -> None:
        if size % 2 == 1:
            self._output.write(b"\n")
        self.members.append((name, size))

    def add_bytes(self, name: str, content: bytes) -> None:
        self._write_header(name, len(content))
        self._output.write(content)
        self._finish_member(name, len(content))

    def add_file(self, name: str, path: Union[str, Path]) -> None:
        """流式写入文件内容作为成员

        Raises:
            OSError: 读取文件失败
            ArFormatError: 读取的字节数与文件大小不符
        """
        path = Path(path)
        size = path.stat().st_size
        self._write_header(name, size)

        written = 0
        with open(path, 'rb') as f:
            while True:
                chunk = f.read(COPY_CHUNK_SIZE)
                if not chunk:
                    break
                self._output.write(chunk)
                written += len(chunk)

        if written != size:
            raise ArFormatError(f"成员 {name} 大小不一致: 期望 {size}, 实际 {written}")
        self._finish_member(name, size)

    def close(self) -> None:
        self._output.close()

    def __enter__(self) -> 'ArWriter':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _iter_members(f: BinaryIO):
    if f.read(len(AR_MAGIC)) != AR_MAGIC:
        raise ArFormatError("不是 ar 归档")

    while True:
        header = f.read(AR_HEADER_SIZE)
        if not header:
            return
        if len(header) != AR_HEADER_SIZE or header[58:60] != b"`\n":
            raise ArFormatError("ar 成员头部损坏")

        name = header[0:16].decode("ascii").rstrip()
        size = int(header[48:58].decode("ascii").strip())
        yield name, size
        f.seek(size + (size % 2), 1)


def read_members(path: Union[str, Path]) -> List[Tuple[str, int]]:
    """列出 ar 归档的成员 (名称, 大小)"""
    with open(path, 'rb') as f:
        return list(_iter_members(f))


def read_member(path: Union[str, Path], member_name: str) -> bytes:
    """读取 ar 归档中指定成员的内容

    Raises:
        KeyError: 成员不存在
    """
    with open(path, 'rb') as f:
        for name, size in _iter_members(f):
            if name == member_name:
                # 生成器在 yield 时正位于成员数据起点
                return f.read(size)
    raise KeyError(member_name)
