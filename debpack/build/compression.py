"""
数据归档压缩方式

压缩方式由压缩标记唯一决定：``gzip``、``bzip2``，其余一律不压缩。
"""

from enum import Enum
from typing import List


class DataCompression(str, Enum):
    """数据归档压缩方式枚举"""
    NONE = "none"
    GZIP = "gzip"
    BZIP2 = "bzip2"

    @classmethod
    def from_token(cls, token: object) -> 'DataCompression':
        """从压缩标记解析压缩方式，无法识别的标记回退为不压缩"""
        if isinstance(token, cls):
            return token
        if token == "gzip":
            return cls.GZIP
        if token == "bzip2":
            return cls.BZIP2
        return cls.NONE

    @property
    def extension(self) -> str:
        """数据成员名 ``data.tar`` 之后的后缀"""
        return {
            DataCompression.GZIP: ".gz",
            DataCompression.BZIP2: ".bz2",
        }.get(self, "")

    @property
    def member_name(self) -> str:
        return "data.tar" + self.extension

    @property
    def tar_mode(self) -> str:
        """流式写入 tar 的模式

        bzip2 流的 ``BZ`` 魔术字节由 :mod:`bz2` 压缩器自身写出，
        因此这里不需要额外补写。
        """
        return {
            DataCompression.GZIP: "w|gz",
            DataCompression.BZIP2: "w|bz2",
        }.get(self, "w|")

    @classmethod
    def available_tokens(cls) -> List[str]:
        return [c.value for c in cls]
