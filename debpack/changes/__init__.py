"""Changes 文档模块

变更记录解析与 ``.changes`` 文档组装。
"""

from .changeset import ChangeSet
from .provider import ChangesProvider, StaticChangesProvider, TextfileChangesProvider
from .assembler import CHANGES_FORMAT, ChangesAssembler

__all__ = [
    "ChangeSet",
    "ChangesProvider",
    "StaticChangesProvider",
    "TextfileChangesProvider",
    "ChangesAssembler",
    "CHANGES_FORMAT",
]
