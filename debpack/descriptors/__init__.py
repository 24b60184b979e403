"""描述文件模块

提供 control 与 changes 描述文件的解析、校验和序列化。
"""

from .descriptor import Descriptor, InvalidDescriptorError, ParseError
from .package import PackageDescriptor
from .changes import ChangesDescriptor

__all__ = [
    "Descriptor",
    "PackageDescriptor",
    "ChangesDescriptor",
    "InvalidDescriptorError",
    "ParseError",
]
