"""
debpack - Debian 二进制软件包（.deb）与 .changes 文档构建工具
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .build import Processor, PackagingError
from .descriptors import InvalidDescriptorError, PackageDescriptor, ChangesDescriptor

__all__ = [
    "Processor",
    "PackagingError",
    "InvalidDescriptorError",
    "PackageDescriptor",
    "ChangesDescriptor",
    "__version__",
]
