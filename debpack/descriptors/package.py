"""
软件包描述文件（control）
"""

from typing import Optional, TextIO, Union

from ..utils.variables import (
    DEFAULT_CLOSE_TOKEN,
    DEFAULT_OPEN_TOKEN,
    VariableResolver,
)
from .descriptor import Descriptor


class PackageDescriptor(Descriptor):
    """``DEBIAN/control`` 描述文件

    归档组装完成后由处理器补充 ``Installed-Size``、``MD5``、``SHA1``、
    ``SHA256``、``Size`` 和 ``File`` 字段。
    """

    MANDATORY_FIELDS = (
        "Package",
        "Version",
        "Section",
        "Priority",
        "Architecture",
        "Maintainer",
        "Description",
    )

    @classmethod
    def from_text(
        cls,
        source: Union[str, TextIO],
        resolver: Optional[VariableResolver] = None,
        open_token: str = DEFAULT_OPEN_TOKEN,
        close_token: str = DEFAULT_CLOSE_TOKEN,
    ) -> 'PackageDescriptor':
        descriptor = cls()
        descriptor.parse(source, resolver, open_token, close_token)
        return descriptor
