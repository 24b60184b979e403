"""
Changes 描述文件
"""

from typing import TYPE_CHECKING, List, Optional, Sequence

from .descriptor import Descriptor

if TYPE_CHECKING:
    from ..changes.changeset import ChangeSet


class ChangesDescriptor(Descriptor):
    """``.changes`` 发布说明

    以软件包描述文件的字段为种子，附加变更记录。存在变更记录时，
    ``Urgency`` 与 ``Changed-By`` 取自最新的一条。``Changes`` 总会写出，
    没有变更记录时为空值。
    """

    MANDATORY_FIELDS = (
        "Format",
        "Date",
        "Source",
        "Binary",
        "Architecture",
        "Version",
        "Distribution",
        "Urgency",
        "Maintainer",
        "Description",
        "Checksums-Sha1",
        "Checksums-Sha256",
        "Files",
    )

    def __init__(
        self,
        source: Optional[Descriptor] = None,
        change_sets: Sequence['ChangeSet'] = (),
    ):
        super().__init__(source)
        self.change_sets: List['ChangeSet'] = list(change_sets)

        if self.change_sets:
            latest = self.change_sets[0]
            self.set("Urgency", latest.urgency)
            self.set("Changed-By", latest.changed_by)

        lines = [""]
        for change_set in self.change_sets:
            lines.append(f" {change_set.title()}")
            lines.append(" .")
            for change in change_set.changes:
                lines.append(f" * {change}")
        self.set("Changes", "\n".join(lines))
