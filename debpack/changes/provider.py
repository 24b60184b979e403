"""
变更记录提供者

文本格式示例::

     * 尚未发布的变更
    release date=22:13 19.08.2012,version=1.0,urgency=low,by=Jane Doe <jane@example.com>
     * 1.0 版本的变更

``release`` 行之前的变更属于当前构建的版本（取值来自软件包描述文件），
每个 ``release`` 行为其后的变更提供版本、日期、紧急程度和提交者。
"""

from datetime import datetime
from typing import Dict, List, Optional, Protocol, TextIO, Union

from ..descriptors import PackageDescriptor, ParseError
from .changeset import ChangeSet

RELEASE_PREFIX = "release "
CHANGE_PREFIX = " * "
RELEASE_DATE_FORMAT = "%H:%M %d.%m.%Y"


class ChangesProvider(Protocol):
    """变更记录提供者协议"""

    def get_change_sets(self) -> List[ChangeSet]:
        ...


class StaticChangesProvider:
    """直接提供现成的变更记录"""

    def __init__(self, change_sets: Optional[List[ChangeSet]] = None):
        self.change_sets = list(change_sets or [])

    def get_change_sets(self) -> List[ChangeSet]:
        return list(self.change_sets)


def _parse_release_line(line: str, line_number: int) -> Dict[str, str]:
    values = {}
    for pair in line[len(RELEASE_PREFIX):].split(','):
        pair = pair.strip()
        if not pair:
            continue
        key, sep, value = pair.partition('=')
        if not sep:
            raise ParseError(f"无效的 release 属性: {pair!r}", line_number)
        values[key.strip()] = value.strip()
    return values


class TextfileChangesProvider:
    """从文本变更文件解析变更记录，按文件顺序（最新在前）返回"""

    def __init__(
        self,
        source: Union[str, TextIO],
        descriptor: PackageDescriptor,
        now: Optional[datetime] = None,
    ):
        text = source if isinstance(source, str) else source.read()
        self._change_sets = self._parse(text, descriptor, now or datetime.now())

    def get_change_sets(self) -> List[ChangeSet]:
        return list(self._change_sets)

    def _parse(self, text: str, descriptor: PackageDescriptor, now: datetime) -> List[ChangeSet]:
        package = descriptor.get("Package") or ""
        current = {
            "version": descriptor.get("Version") or "",
            "date": now,
            "distribution": descriptor.get("Distribution") or "unknown",
            "urgency": descriptor.get("Urgency") or "low",
            "by": descriptor.get("Maintainer") or "",
        }

        change_sets: List[ChangeSet] = []
        changes: List[str] = []

        def flush() -> None:
            if changes:
                change_sets.append(ChangeSet(
                    package=package,
                    version=current["version"],
                    date=current["date"],
                    distribution=current["distribution"],
                    urgency=current["urgency"],
                    changed_by=current["by"],
                    changes=list(changes),
                ))
                changes.clear()

        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue

            if line.startswith(RELEASE_PREFIX):
                flush()
                values = _parse_release_line(line, line_number)
                if "date" in values:
                    try:
                        current["date"] = datetime.strptime(values["date"], RELEASE_DATE_FORMAT)
                    except ValueError:
                        raise ParseError(f"无效的日期: {values['date']!r}", line_number) from None
                for key in ("version", "urgency", "by", "distribution"):
                    if key in values:
                        current[key] = values[key]
            elif line.startswith(CHANGE_PREFIX):
                changes.append(line[len(CHANGE_PREFIX):])
            else:
                raise ParseError(f"无法识别的行: {line!r}", line_number)

        flush()
        return change_sets
