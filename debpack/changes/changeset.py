"""
变更记录
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List


@dataclass
class ChangeSet:
    """一次发布的变更记录"""
    package: str
    version: str
    date: datetime
    distribution: str
    urgency: str
    changed_by: str
    changes: List[str] = field(default_factory=list)

    def title(self) -> str:
        """``package (version) distribution; urgency=urgency``"""
        return f"{self.package} ({self.version}) {self.distribution}; urgency={self.urgency}"
