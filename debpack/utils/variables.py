"""
变量替换

控制文件与维护脚本中的 ``[[name]]`` 占位符在写入控制归档前被替换。
占位符的开闭标记作为显式配置传入，不使用进程级全局状态。
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Protocol

DEFAULT_OPEN_TOKEN = "[["
DEFAULT_CLOSE_TOKEN = "]]"


class VariableResolver(Protocol):
    """变量解析器协议"""

    def get(self, name: str) -> Optional[str]:
        ...


@dataclass
class MapVariableResolver:
    """基于字典的变量解析器"""
    values: Dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> Optional[str]:
        return self.values.get(name)

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, object]]) -> 'MapVariableResolver':
        return cls({str(k): str(v) for k, v in (values or {}).items()})


@dataclass(frozen=True)
class TokenConfig:
    """占位符开闭标记"""
    open: str = DEFAULT_OPEN_TOKEN
    close: str = DEFAULT_CLOSE_TOKEN


def replace_variables(
    resolver: Optional[VariableResolver],
    text: str,
    open_token: str = DEFAULT_OPEN_TOKEN,
    close_token: str = DEFAULT_CLOSE_TOKEN,
) -> str:
    """替换文本中的占位符

    未知变量保持原样（包括开闭标记）。没有解析器时原样返回。

    Args:
        resolver: 变量解析器
        text: 输入文本
        open_token: 开标记
        close_token: 闭标记

    Returns:
        str: 替换后的文本
    """
    if resolver is None or open_token not in text:
        return text

    out = []
    pos = 0
    while True:
        start = text.find(open_token, pos)
        if start < 0:
            break
        end = text.find(close_token, start + len(open_token))
        if end < 0:
            break

        name = text[start + len(open_token):end]
        value = resolver.get(name)
        out.append(text[pos:start])
        if value is None:
            out.append(text[start:end + len(close_token)])
        else:
            out.append(value)
        pos = end + len(close_token)

    out.append(text[pos:])
    return "".join(out)
