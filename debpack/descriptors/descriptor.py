"""
描述文件基础模型

控制文件与 changes 文件都是有序的 ``字段: 值`` 文档。字段名区分大小写，
序列化时保持插入顺序；多行值的续行以空白开头。
"""

from typing import Dict, Iterable, List, Optional, TextIO, Tuple, Union

from ..utils.variables import (
    DEFAULT_CLOSE_TOKEN,
    DEFAULT_OPEN_TOKEN,
    VariableResolver,
    replace_variables,
)


class ParseError(ValueError):
    """描述文件或 conffiles 解析错误"""

    def __init__(self, message: str, line_number: int):
        super().__init__(f"{message} (第 {line_number} 行)")
        self.line_number = line_number


class InvalidDescriptorError(Exception):
    """描述文件缺少必填字段

    携带未通过校验的描述文件本身，调用方可据此检查问题所在。
    """

    def __init__(self, descriptor: 'Descriptor'):
        self.descriptor = descriptor
        missing = ", ".join(descriptor.invalid_fields())
        super().__init__(f"{type(descriptor).__name__} 缺少必填字段: {missing}")


class Descriptor:
    """有序字段映射

    子类通过 ``MANDATORY_FIELDS`` 声明必填字段。
    """

    MANDATORY_FIELDS: Tuple[str, ...] = ()

    def __init__(self, source: Optional['Descriptor'] = None):
        self._values: Dict[str, str] = {}
        if source is not None:
            self._values.update(source._values)

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: Optional[str]) -> None:
        """设置字段；值为 None 时删除该字段"""
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value

    def keys(self) -> List[str]:
        return list(self._values)

    def items(self) -> List[Tuple[str, str]]:
        return list(self._values.items())

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def invalid_fields(self) -> List[str]:
        """返回缺失（或为空）的必填字段列表"""
        return [
            key for key in self.MANDATORY_FIELDS
            if not (self._values.get(key) or "").strip()
        ]

    def is_valid(self) -> bool:
        return not self.invalid_fields()

    def parse(
        self,
        source: Union[str, TextIO],
        resolver: Optional[VariableResolver] = None,
        open_token: str = DEFAULT_OPEN_TOKEN,
        close_token: str = DEFAULT_CLOSE_TOKEN,
    ) -> None:
        """解析文本并写入字段

        Args:
            source: 文本或文本流
            resolver: 变量解析器，逐行替换占位符
            open_token: 占位符开标记
            close_token: 占位符闭标记

        Raises:
            ParseError: 非续行内容缺少冒号
        """
        text = source if isinstance(source, str) else source.read()

        key: Optional[str] = None
        value: List[str] = []

        for line_number, raw in enumerate(text.splitlines(), start=1):
            line = replace_variables(resolver, raw, open_token, close_token)

            if not line.strip() or line.startswith('#'):
                continue

            if line[0] in ' \t':
                if key is None:
                    raise ParseError("续行之前没有字段", line_number)
                value.append(line)
                continue

            if key is not None:
                self.set(key, "\n".join(value))

            colon = line.find(':')
            if colon <= 0:
                raise ParseError(f"无效的字段行: {line!r}", line_number)

            key = line[:colon].strip()
            value = [line[colon + 1:].strip()]

        if key is not None:
            self.set(key, "\n".join(value))

    def to_text(self, keys: Optional[Iterable[str]] = None) -> str:
        """序列化为文本

        每个值按行输出；不以空白开头的行前补一个空格，
        因此以换行开头的值会在字段名后直接换行。
        """
        out = []
        for key in (keys if keys is not None else self._values):
            value = self._values.get(key)
            if value is None:
                continue
            out.append(f"{key}:")
            lines = value.split("\n")
            if len(lines) > 1 and not lines[-1]:
                # 末尾换行会产生空行，而空行在 deb822 中表示段落结束
                lines.pop()
            for line in lines:
                if line and not line[0].isspace():
                    out.append(" ")
                out.append(line)
                out.append("\n")
        return "".join(out)

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"
