"""
控制归档构建器

把控制文件分为三组：维护脚本（延后写入）、``control`` 描述文件（解析）、
其他文件（立即原样写入）。控制归档固定为 gzip 压缩的 tar。
"""

import io
import tarfile
import time
from dataclasses import dataclass
from datetime import datetime
from email.utils import format_datetime
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from ..descriptors import InvalidDescriptorError, PackageDescriptor, ParseError
from ..utils.logging import control_logger
from ..utils.paths import perm_to_mode
from ..utils.variables import TokenConfig, VariableResolver, replace_variables
from .build_context import MissingControlError

MAINTAINER_SCRIPT_NAMES = frozenset(["conffiles", "preinst", "postinst", "prerm", "postrm"])

CONTROL_ENTRY_USER = "root"
CONTROL_ENTRY_GROUP = "root"
CONTROL_ENTRY_MODE = perm_to_mode("755")


@dataclass(frozen=True)
class MaintainerInfo:
    """维护者信息，由调用方一次性解析后注入"""
    full_name: Optional[str] = None
    email: Optional[str] = None

    def is_complete(self) -> bool:
        return bool(self.full_name) and bool(self.email)

    def formatted(self) -> str:
        return f"{self.full_name} <{self.email}>"

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> 'MaintainerInfo':
        """从 ``DEBFULLNAME`` / ``DEBEMAIL`` 解析"""
        return cls(environ.get("DEBFULLNAME"), environ.get("DEBEMAIL"))


def format_rfc2822(moment: Optional[datetime] = None) -> str:
    """格式化为 RFC 2822 时间，例如 ``Mon, 26 Mar 2007 11:44:04 +0200``"""
    moment = moment or datetime.now().astimezone()
    return format_datetime(moment)


def render_maintainer_script(
    name: str,
    text: str,
    resolver: Optional[VariableResolver],
    tokens: TokenConfig,
) -> str:
    """逐行替换维护脚本中的变量，每行以 ``\\n`` 结尾

    Raises:
        ParseError: ``conffiles`` 中出现空行
    """
    lines = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if name == "conffiles" and not line:
            raise ParseError("conffiles 中不允许空行", line_number)
        lines.append(replace_variables(resolver, line, tokens.open, tokens.close) + "\n")
    return "".join(lines)


class ControlArchiveBuilder:
    """控制归档（``control.tar.gz``）构建器"""

    def __init__(
        self,
        resolver: Optional[VariableResolver] = None,
        tokens: TokenConfig = TokenConfig(),
        maintainer: Optional[MaintainerInfo] = None,
    ):
        self.resolver = resolver
        self.tokens = tokens
        self.maintainer = maintainer

    def build(
        self,
        control_files: Sequence[Path],
        data_size: int,
        checksums: str,
        output_path: Path,
    ) -> PackageDescriptor:
        """构建控制归档

        归档在校验描述文件之前就已完整写出，即使校验失败，调用方也可以检查写出的内容。

        Args:
            control_files: 控制文件路径列表
            data_size: 数据归档中文件的总字节数
            checksums: ``md5sums`` 文本
            output_path: 输出文件路径

        Returns:
            PackageDescriptor: 补全后的软件包描述文件

        Raises:
            MissingControlError: 没有名为 ``control`` 的文件
            InvalidDescriptorError: 描述文件缺少必填字段（归档已写出）
        """
        control_logger.info("构建控制归档")
        mtime = int(time.time())

        scripts: List[Tuple[str, str]] = []
        descriptor: Optional[PackageDescriptor] = None

        with tarfile.open(output_path, 'w:gz', format=tarfile.GNU_FORMAT) as tar:
            for file_path in control_files:
                file_path = Path(file_path)
                if not file_path.is_file():
                    continue

                name = file_path.name
                if name in MAINTAINER_SCRIPT_NAMES:
                    text = file_path.read_text(encoding='utf-8')
                    scripts.append((name, render_maintainer_script(name, text, self.resolver, self.tokens)))
                elif name == "control":
                    descriptor = self._parse_descriptor(file_path)
                else:
                    self._add_file(tar, file_path)

            if descriptor is None:
                names = ", ".join(str(p) for p in control_files)
                raise MissingControlError(f"控制文件列表中没有 control 文件: [{names}]")

            descriptor.set("Installed-Size", str(data_size // 1024))

            for name, content in scripts:
                self._add_text(tar, name, content, mtime)
            self._add_text(tar, "control", descriptor.to_text(), mtime)
            self._add_text(tar, "md5sums", checksums, mtime)

        control_logger.debug(f"Installed-Size: {descriptor.get('Installed-Size')}")

        if not descriptor.is_valid():
            raise InvalidDescriptorError(descriptor)

        return descriptor

    def _parse_descriptor(self, file_path: Path) -> PackageDescriptor:
        text = file_path.read_text(encoding='utf-8')
        descriptor = PackageDescriptor.from_text(text, self.resolver, self.tokens.open, self.tokens.close)

        if descriptor.get("Date") is None:
            descriptor.set("Date", format_rfc2822())

        if descriptor.get("Distribution") is None:
            descriptor.set("Distribution", "unknown")

        if descriptor.get("Urgency") is None:
            descriptor.set("Urgency", "low")

        if self.maintainer is not None and self.maintainer.is_complete():
            descriptor.set("Maintainer", self.maintainer.formatted())
            control_logger.info("使用配置中的维护者信息")

        return descriptor

    def _entry(self, name: str, size: int, mtime: int) -> tarfile.TarInfo:
        info = tarfile.TarInfo("./" + name)
        info.size = size
        info.uname = CONTROL_ENTRY_USER
        info.gname = CONTROL_ENTRY_GROUP
        info.uid = 0
        info.gid = 0
        info.mode = CONTROL_ENTRY_MODE
        info.mtime = mtime
        return info

    def _add_text(self, tar: tarfile.TarFile, name: str, content: str, mtime: int) -> None:
        data = content.encode('utf-8')
        tar.addfile(self._entry(name, len(data), mtime), io.BytesIO(data))
        control_logger.debug(f"control: ./{name} ({len(data)} bytes)")

    def _add_file(self, tar: tarfile.TarFile, file_path: Path) -> None:
        st = file_path.stat()
        with open(file_path, 'rb') as f:
            tar.addfile(self._entry(file_path.name, st.st_size, int(st.st_mtime)), f)
        control_logger.debug(f"control: ./{file_path.name} ({st.st_size} bytes)")
