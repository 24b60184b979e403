"""
软件包组装步骤模块

在三级链式哈希之上写出 ar 容器，并把哈希与大小回写到描述文件。
"""

from typing import Optional, Tuple

from ...utils import ensure_directory, format_size
from ...utils.logging import assemble_logger
from ..ar import ArWriter
from ..build_context import BuildContext, PackagingError
from ..digest import DigestChain
from .build_step import BuildStep

DEBIAN_BINARY_CONTENT = b"2.0\n"

# 从外到内：写入的字节先经过 SHA-256，再经过 SHA-1、MD5，最后到达文件
DIGEST_ALGORITHMS = ("sha256", "sha1", "md5")


class PackageAssemblyStep(BuildStep):
    """软件包组装步骤"""

    def __init__(self, mtime: Optional[float] = None):
        super().__init__("assemble", "组装 deb 软件包")
        self.mtime = mtime

    def get_progress_range(self) -> Tuple[int, int]:
        return (70, 100)

    def execute(self, context: BuildContext) -> None:
        descriptor = context.package_descriptor
        if descriptor is None:
            raise PackagingError("缺少软件包描述文件，无法组装")

        start, end = self.get_progress_range()
        context.report("组装软件包", start, "写入 ar 容器...")
        assemble_logger.info(f"组装软件包: {context.output_path}")

        ensure_directory(context.output_path.parent)

        with open(context.output_path, 'wb') as f:
            chain = DigestChain(f, DIGEST_ALGORITHMS)
            with ArWriter(chain, self.mtime) as ar:
                ar.add_bytes("debian-binary", DEBIAN_BINARY_CONTENT)
                ar.add_file("control.tar.gz", context.temp_control)
                ar.add_file(context.compression.member_name, context.temp_data)

        digests = chain.hexdigests()
        context.digests = digests
        context.output_size = chain.size

        descriptor.set("MD5", digests["md5"])
        descriptor.set("SHA1", digests["sha1"])
        descriptor.set("SHA256", digests["sha256"])
        descriptor.set("Size", str(chain.size))
        descriptor.set("File", context.output_path.name)

        assemble_logger.debug(f"MD5={digests['md5']} SHA1={digests['sha1']} SHA256={digests['sha256']}")
        context.report("组装软件包", end, f"完成，大小 {format_size(chain.size)}")
        assemble_logger.success(f"软件包组装完成 - 大小: {format_size(chain.size)}")
