"""
Changes 文档组装器

以软件包描述文件为种子生成 ``.changes`` 文档，可选地做明文签名。
"""

import io
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ..descriptors import ChangesDescriptor, InvalidDescriptorError, PackageDescriptor
from ..signing import GpgSigner, Signer
from ..utils.logging import changes_logger, sign_logger
from .provider import ChangesProvider

CHANGES_FORMAT = "1.8"


def _blank(value: Optional[str]) -> str:
    return value if value is not None else ""


class ChangesAssembler:
    """Changes 文档组装器"""

    def __init__(self, signer: Optional[Signer] = None):
        self.signer = signer

    def assemble(
        self,
        package_descriptor: PackageDescriptor,
        provider: ChangesProvider,
        output: BinaryIO,
        keyring: Optional[Union[str, Path]] = None,
        key: Optional[str] = None,
        passphrase: Optional[str] = None,
    ) -> ChangesDescriptor:
        """组装 changes 文档并写入 output

        只有 keyring、key、passphrase 全部提供时才签名。签名失败只记录错误，
        此时写入未签名的文档。无论成功与否，output 都会被关闭。

        Args:
            package_descriptor: 已完成组装的软件包描述文件（需含 MD5/SHA1/SHA256/Size/File）
            provider: 变更记录提供者
            output: 输出流
            keyring: 密钥环文件或 GnuPG 主目录
            key: 签名密钥
            passphrase: 密钥口令

        Returns:
            ChangesDescriptor: 生成的 changes 描述文件

        Raises:
            InvalidDescriptorError: 缺少必填字段
            OSError: 写入失败
        """
        try:
            descriptor = self._build_descriptor(package_descriptor, provider)

            if not descriptor.is_valid():
                raise InvalidDescriptorError(descriptor)

            data = descriptor.to_text().encode('utf-8')

            if keyring and key and passphrase:
                output.write(self._sign(data, keyring, key, passphrase))
            else:
                output.write(data)

            changes_logger.success(f"changes 文档已生成 - {len(descriptor.change_sets)} 条变更记录")
            return descriptor
        finally:
            output.close()

    def _build_descriptor(
        self,
        package_descriptor: PackageDescriptor,
        provider: ChangesProvider,
    ) -> ChangesDescriptor:
        change_sets = provider.get_change_sets()
        descriptor = ChangesDescriptor(package_descriptor, change_sets)

        descriptor.set("Format", CHANGES_FORMAT)

        if descriptor.get("Binary") is None:
            descriptor.set("Binary", descriptor.get("Package"))

        if descriptor.get("Source") is None:
            descriptor.set("Source", descriptor.get("Package"))

        if descriptor.get("Description") is None:
            descriptor.set("Description", f"update to {descriptor.get('Version')}")

        size = _blank(descriptor.get("Size"))
        file_name = _blank(descriptor.get("File"))

        descriptor.set(
            "Checksums-Sha1",
            f"\n {_blank(descriptor.get('SHA1'))} {size} {file_name}",
        )
        descriptor.set(
            "Checksums-Sha256",
            f"\n {_blank(descriptor.get('SHA256'))} {size} {file_name}",
        )
        descriptor.set(
            "Files",
            f"\n {_blank(descriptor.get('MD5'))} {size} "
            f"{_blank(descriptor.get('Section'))} {_blank(descriptor.get('Priority'))} {file_name}",
        )
        return descriptor

    def _sign(self, data: bytes, keyring: Union[str, Path], key: str, passphrase: str) -> bytes:
        signer = self.signer or GpgSigner()
        buffer = io.BytesIO()
        try:
            signer.clear_sign(data, keyring, key, passphrase, buffer)
        except Exception as e:
            sign_logger.error(f"签名失败，写入未签名的 changes 文档: {e}")
            return data

        sign_logger.success(f"已使用密钥 {key} 签名")
        return buffer.getvalue()
