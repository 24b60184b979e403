"""
签名

对 changes 文档做 OpenPGP 明文签名。默认实现调用 ``gpg`` 可执行文件。
"""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional, Protocol, Union


class SigningError(Exception):
    """签名失败"""
    pass


class Signer(Protocol):
    """明文签名协议"""

    def clear_sign(
        self,
        data: bytes,
        keyring: Union[str, Path],
        key: str,
        passphrase: str,
        output: BinaryIO,
    ) -> None:
        ...


class GpgSigner:
    """通过 ``gpg`` 命令行进行明文签名

    ``keyring`` 为目录时作为 GnuPG 主目录，否则作为密钥环文件。
    口令经标准输入传入，不出现在命令行参数中。
    """

    def __init__(self, gpg_command: Optional[str] = None, timeout_sec: int = 60):
        self.gpg_command = gpg_command or shutil.which("gpg2") or shutil.which("gpg") or "gpg"
        self.timeout_sec = timeout_sec

    def build_command(self, keyring: Union[str, Path], key: str, input_path: str) -> list:
        keyring = Path(keyring)
        command = [self.gpg_command, "--batch", "--yes"]
        if keyring.is_dir():
            command += ["--homedir", str(keyring)]
        else:
            command += ["--no-default-keyring", "--keyring", str(keyring)]
        command += [
            "--pinentry-mode", "loopback",
            "--passphrase-fd", "0",
            "--local-user", key,
            "--armor",
            "--clearsign",
            "--output", "-",
            input_path,
        ]
        return command

    def clear_sign(
        self,
        data: bytes,
        keyring: Union[str, Path],
        key: str,
        passphrase: str,
        output: BinaryIO,
    ) -> None:
        """签名并把结果写入 output

        Raises:
            SigningError: gpg 不可用、超时或返回非零退出码
        """
        fd, input_path = tempfile.mkstemp(prefix="changes", suffix=".txt")
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)

            try:
                result = subprocess.run(
                    self.build_command(keyring, key, input_path),
                    input=(passphrase + "\n").encode('utf-8'),
                    capture_output=True,
                    timeout=self.timeout_sec,
                )
            except (OSError, subprocess.TimeoutExpired) as e:
                raise SigningError(f"无法执行 gpg: {e}") from e

            if result.returncode != 0:
                stderr = result.stderr.decode('utf-8', errors='replace').strip()
                raise SigningError(f"gpg 签名失败 (退出码 {result.returncode}): {stderr}")

            output.write(result.stdout)
        finally:
            os.unlink(input_path)
