"""
软件包处理器

对外的打包入口：``create_deb`` 生成 ``.deb``，``create_changes`` 生成 ``.changes``。
"""

import io
import tarfile
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, Union

from ..changes import ChangesAssembler, ChangesProvider
from ..descriptors import ChangesDescriptor, InvalidDescriptorError, PackageDescriptor
from ..signing import Signer
from ..utils.logging import ConsoleSink, LogStage, error
from ..utils.paths import create_temp_file
from ..utils.variables import TokenConfig, VariableResolver
from .ar import read_member
from .build_context import BuildContext, PackagingError, ProgressCallback
from .build_pipeline import BuildPipeline
from .compression import DataCompression
from .control_builder import MaintainerInfo
from .sources import DataSource


class Processor:
    """软件包处理器

    Args:
        resolver: 变量解析器，用于 control 文件与维护脚本中的变量替换
        tokens: 变量起止标记
        maintainer: 维护者信息，完整时覆盖 control 中的 Maintainer
        console: 逐条目输出回调
        signer: changes 文档签名器，缺省使用 gpg
    """

    def __init__(
        self,
        resolver: Optional[VariableResolver] = None,
        tokens: TokenConfig = TokenConfig(),
        maintainer: Optional[MaintainerInfo] = None,
        console: Optional[ConsoleSink] = None,
        signer: Optional[Signer] = None,
    ):
        self.pipeline = BuildPipeline(resolver, tokens, maintainer, console)
        self.assembler = ChangesAssembler(signer)

    def create_deb(
        self,
        control_files: Sequence[Union[str, Path]],
        sources: Sequence[DataSource],
        output: Union[str, Path],
        compression: Union[str, DataCompression] = DataCompression.GZIP,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> PackageDescriptor:
        """构建 deb 软件包

        Args:
            control_files: 控制文件路径列表，必须包含 ``control``
            sources: 数据源列表
            output: 输出 ``.deb`` 路径，父目录不存在时自动创建
            compression: 数据归档压缩方式，未知取值视为不压缩
            progress_callback: 进度回调

        Returns:
            PackageDescriptor: 写回了 MD5/SHA1/SHA256/Size/File 的描述文件

        Raises:
            InvalidDescriptorError: 描述文件缺少必填字段（控制归档已写出，deb 软件包不会组装）
            PackagingError: 其他任何失败，包括临时文件删除失败
        """
        if not isinstance(compression, DataCompression):
            compression = DataCompression.from_token(compression)

        temp_data: Optional[Path] = None
        temp_control: Optional[Path] = None

        try:
            temp_data = create_temp_file("deb", "data")
            temp_control = create_temp_file("deb", "control")

            context = BuildContext(
                control_files=[Path(p) for p in control_files],
                sources=list(sources),
                output_path=Path(output),
                compression=compression,
                temp_data=temp_data,
                temp_control=temp_control,
                progress_callback=progress_callback,
            )
            self.pipeline.execute(context)
            return context.package_descriptor
        except (InvalidDescriptorError, PackagingError):
            raise
        except Exception as e:
            raise PackagingError(f"无法创建 deb 软件包: {e}", e) from e
        finally:
            for temp in (temp_data, temp_control):
                if temp is None:
                    continue
                try:
                    temp.unlink()
                except FileNotFoundError:
                    pass
                except OSError as e:
                    error(f"无法删除临时文件 {temp}: {e}", stage=LogStage.BUILD)
                    raise PackagingError(f"无法删除临时文件 {temp}", e) from e

    def create_changes(
        self,
        package_descriptor: PackageDescriptor,
        provider: ChangesProvider,
        output: BinaryIO,
        keyring: Optional[Union[str, Path]] = None,
        key: Optional[str] = None,
        passphrase: Optional[str] = None,
    ) -> ChangesDescriptor:
        """生成 changes 文档，参见 :meth:`ChangesAssembler.assemble`"""
        return self.assembler.assemble(package_descriptor, provider, output, keyring, key, passphrase)


def read_control(deb_path: Union[str, Path]) -> PackageDescriptor:
    """读取 deb 软件包中的 control 描述文件

    Raises:
        KeyError: 缺少 ``control.tar.gz`` 或其中没有 ``./control``
    """
    data = read_member(deb_path, "control.tar.gz")
    with tarfile.open(fileobj=io.BytesIO(data), mode='r:gz') as tar:
        for member in tar:
            if member.isfile() and member.name in ("./control", "control"):
                text = tar.extractfile(member).read().decode('utf-8')
                return PackageDescriptor.from_text(text)
    raise KeyError("control")
