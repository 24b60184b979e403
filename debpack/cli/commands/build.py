"""
Build 命令实现

根据配置文件构建 deb 软件包，按需生成 .changes 文档。
"""

import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ...config import load_config, ConfigError, ConfigValidationError
from ...config.schema import DebpackConfig
from ...descriptors import InvalidDescriptorError, PackageDescriptor
from ...utils.logging import set_log_level, set_log_file, OutputLevel
from ...utils.variables import MapVariableResolver, TokenConfig


console = Console()

SUMMARY_FIELDS = ("Package", "Version", "Architecture", "Installed-Size", "Size", "MD5", "SHA1", "SHA256")


def build_command(
    config: str = typer.Option(..., "--config", "-c", help="配置文件路径"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="输出 .deb 路径（覆盖配置中的 output）"),
    force: bool = typer.Option(False, "--force", "-f", help="强制覆盖已存在的输出文件"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """构建 deb 软件包

    示例:
        debpack build -c debpack.yaml
        debpack build -c debpack.yaml -o dist/app_1.0_all.deb --force
    """
    set_log_level(OutputLevel.DEBUG if verbose else OutputLevel.INFO)

    if log_file:
        try:
            set_log_file(log_file)
        except OSError:
            console.print(f"[yellow]无法写入日志文件: {log_file}[/yellow]")

    config_path = Path(config)

    try:
        console.print(f"[cyan]正在加载配置文件[/cyan]: {config_path}")
        config_obj = load_config(config_path)
    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(e.format_errors())
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {e}")
        raise typer.Exit(1)

    output_path = Path(output) if output else Path(config_obj.output)

    if output_path.exists() and not force:
        console.print(f"[red]输出文件已存在: {output_path}[/red]")
        console.print("使用 --force 参数强制覆盖")
        raise typer.Exit(1)

    def progress_callback(stage: str, current: int, total: int, message: str = "") -> None:
        """进度回调函数，显示进度"""
        if total > 0:
            percentage = (current / total) * 100
            if message:
                console.print(f"[blue]{stage}[/blue]: {message} ({percentage:.0f}%)")
            else:
                console.print(f"[blue]{stage}[/blue]: {percentage:.0f}%")

    try:
        descriptor = run_build(config_obj, output_path, progress_callback)
    except InvalidDescriptorError as e:
        console.print(f"[red]✗ 描述文件无效[/red]: {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]✗ 构建失败[/red]: {e}")
        if log_file:
            console.print(f"[yellow]详细错误信息:[/yellow]\n{traceback.format_exc()}")
        raise typer.Exit(1)

    console.print(f"[green]✓ 软件包构建完成[/green]: {output_path}")
    _print_summary(descriptor)
    if config_obj.changes:
        console.print(f"[green]✓ changes 文档已生成[/green]: {config_obj.changes.output}")


def run_build(config: DebpackConfig, output_path: Path, progress_callback=None) -> PackageDescriptor:
    """按配置构建软件包，配置了 changes 时一并生成 changes 文档"""
    from ...build import MaintainerInfo, Processor, create_source
    from ...changes import TextfileChangesProvider

    processor = Processor(
        resolver=MapVariableResolver.from_mapping(config.variables),
        tokens=TokenConfig(config.tokens.open, config.tokens.close),
        maintainer=MaintainerInfo(config.maintainer.full_name, config.maintainer.email),
    )

    descriptor = processor.create_deb(
        config.control.get_control_files(),
        [create_source(model) for model in config.data],
        output_path,
        config.compression,
        progress_callback=progress_callback,
    )

    if config.changes:
        changes = config.changes
        with open(changes.input, 'r', encoding='utf-8') as f:
            provider = TextfileChangesProvider(f, descriptor)

        changes_path = Path(changes.output)
        changes_path.parent.mkdir(parents=True, exist_ok=True)
        signing = changes.signing
        processor.create_changes(
            descriptor,
            provider,
            open(changes_path, 'wb'),
            keyring=signing.keyring if signing else None,
            key=signing.key if signing else None,
            passphrase=signing.passphrase if signing else None,
        )

    return descriptor


def _print_summary(descriptor: PackageDescriptor) -> None:
    table = Table(title="软件包信息")
    table.add_column("字段", style="cyan", no_wrap=True)
    table.add_column("值", style="green")

    for key in SUMMARY_FIELDS:
        value = descriptor.get(key)
        if value is not None:
            table.add_row(key, value)

    console.print(table)
