"""
debpack CLI 主入口

提供命令行接口，支持 build/validate/inspect/info 等命令。
"""

import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..build.compression import DataCompression
from ..utils import configure_logging
from ..utils.logging import OutputLevel
from .commands import build, validate, inspect


# 创建主应用
app = typer.Typer(
    name="debpack",
    help="debpack - Debian 软件包（.deb）与 .changes 文档构建工具",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# 控制台输出
console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"debpack v{__version__}")
        raise typer.Exit()


def verbose_callback(verbose: bool) -> None:
    """配置详细输出"""
    configure_logging(level=OutputLevel.DEBUG if verbose else OutputLevel.INFO)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        callback=verbose_callback,
        help="启用详细输出"
    )
) -> None:
    """debpack - Debian 软件包（.deb）与 .changes 文档构建工具

    使用 --help 查看可用命令的详细信息。
    """
    pass


# 注册子命令
app.command("build", help="构建 deb 软件包")(build.build_command)
app.command("validate", help="验证配置文件")(validate.validate_command)
app.command("inspect", help="检查 deb 软件包")(inspect.inspect_command)


@app.command("info")
def info_command() -> None:
    """显示系统信息"""
    console.print("[bold]debpack 系统信息[/bold]")
    console.print()

    table = Table(title="版本信息")
    table.add_column("组件", style="cyan")
    table.add_column("版本", style="green")

    table.add_row("debpack", __version__)
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")

    console.print(table)
    console.print()

    algo_table = Table(title="支持的数据归档压缩方式")
    algo_table.add_column("压缩方式", style="cyan")
    algo_table.add_column("成员名", style="green")

    for token in DataCompression.available_tokens():
        algo_table.add_row(token, DataCompression.from_token(token).member_name)

    console.print(algo_table)


if __name__ == "__main__":
    app()
