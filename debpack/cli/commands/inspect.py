"""
Inspect 命令实现

列出 deb 软件包的 ar 成员并显示 control 描述文件。
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ...build.ar import ArFormatError, read_members
from ...build.processor import read_control
from ...utils.paths import format_size


console = Console()


def inspect_command(
    package: str = typer.Argument(..., help="deb 软件包路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式"),
) -> None:
    """检查 deb 软件包

    示例:
        debpack inspect app_1.0_all.deb
        debpack inspect app_1.0_all.deb --json
    """
    package_path = Path(package)

    if not package_path.exists():
        console.print(f"[red]软件包文件不存在: {package_path}[/red]")
        raise typer.Exit(1)

    try:
        members = read_members(package_path)
        descriptor = read_control(package_path)
    except (OSError, ArFormatError, KeyError) as e:
        console.print(f"[red]检查软件包失败: {e}[/red]")
        raise typer.Exit(1)

    if json_output:
        data = {
            "file": str(package_path),
            "members": [{"name": name, "size": size} for name, size in members],
            "control": dict(descriptor.items()),
        }
        typer.echo(json.dumps(data, ensure_ascii=False, indent=2))
        return

    table = Table(title="ar 成员")
    table.add_column("名称", style="cyan")
    table.add_column("大小", style="green", justify="right")
    for name, size in members:
        table.add_row(name, f"{size} ({format_size(size)})")
    console.print(table)
    console.print()

    console.print("[bold]control[/bold]")
    console.print(descriptor.to_text(), markup=False, highlight=False)
