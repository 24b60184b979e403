"""
路径工具

提供路径与权限处理相关的工具函数。
"""

import os
import tempfile
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """确保目录存在

    Args:
        path: 目录路径

    Returns:
        Path: 目录路径
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def create_temp_file(prefix: str = "deb", suffix: str = "") -> Path:
    """创建一个唯一命名的空临时文件

    并发构建依靠唯一的临时文件名互相隔离，因此每次调用都生成新文件。

    Args:
        prefix: 文件名前缀
        suffix: 文件名后缀

    Returns:
        Path: 临时文件路径
    """
    fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix)
    os.close(fd)
    return Path(name)


def normalize_archive_path(path: str) -> str:
    """规范化归档内路径为 ``./foo/bar`` 形式

    反斜杠统一为正斜杠；以 ``/`` 开头的路径改写为 ``./``；
    其余缺少 ``./`` 前缀的路径补上前缀。末尾的 ``/.`` 折叠为 ``/``，
    因此 ``.`` 与空路径都规范为根目录 ``./``。
    """
    if '\\' in path:
        path = path.replace('\\', '/')
    if path.startswith('/'):
        path = '.' + path
    elif not path.startswith('./'):
        path = './' + path
    while path.endswith('/.'):
        path = path[:-1]
    return path


def perm_to_mode(permissions: Union[str, int]) -> int:
    """将八进制权限字符串（如 ``"755"``）转换为数值模式"""
    if isinstance(permissions, int):
        return permissions
    text = permissions.strip()
    if not text:
        raise ValueError("权限字符串不能为空")
    try:
        return int(text, 8)
    except ValueError:
        raise ValueError(f"无效的权限字符串: {permissions}") from None


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    return f"{size:.1f} {units[unit_index]}"
