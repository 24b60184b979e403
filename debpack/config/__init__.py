"""配置和 Schema 模块

提供 YAML 构建配置的加载、验证和保存功能。
"""

from .schema import DebpackConfig, DataSourceModel, MapperModel, SourceType
from .loader import (
    ConfigLoader,
    ConfigValidationError,
    ConfigError,
    load_config,
    validate_config,
    save_config,
    resolve_maintainer,
    config_loader,
)

__all__ = [
    # 主要类
    "DebpackConfig",
    "DataSourceModel",
    "MapperModel",
    "SourceType",
    "ConfigLoader",

    # 异常类
    "ConfigError",
    "ConfigValidationError",

    # 便捷函数
    "load_config",
    "validate_config",
    "save_config",
    "resolve_maintainer",

    # 单例
    "config_loader",
]
