"""通用工具模块"""

from .logging import (
    configure_logging,
    get_stage_logger,
    StageLogger,
    LogStage,
    OutputLevel,
    ConsoleSink,
    data_logger,
    control_logger,
    assemble_logger,
    changes_logger,
    sign_logger,
)

from .paths import (
    ensure_directory,
    create_temp_file,
    normalize_archive_path,
    perm_to_mode,
    format_size,
)

from .variables import (
    VariableResolver,
    MapVariableResolver,
    TokenConfig,
    replace_variables,
)

__all__ = [
    # 日志相关
    "configure_logging",
    "get_stage_logger",
    "StageLogger",
    "LogStage",
    "OutputLevel",
    "ConsoleSink",
    "data_logger",
    "control_logger",
    "assemble_logger",
    "changes_logger",
    "sign_logger",

    # 路径相关
    "ensure_directory",
    "create_temp_file",
    "normalize_archive_path",
    "perm_to_mode",
    "format_size",

    # 变量替换
    "VariableResolver",
    "MapVariableResolver",
    "TokenConfig",
    "replace_variables",
]
