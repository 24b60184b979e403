"""
配置 Schema 定义

使用 Pydantic 定义 YAML 构建配置模型，支持验证和类型检查。
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..utils.paths import perm_to_mode


class SourceType(str, Enum):
    """数据源类型枚举"""
    DIRECTORY = "directory"
    FILE = "file"
    ARCHIVE = "archive"
    LITERAL = "literal"


class MapperModel(BaseModel):
    """条目映射模型"""
    prefix: Optional[str] = Field(None, description="归档内路径前缀")
    strip: int = Field(0, description="裁剪的前导路径段数", ge=0)
    user: Optional[str] = Field(None, description="属主用户名")
    uid: Optional[int] = Field(None, description="属主 uid", ge=0)
    group: Optional[str] = Field(None, description="属组名")
    gid: Optional[int] = Field(None, description="属组 gid", ge=0)
    filemode: Optional[str] = Field(None, description="文件权限，如 \"644\"")
    dirmode: Optional[str] = Field(None, description="目录权限，如 \"755\"")

    model_config = {"extra": "forbid"}

    @field_validator('filemode', 'dirmode', mode='before')
    @classmethod
    def validate_mode(cls, v: Any) -> Optional[str]:
        """权限必须是合法的八进制字符串"""
        if v is None:
            return None
        # YAML 中未加引号的 644 会被读成整数
        text = str(v).strip()
        perm_to_mode(text)
        return text


class DataSourceModel(BaseModel):
    """数据源模型"""
    type: SourceType = Field(..., description="数据源类型")
    src: Optional[str] = Field(None, description="源路径（directory / file / archive）")
    paths: Optional[List[str]] = Field(None, description="字面路径列表（literal）")
    fail_on_missing_src: bool = Field(True, description="源路径不存在时是否报错")
    mapper: Optional[MapperModel] = Field(None, description="条目映射")

    model_config = {"extra": "forbid"}

    @model_validator(mode='after')
    def validate_source_fields(self) -> 'DataSourceModel':
        """验证数据源字段与类型匹配"""
        if self.type == SourceType.LITERAL:
            if not self.paths:
                raise ValueError("literal 数据源必须提供 paths")
        elif not self.src:
            raise ValueError(f"{self.type.value} 数据源必须提供 src")
        return self


class ControlModel(BaseModel):
    """控制文件模型：目录或文件列表二选一"""
    path: Optional[str] = Field(None, description="控制文件目录")
    files: Optional[List[str]] = Field(None, description="控制文件列表")

    model_config = {"extra": "forbid"}

    @model_validator(mode='after')
    def validate_control_source(self) -> 'ControlModel':
        if bool(self.path) == bool(self.files):
            raise ValueError("control 必须且只能提供 path 或 files 之一")
        return self

    def get_control_files(self) -> List[Path]:
        """获取控制文件列表，目录按文件名排序"""
        if self.files:
            return [Path(f) for f in self.files]
        directory = Path(self.path)
        if not directory.is_dir():
            return []
        return sorted((p for p in directory.iterdir() if p.is_file()), key=lambda p: p.name)


class SigningModel(BaseModel):
    """签名配置模型"""
    keyring: str = Field(..., description="密钥环文件或 GnuPG 主目录", min_length=1)
    key: str = Field(..., description="签名密钥 ID", min_length=1)
    passphrase: str = Field(..., description="密钥口令")

    model_config = {"extra": "forbid"}


class ChangesModel(BaseModel):
    """changes 文档配置模型"""
    input: str = Field(..., description="文本变更文件路径", min_length=1)
    output: str = Field(..., description=".changes 输出路径", min_length=1)
    signing: Optional[SigningModel] = Field(None, description="签名配置")

    model_config = {"extra": "forbid"}


class TokensModel(BaseModel):
    """变量标记模型"""
    open: str = Field("[[", description="变量起始标记", min_length=1)
    close: str = Field("]]", description="变量结束标记", min_length=1)

    model_config = {"extra": "forbid"}


class MaintainerModel(BaseModel):
    """维护者模型"""
    full_name: Optional[str] = Field(None, description="维护者全名")
    email: Optional[str] = Field(None, description="维护者邮箱")

    model_config = {"extra": "forbid"}


class ConfigModel(BaseModel):
    """配置元信息模型"""
    version: int = Field(1, description="配置 schema 版本", ge=1)

    @field_validator('version')
    @classmethod
    def validate_config_version(cls, v: int) -> int:
        """验证配置版本"""
        SUPPORTED_VERSIONS = [1]
        if v not in SUPPORTED_VERSIONS:
            raise ValueError(f"不支持的配置版本 {v}，支持的版本: {SUPPORTED_VERSIONS}")
        return v


class DebpackConfig(BaseModel):
    """debpack 主配置模型

    这是整个配置文件的根模型，包含所有配置部分。
    """

    # 元信息
    config: ConfigModel = Field(default_factory=ConfigModel, description="配置元信息")

    # 必填部分
    control: ControlModel = Field(..., description="控制文件")
    data: List[DataSourceModel] = Field(..., description="数据源列表", min_length=1)
    output: str = Field(..., description=".deb 输出路径", min_length=1)

    # 可选部分
    compression: str = Field("gzip", description="数据归档压缩方式: gzip / bzip2 / none")
    changes: Optional[ChangesModel] = Field(None, description="changes 文档配置")
    variables: Dict[str, str] = Field(default_factory=dict, description="变量替换表")
    tokens: TokensModel = Field(default_factory=TokensModel, description="变量标记")
    maintainer: MaintainerModel = Field(default_factory=MaintainerModel, description="维护者信息")

    model_config = {
        "extra": "forbid",  # 禁止额外字段
        "validate_assignment": True,
    }

    @field_validator('variables', mode='before')
    @classmethod
    def stringify_variables(cls, v: Any) -> Dict[str, str]:
        """变量值统一转为字符串"""
        if v is None:
            return {}
        return {str(k): str(val) for k, val in dict(v).items()}

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        data = self.model_dump(exclude_none=True)

        def convert_values(obj):
            if isinstance(obj, dict):
                return {k: convert_values(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [convert_values(item) for item in obj]
            elif isinstance(obj, (Path, Enum)):
                return obj.value if isinstance(obj, Enum) else str(obj)
            else:
                return obj

        return convert_values(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DebpackConfig':
        """从字典创建配置实例"""
        return cls.model_validate(data)
