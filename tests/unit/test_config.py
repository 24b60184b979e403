"""
配置系统单元测试

测试配置模型验证、加载器的相对路径解析与维护者信息补全。
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from debpack.config.loader import (
    ConfigError,
    ConfigLoader,
    ConfigValidationError,
    resolve_maintainer,
    save_config,
    validate_config,
)
from debpack.config.schema import (
    ControlModel,
    DataSourceModel,
    DebpackConfig,
    MapperModel,
    SourceType,
)


MINIMAL_YAML = """\
control:
  path: debian
data:
  - type: directory
    src: build/root
    mapper:
      prefix: /opt/app
      filemode: 644
      dirmode: "755"
  - type: literal
    paths:
      - /var/log/app
output: dist/app_1.0_all.deb
compression: bzip2
variables:
  version: "1.0"
changes:
  input: CHANGES.txt
  output: dist/app.changes
"""


def _write_config(tmp_path, text=MINIMAL_YAML, name="debpack.yaml"):
    path = tmp_path / name
    path.write_text(text, encoding='utf-8')
    return path


def _minimal_dict(**overrides):
    data = {
        "control": {"path": "/pkg/debian"},
        "data": [{"type": "directory", "src": "/pkg/root"}],
        "output": "/pkg/out.deb",
    }
    data.update(overrides)
    return data


class TestMapperModel:
    """MapperModel 测试"""

    def test_integer_mode_converted(self):
        """测试未加引号的权限数字转为字符串"""
        assert MapperModel(filemode=644).filemode == "644"

    def test_invalid_mode(self):
        """测试无效权限字符串"""
        with pytest.raises(ValidationError):
            MapperModel(dirmode="rwx")

    def test_extra_field_forbidden(self):
        """测试禁止额外字段"""
        with pytest.raises(ValidationError):
            MapperModel(owner="root")


class TestDataSourceModel:
    """DataSourceModel 测试"""

    def test_literal_requires_paths(self):
        """测试 literal 数据源必须提供 paths"""
        with pytest.raises(ValidationError):
            DataSourceModel(type="literal")

    def test_directory_requires_src(self):
        """测试 directory 数据源必须提供 src"""
        with pytest.raises(ValidationError):
            DataSourceModel(type="directory")

    def test_defaults(self):
        """测试默认值"""
        model = DataSourceModel(type="file", src="a.txt")
        assert model.type == SourceType.FILE
        assert model.fail_on_missing_src is True
        assert model.mapper is None

    def test_unknown_type(self):
        """测试未知的数据源类型"""
        with pytest.raises(ValidationError):
            DataSourceModel(type="glob", src="*")


class TestControlModel:
    """ControlModel 测试"""

    def test_path_or_files_required(self):
        """测试 path 与 files 必须且只能提供一个"""
        with pytest.raises(ValidationError):
            ControlModel()
        with pytest.raises(ValidationError):
            ControlModel(path="debian", files=["debian/control"])

    def test_control_files_from_directory(self, tmp_path):
        """测试目录中的控制文件按文件名排序"""
        (tmp_path / "postinst").write_text("")
        (tmp_path / "control").write_text("")
        (tmp_path / "sub").mkdir()

        files = ControlModel(path=str(tmp_path)).get_control_files()
        assert [f.name for f in files] == ["control", "postinst"]


class TestDebpackConfig:
    """DebpackConfig 测试"""

    def test_minimal(self):
        """测试最小配置与默认值"""
        config = DebpackConfig.from_dict(_minimal_dict())

        assert config.compression == "gzip"
        assert config.tokens.open == "[["
        assert config.tokens.close == "]]"
        assert config.changes is None
        assert config.variables == {}

    def test_data_must_not_be_empty(self):
        """测试数据源列表不能为空"""
        with pytest.raises(ValidationError):
            DebpackConfig.from_dict(_minimal_dict(data=[]))

    def test_extra_field_forbidden(self):
        """测试禁止额外字段"""
        with pytest.raises(ValidationError):
            DebpackConfig.from_dict(_minimal_dict(unknown=True))

    def test_variables_stringified(self):
        """测试变量值转为字符串"""
        config = DebpackConfig.from_dict(_minimal_dict(variables={"revision": 3}))
        assert config.variables == {"revision": "3"}

    def test_to_dict_roundtrip(self):
        """测试转换为字典后可以重新验证"""
        config = DebpackConfig.from_dict(_minimal_dict())
        data = config.to_dict()

        assert data["data"][0]["type"] == "directory"
        assert DebpackConfig.from_dict(data) == config


class TestConfigLoader:
    """ConfigLoader 测试"""

    def test_load_from_file(self, tmp_path):
        """测试加载配置并解析相对路径"""
        config = ConfigLoader(environ={}).load_from_file(_write_config(tmp_path))

        base = tmp_path.resolve()
        assert config.control.path == str(base / "debian")
        assert config.data[0].src == str(base / "build" / "root")
        assert config.data[0].mapper.filemode == "644"
        assert config.data[1].paths == ["/var/log/app"]
        assert config.output == str(base / "dist" / "app_1.0_all.deb")
        assert config.changes.input == str(base / "CHANGES.txt")
        assert config.compression == "bzip2"
        assert config.variables == {"version": "1.0"}

    def test_absolute_paths_kept(self, tmp_path):
        """测试绝对路径保持不变"""
        text = MINIMAL_YAML.replace("output: dist/app_1.0_all.deb", "output: /srv/out.deb")
        config = ConfigLoader(environ={}).load_from_file(_write_config(tmp_path, text))

        assert config.output == "/srv/out.deb"

    def test_maintainer_from_environ(self, tmp_path):
        """测试从环境变量补全维护者信息"""
        environ = {"DEBFULLNAME": "Jane Doe", "DEBEMAIL": "jane@example.com"}
        config = ConfigLoader(environ=environ).load_from_file(_write_config(tmp_path))

        assert config.maintainer.full_name == "Jane Doe"
        assert config.maintainer.email == "jane@example.com"

    def test_maintainer_in_file_wins(self, tmp_path):
        """测试配置文件中的维护者信息优先"""
        text = MINIMAL_YAML + "maintainer:\n  full_name: John Roe\n"
        environ = {"DEBFULLNAME": "Jane Doe", "DEBEMAIL": "jane@example.com"}
        config = ConfigLoader(environ=environ).load_from_file(_write_config(tmp_path, text))

        assert config.maintainer.full_name == "John Roe"
        assert config.maintainer.email == "jane@example.com"

    def test_missing_file(self):
        """测试配置文件不存在"""
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load_from_file("nonexistent.yaml")

        assert "配置文件不存在" in str(exc_info.value)

    def test_invalid_extension(self, tmp_path):
        """测试无效扩展名"""
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load_from_file(_write_config(tmp_path, name="debpack.txt"))

        assert "配置文件必须是 .yaml 或 .yml 格式" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        """测试无效 YAML"""
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load_from_file(_write_config(tmp_path, "invalid: yaml: content: [\n"))

        assert "YAML 解析错误" in str(exc_info.value)

    def test_empty_file(self, tmp_path):
        """测试空配置文件"""
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load_from_file(_write_config(tmp_path, ""))

        assert "配置文件为空" in str(exc_info.value)

    def test_validation_errors(self, tmp_path):
        """测试验证错误的格式化"""
        text = "control:\n  path: debian\ndata: []\noutput: out.deb\n"

        with pytest.raises(ConfigValidationError) as exc_info:
            ConfigLoader(environ={}).load_from_file(_write_config(tmp_path, text))

        assert "data" in exc_info.value.format_errors()
        assert isinstance(json.loads(exc_info.value.format_errors_json()), list)

    def test_load_from_dict_with_base_path(self):
        """测试从字典加载时解析相对路径"""
        data = _minimal_dict(output="out.deb")
        config = ConfigLoader(environ={}).load_from_dict(data, Path("/project"))

        assert config.output == str(Path("/project/out.deb").resolve())
        # 原数据不被修改
        assert data["output"] == "out.deb"

    def test_save_and_reload(self, tmp_path):
        """测试保存后重新加载"""
        loader = ConfigLoader(environ={})
        config = loader.load_from_dict(_minimal_dict(variables={"a": "b"}))
        path = tmp_path / "saved.yaml"

        loader.save_to_file(config, path)
        reloaded = loader.load_from_file(path)

        assert reloaded.output == config.output
        assert reloaded.variables == {"a": "b"}

    def test_save_config_creates_parent(self, tmp_path):
        """测试 save_config 创建父目录并写出可重新加载的 YAML"""
        config = ConfigLoader(environ={}).load_from_dict(_minimal_dict(compression="none"))
        path = tmp_path / "nested" / "debpack.yaml"

        save_config(config, path)

        assert path.exists()
        reloaded = ConfigLoader(environ={}).load_from_file(path)
        assert reloaded.compression == config.compression
        assert reloaded.control.path == config.control.path

    def test_validate_config_returns_errors(self, tmp_path):
        """测试 validate_config 返回错误列表"""
        assert validate_config(tmp_path / "missing.yaml")[0]["type"] == "config_error"


class TestResolveMaintainer:
    """resolve_maintainer 测试"""

    def test_no_environ_values(self):
        """测试环境变量缺失时保持为空"""
        config = resolve_maintainer(DebpackConfig.from_dict(_minimal_dict()), {})
        assert config.maintainer.full_name is None
        assert config.maintainer.email is None
