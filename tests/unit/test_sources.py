"""
数据源单元测试

测试目录、文件、归档与字面路径数据源以及条目映射。
"""

import io
import os
import tarfile
import zipfile

import pytest

from debpack.build.sources import (
    ArchiveEntry,
    ArchiveSource,
    DirectorySource,
    FileSource,
    LiteralPathsSource,
    PermMapper,
    create_source,
)
from debpack.config.schema import DataSourceModel


class RecordingSink:
    """记录收到的条目"""

    def __init__(self):
        self.events = []

    def on_directory(self, entry):
        self.events.append(("dir", entry.path, entry.mode, None))

    def on_file(self, entry, stream):
        self.events.append(("file", entry.path, entry.mode, stream.read()))

    def paths(self):
        return [path for _, path, _, _ in self.events]


@pytest.fixture
def tree(tmp_path):
    """创建测试目录树"""
    root = tmp_path / "tree"
    (root / "bin").mkdir(parents=True)
    (root / "etc").mkdir()
    (root / "bin" / "tool").write_bytes(b"#!/bin/sh\n")
    os.chmod(root / "bin" / "tool", 0o755)
    (root / "etc" / "tool.conf").write_bytes(b"a=1\n")
    return root


class TestDirectorySource:
    """DirectorySource 测试"""

    def test_sorted_walk(self, tree):
        """测试按名称排序遍历，目录先于其内容"""
        sink = RecordingSink()
        DirectorySource(tree).produce(sink)

        assert sink.paths() == ["bin", "bin/tool", "etc", "etc/tool.conf"]

    def test_modes(self, tree):
        """测试目录 755，可执行文件 755，其他文件 644"""
        sink = RecordingSink()
        DirectorySource(tree).produce(sink)
        modes = {path: mode for _, path, mode, _ in sink.events}

        assert modes["bin"] == 0o755
        assert modes["bin/tool"] == 0o755
        assert modes["etc/tool.conf"] == 0o644

    def test_file_content_streamed(self, tree):
        """测试文件内容通过流提供"""
        sink = RecordingSink()
        DirectorySource(tree).produce(sink)
        contents = {path: data for kind, path, _, data in sink.events if kind == "file"}

        assert contents["etc/tool.conf"] == b"a=1\n"

    def test_missing_source_fails_by_default(self, tmp_path):
        """测试源不存在时默认报错"""
        with pytest.raises(FileNotFoundError):
            DirectorySource(tmp_path / "missing").produce(RecordingSink())

    def test_missing_source_skipped(self, tmp_path):
        """测试允许缺失时静默跳过"""
        sink = RecordingSink()
        DirectorySource(tmp_path / "missing", fail_on_missing_src=False).produce(sink)

        assert sink.events == []

    def test_mapper_applied(self, tree):
        """测试映射器改写路径与权限"""
        mapper = PermMapper(prefix="/opt/tool", file_mode=0o600, dir_mode=0o700, user="app")
        sink = RecordingSink()
        DirectorySource(tree, mapper).produce(sink)
        events = {path: mode for _, path, mode, _ in sink.events}

        assert events["/opt/tool/bin"] == 0o700
        assert events["/opt/tool/etc/tool.conf"] == 0o600


class TestFileSource:
    """FileSource 测试"""

    def test_single_file(self, tree):
        """测试以文件名作为条目路径"""
        sink = RecordingSink()
        FileSource(tree / "etc" / "tool.conf").produce(sink)

        assert sink.events == [("file", "tool.conf", 0o644, b"a=1\n")]

    def test_missing_file_skipped(self, tmp_path):
        """测试允许缺失时静默跳过"""
        sink = RecordingSink()
        FileSource(tmp_path / "nope", fail_on_missing_src=False).produce(sink)
        assert sink.events == []


class TestArchiveSource:
    """ArchiveSource 测试"""

    def test_tar_members(self, tmp_path):
        """测试重新送出 tar 成员并保留权限"""
        archive = tmp_path / "input.tar.gz"
        with tarfile.open(archive, 'w:gz') as tar:
            info = tarfile.TarInfo("share")
            info.type = tarfile.DIRTYPE
            info.mode = 0o750
            tar.addfile(info)
            data = b"hello"
            info = tarfile.TarInfo("share/hello.txt")
            info.size = len(data)
            info.mode = 0o640
            tar.addfile(info, io.BytesIO(data))
            info = tarfile.TarInfo("share/link")
            info.type = tarfile.SYMTYPE
            info.linkname = "hello.txt"
            tar.addfile(info)

        sink = RecordingSink()
        ArchiveSource(archive).produce(sink)

        assert sink.events == [
            ("dir", "share", 0o750, None),
            ("file", "share/hello.txt", 0o640, b"hello"),
        ]

    def test_zip_members(self, tmp_path):
        """测试读取 zip 归档"""
        archive = tmp_path / "input.zip"
        with zipfile.ZipFile(archive, 'w') as zf:
            zf.writestr("doc/", "")
            zf.writestr("doc/readme.txt", "text")

        sink = RecordingSink()
        ArchiveSource(archive).produce(sink)

        assert sink.paths() == ["doc/", "doc/readme.txt"]
        assert sink.events[1][3] == b"text"

    def test_unsupported_format(self, tmp_path):
        """测试不支持的归档格式"""
        bogus = tmp_path / "input.bin"
        bogus.write_bytes(b"not an archive")

        with pytest.raises(ValueError):
            ArchiveSource(bogus).produce(RecordingSink())


class TestLiteralPathsSource:
    """LiteralPathsSource 测试"""

    def test_paths_as_directories(self):
        """测试每个路径作为 755 目录送出"""
        sink = RecordingSink()
        LiteralPathsSource(["/var/log/app", "/var/cache/app"]).produce(sink)

        assert sink.events == [
            ("dir", "/var/log/app", 0o755, None),
            ("dir", "/var/cache/app", 0o755, None),
        ]


class TestPermMapper:
    """PermMapper 测试"""

    def test_strip_and_prefix(self):
        """测试裁剪前导路径段后添加前缀"""
        mapper = PermMapper(prefix="usr/share/app", strip=1)
        entry = mapper.map(ArchiveEntry(path="build/lib/x.py"), False)

        assert entry.path == "usr/share/app/lib/x.py"

    def test_owner_override(self):
        """测试覆盖属主与属组"""
        mapper = PermMapper(user="app", uid=1000, group="app", gid=1000)
        entry = mapper.map(ArchiveEntry(path="x"), False)

        assert (entry.user, entry.uid, entry.group, entry.gid) == ("app", 1000, "app", 1000)

    def test_unset_fields_kept(self):
        """测试未设置的字段保持原值"""
        entry = PermMapper().map(ArchiveEntry(path="x", mode=0o600), False)
        assert entry.mode == 0o600
        assert entry.user == "root"


class TestCreateSource:
    """create_source 工厂测试"""

    def test_directory_with_mapper(self, tree):
        """测试从配置模型创建目录数据源"""
        model = DataSourceModel(
            type="directory",
            src=str(tree),
            mapper={"prefix": "/opt", "filemode": "640", "dirmode": "750"},
        )
        source = create_source(model)

        assert isinstance(source, DirectorySource)
        assert source.mapper.file_mode == 0o640
        assert source.mapper.dir_mode == 0o750
        assert source.mapper.prefix == "/opt"

    def test_literal(self):
        """测试创建字面路径数据源"""
        source = create_source(DataSourceModel(type="literal", paths=["/var/lib/app"]))

        assert isinstance(source, LiteralPathsSource)
        assert source.mapper is None

    def test_fail_on_missing_passed_through(self, tmp_path):
        """测试 fail_on_missing_src 传递给数据源"""
        model = DataSourceModel(type="file", src=str(tmp_path / "none"), fail_on_missing_src=False)
        source = create_source(model)

        assert isinstance(source, FileSource)
        sink = RecordingSink()
        source.produce(sink)
        assert sink.events == []
