"""
软件包处理器单元测试

端到端测试 deb 构建：ar 成员顺序、链式哈希、临时文件清理与错误包装。
"""

import hashlib
import io
import tarfile
from pathlib import Path
from unittest.mock import patch

import pytest

from debpack.build import PackagingError, Processor, read_control, read_members
from debpack.build.ar import read_member
from debpack.build.build_context import MissingControlError
from debpack.build.sources import DirectorySource, FileSource
from debpack.descriptors import InvalidDescriptorError, ParseError


CONTROL_TEXT = """\
Package: app
Version: 1.0
Section: misc
Priority: optional
Architecture: all
Maintainer: Jane Doe <jane@example.com>
Description: test package
"""


@pytest.fixture
def project(tmp_path):
    """创建控制目录与数据目录"""
    control = tmp_path / "control"
    control.mkdir()
    (control / "control").write_text(CONTROL_TEXT, encoding='utf-8')

    data = tmp_path / "data"
    (data / "usr" / "bin").mkdir(parents=True)
    (data / "usr" / "bin" / "app").write_bytes(b"binary" * 100)
    return tmp_path


def _processor():
    return Processor(console=lambda line: None)


class TestCreateDeb:
    """create_deb 测试"""

    @pytest.mark.parametrize("compression, member", [
        ("gzip", "data.tar.gz"),
        ("bzip2", "data.tar.bz2"),
        ("none", "data.tar"),
        ("lzma", "data.tar"),
    ])
    def test_members_in_order(self, project, compression, member):
        """测试 ar 成员固定为三个且顺序正确"""
        output = project / "dist" / "app.deb"
        _processor().create_deb([project / "control" / "control"], [DirectorySource(project / "data")],
                                output, compression)

        names = [name for name, _ in read_members(output)]
        assert names == ["debian-binary", "control.tar.gz", member]
        assert read_member(output, "debian-binary") == b"2.0\n"

    def test_digests_match_output(self, project):
        """测试回写的哈希与大小对应最终文件"""
        output = project / "app.deb"
        descriptor = _processor().create_deb(
            [project / "control" / "control"], [DirectorySource(project / "data")], output
        )

        content = output.read_bytes()
        assert descriptor.get("MD5") == hashlib.md5(content).hexdigest()
        assert descriptor.get("SHA1") == hashlib.sha1(content).hexdigest()
        assert descriptor.get("SHA256") == hashlib.sha256(content).hexdigest()
        assert descriptor.get("Size") == str(len(content))
        assert descriptor.get("File") == "app.deb"

    def test_control_and_data_contents(self, project):
        """测试控制归档与数据归档内容"""
        output = project / "app.deb"
        descriptor = _processor().create_deb(
            [project / "control" / "control"], [DirectorySource(project / "data")], output
        )

        data = read_member(output, "data.tar.gz")
        with tarfile.open(fileobj=io.BytesIO(data), mode='r:gz') as tar:
            assert tar.getnames() == [".", "./usr", "./usr/bin", "./usr/bin/app"]

        control = read_control(output)
        assert control.get("Package") == "app"
        assert control.get("Installed-Size") == "0"
        assert descriptor.get("Installed-Size") == "0"

    def test_progress_reported(self, project):
        """测试进度回调覆盖 0 到 100"""
        calls = []
        _processor().create_deb(
            [project / "control" / "control"], [DirectorySource(project / "data")],
            project / "app.deb", progress_callback=lambda *args: calls.append(args),
        )

        assert calls[0][1] == 0
        assert calls[-1][1] == 100
        assert all(total == 100 for _, _, total, _ in calls)

    def test_temp_files_removed(self, project):
        """测试构建结束后临时文件被删除"""
        created = []

        def fake_temp(prefix, suffix):
            path = project / f"{prefix}-{suffix}.tmp"
            path.touch()
            created.append(path)
            return path

        with patch('debpack.build.processor.create_temp_file', side_effect=fake_temp):
            _processor().create_deb(
                [project / "control" / "control"], [DirectorySource(project / "data")], project / "app.deb"
            )

        assert [p.name for p in created] == ["deb-data.tmp", "deb-control.tmp"]
        assert not any(p.exists() for p in created)

    def test_temp_files_removed_on_failure(self, project):
        """测试构建失败时临时文件同样被删除"""
        created = []

        def fake_temp(prefix, suffix):
            path = project / f"{prefix}-{suffix}.tmp"
            path.touch()
            created.append(path)
            return path

        with patch('debpack.build.processor.create_temp_file', side_effect=fake_temp):
            with pytest.raises(PackagingError):
                _processor().create_deb([], [DirectorySource(project / "data")], project / "app.deb")

        assert not any(p.exists() for p in created)

    def test_first_temp_file_removed_when_second_fails(self, project):
        """测试第二个临时文件创建失败时删除已创建的第一个"""
        created = []

        def fake_temp(prefix, suffix):
            if created:
                raise OSError("no space left on device")
            path = project / f"{prefix}-{suffix}.tmp"
            path.touch()
            created.append(path)
            return path

        with patch('debpack.build.processor.create_temp_file', side_effect=fake_temp):
            with pytest.raises(PackagingError) as exc_info:
                _processor().create_deb(
                    [project / "control" / "control"], [DirectorySource(project / "data")], project / "app.deb"
                )

        assert isinstance(exc_info.value.cause, OSError)
        assert len(created) == 1
        assert not created[0].exists()
        assert not (project / "app.deb").exists()

    def test_temp_cleanup_failure_raises(self, project):
        """测试临时文件删除失败时即使构建成功也报错"""
        output = project / "app.deb"

        with patch.object(Path, 'unlink', side_effect=PermissionError("denied")):
            with pytest.raises(PackagingError) as exc_info:
                _processor().create_deb(
                    [project / "control" / "control"], [DirectorySource(project / "data")], output
                )

        assert "无法删除临时文件" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, PermissionError)
        assert output.exists()


class TestCreateDebErrors:
    """create_deb 错误处理测试"""

    def test_missing_control_wrapped(self, project):
        """测试缺少 control 文件被包装为 PackagingError"""
        with pytest.raises(PackagingError) as exc_info:
            _processor().create_deb([], [DirectorySource(project / "data")], project / "app.deb")

        assert isinstance(exc_info.value.cause, MissingControlError)
        assert not (project / "app.deb").exists()
        assert exc_info.value.__cause__ is exc_info.value.cause

    def test_missing_source_wrapped(self, project):
        """测试数据源缺失被包装为 PackagingError"""
        with pytest.raises(PackagingError) as exc_info:
            _processor().create_deb(
                [project / "control" / "control"], [FileSource(project / "missing")], project / "app.deb"
            )

        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_missing_optional_source_skipped(self, project):
        """测试允许缺失的数据源被静默跳过"""
        output = project / "app.deb"
        _processor().create_deb(
            [project / "control" / "control"],
            [FileSource(project / "missing", fail_on_missing_src=False)],
            output,
        )

        assert output.exists()

    def test_parse_error_wrapped(self, project):
        """测试描述文件语法错误被包装"""
        (project / "control" / "control").write_text("not a field\n", encoding='utf-8')

        with pytest.raises(PackagingError) as exc_info:
            _processor().create_deb(
                [project / "control" / "control"], [DirectorySource(project / "data")], project / "app.deb"
            )

        assert isinstance(exc_info.value.cause, ParseError)

    def test_invalid_descriptor_not_wrapped(self, project):
        """测试描述文件校验失败不被包装"""
        (project / "control" / "control").write_text(
            CONTROL_TEXT.replace("Priority: optional\n", ""), encoding='utf-8'
        )

        with pytest.raises(InvalidDescriptorError) as exc_info:
            _processor().create_deb(
                [project / "control" / "control"], [DirectorySource(project / "data")], project / "app.deb"
            )

        assert exc_info.value.descriptor.invalid_fields() == ["Priority"]
        assert not (project / "app.deb").exists()
