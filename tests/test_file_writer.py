"""Tests for backed-up file writes."""
from __future__ import annotations

import pytest

from sidekick.core.structured import GeneratedFile
from sidekick.errors import FileMutationError, PathSecurityError
from sidekick.executor import BACKUP_SUFFIX, FileWriter, write_with_backup


def test_new_file_has_no_backup(tmp_path):
    target = tmp_path / "new.txt"

    backup = write_with_backup(target, "hello")

    assert backup == ""
    assert target.read_text() == "hello"
    assert not (tmp_path / "new.txt.backup").exists()


def test_existing_file_is_backed_up(tmp_path):
    target = tmp_path / "app.py"
    target.write_text("old")

    backup = write_with_backup(target, "new")

    assert backup == str(target) + BACKUP_SUFFIX
    assert target.read_text() == "new"
    assert (tmp_path / "app.py.backup").read_text() == "old"


def test_last_backup_wins(tmp_path):
    target = tmp_path / "app.py"
    target.write_text("v1")

    write_with_backup(target, "v2")
    write_with_backup(target, "v3")

    assert target.read_text() == "v3"
    assert (tmp_path / "app.py.backup").read_text() == "v2"


def test_missing_parent_directories_are_created(tmp_path):
    target = tmp_path / "a" / "b" / "c.txt"

    write_with_backup(target, "deep")

    assert target.read_text() == "deep"


def test_bytes_are_written_verbatim(tmp_path):
    target = tmp_path / "blob.bin"

    write_with_backup(target, b"\x00\xff")

    assert target.read_bytes() == b"\x00\xff"


def test_file_in_place_of_directory_fails(tmp_path):
    (tmp_path / "a").write_text("i am a file")

    with pytest.raises(FileMutationError):
        write_with_backup(tmp_path / "a" / "b.txt", "x")


def test_failed_backup_leaves_original_untouched(tmp_path):
    target = tmp_path / "app.py"
    target.write_text("original")
    (tmp_path / "app.py.backup").mkdir()

    with pytest.raises(FileMutationError) as exc_info:
        write_with_backup(target, "replacement")

    assert target.read_text() == "original"
    assert exc_info.value.path == str(target)


def test_empty_path_is_rejected():
    with pytest.raises(FileMutationError):
        write_with_backup("", "x")


class TestFileWriter:

    def test_write_returns_result(self, tmp_path):
        writer = FileWriter(tmp_path)

        result = writer.write("src/app.py", "print('hi')\n")

        assert result.path == "src/app.py"
        assert result.created
        assert result.bytes_written == len("print('hi')\n")
        assert (tmp_path / "src" / "app.py").read_text() == "print('hi')\n"
        assert writer.history == [result]

    def test_overwrite_reports_previous_size(self, tmp_path):
        (tmp_path / "notes.md").write_text("12345")
        writer = FileWriter(tmp_path)

        result = writer.write("notes.md", "new")

        assert not result.created
        assert result.previous_size == 5
        assert result.backup_path.endswith("notes.md.backup")

    @pytest.mark.parametrize("bad", ["../escape.txt", "/etc/passwd", "", "a/../../x"])
    def test_traversal_is_rejected_before_touching_disk(self, tmp_path, bad):
        root = tmp_path / "proj"
        root.mkdir()
        writer = FileWriter(root)

        with pytest.raises(PathSecurityError):
            writer.write(bad, "pwned")

        assert not (tmp_path / "escape.txt").exists()
        assert writer.history == []

    def test_batch_with_unsafe_name_writes_nothing(self, tmp_path):
        writer = FileWriter(tmp_path)
        files = [
            GeneratedFile(filename="good.txt", content="ok"),
            GeneratedFile(filename="../evil.txt", content="bad"),
        ]

        with pytest.raises(PathSecurityError):
            writer.apply_generated(files)

        assert not (tmp_path / "good.txt").exists()

    def test_batch_writes_all_files(self, tmp_path):
        writer = FileWriter(tmp_path)
        files = [
            GeneratedFile(filename="a.txt", content="A"),
            GeneratedFile(filename="pkg/b.py", content="B"),
        ]

        results = writer.apply_generated(files)

        assert [r.path for r in results] == ["a.txt", "pkg/b.py"]
        assert (tmp_path / "pkg" / "b.py").read_text() == "B"

    def test_rollback_restores_backup(self, tmp_path):
        (tmp_path / "app.py").write_text("before")
        writer = FileWriter(tmp_path)
        result = writer.write("app.py", "after")

        assert writer.rollback(result)
        assert (tmp_path / "app.py").read_text() == "before"
        assert writer.history == []

    def test_rollback_removes_created_file(self, tmp_path):
        writer = FileWriter(tmp_path)
        result = writer.write("fresh.txt", "content")

        assert writer.rollback(result)
        assert not (tmp_path / "fresh.txt").exists()

    def test_undo_last(self, tmp_path):
        (tmp_path / "a.txt").write_text("1")
        writer = FileWriter(tmp_path)
        writer.write("a.txt", "2")
        second = writer.write("b.txt", "new")

        assert writer.undo_last() == second
        assert not (tmp_path / "b.txt").exists()
        assert writer.undo_last() is not None
        assert (tmp_path / "a.txt").read_text() == "1"
        assert writer.undo_last() is None

    def test_repeated_undo_walks_back_through_versions(self, tmp_path):
        (tmp_path / "a.txt").write_text("v1")
        writer = FileWriter(tmp_path)
        writer.write("a.txt", "v2")
        writer.write("a.txt", "v3")

        assert writer.undo_last() is not None
        assert (tmp_path / "a.txt").read_text() == "v2"
        assert writer.undo_last() is not None
        assert (tmp_path / "a.txt").read_text() == "v1"
        assert writer.undo_last() is None

    def test_empty_root_is_rejected(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with pytest.raises(PathSecurityError):
            FileWriter("").write("x.txt", "hi")

        assert not (tmp_path / "x.txt").exists()
