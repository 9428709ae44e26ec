"""Tests for file references in prompts."""
from __future__ import annotations

from sidekick.core.file_context import (
    FILE_CONTENTS_HEADER,
    MAX_FILE_SIZE,
    detect_file_in_input,
    find_file_references,
    load_referenced_files,
)


def test_find_file_references():
    text = "compare src/app.py with README.md and src/app.py again"

    assert find_file_references(text) == ["src/app.py", "README.md"]


def test_words_without_known_extension_are_ignored():
    assert find_file_references("open photo.png and run make") == []


def test_load_appends_file_sections(tmp_path):
    (tmp_path / "app.py").write_text("print('hi')")

    prompt = load_referenced_files("explain app.py", tmp_path)

    assert prompt == (
        "explain app.py"
        + FILE_CONTENTS_HEADER
        + "\n--- app.py ---\nprint('hi')\n--- End of app.py ---\n"
    )


def test_unchanged_when_nothing_loads(tmp_path):
    assert load_referenced_files("explain missing.py", tmp_path) == "explain missing.py"


def test_references_outside_root_are_skipped(tmp_path):
    root = tmp_path / "proj"
    root.mkdir()
    (tmp_path / "secret.txt").write_text("token")

    prompt = load_referenced_files("show ../secret.txt", root)

    assert "token" not in prompt


def test_extra_files_are_included_once(tmp_path):
    (tmp_path / "a.py").write_text("A")
    (tmp_path / "b.py").write_text("B")

    prompt = load_referenced_files("look at a.py", tmp_path, extra_files=["a.py", "b.py"])

    assert prompt.count("--- a.py ---") == 1
    assert "--- b.py ---\nB" in prompt


def test_large_files_are_skipped(tmp_path):
    (tmp_path / "big.txt").write_text("x" * (MAX_FILE_SIZE + 1))

    assert load_referenced_files("read big.txt", tmp_path) == "read big.txt"


def test_detect_file_in_input():
    assert detect_file_in_input("add logging to 'src/server.py', please") == "src/server.py"
    assert detect_file_in_input("refactor ./index.html") == "index.html"
    assert detect_file_in_input("make it faster") == ""


def test_excluded_paths_are_not_loaded(tmp_path):
    (tmp_path / "app.py").write_text("A")
    (tmp_path / "lib.py").write_text("L")

    prompt = load_referenced_files("edit ./app.py with lib.py", tmp_path, exclude=["app.py"])

    assert "--- app.py ---" not in prompt
    assert "--- lib.py ---\nL" in prompt
