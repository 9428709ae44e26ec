"""Tests for structured reply decoding."""
from __future__ import annotations

import pytest

from sidekick.core import EditResult, GeneratedFile, parse_edit_result, parse_generated_files
from sidekick.errors import StructuredOutputError


def test_array_of_files():
    files = parse_generated_files(
        '[{"filename": "a.py", "content": "x = 1"}, {"filename": "b.md", "content": "# B"}]'
    )

    assert files == [
        GeneratedFile(filename="a.py", content="x = 1"),
        GeneratedFile(filename="b.md", content="# B"),
    ]


def test_single_object_becomes_one_element_list():
    files = parse_generated_files('{"filename": "hello.py", "content": "print(1)"}')

    assert files == [GeneratedFile(filename="hello.py", content="print(1)")]


def test_empty_array():
    assert parse_generated_files("[]") == []


def test_missing_fields_default_to_empty():
    files = parse_generated_files('[{"filename": "empty.txt"}]')

    assert files[0].content == ""


@pytest.mark.parametrize("payload", ["not json", '"just a string"', "[1, 2]", ""])
def test_undecodable_payload_keeps_raw_text(payload):
    with pytest.raises(StructuredOutputError) as exc_info:
        parse_generated_files(payload)

    assert exc_info.value.raw == payload
    assert "invalid JSON for generated files" in str(exc_info.value)


def test_error_message_includes_response():
    with pytest.raises(StructuredOutputError) as exc_info:
        parse_generated_files("oops")

    assert str(exc_info.value).endswith("Response was: oops")


def test_edit_result():
    result = parse_edit_result(
        '{"filename": "app.py", "content": "def f():\\n    pass\\n", "summary": "added f"}'
    )

    assert result == EditResult(filename="app.py", content="def f():\n    pass\n", summary="added f")


def test_edit_result_invalid():
    with pytest.raises(StructuredOutputError) as exc_info:
        parse_edit_result("[]")

    assert exc_info.value.raw == "[]"
