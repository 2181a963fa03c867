"""Tests for theme_preview.jsonc."""

import pytest

from theme_preview.errors import InvalidFormatError, NotFoundError
from theme_preview.jsonc import parse_jsonc, read_jsonc, strip_jsonc


class TestStripJsonc:
    def test_line_and_block_comments(self):
        text = """{
            // the name
            "name": "Sample", /* inline */
            "type": "dark"
        }"""
        assert parse_jsonc(text) == {"name": "Sample", "type": "dark"}

    def test_comment_markers_inside_strings_are_kept(self):
        text = '{"url": "https://example.com/a", "glob": "/* not a comment */"}'
        assert parse_jsonc(text) == {
            "url": "https://example.com/a",
            "glob": "/* not a comment */",
        }

    def test_escaped_quotes_inside_strings(self):
        assert parse_jsonc(r'{"a": "say \"hi\" // still text"}') == {"a": 'say "hi" // still text'}

    def test_trailing_commas(self):
        assert parse_jsonc('{"a": [1, 2, ], "b": {"c": 3,},}') == {"a": [1, 2], "b": {"c": 3}}

    def test_trailing_comma_before_comment(self):
        text = '{"a": 1, // last\n}'
        assert parse_jsonc(text) == {"a": 1}

    def test_comma_in_string_is_not_trailing(self):
        assert parse_jsonc('["a,", "b"]') == ["a,", "b"]

    def test_plain_json_unchanged(self):
        text = '{"a": [1, 2], "b": "c"}'
        assert strip_jsonc(text) == text


class TestReadJsonc:
    def test_reads_file_with_bom(self, tmp_path):
        path = tmp_path / "theme.json"
        path.write_text('\ufeff{"name": "x", // c\n}', encoding="utf-8")
        assert read_jsonc(path) == {"name": "x"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            read_jsonc(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json", encoding="utf-8")
        with pytest.raises(InvalidFormatError) as excinfo:
            read_jsonc(path)
        assert "Invalid json at" in str(excinfo.value)
