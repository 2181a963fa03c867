"""Tests for theme_preview.tmtheme."""

import plistlib

import pytest

from theme_preview.errors import InvalidFormatError, NotFoundError
from theme_preview.tmtheme import convert_tmtheme, read_tmtheme

SAMPLE_PLIST = {
    "name": "Monokai Sample",
    "settings": [
        {
            "settings": {
                "background": "#272822",
                "foreground": "#F8F8F2",
                "caret": "#F8F8F0",
                "selection": "#49483E",
            }
        },
        {"name": "Comment", "scope": "comment", "settings": {"foreground": "#75715E"}},
        {"name": "String", "scope": "string", "settings": {"foreground": "#E6DB74"}},
        {"name": "Broken", "scope": "keyword"},
    ],
}


class TestConvertTmtheme:
    def test_global_settings_become_workbench_colors(self):
        theme = convert_tmtheme(SAMPLE_PLIST)
        assert theme["colors"] == {
            "editor.background": "#272822",
            "editor.foreground": "#F8F8F2",
            "editorCursor.foreground": "#F8F8F0",
            "editor.selectionBackground": "#49483E",
        }

    def test_entries_kept_as_token_rules(self):
        theme = convert_tmtheme(SAMPLE_PLIST)
        scopes = [rule.get("scope") for rule in theme["tokenColors"]]
        assert scopes == [None, "comment", "string"]
        assert theme["tokenColors"][1] == {
            "name": "Comment",
            "scope": "comment",
            "settings": {"foreground": "#75715E"},
        }

    def test_name_is_carried(self):
        assert convert_tmtheme(SAMPLE_PLIST)["name"] == "Monokai Sample"
        assert "name" not in convert_tmtheme({"settings": []})

    def test_no_type_is_produced(self):
        assert "type" not in convert_tmtheme(SAMPLE_PLIST)

    def test_missing_settings(self):
        with pytest.raises(InvalidFormatError):
            convert_tmtheme({"name": "x"})


class TestReadTmtheme:
    def test_reads_plist(self, tmp_path):
        path = tmp_path / "Sample.tmTheme"
        path.write_bytes(plistlib.dumps(SAMPLE_PLIST))
        theme = read_tmtheme(path)
        assert theme["name"] == "Monokai Sample"
        assert len(theme["tokenColors"]) == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            read_tmtheme(tmp_path / "missing.tmTheme")

    def test_not_a_plist(self, tmp_path):
        path = tmp_path / "bad.tmTheme"
        path.write_text("this is not xml", encoding="utf-8")
        with pytest.raises(InvalidFormatError) as excinfo:
            read_tmtheme(path)
        assert "Invalid tmTheme" in str(excinfo.value)

    def test_top_level_array(self, tmp_path):
        path = tmp_path / "array.tmTheme"
        path.write_bytes(plistlib.dumps([1, 2]))
        with pytest.raises(InvalidFormatError):
            read_tmtheme(path)
