"""Tests for theme_preview.extension."""

import xml.etree.ElementTree as ET

import pytest

from theme_preview.errors import InvalidFormatError, NotFoundError
from theme_preview.extension import (
    get_info,
    parse_github_link,
    parse_theme_contributes,
    strip_emoji,
)

CONTRIBUTES = [
    {"label": "Sample Dark", "uiTheme": "vs-dark", "path": "./themes/dark.json"},
    {"label": "Sample Light", "uiTheme": "vs", "path": "./themes/light.json"},
]


class TestStripEmoji:
    def test_removes_pictographs(self):
        assert strip_emoji("Night Owl 🦉").strip() == "Night Owl"
        assert strip_emoji("✨ Shiny ✨").strip() == "Shiny"

    def test_keeps_plain_text(self):
        assert strip_emoji("Solarized (Dark) - v2.0") == "Solarized (Dark) - v2.0"
        assert strip_emoji("Thème café") == "Thème café"


class TestParseThemeContributes:
    def test_entries(self):
        contributions = parse_theme_contributes({"contributes": {"themes": CONTRIBUTES}})
        assert [(c.label, c.ui_theme, c.path) for c in contributions] == [
            ("Sample Dark", "vs-dark", "./themes/dark.json"),
            ("Sample Light", "vs", "./themes/light.json"),
        ]

    def test_duplicate_paths_keep_last_entry(self):
        themes = CONTRIBUTES + [{"label": "Renamed", "uiTheme": "vs-dark", "path": "./themes/dark.json"}]
        contributions = parse_theme_contributes({"contributes": {"themes": themes}})
        assert [c.label for c in contributions] == ["Renamed", "Sample Light"]

    def test_incomplete_entries_skipped(self):
        themes = [
            {"uiTheme": "vs-dark", "path": "./a.json"},
            {"label": "No path", "uiTheme": "vs"},
            "nonsense",
            CONTRIBUTES[0],
        ]
        contributions = parse_theme_contributes({"contributes": {"themes": themes}})
        assert [c.label for c in contributions] == ["Sample Dark"]

    def test_no_themes(self):
        assert parse_theme_contributes({"name": "x"}) == []
        assert parse_theme_contributes({"contributes": {"themes": "nope"}}) == []
        assert parse_theme_contributes([]) == []


class TestManifest:
    def test_github_link_absent_without_properties(self):
        manifest = ET.fromstring("<PackageManifest><Metadata /></PackageManifest>")
        assert parse_github_link(manifest) is None

    def test_github_link_without_namespace(self):
        manifest = ET.fromstring(
            "<PackageManifest><Metadata><Properties>"
            '<Property Id="Microsoft.VisualStudio.Services.Links.GitHub" Value="https://github.com/a/b" />'
            "</Properties></Metadata></PackageManifest>"
        )
        assert parse_github_link(manifest) == "https://github.com/a/b"


class TestGetInfo:
    def test_reads_manifest_and_package(self, make_extension):
        root = make_extension(contributes=CONTRIBUTES, display_name="Sample Theme 🎨")
        info = get_info(root)
        assert info.extension.display_name == "Sample Theme"
        assert info.extension.description == "A sample theme"
        assert info.extension.github_link == "https://github.com/someone/sample-theme"
        assert len(info.theme_contributes) == 2

    def test_wire_format(self, make_extension):
        root = make_extension(contributes=CONTRIBUTES)
        wire = get_info(root).to_wire()
        assert wire == {
            "extension": {
                "displayName": "Sample Theme",
                "description": "A sample theme",
                "githubLink": "https://github.com/someone/sample-theme",
            },
            "themeContributes": [
                {"label": "Sample Dark", "uiTheme": "vs-dark", "path": "./themes/dark.json"},
                {"label": "Sample Light", "uiTheme": "vs", "path": "./themes/light.json"},
            ],
        }

    def test_package_json_with_comments(self, make_extension):
        root = make_extension()
        (root / "extension" / "package.json").write_text(
            '{\n  // themes\n  "contributes": {"themes": [\n'
            '    {"label": "X", "uiTheme": "vs", "path": "./x.json"},\n  ]},\n}',
            encoding="utf-8",
        )
        assert [c.label for c in get_info(root).theme_contributes] == ["X"]

    def test_missing_manifest(self, tmp_path):
        with pytest.raises(NotFoundError) as excinfo:
            get_info(tmp_path)
        assert "Could not find extension manifest" in str(excinfo.value)

    def test_missing_package_json(self, make_extension):
        root = make_extension()
        (root / "extension" / "package.json").unlink()
        with pytest.raises(NotFoundError):
            get_info(root)

    def test_malformed_manifest(self, make_extension):
        root = make_extension()
        (root / "extension.vsixmanifest").write_text("<PackageManifest>", encoding="utf-8")
        with pytest.raises(InvalidFormatError):
            get_info(root)

    def test_missing_description(self, make_extension):
        root = make_extension(description="")
        with pytest.raises(InvalidFormatError):
            get_info(root)

    def test_emoji_only_name(self, make_extension):
        root = make_extension(display_name="🌈🌈")
        with pytest.raises(InvalidFormatError):
            get_info(root)
