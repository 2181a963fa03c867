"""Tests for theme_preview.textmate."""

from theme_preview.metadata import COLOR_ID_NONE, FONT_STYLE_NOT_SET, FontStyle
from theme_preview.textmate import (
    ColorMap,
    TextMateTheme,
    is_valid_hex_color,
    parse_theme_rules,
)

RULES = [
    {"settings": {"foreground": "#BBBBBB"}},
    {"scope": "comment", "settings": {"foreground": "#6A9955", "fontStyle": "italic"}},
    {"scope": "comment.line", "settings": {"foreground": "#FF0000"}},
    {"scope": "source.python comment", "settings": {"foreground": "#00FF00"}},
    {"scope": "keyword, storage.type", "settings": {"foreground": "#569CD6", "fontStyle": "bold underline"}},
]


class TestRuleParsing:
    def test_hex_colors(self):
        for value in ("#abc", "#abcd", "#AABBCC", "#AABBCCDD"):
            assert is_valid_hex_color(value)
        for value in ("abc", "#ab", "#abcde", "red", None, 12):
            assert not is_valid_hex_color(value)

    def test_comma_separated_scopes_share_the_rule_index(self):
        parsed = parse_theme_rules(RULES)
        keyword_rules = [rule for rule in parsed if rule.index == 4]
        assert [rule.scope for rule in keyword_rules] == ["keyword", "storage.type"]
        assert keyword_rules[0].font_style == int(FontStyle.BOLD | FontStyle.UNDERLINE)

    def test_parent_scopes_nearest_first(self):
        (rule,) = parse_theme_rules([
            {"scope": "source.python meta.class comment", "settings": {"foreground": "#111111"}}
        ])
        assert rule.scope == "comment"
        assert rule.parent_scopes == ("meta.class", "source.python")

    def test_scope_list_and_invalid_colors(self):
        parsed = parse_theme_rules([
            {"scope": ["string", "constant"], "settings": {"foreground": "blue"}},
            {"scope": "ignored"},
            "not a rule",
        ])
        assert [rule.scope for rule in parsed] == ["string", "constant"]
        assert all(rule.foreground is None for rule in parsed)
        assert all(rule.font_style == FONT_STYLE_NOT_SET for rule in parsed)


class TestColorMap:
    def test_ids_are_stable_and_case_insensitive(self):
        color_map = ColorMap()
        assert color_map.get_id(None) == COLOR_ID_NONE
        assert color_map.get_id("#abcdef") == 1
        assert color_map.get_id("#ABCDEF") == 1
        assert color_map.get_id("#000000") == 2
        assert color_map.colors == [None, "#ABCDEF", "#000000"]


class TestTextMateTheme:
    def test_defaults_from_selector_less_rule(self):
        theme = TextMateTheme.from_rules(RULES)
        colors = theme.color_map.colors
        assert colors[:3] == [None, "#BBBBBB", "#FFFFFF"]
        assert theme.defaults.foreground == 1
        assert theme.defaults.background == 2
        assert theme.defaults.font_style == int(FontStyle.NONE)

    def test_black_on_white_without_defaults(self):
        theme = TextMateTheme.from_rules([])
        assert theme.color_map.colors == [None, "#000000", "#FFFFFF"]

    def test_deepest_matching_rule_wins(self):
        theme = TextMateTheme.from_rules(RULES)
        colors = theme.color_map.colors
        style = theme.match(("source.js", "comment.line.double-slash.js"))
        assert colors[style.foreground] == "#FF0000"
        assert style.font_style == int(FontStyle.ITALIC)

    def test_prefix_match(self):
        theme = TextMateTheme.from_rules(RULES)
        colors = theme.color_map.colors
        style = theme.match(("source.js", "comment.block.js"))
        assert colors[style.foreground] == "#6A9955"

    def test_parent_scope_selector(self):
        theme = TextMateTheme.from_rules(RULES)
        colors = theme.color_map.colors
        in_python = theme.match(("source.python", "comment.block.python"))
        in_js = theme.match(("source.js", "comment.block.js"))
        assert colors[in_python.foreground] == "#00FF00"
        assert in_python.font_style == int(FontStyle.ITALIC)
        assert colors[in_js.foreground] == "#6A9955"

    def test_unmatched_scope_sets_nothing(self):
        theme = TextMateTheme.from_rules(RULES)
        style = theme.match(("source.js", "variable.other.js"))
        assert style.foreground == 0
        assert style.background == 0
        assert style.font_style == FONT_STYLE_NOT_SET

    def test_segment_boundaries(self):
        theme = TextMateTheme.from_rules(RULES)
        style = theme.match(("source.js", "keywords.js"))
        assert style.foreground == 0

    def test_later_rule_overrides_same_selector(self):
        theme = TextMateTheme.from_rules([
            {"scope": "string", "settings": {"foreground": "#111111"}},
            {"scope": "string", "settings": {"foreground": "#222222", "fontStyle": "bold"}},
        ])
        style = theme.match(("source.js", "string.quoted.js"))
        assert theme.color_map.colors[style.foreground] == "#222222"
        assert style.font_style == int(FontStyle.BOLD)

    def test_empty_path_gives_defaults(self):
        theme = TextMateTheme.from_rules(RULES)
        assert theme.match(()) == theme.defaults

    def test_equal_foreground_and_background_share_an_id(self):
        theme = TextMateTheme.from_rules([{"settings": {"foreground": "#222222", "background": "#222222"}}])
        assert theme.defaults.foreground == theme.defaults.background == 1
        assert theme.color_map.colors == [None, "#222222"]
