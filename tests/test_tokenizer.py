"""Tests for theme_preview.tokenizer (Pygments-backed grammars)."""

import pytest
from pygments.token import Comment, Keyword, Name, String

from theme_preview import metadata
from theme_preview.errors import TokenizerUnavailableError
from theme_preview.metadata import FontStyle, StandardTokenType, decode_style
from theme_preview.tokenizer import Registry, scope_for, standard_token_type

RULES = [
    {"settings": {"foreground": "#BBBBBB"}},
    {"scope": "comment", "settings": {"foreground": "#6A9955"}},
    {"scope": "storage.type", "settings": {"foreground": "#569CD6", "fontStyle": "bold"}},
]


def _starts(tokens):
    return tokens[0::2]


def _words(tokens):
    return tokens[1::2]


@pytest.fixture(scope="module")
def registry():
    return Registry()


class TestScopeMapping:
    def test_nearest_mapped_parent(self):
        assert scope_for(Keyword.Declaration) == "storage.type"
        assert scope_for(Comment.Single) == "comment.line"
        assert scope_for(String.Double) == "string.quoted"
        assert scope_for(Name.Other) is None

    def test_standard_token_type(self):
        assert standard_token_type("comment.line.js") == StandardTokenType.COMMENT
        assert standard_token_type("string.quoted.js") == StandardTokenType.STRING
        assert standard_token_type("string.regexp.js") == StandardTokenType.STRING
        assert standard_token_type("meta.embedded.block.js") == StandardTokenType.OTHER
        assert standard_token_type("keyword.control.js") is None

    def test_first_kind_in_scope_wins(self):
        assert standard_token_type("comment.line.string.js") == StandardTokenType.COMMENT
        assert standard_token_type("string.quoted.comment.js") == StandardTokenType.STRING
        assert standard_token_type("meta.embedded.string.js") == StandardTokenType.OTHER


class TestGrammar:
    def test_keyword_and_comment_styles(self, registry):
        line = "const a = 1; // hi"
        with registry.themed(RULES) as session:
            result = session.grammar("source.js").tokenize_line(line)
            color_map = session.color_map

        starts, words = _starts(result.tokens), _words(result.tokens)
        assert starts[0] == 0
        assert starts == sorted(set(starts))
        assert all(0 <= start < len(line) for start in starts)

        keyword = decode_style(words[0], color_map)
        assert keyword.color == "#569CD6"
        assert keyword.font_weight == "bold"

        comment_word = words[starts.index(line.index("//"))]
        assert decode_style(comment_word, color_map).color == "#6A9955"
        assert metadata.get_token_type(comment_word) == StandardTokenType.COMMENT

    def test_unstyled_tokens_use_theme_default(self, registry):
        with registry.themed(RULES) as session:
            result = session.grammar("source.js").tokenize_line("a + b")
            color_map = session.color_map
        assert {decode_style(word, color_map).color for word in _words(result.tokens)} == {"#BBBBBB"}

    def test_adjacent_equal_tokens_are_merged(self, registry):
        with registry.themed([]) as session:
            result = session.grammar("source.js").tokenize_line("a + b")
        assert len(result.tokens) == 2

    def test_language_id_is_packed(self, registry):
        with registry.themed(RULES) as session:
            grammar = session.grammar("source.js")
            result = grammar.tokenize_line("let x;")
        assert grammar.language_id == 1
        assert metadata.get_language_id(result.tokens[1]) == 1

    def test_empty_line(self, registry):
        with registry.themed(RULES) as session:
            result = session.grammar("source.js").tokenize_line("", ("let x;",))
            color_map = session.color_map
        assert len(result.tokens) == 2
        assert result.tokens[0] == 0
        assert decode_style(result.tokens[1], color_map).color == "#BBBBBB"
        assert result.rule_stack == ("let x;", "")

    def test_state_carries_multi_line_strings(self, registry):
        rules = RULES + [{"scope": "string", "settings": {"foreground": "#CE9178"}}]
        with registry.themed(rules) as session:
            grammar = session.grammar("source.python")
            first = grammar.tokenize_line('"""A')
            second = grammar.tokenize_line('string"""', first.rule_stack)
            fresh = grammar.tokenize_line('string"""')
            color_map = session.color_map

        assert metadata.get_token_type(second.tokens[1]) == StandardTokenType.STRING
        assert decode_style(second.tokens[1], color_map).color == "#CE9178"
        assert metadata.get_token_type(fresh.tokens[1]) != StandardTokenType.STRING

    def test_font_style_flags(self, registry):
        rules = [{"scope": "storage.type", "settings": {"fontStyle": "italic underline"}}]
        with registry.themed(rules) as session:
            result = session.grammar("source.js").tokenize_line("var x")
        font_style = metadata.get_font_style(result.tokens[1])
        assert font_style == FontStyle.ITALIC | FontStyle.UNDERLINE


class TestRegistry:
    def test_grammars_are_cached(self, registry):
        assert registry.load_grammar("source.css") is registry.load_grammar("source.css")

    def test_unknown_scope(self, registry):
        assert registry.load_grammar("source.cobol") is None
        with registry.themed(RULES) as session:
            with pytest.raises(TokenizerUnavailableError) as excinfo:
                session.grammar("source.cobol")
        assert excinfo.value.scope_name == "source.cobol"

    def test_theme_swap_changes_palette(self, registry):
        with registry.themed(RULES) as session:
            first = session.color_map
            grammar = session.grammar("source.js")
            dark = grammar.tokenize_line("const a")
        with registry.themed([{"settings": {"foreground": "#111111"}}]) as session:
            second = session.color_map
            plain = grammar.tokenize_line("const a")
        assert first[:4] == [None, "#BBBBBB", "#FFFFFF", "#6A9955"]
        assert second == [None, "#111111", "#FFFFFF"]
        assert dark.tokens != plain.tokens

    def test_every_registered_language_loads(self, registry):
        from theme_preview.languages import LANGUAGES

        for language in LANGUAGES:
            assert registry.load_grammar(language.scope_name) is not None
