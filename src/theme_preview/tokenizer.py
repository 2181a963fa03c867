"""
Grammar engine for the example languages.

Each registered grammar scope (``source.js``, ``source.python``, ...) is
backed by a Pygments lexer.  Pygments token types are mapped onto TextMate
scope names so theme rules written for the reference editor apply, and every
token is reported as a packed metadata word (see ``metadata``) against the
palette of the currently configured theme.

The registry holds one theme at a time.  Configuring it and reading results
back must happen as one step, so the theme is only ever swapped inside
``Registry.themed``, which holds the registry lock until the caller is done::

    with registry.themed(rules) as session:
        grammar = session.grammar("source.js")
        result = grammar.tokenize_line("let a = 1;", None)
        styles = session.color_map
"""

from __future__ import annotations

import logging
import re
import threading
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, NamedTuple, Optional, Sequence

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.token import (
    Comment,
    Generic,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Token,
    _TokenType,
)
from pygments.util import ClassNotFound

from .errors import TokenizerUnavailableError
from .languages import LANGUAGES, Language
from .metadata import StandardTokenType, encode_metadata, merge_metadata
from .textmate import TextMateTheme

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pygments token type -> TextMate scope
# ---------------------------------------------------------------------------

SCOPE_MAP: dict[_TokenType, str] = {
    Keyword: "keyword",
    Keyword.Constant: "constant.language",
    Keyword.Declaration: "storage.type",
    Keyword.Type: "storage.type",
    Keyword.Namespace: "keyword.control.import",
    Keyword.Reserved: "keyword.control",
    Keyword.Pseudo: "keyword.other",

    Name.Function: "entity.name.function",
    Name.Function.Magic: "support.function.magic",
    Name.Class: "entity.name.type.class",
    Name.Builtin: "support.function",
    Name.Builtin.Pseudo: "variable.language",
    Name.Decorator: "entity.name.function.decorator",
    Name.Tag: "entity.name.tag",
    Name.Attribute: "entity.other.attribute-name",
    Name.Variable: "variable",
    Name.Variable.Instance: "variable.other.readwrite.instance",
    Name.Constant: "constant.other",
    Name.Exception: "support.type.exception",
    Name.Namespace: "entity.name.namespace",
    Name.Property: "variable.other.property",
    Name.Label: "entity.name.label",
    Name.Entity: "constant.character.entity",

    String: "string.quoted",
    String.Doc: "string.quoted.docstring",
    String.Escape: "constant.character.escape",
    String.Interpol: "string.interpolated",
    String.Regex: "string.regexp",
    String.Symbol: "constant.other.symbol",
    String.Char: "string.quoted.single",
    String.Affix: "storage.type.string",

    Number: "constant.numeric",
    Operator: "keyword.operator",
    Operator.Word: "keyword.operator.word",
    Punctuation: "punctuation",

    Comment: "comment",
    Comment.Single: "comment.line",
    Comment.Multiline: "comment.block",
    Comment.Hashbang: "comment.line.shebang",
    Comment.Preproc: "meta.preprocessor",
    Comment.PreprocFile: "string.quoted.other.lt-gt.include",
    Comment.Special: "comment.block.documentation",

    Generic.Deleted: "markup.deleted",
    Generic.Inserted: "markup.inserted",
    Generic.Heading: "markup.heading",
    Generic.Emph: "markup.italic",
    Generic.Strong: "markup.bold",
}

_STANDARD_TYPE = re.compile(r"\b(comment|string|regex|meta\.embedded)\b")


def scope_for(ttype: _TokenType) -> Optional[str]:
    """TextMate scope of a Pygments token type, via its nearest mapped parent."""
    while ttype is not Token and ttype is not None:
        scope = SCOPE_MAP.get(ttype)
        if scope is not None:
            return scope
        ttype = ttype.parent
    return None


def standard_token_type(scope: str) -> Optional[int]:
    """Token kind implied by a scope name, ``None`` when it implies none."""
    match = _STANDARD_TYPE.search(scope)
    if match is None:
        return None
    kind = match.group(1)
    if kind == "comment":
        return StandardTokenType.COMMENT
    if kind == "string":
        return StandardTokenType.STRING
    if kind == "regex":
        return StandardTokenType.REGEX
    return StandardTokenType.OTHER


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------

LineState = tuple[str, ...]  # lines tokenized so far


class TokenizeLineResult(NamedTuple):
    tokens: list[int]  # flat [start, metadata, start, metadata, ...]
    rule_stack: LineState


class Grammar:
    """Tokenizes lines of one language against the registry's current theme."""

    def __init__(self, registry: Registry, scope_name: str, lexer: Lexer, language_id: int):
        self._registry = registry
        self.scope_name = scope_name
        self.language_id = language_id
        self._lexer = lexer
        self._suffix = scope_name.split(".")[1] if "." in scope_name else scope_name
        self._metadata_cache: dict[tuple[str, ...], int] = {}
        self._cache_theme: Optional[TextMateTheme] = None

    def _scope_path(self, ttype: _TokenType) -> tuple[str, ...]:
        scope = scope_for(ttype)
        if scope is None:
            return (self.scope_name,)
        return (self.scope_name, f"{scope}.{self._suffix}")

    def _metadata(self, scope_path: tuple[str, ...]) -> int:
        theme = self._registry.theme
        if theme is not self._cache_theme:
            self._metadata_cache.clear()
            self._cache_theme = theme

        cached = self._metadata_cache.get(scope_path)
        if cached is not None:
            return cached

        defaults = theme.defaults
        metadata = encode_metadata(
            language_id=self.language_id,
            token_type=StandardTokenType.OTHER,
            font_style=defaults.font_style,
            foreground=defaults.foreground,
            background=defaults.background,
        )
        for depth in range(1, len(scope_path) + 1):
            style = theme.match(scope_path[:depth])
            token_type = standard_token_type(scope_path[depth - 1])
            if style is None:
                metadata = merge_metadata(metadata, token_type=token_type)
            else:
                metadata = merge_metadata(
                    metadata,
                    token_type=token_type,
                    font_style=style.font_style,
                    foreground=style.foreground,
                    background=style.background,
                )

        self._metadata_cache[scope_path] = metadata
        return metadata

    def tokenize_line(self, line: str, prior_state: Optional[LineState] = None) -> TokenizeLineResult:
        """Tokenize one line given the state returned for the previous line.

        The whole document so far is lexed again so multi-line constructs
        (block comments, docstrings) carry over; tokens are clipped to the
        current line.  Adjacent tokens with the same metadata are merged.
        """
        state = prior_state or ()
        prefix = "".join(f"{previous}\n" for previous in state)
        start = len(prefix)
        end = start + len(line)

        tokens: list[int] = []
        for index, ttype, value in self._lexer.get_tokens_unprocessed(f"{prefix}{line}\n"):
            token_start = max(index, start)
            token_end = min(index + len(value), end)
            if token_start >= token_end:
                continue
            metadata = self._metadata(self._scope_path(ttype))
            if tokens and tokens[-1] == metadata:
                continue
            tokens.extend((token_start - start, metadata))

        if not tokens:
            tokens = [0, self._metadata((self.scope_name,))]

        return TokenizeLineResult(tokens, state + (line,))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class ThemedSession:
    """Grammar access while a theme is configured on the registry."""

    def __init__(self, registry: Registry):
        self._registry = registry
        self.color_map = registry.get_color_map()

    def grammar(self, scope_name: str) -> Grammar:
        """Load a grammar.

        Raises:
            TokenizerUnavailableError: If the scope is not registered.
        """
        grammar = self._registry.load_grammar(scope_name)
        if grammar is None:
            raise TokenizerUnavailableError(scope_name)
        return grammar


class Registry:
    """Long-lived grammar engine: one grammar cache, one active theme."""

    def __init__(self, languages: Sequence[Language] = LANGUAGES):
        self._lock = threading.Lock()
        self._languages = {language.scope_name: (index + 1, language)
                           for index, language in enumerate(languages)}
        self._grammars: dict[str, Grammar] = {}
        self.theme = TextMateTheme.from_rules([])

    def set_theme(self, rules: Iterable[dict[str, Any]]) -> None:
        self.theme = TextMateTheme.from_rules(rules)

    def get_color_map(self) -> list[Optional[str]]:
        return self.theme.color_map.colors

    def load_grammar(self, scope_name: str) -> Optional[Grammar]:
        """Return the grammar for ``scope_name``, or ``None`` if unknown."""
        grammar = self._grammars.get(scope_name)
        if grammar is not None:
            logger.debug("Grammar cache hit for %s", scope_name)
            return grammar

        entry = self._languages.get(scope_name)
        if entry is None:
            return None
        language_id, language = entry
        try:
            lexer = get_lexer_by_name(language.grammar, stripnl=False, ensurenl=False)
        except ClassNotFound:
            logger.warning("No lexer named %r for %s", language.grammar, scope_name)
            return None

        logger.debug("Loaded grammar %s (lexer %s)", scope_name, lexer.name)
        grammar = Grammar(self, scope_name, lexer, language_id)
        self._grammars[scope_name] = grammar
        return grammar

    @contextmanager
    def themed(self, rules: Iterable[dict[str, Any]]) -> Iterator[ThemedSession]:
        """Configure ``rules`` as the active theme and hold it for the block."""
        with self._lock:
            self.set_theme(rules)
            yield ThemedSession(self)
