"""
Theme canonicalization.

Turns one theme contribution of an extension into a ``Theme``: the include
chain is resolved, the display name and theme type are settled, the canonical
UI colors are derived and every example language is tokenized under the
theme's token rules.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from .colors import normalize_colors
from .errors import MissingThemeNameError, UnsupportedThemeTypeError
from .languages import LANGUAGES, Language
from .metadata import decode_style
from .models import LanguageTokens, ResolvedTheme, Theme, ThemeContribution, ThemeType, Token, TokenStream
from .resolver import resolve, true_case_path
from .tokenizer import Registry

logger = logging.getLogger(__name__)


def resolve_theme_type(source_type: Optional[str], ui_theme: Optional[str]) -> ThemeType:
    """Map a theme's ``type`` and the contribution's ``uiTheme`` to a family.

    Families are checked light, dark, hcDark, hcLight in that order, and for
    each either source may decide.

    Raises:
        UnsupportedThemeTypeError: If neither value is recognized.
    """
    if source_type == "light" or ui_theme == "vs":
        return "light"
    if source_type == "dark" or ui_theme == "vs-dark":
        return "dark"
    if source_type in ("hc-dark", "hc-black") or ui_theme == "hc-black":
        return "hcDark"
    if source_type == "hc-light" or ui_theme == "hc-light":
        return "hcLight"
    raise UnsupportedThemeTypeError(source_type, ui_theme)


def theme_rules(resolved: ResolvedTheme) -> list[dict[str, Any]]:
    """Token rules handed to the tokenizer.

    A selector-less rule carrying ``editor.foreground`` comes first, so it
    sets the default foreground and every explicit rule can override it.
    """
    default_rule = {"settings": {"foreground": resolved.colors.get("editor.foreground")}}
    return [default_rule, *resolved.token_colors]


def tokenize_template(session, language: Language) -> TokenStream:
    """Tokenize a language's example template line by line."""
    grammar = session.grammar(language.scope_name)
    color_map = session.color_map

    lines: TokenStream = []
    state = None
    for line in language.template.split("\n"):
        result = grammar.tokenize_line(line, state)
        offsets = result.tokens[0::2]
        words = result.tokens[1::2]

        tokens: list[Token] = []
        for i, (start, metadata) in enumerate(zip(offsets, words)):
            end = offsets[i + 1] if i + 1 < len(offsets) else len(line)
            tokens.append(Token(text=line[start:end], style=decode_style(metadata, color_map)))
        lines.append(tokens)
        state = result.rule_stack
    return lines


def tokenize_languages(
    resolved: ResolvedTheme,
    registry: Registry,
    languages: Sequence[Language] = LANGUAGES,
) -> list[LanguageTokens]:
    """Token streams of every language, under one exclusive theme session."""
    language_tokens: list[LanguageTokens] = []
    with registry.themed(theme_rules(resolved)) as session:
        for language in languages:
            tokens = tokenize_template(session, language)
            language_tokens.append(LanguageTokens(language=language, tokens=tokens))
    return language_tokens


def canonicalize(
    contribution: ThemeContribution,
    extension_dir: Union[str, Path],
    registry: Registry,
    languages: Sequence[Language] = LANGUAGES,
) -> Theme:
    """Build the canonical ``Theme`` of one contribution.

    The theme file is looked up at ``<extension_dir>/extension/<path>``.

    Raises:
        NotFoundError: If the theme file does not exist.
        InvalidFormatError: If the theme cannot be resolved.
        MissingThemeNameError: If neither the label nor the theme names it.
        UnsupportedThemeTypeError: If the theme type is not recognized.
        MissingRequiredColorError: If a required color cannot be resolved.
        TokenizerUnavailableError: If a language has no grammar.
    """
    theme_path = true_case_path(Path(extension_dir) / "extension" / contribution.path)
    logger.info("Canonicalizing theme %s", theme_path)

    resolved = resolve(theme_path)

    display_name = contribution.label or resolved.name
    if not display_name:
        raise MissingThemeNameError(theme_path)

    theme_type = resolve_theme_type(resolved.type, contribution.ui_theme)
    language_tokens = tokenize_languages(resolved, registry, languages)
    colors = normalize_colors(theme_type, resolved.colors)

    theme = Theme(
        path=str(theme_path),
        display_name=display_name,
        type=theme_type,
        colors=colors,
        language_tokens=language_tokens,
    )
    logger.info("Canonicalized theme %r (%s, %d languages)", display_name, theme_type, len(language_tokens))
    return theme
