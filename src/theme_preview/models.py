"""
Data models for theme-preview: the theme pipeline's value objects.

Everything the pipeline produces is a value object created per invocation and
thrown away once the preview images are written:

    ThemeContribution  : one ``{label, uiTheme, path}`` entry of an extension
    ThemeSource        : one theme file as read from disk (sparse, transient)
    ResolvedTheme      : the merge of a ThemeSource include chain
    Theme              : the canonical, user-facing result:
        Colors         : the fixed set of UI colors the compositor needs
        LanguageTokens : one styled token stream per example language
            Token      : literal text plus a decoded ``Style``

Field names are snake_case in Python and camelCase on the wire (``info`` and
``output.json`` keep the key names downstream tooling already consumes), so
models are dumped with ``by_alias=True`` whenever they leave the process.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .languages import Language

ThemeType = Literal["dark", "light", "hcDark", "hcLight"]


class WireModel(BaseModel):
    """Base model whose fields serialize as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenWireModel(WireModel):
    """Immutable variant for the pipeline's output values."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


# ---------------------------------------------------------------------------
# Extension metadata
# ---------------------------------------------------------------------------

class ExtensionInfo(WireModel):
    """Display metadata of an extension package."""
    display_name: str
    description: str
    github_link: Optional[str] = None


class ThemeContribution(WireModel):
    """A theme declared by an extension's package descriptor.

    Attributes:
        label:    Display label; falls back to the theme file's ``name``.
        ui_theme: Declared base theme (``vs``, ``vs-dark``, ``hc-black``,
                  ``hc-light``), used when the theme file has no ``type``.
        path:     Theme file path relative to the extension root.
    """
    label: Optional[str] = None
    ui_theme: str
    path: str


# ---------------------------------------------------------------------------
# Theme sources
# ---------------------------------------------------------------------------

class ThemeSource(WireModel):
    """One theme file exactly as read from disk.

    ``token_colors`` is either a list of token rules or, for older themes, the
    relative path of a tmTheme file holding the rules.
    """
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    type: Optional[str] = None
    colors: dict[str, Any] = Field(default_factory=dict)
    token_colors: Union[list[Any], str, None] = None
    name: Optional[str] = None
    include: Optional[str] = None


class ResolvedTheme(WireModel):
    """The terminal merge of a ``ThemeSource`` include chain.

    ``colors`` holds the nearest file's value per key; ``token_colors`` lists
    the most distant ancestor's rules first so nearer rules win downstream.
    ``type`` may be absent, in which case the contribution's ``uiTheme``
    decides the theme type.
    """
    type: Optional[str] = None
    colors: dict[str, str] = Field(default_factory=dict)
    token_colors: list[dict[str, Any]] = Field(default_factory=list)
    name: Optional[str] = None


# ---------------------------------------------------------------------------
# Canonical colors
# ---------------------------------------------------------------------------

class Colors(FrozenWireModel):
    """The UI colors the preview compositor draws with.

    Required colors are always populated (from the theme or a default for the
    theme type); optional ones stay ``None`` when the theme declares nothing
    and the reference defaults have no value for the theme type.
    """
    editor_background: str
    editor_foreground: str
    activity_bar_background: str
    activity_bar_foreground: str
    activity_bar_in_active_foreground: str
    activity_bar_border: Optional[str] = None
    activity_bar_active_border: str
    activity_bar_active_background: Optional[str] = None
    activity_bar_badge_background: str
    activity_bar_badge_foreground: str
    tabs_container_background: Optional[str] = None
    tabs_container_border: Optional[str] = None
    status_bar_background: Optional[str] = None
    status_bar_foreground: str
    status_bar_border: Optional[str] = None
    tab_active_background: Optional[str] = None
    tab_inactive_background: Optional[str] = None
    tab_active_foreground: str
    tab_border: str
    tab_active_border: Optional[str] = None
    tab_active_border_top: Optional[str] = None
    title_bar_active_background: str
    title_bar_active_foreground: str
    title_bar_border: Optional[str] = None


# ---------------------------------------------------------------------------
# Token streams
# ---------------------------------------------------------------------------

class Style(FrozenWireModel):
    """Decoded style of one token.  Every field is optional."""
    color: Optional[str] = None
    font_weight: Optional[str] = None
    font_style: Optional[str] = None
    text_decoration: Optional[str] = None


class Token(FrozenWireModel):
    """A run of literal text with its style."""
    text: str
    style: Style = Field(default_factory=Style)


TokenStream = list[list[Token]]


class LanguageTokens(FrozenWireModel):
    """The token stream of one example language under one theme."""
    language: Language
    tokens: TokenStream = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Theme (root, the canonical result)
# ---------------------------------------------------------------------------

class Theme(FrozenWireModel):
    """The canonical theme: resolved colors plus per-language token streams.

    ``language_tokens`` follows the order of the static language registry.
    """
    path: str
    display_name: str
    type: ThemeType
    colors: Colors
    language_tokens: list[LanguageTokens] = Field(default_factory=list)

    def tokens_for(self, ext_name: str) -> Optional[LanguageTokens]:
        """Look up the token stream of a language by its extension tag."""
        for entry in self.language_tokens:
            if entry.language.ext_name == ext_name:
                return entry
        return None
