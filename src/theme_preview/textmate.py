"""
TextMate theme matching.

Token rules (``{"scope": ..., "settings": {...}}``) are compiled into a trie
keyed by dot-separated scope segments.  Looking up a scope walks the trie as
deep as the scope allows; the rules stored at that node are then ordered by
specificity and the first whose parent-scope selector matches the scope's
ancestors wins.

Colors are interned into a ``ColorMap`` so the token metadata word only has
to carry small palette ids:

    0   unused
    1   default foreground
    2   default background, unless it equals the foreground
    n   first-seen order of the remaining rule colors
"""

from __future__ import annotations

import functools
import re
from typing import Any, Iterable, NamedTuple, Optional, Sequence

from .metadata import COLOR_ID_NONE, FONT_STYLE_NOT_SET, FontStyle

DEFAULT_FOREGROUND = "#000000"
DEFAULT_BACKGROUND = "#FFFFFF"

_HEX_COLOR = re.compile(r"^#([0-9A-Fa-f]{3,4}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")


def is_valid_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(_HEX_COLOR.match(value))


# ---------------------------------------------------------------------------
# Rule parsing
# ---------------------------------------------------------------------------

class ParsedThemeRule(NamedTuple):
    scope: str
    parent_scopes: Optional[tuple[str, ...]]  # nearest ancestor first
    index: int
    font_style: int
    foreground: Optional[str]
    background: Optional[str]


def _parse_font_style(value: Any) -> int:
    if not isinstance(value, str):
        return FONT_STYLE_NOT_SET
    style = FontStyle.NONE
    for segment in value.split(" "):
        if segment == "italic":
            style |= FontStyle.ITALIC
        elif segment == "bold":
            style |= FontStyle.BOLD
        elif segment == "underline":
            style |= FontStyle.UNDERLINE
    return int(style)


def parse_theme_rules(rules: Iterable[dict[str, Any]]) -> list[ParsedThemeRule]:
    """Flatten token rules into one ``ParsedThemeRule`` per selector."""
    parsed: list[ParsedThemeRule] = []
    for index, entry in enumerate(rules):
        if not isinstance(entry, dict):
            continue
        settings = entry.get("settings")
        if not isinstance(settings, dict):
            continue

        scope = entry.get("scope")
        if isinstance(scope, str):
            scopes = scope.strip(",").split(",")
        elif isinstance(scope, list):
            scopes = [s for s in scope if isinstance(s, str)]
        else:
            scopes = [""]

        font_style = _parse_font_style(settings.get("fontStyle"))
        foreground = settings.get("foreground")
        foreground = foreground if is_valid_hex_color(foreground) else None
        background = settings.get("background")
        background = background if is_valid_hex_color(background) else None

        for selector in scopes:
            segments = selector.strip().split(" ")
            parent_scopes = tuple(reversed(segments[:-1])) if len(segments) > 1 else None
            parsed.append(ParsedThemeRule(
                scope=segments[-1],
                parent_scopes=parent_scopes,
                index=index,
                font_style=font_style,
                foreground=foreground,
                background=background,
            ))
    return parsed


def _strcmp(a: str, b: str) -> int:
    return (a > b) - (a < b)


def _str_arr_cmp(a: Optional[Sequence[str]], b: Optional[Sequence[str]]) -> int:
    if a is None and b is None:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1
    if len(a) != len(b):
        return len(a) - len(b)
    for left, right in zip(a, b):
        result = _strcmp(left, right)
        if result:
            return result
    return 0


def _cmp_rules(a: ParsedThemeRule, b: ParsedThemeRule) -> int:
    return (
        _strcmp(a.scope, b.scope)
        or _str_arr_cmp(a.parent_scopes, b.parent_scopes)
        or a.index - b.index
    )


# ---------------------------------------------------------------------------
# Color map
# ---------------------------------------------------------------------------

class ColorMap:
    """Interns upper-cased colors to small integer ids."""

    def __init__(self) -> None:
        self._color_to_id: dict[str, int] = {}
        self._colors: list[Optional[str]] = [None]

    def get_id(self, color: Optional[str]) -> int:
        if color is None:
            return COLOR_ID_NONE
        color = color.upper()
        color_id = self._color_to_id.get(color)
        if color_id is None:
            color_id = len(self._colors)
            self._color_to_id[color] = color_id
            self._colors.append(color)
        return color_id

    @property
    def colors(self) -> list[Optional[str]]:
        return list(self._colors)


# ---------------------------------------------------------------------------
# Trie
# ---------------------------------------------------------------------------

class StyleAttributes(NamedTuple):
    font_style: int
    foreground: int
    background: int


class ThemeTrieRule:
    __slots__ = ("scope_depth", "parent_scopes", "font_style", "foreground", "background")

    def __init__(self, scope_depth: int, parent_scopes: Optional[tuple[str, ...]],
                 font_style: int, foreground: int, background: int) -> None:
        self.scope_depth = scope_depth
        self.parent_scopes = parent_scopes
        self.font_style = font_style
        self.foreground = foreground
        self.background = background

    def clone(self) -> ThemeTrieRule:
        return ThemeTrieRule(self.scope_depth, self.parent_scopes,
                             self.font_style, self.foreground, self.background)

    def accept_overwrite(self, scope_depth: int, font_style: int, foreground: int, background: int) -> None:
        self.scope_depth = max(self.scope_depth, scope_depth)
        if font_style != FONT_STYLE_NOT_SET:
            self.font_style = font_style
        if foreground:
            self.foreground = foreground
        if background:
            self.background = background


def _cmp_specificity(a: ThemeTrieRule, b: ThemeTrieRule) -> int:
    if a.scope_depth != b.scope_depth:
        return b.scope_depth - a.scope_depth
    a_parents = a.parent_scopes or ()
    b_parents = b.parent_scopes or ()
    if len(a_parents) == len(b_parents):
        for left, right in zip(a_parents, b_parents):
            if len(left) != len(right):
                return len(right) - len(left)
    return len(b_parents) - len(a_parents)


class ThemeTrieElement:
    """One scope segment.  Children inherit a copy of their parent's rules."""

    def __init__(self, main_rule: ThemeTrieRule, rules_with_parent_scopes: Optional[list[ThemeTrieRule]] = None) -> None:
        self.main_rule = main_rule
        self.rules_with_parent_scopes = rules_with_parent_scopes or []
        self.children: dict[str, ThemeTrieElement] = {}

    def _candidates(self) -> list[ThemeTrieRule]:
        rules = [self.main_rule, *self.rules_with_parent_scopes]
        if len(rules) > 1:
            rules.sort(key=functools.cmp_to_key(_cmp_specificity))
        return rules

    def match(self, scope: str) -> list[ThemeTrieRule]:
        node = self
        for segment in scope.split(".") if scope else ():
            child = node.children.get(segment)
            if child is None:
                break
            node = child
        return node._candidates()

    def insert(self, scope_depth: int, scope: str, parent_scopes: Optional[tuple[str, ...]],
               font_style: int, foreground: int, background: int) -> None:
        if not scope:
            self._insert_here(scope_depth, parent_scopes, font_style, foreground, background)
            return

        head, _, tail = scope.partition(".")
        child = self.children.get(head)
        if child is None:
            child = ThemeTrieElement(
                self.main_rule.clone(),
                [rule.clone() for rule in self.rules_with_parent_scopes],
            )
            self.children[head] = child
        child.insert(scope_depth + 1, tail, parent_scopes, font_style, foreground, background)

    def _insert_here(self, scope_depth: int, parent_scopes: Optional[tuple[str, ...]],
                     font_style: int, foreground: int, background: int) -> None:
        if parent_scopes is None:
            self.main_rule.accept_overwrite(scope_depth, font_style, foreground, background)
            return

        for rule in self.rules_with_parent_scopes:
            if _str_arr_cmp(rule.parent_scopes, parent_scopes) == 0:
                rule.accept_overwrite(scope_depth, font_style, foreground, background)
                return

        # Unset fields inherit from the main rule
        if font_style == FONT_STYLE_NOT_SET:
            font_style = self.main_rule.font_style
        if not foreground:
            foreground = self.main_rule.foreground
        if not background:
            background = self.main_rule.background
        self.rules_with_parent_scopes.append(
            ThemeTrieRule(scope_depth, parent_scopes, font_style, foreground, background)
        )


def _matches_scope(scope_name: str, pattern: str) -> bool:
    return scope_name == pattern or (
        scope_name.startswith(pattern) and scope_name[len(pattern):len(pattern) + 1] == "."
    )


def _ancestors_match(ancestors: Sequence[str], parent_scopes: Optional[tuple[str, ...]]) -> bool:
    """``ancestors`` is nearest first, like ``parent_scopes``."""
    if parent_scopes is None:
        return True
    index = 0
    for scope_name in ancestors:
        if _matches_scope(scope_name, parent_scopes[index]):
            index += 1
            if index == len(parent_scopes):
                return True
    return False


# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------

class TextMateTheme:
    """A compiled set of token rules."""

    def __init__(self, color_map: ColorMap, defaults: StyleAttributes, root: ThemeTrieElement) -> None:
        self.color_map = color_map
        self.defaults = defaults
        self._root = root
        self._match_cache: dict[str, list[ThemeTrieRule]] = {}

    @classmethod
    def from_rules(cls, rules: Iterable[dict[str, Any]]) -> TextMateTheme:
        parsed = sorted(parse_theme_rules(rules), key=functools.cmp_to_key(_cmp_rules))

        # Selector-less rules only set the defaults; later ones win.
        font_style = int(FontStyle.NONE)
        foreground = DEFAULT_FOREGROUND
        background = DEFAULT_BACKGROUND
        while parsed and parsed[0].scope == "":
            incoming = parsed.pop(0)
            if incoming.font_style != FONT_STYLE_NOT_SET:
                font_style = incoming.font_style
            if incoming.foreground is not None:
                foreground = incoming.foreground
            if incoming.background is not None:
                background = incoming.background

        color_map = ColorMap()
        defaults = StyleAttributes(font_style, color_map.get_id(foreground), color_map.get_id(background))

        root = ThemeTrieElement(ThemeTrieRule(0, None, FONT_STYLE_NOT_SET, COLOR_ID_NONE, COLOR_ID_NONE))
        for rule in parsed:
            root.insert(
                0, rule.scope, rule.parent_scopes, rule.font_style,
                color_map.get_id(rule.foreground), color_map.get_id(rule.background),
            )
        return cls(color_map, defaults, root)

    def match(self, scope_path: Sequence[str]) -> Optional[StyleAttributes]:
        """Style of the innermost scope of ``scope_path`` (outermost first).

        Returns ``None`` when no rule applies to the path.
        """
        if not scope_path:
            return self.defaults
        scope_name = scope_path[-1]
        candidates = self._match_cache.get(scope_name)
        if candidates is None:
            candidates = self._root.match(scope_name)
            self._match_cache[scope_name] = candidates

        ancestors = tuple(reversed(scope_path[:-1]))
        for rule in candidates:
            if _ancestors_match(ancestors, rule.parent_scopes):
                return StyleAttributes(rule.font_style, rule.foreground, rule.background)
        return None
