"""
Canonical UI colors for theme previews.

A theme file only lists the colors its author cared about.  The preview needs
a fixed set, so every canonical color is looked up in the theme and, when
absent, taken from the built-in defaults of the reference editor for the
theme's type (dark, light, hcDark, hcLight).

Colors with an alpha channel are flattened over the color they are drawn on,
which means backgrounds must be resolved before the foregrounds that sit on
them.  ``COLOR_RULES`` therefore lists the colors in resolution order and each
rule names the already-resolved color it is flattened over.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from PIL import ImageColor

from .errors import InvalidFormatError, MissingRequiredColorError
from .models import Colors


# --- Color helpers ---

RGBA = tuple[float, float, float, float]


_TRANSPARENT = "transparent"

# rgba()/hsla() with a CSS alpha (0-1 or a percentage); ImageColor reads it as 0-255
_ALPHA_FUNCTION = re.compile(
    r"^(rgb|hsl)a?\(\s*([^,()]+),\s*([^,()]+),\s*([^,()]+),\s*([0-9.]+)(%?)\s*\)$",
    re.IGNORECASE,
)


def _getrgb(text: str, value: str) -> tuple:
    try:
        return ImageColor.getrgb(text)
    except ValueError as exc:
        raise InvalidFormatError(f"Unable to parse color from string '{value}'") from exc


def parse_color(value: str) -> RGBA:
    """Parse a color string into ``(r, g, b, alpha)`` with alpha in [0, 1].

    Accepts ``#rgb``, ``#rgba``, ``#rrggbb``, ``#rrggbbaa``, the functional
    ``rgb()/rgba()/hsl()/hsla()/hsv()`` forms, ``transparent`` and CSS color
    names.  The alpha of ``rgba()``/``hsla()`` is a fraction or a percentage,
    as in CSS.

    Raises:
        InvalidFormatError: If the string is not a color.
    """
    if not isinstance(value, str):
        raise InvalidFormatError(f"Unable to parse color from string '{value}'")
    text = value.strip()
    if text.lower() == _TRANSPARENT:
        return (0.0, 0.0, 0.0, 0.0)

    match = _ALPHA_FUNCTION.match(text)
    if match:
        function, first, second, third, opacity, percent = match.groups()
        try:
            opacity = float(opacity) / (100 if percent else 1)
        except ValueError as exc:
            raise InvalidFormatError(f"Unable to parse color from string '{value}'") from exc
        base = f"{function.lower()}({first.strip()}, {second.strip()}, {third.strip()})"
        r, g, b = _getrgb(base, value)[:3]
        return (float(r), float(g), float(b), max(0.0, min(1.0, opacity)))

    parsed = _getrgb(text, value)
    if len(parsed) == 4:
        r, g, b, a = parsed
        return (float(r), float(g), float(b), a / 255)
    r, g, b = parsed[:3]
    return (float(r), float(g), float(b), 1.0)


def _channel(value: float) -> int:
    return max(0, min(255, math.floor(value + 0.5)))


def to_hex(rgba: RGBA) -> str:
    """Format a parsed color as an opaque, upper-case ``#RRGGBB`` string."""
    r, g, b, _ = rgba
    return f"#{_channel(r):02X}{_channel(g):02X}{_channel(b):02X}"


def mix(base: RGBA, mixin: RGBA, weight: float) -> RGBA:
    """Blend ``mixin`` into ``base``; ``weight`` is the share of ``mixin``.

    Channel weights account for the alpha difference of the two colors, so a
    translucent mixin contributes less than its nominal weight.
    """
    w = 2 * weight - 1
    a = mixin[3] - base[3]
    if w * a == -1:
        w1 = w
    else:
        w1 = (w + a) / (1 + w * a)
    w1 = (w1 + 1) / 2
    w2 = 1 - w1
    return (
        w1 * mixin[0] + w2 * base[0],
        w1 * mixin[1] + w2 * base[1],
        w1 * mixin[2] + w2 * base[2],
        mixin[3] * weight + base[3] * (1 - weight),
    )


def normalize_color(value: Optional[str], background: Optional[str] = None) -> Optional[str]:
    """Normalize a color to an opaque ``#RRGGBB`` string.

    A translucent color is composited over ``background`` when one is given,
    so the result matches what is actually seen on screen.  Without a
    background the alpha channel is dropped.  Returns ``None`` when ``value``
    is empty.
    """
    if not value:
        return None

    color = parse_color(value)
    opacity = color[3]
    if opacity < 1 and background:
        opaque = (color[0], color[1], color[2], 1.0)
        color = mix(opaque, parse_color(background), 1 - opacity)

    return to_hex(color)


def alpha(value: str, opacity: float) -> str:
    """Return ``value`` with its alpha channel replaced, as ``#RRGGBBAA``."""
    r, g, b, _ = parse_color(value)
    return f"#{_channel(r):02X}{_channel(g):02X}{_channel(b):02X}{_channel(opacity * 255):02X}"


# --- Defaults table ---

@dataclass(frozen=True)
class Ref:
    """Default that reuses an already-resolved canonical color."""
    name: str


@dataclass(frozen=True)
class Translucent:
    """Default that reuses a resolved color at a reduced opacity."""
    name: str
    opacity: float


DefaultValue = Union[str, Ref, Translucent, None]


@dataclass(frozen=True)
class ColorRule:
    """How one canonical color is resolved.

    Attributes:
        name:       Canonical name (``Colors`` field, or an intermediate).
        key:        Key looked up in the theme's ``colors``.
        defaults:   Per-theme-type defaults, or one value for every type.
        background: Canonical color the value is flattened over.
        required:   Fail the theme when nothing resolves.
    """
    name: str
    key: str
    defaults: Union[DefaultValue, Mapping[str, DefaultValue]] = None
    background: Optional[str] = None
    required: bool = False

    def default_for(self, theme_type: str, resolved: Mapping[str, Optional[str]]) -> Optional[str]:
        if isinstance(self.defaults, Mapping):
            default = self.defaults.get(theme_type)
        else:
            default = self.defaults
        if isinstance(default, Ref):
            return resolved.get(default.name)
        if isinstance(default, Translucent):
            base = resolved.get(default.name)
            return alpha(base, default.opacity) if base else None
        return default


def _per_type(dark: DefaultValue, light: DefaultValue, hc_dark: DefaultValue, hc_light: DefaultValue) -> dict[str, DefaultValue]:
    return {"dark": dark, "light": light, "hcDark": hc_dark, "hcLight": hc_light}


# Values follow the reference editor's workbench defaults (theme.ts).
COLOR_RULES: tuple[ColorRule, ...] = (
    ColorRule("foreground", "foreground",
              _per_type("#CCCCCC", "#616161", "#FFFFFF", "#292929"), required=True),
    ColorRule("contrast_border", "contrastBorder",
              _per_type(None, None, "#6FC3DF", "#0F4A85")),
    ColorRule("editor_background", "editor.background",
              _per_type("#1E1E1E", "#FFFFFF", "#000000", "#FFFFFF"), required=True),
    ColorRule("editor_foreground", "editor.foreground",
              _per_type("#BBBBBB", "#333333", "#FFFFFF", Ref("foreground")), required=True),
    ColorRule("activity_bar_background", "activityBar.background",
              _per_type("#333333", "#2C2C2C", "#000000", "#FFFFFF"), required=True),
    ColorRule("activity_bar_foreground", "activityBar.foreground",
              _per_type("#FFFFFF", "#FFFFFF", "#FFFFFF", Ref("editor_foreground")),
              background="activity_bar_background", required=True),
    ColorRule("activity_bar_in_active_foreground", "activityBar.inactiveForeground",
              _per_type(Translucent("activity_bar_foreground", 0.4),
                        Translucent("activity_bar_foreground", 0.4),
                        "#FFFFFF", Ref("editor_foreground")),
              background="activity_bar_background", required=True),
    ColorRule("activity_bar_border", "activityBar.border",
              _per_type(None, None, Ref("contrast_border"), Ref("contrast_border")),
              background="editor_background"),
    ColorRule("activity_bar_active_border", "activityBar.activeBorder",
              _per_type(Ref("activity_bar_foreground"), Ref("activity_bar_foreground"),
                        Ref("contrast_border"), Ref("contrast_border")),
              background="editor_background", required=True),
    ColorRule("activity_bar_active_background", "activityBar.activeBackground",
              background="activity_bar_background"),
    ColorRule("activity_bar_badge_background", "activityBarBadge.background",
              _per_type("#007ACC", "#007ACC", "#000000", "#0F4A85"), required=True),
    ColorRule("activity_bar_badge_foreground", "activityBarBadge.foreground",
              "#FFFFFF", required=True),
    ColorRule("tabs_container_background", "editorGroupHeader.tabsBackground",
              _per_type("#252526", "#F3F3F3", None, None),
              background="editor_background"),
    ColorRule("tabs_container_border", "editorGroupHeader.tabsBorder",
              background="editor_background"),
    ColorRule("status_bar_background", "statusBar.background",
              _per_type("#007ACC", "#007ACC", None, None)),
    ColorRule("status_bar_foreground", "statusBar.foreground",
              _per_type("#FFFFFF", "#FFFFFF", "#FFFFFF", Ref("editor_foreground")), required=True),
    ColorRule("status_bar_border", "statusBar.border",
              _per_type(None, None, Ref("contrast_border"), Ref("contrast_border")),
              background="status_bar_background"),
    ColorRule("tab_active_background", "tab.activeBackground", Ref("editor_background")),
    ColorRule("tab_inactive_background", "tab.inactiveBackground",
              _per_type("#2D2D2D", "#ECECEC", None, None)),
    ColorRule("tab_active_foreground", "tab.activeForeground",
              _per_type("#FFFFFF", "#333333", "#FFFFFF", "#292929"), required=True),
    ColorRule("tab_border", "tab.border",
              _per_type("#252526", "#F3F3F3", Ref("contrast_border"), Ref("contrast_border")),
              background="tabs_container_background", required=True),
    ColorRule("tab_active_border", "tab.activeBorder",
              background="tab_active_background"),
    ColorRule("tab_active_border_top", "tab.activeBorderTop",
              _per_type(None, None, None, "#B5200D"),
              background="tab_active_background"),
    ColorRule("title_bar_active_background", "titleBar.activeBackground",
              _per_type("#3C3C3C", "#DDDDDD", "#000000", "#FFFFFF"), required=True),
    ColorRule("title_bar_active_foreground", "titleBar.activeForeground",
              _per_type("#CCCCCC", "#333333", "#FFFFFF", "#292929"), required=True),
    ColorRule("title_bar_border", "titleBar.border",
              _per_type(None, None, Ref("contrast_border"), Ref("contrast_border")),
              background="title_bar_active_background"),
)


def get_color_value(
    colors: Mapping[str, str],
    key: str,
    default: Optional[str] = None,
    background: Optional[str] = None,
) -> Optional[str]:
    """Resolve one theme color with its fallback and flatten it.

    The default doubles as the flattening background when no background is
    known, so a translucent override of a default is blended over it.
    """
    value = colors.get(key) or default
    return normalize_color(value, background or default)


def resolve_colors(theme_type: str, colors: Mapping[str, str]) -> dict[str, Optional[str]]:
    """Resolve every rule of ``COLOR_RULES`` in order, intermediates included.

    Raises:
        MissingRequiredColorError: If a required color resolves to nothing.
    """
    resolved: dict[str, Optional[str]] = {}
    for rule in COLOR_RULES:
        default = rule.default_for(theme_type, resolved)
        background = resolved.get(rule.background) if rule.background else None
        value = get_color_value(colors, rule.key, default, background)
        if value is None and rule.required:
            raise MissingRequiredColorError(rule.key)
        resolved[rule.name] = value
    return resolved


def normalize_colors(theme_type: str, colors: Mapping[str, str]) -> Colors:
    """Build the canonical ``Colors`` of a theme."""
    resolved = resolve_colors(theme_type, colors)
    return Colors(**{name: value for name, value in resolved.items() if name in Colors.model_fields})
