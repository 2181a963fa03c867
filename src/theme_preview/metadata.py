"""
Packed token metadata.

The grammar engine describes every token with one 32-bit word:

    bits  0-7   language id
    bits  8-10  standard token kind (other, comment, string, regex)
    bits 11-13  font style flags (italic, bold, underline)
    bits 14-22  foreground palette index
    bits 23-31  background palette index

``decode_style`` turns a word plus the engine's palette into the ``Style`` the
compositor renders.  A wrong mask here does not crash anything, it silently
picks the wrong palette entry for every token, so the constants are pinned by
the test suite.
"""

from __future__ import annotations

from enum import IntEnum, IntFlag
from typing import Optional, Sequence

from .models import Style

LANGUAGEID_MASK = 0b00000000000000000000000011111111
TOKEN_TYPE_MASK = 0b00000000000000000000011100000000
FONT_STYLE_MASK = 0b00000000000000000011100000000000
FOREGROUND_MASK = 0b00000000011111111100000000000000
BACKGROUND_MASK = 0b11111111100000000000000000000000

LANGUAGEID_OFFSET = 0
TOKEN_TYPE_OFFSET = 8
FONT_STYLE_OFFSET = 11
FOREGROUND_OFFSET = 14
BACKGROUND_OFFSET = 23


class StandardTokenType(IntEnum):
    OTHER = 0
    COMMENT = 1
    STRING = 2
    REGEX = 4


class FontStyle(IntFlag):
    NONE = 0
    ITALIC = 1
    BOLD = 2
    UNDERLINE = 4


# Palette id meaning "no color"; never assigned to a color.
COLOR_ID_NONE = 0

# Font style argument meaning "leave unchanged" when merging.
FONT_STYLE_NOT_SET = -1


def get_language_id(metadata: int) -> int:
    return (metadata & LANGUAGEID_MASK) >> LANGUAGEID_OFFSET


def get_token_type(metadata: int) -> int:
    return (metadata & TOKEN_TYPE_MASK) >> TOKEN_TYPE_OFFSET


def get_font_style(metadata: int) -> FontStyle:
    return FontStyle((metadata & FONT_STYLE_MASK) >> FONT_STYLE_OFFSET)


def get_foreground(metadata: int) -> int:
    return (metadata & FOREGROUND_MASK) >> FOREGROUND_OFFSET


def get_background(metadata: int) -> int:
    return (metadata & BACKGROUND_MASK) >> BACKGROUND_OFFSET


def encode_metadata(
    language_id: int = 0,
    token_type: int = StandardTokenType.OTHER,
    font_style: int = FontStyle.NONE,
    foreground: int = COLOR_ID_NONE,
    background: int = COLOR_ID_NONE,
) -> int:
    """Pack the five fields into one unsigned 32-bit word."""
    return (
        ((language_id << LANGUAGEID_OFFSET) & LANGUAGEID_MASK)
        | ((int(token_type) << TOKEN_TYPE_OFFSET) & TOKEN_TYPE_MASK)
        | ((int(font_style) << FONT_STYLE_OFFSET) & FONT_STYLE_MASK)
        | ((foreground << FOREGROUND_OFFSET) & FOREGROUND_MASK)
        | ((background << BACKGROUND_OFFSET) & BACKGROUND_MASK)
    ) & 0xFFFFFFFF


def _palette_color(color_map: Sequence[Optional[str]], index: int) -> Optional[str]:
    if 0 <= index < len(color_map):
        return color_map[index] or None
    return None


def decode_style(metadata: int, color_map: Sequence[Optional[str]]) -> Style:
    """Build the ``Style`` of a token from its metadata word.

    The foreground palette entry becomes ``color`` when it exists; the three
    font flags are independent and may combine.  Language id, token kind and
    background are decoded elsewhere but not surfaced in the style.
    """
    foreground = get_foreground(metadata)
    font_style = get_font_style(metadata)

    fields: dict[str, str] = {}
    color = _palette_color(color_map, foreground)
    if color:
        fields["color"] = color
    if font_style & FontStyle.ITALIC:
        fields["font_style"] = "italic"
    if font_style & FontStyle.BOLD:
        fields["font_weight"] = "bold"
    if font_style & FontStyle.UNDERLINE:
        fields["text_decoration"] = "underline"
    return Style(**fields)


def merge_metadata(
    metadata: int,
    language_id: int = 0,
    token_type: Optional[int] = None,
    font_style: int = FONT_STYLE_NOT_SET,
    foreground: int = COLOR_ID_NONE,
    background: int = COLOR_ID_NONE,
) -> int:
    """Overlay fields onto an existing word.

    Zero ids, ``None`` token type and ``FONT_STYLE_NOT_SET`` keep the value
    already stored in ``metadata``.
    """
    return encode_metadata(
        language_id=language_id or get_language_id(metadata),
        token_type=get_token_type(metadata) if token_type is None else token_type,
        font_style=get_font_style(metadata) if font_style == FONT_STYLE_NOT_SET else font_style,
        foreground=foreground or get_foreground(metadata),
        background=background or get_background(metadata),
    )
