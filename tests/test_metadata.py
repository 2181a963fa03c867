"""Tests for theme_preview.metadata."""

from theme_preview import metadata
from theme_preview.metadata import (
    FONT_STYLE_NOT_SET,
    FontStyle,
    StandardTokenType,
    decode_style,
    encode_metadata,
    merge_metadata,
)

PALETTE = [None, "#000000", "#FFFFFF", "#AA0000", "#00AA00", "#0000AA", "#ABCDEF"]


class TestBitLayout:
    def test_masks_are_pinned(self):
        assert metadata.LANGUAGEID_MASK == 0x000000FF
        assert metadata.TOKEN_TYPE_MASK == 0x00000700
        assert metadata.FONT_STYLE_MASK == 0x00003800
        assert metadata.FOREGROUND_MASK == 0x007FC000
        assert metadata.BACKGROUND_MASK == 0xFF800000

    def test_offsets_are_pinned(self):
        assert metadata.LANGUAGEID_OFFSET == 0
        assert metadata.TOKEN_TYPE_OFFSET == 8
        assert metadata.FONT_STYLE_OFFSET == 11
        assert metadata.FOREGROUND_OFFSET == 14
        assert metadata.BACKGROUND_OFFSET == 23

    def test_masks_do_not_overlap_and_cover_32_bits(self):
        masks = [
            metadata.LANGUAGEID_MASK,
            metadata.TOKEN_TYPE_MASK,
            metadata.FONT_STYLE_MASK,
            metadata.FOREGROUND_MASK,
            metadata.BACKGROUND_MASK,
        ]
        combined = 0
        for mask in masks:
            assert combined & mask == 0
            combined |= mask
        assert combined == 0xFFFFFFFF

    def test_font_style_bits(self):
        assert encode_metadata(font_style=FontStyle.ITALIC) == 1 << 11
        assert encode_metadata(font_style=FontStyle.BOLD) == 1 << 12
        assert encode_metadata(font_style=FontStyle.UNDERLINE) == 1 << 13


class TestFieldAccess:
    def test_round_trip_of_every_field(self):
        word = encode_metadata(
            language_id=7,
            token_type=StandardTokenType.STRING,
            font_style=FontStyle.BOLD | FontStyle.UNDERLINE,
            foreground=300,
            background=511,
        )
        assert metadata.get_language_id(word) == 7
        assert metadata.get_token_type(word) == StandardTokenType.STRING
        assert metadata.get_font_style(word) == FontStyle.BOLD | FontStyle.UNDERLINE
        assert metadata.get_foreground(word) == 300
        assert metadata.get_background(word) == 511

    def test_word_is_unsigned_32_bit(self):
        word = encode_metadata(background=511)
        assert 0 <= word <= 0xFFFFFFFF
        assert word == 511 << 23

    def test_merge_keeps_unset_fields(self):
        word = encode_metadata(language_id=3, foreground=4, background=2, font_style=FontStyle.ITALIC)
        merged = merge_metadata(word, token_type=StandardTokenType.COMMENT, font_style=FONT_STYLE_NOT_SET)
        assert metadata.get_language_id(merged) == 3
        assert metadata.get_token_type(merged) == StandardTokenType.COMMENT
        assert metadata.get_font_style(merged) == FontStyle.ITALIC
        assert metadata.get_foreground(merged) == 4
        assert metadata.get_background(merged) == 2

    def test_merge_overrides_set_fields(self):
        word = encode_metadata(foreground=4, font_style=FontStyle.ITALIC)
        merged = merge_metadata(word, foreground=6, font_style=FontStyle.NONE)
        assert metadata.get_foreground(merged) == 6
        assert metadata.get_font_style(merged) == FontStyle.NONE


class TestDecodeStyle:
    def test_foreground_bold_and_italic(self):
        word = (
            (5 << metadata.FOREGROUND_OFFSET)
            | (int(FontStyle.BOLD) << metadata.FONT_STYLE_OFFSET)
            | (int(FontStyle.ITALIC) << metadata.FONT_STYLE_OFFSET)
        )
        style = decode_style(word, PALETTE)
        assert style.color == PALETTE[5]
        assert style.font_weight == "bold"
        assert style.font_style == "italic"
        assert style.text_decoration is None

    def test_underline_only(self):
        style = decode_style(encode_metadata(font_style=FontStyle.UNDERLINE), PALETTE)
        assert style.text_decoration == "underline"
        assert style.font_weight is None
        assert style.font_style is None
        assert style.color is None

    def test_index_outside_palette_has_no_color(self):
        style = decode_style(encode_metadata(foreground=42), PALETTE)
        assert style.color is None

    def test_reserved_index_zero_has_no_color(self):
        assert decode_style(encode_metadata(foreground=0), PALETTE).color is None

    def test_language_token_type_and_background_are_not_surfaced(self):
        word = encode_metadata(
            language_id=9, token_type=StandardTokenType.REGEX, foreground=3, background=6
        )
        style = decode_style(word, PALETTE)
        assert style.color == "#AA0000"
        assert style.model_dump(exclude_none=True) == {"color": "#AA0000"}
