"""Tests for the pixel data decoder."""
import logging
import pytest
from sngc import pixels
from sngc.pixels import DataMode, decode
from sngc.lexer import Lexer
from sngc.records import HeaderRecord, ColorFlags
from sngc.errors import LexError, ParseError


def decode_text(text: str, mode: DataMode, chunk_name: str = "IDAT") -> bytes:
    if not text.rstrip().endswith("}"):
        text += "}"
    return decode(Lexer(text), mode, chunk_name)


class TestCompactMode:
    def test_full_alphabet(self):
        data = decode_text(pixels.COMPACT_ALPHABET, DataMode.COMPACT)
        assert data == bytes(range(62))

    def test_whitespace_ignored(self):
        assert decode_text("0 1\n\t2", DataMode.COMPACT) == b"\x00\x01\x02"

    def test_one_byte_per_character(self):
        assert decode_text("zZ9a", DataMode.COMPACT) == bytes([35, 61, 9, 10])

    @pytest.mark.parametrize("bad", ["-", "_", ".", "#", "é"])
    def test_bad_character(self, bad):
        with pytest.raises(ParseError, match="bad character in IMAGE block"):
            decode_text("01" + bad, DataMode.COMPACT, "IMAGE")

    def test_empty_block(self):
        assert decode_text("", DataMode.COMPACT) == b""


class TestHexMode:
    def test_pairs(self):
        assert decode_text("00ff7f", DataMode.HEX) == bytes([0x00, 0xFF, 0x7F])

    def test_mixed_case(self):
        assert decode_text("aBcD", DataMode.HEX) == bytes([0xAB, 0xCD])

    def test_even_count_with_whitespace(self):
        assert decode_text("0f f7", DataMode.HEX) == bytes([0x0F, 0xF7])

    def test_digits_split_across_lines(self):
        assert decode_text("0\nf\nf7", DataMode.HEX) == bytes([0x0F, 0xF7])

    def test_odd_count_zero_pads_last_nibble(self, caplog):
        with caplog.at_level(logging.WARNING, logger="sngc.pixels"):
            data = decode_text("abc", DataMode.HEX)
        assert data == bytes([0xAB, 0xC0])
        assert "odd number of hex digits" in caplog.text

    def test_single_digit(self):
        assert decode_text("7", DataMode.HEX) == bytes([0x70])

    def test_non_hex_character(self):
        with pytest.raises(ParseError, match="bad character in IDAT block"):
            decode_text("0g", DataMode.HEX)


class TestReading:
    def test_stops_after_closing_brace(self):
        lexer = Lexer("ff } IEND ")
        assert decode(lexer, DataMode.HEX) == b"\xff"
        assert lexer.next_token().text == "IEND"

    def test_eof_in_data(self):
        with pytest.raises(LexError, match="unexpected EOF in data segment"):
            decode(Lexer("ff00"), DataMode.HEX)

    def test_error_line(self):
        with pytest.raises(ParseError) as exc:
            decode(Lexer("ff\n00\nxx }"), DataMode.HEX)
        assert exc.value.line == 3

    def test_large_block_not_truncated(self):
        text = "0123456789abcdef" * 1000
        data = decode_text(text, DataMode.HEX)
        assert len(data) == 8000
        assert data[:8] == bytes([0x01, 0x23, 0x45, 0x67, 0x89, 0xAB, 0xCD, 0xEF])
        assert data[-8:] == data[:8]


class TestSampleGeometry:
    @pytest.mark.parametrize("color,depth,bits", [
        (ColorFlags.NONE, 1, 1),
        (ColorFlags.NONE, 16, 16),
        (ColorFlags.PALETTE | ColorFlags.COLOR, 4, 8),
        (ColorFlags.COLOR, 8, 24),
        (ColorFlags.COLOR | ColorFlags.ALPHA, 16, 64),
        (ColorFlags.ALPHA, 8, 16),
    ])
    def test_sample_size(self, color, depth, bits):
        assert pixels.sample_size(HeaderRecord(1, 1, depth, color)) == bits

    def test_small_samples_are_compact(self):
        assert pixels.select_mode(HeaderRecord(1, 1, 4), 0) is DataMode.COMPACT

    def test_eight_bit_gray_is_hex(self):
        assert pixels.select_mode(HeaderRecord(1, 1, 8), 0) is DataMode.HEX

    def test_small_palette_is_compact(self):
        header = HeaderRecord(1, 1, 8, ColorFlags.PALETTE | ColorFlags.COLOR)
        assert pixels.select_mode(header, 62) is DataMode.COMPACT
        assert pixels.select_mode(header, 63) is DataMode.HEX

    def test_bytes_per_sample(self):
        assert [pixels.bytes_per_sample(b) for b in (1, 4, 8, 16, 24, 64)] == [1, 1, 1, 2, 3, 8]

    def test_expected_size(self):
        assert pixels.expected_size(HeaderRecord(3, 2, 8, ColorFlags.COLOR)) == 18


class TestReshape:
    def test_row_major(self):
        rows = pixels.reshape(bytes(range(6)), 3, 2, 1)
        assert rows == [b"\x00\x01\x02", b"\x03\x04\x05"]

    def test_multibyte_pixels(self):
        rows = pixels.reshape(bytes(range(12)), 2, 2, 3)
        assert rows == [bytes(range(6)), bytes(range(6, 12))]

    def test_wrong_length(self):
        with pytest.raises(ValueError):
            pixels.reshape(b"\x00" * 5, 3, 2, 1)
