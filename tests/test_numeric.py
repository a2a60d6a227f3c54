"""Tests for numeric literal validation."""
import pytest
from sngc.numeric import parse_unsigned, long_numeric, byte_numeric, double_numeric
from sngc.tokens import Token, TokenKind
from sngc.errors import ParseError


def word(text: str) -> Token:
    return Token(TokenKind.WORD, text, 1)


class TestParseUnsigned:
    @pytest.mark.parametrize("text,value", [
        ("0", 0), ("7", 7), ("255", 255), ("0x1F", 31), ("0XfF", 255), ("010", 8),
    ])
    def test_valid(self, text, value):
        assert parse_unsigned(text) == value

    @pytest.mark.parametrize("text", ["", "abc", "12a", "0x", "09", "1.5", "-1", "+3"])
    def test_invalid(self, text):
        assert parse_unsigned(text) is None


class TestLong:
    def test_value(self):
        assert long_numeric(word("640"), 1) == 640

    def test_largest(self):
        assert long_numeric(word(str(2**31 - 1)), 1) == 2**31 - 1

    def test_out_of_range(self):
        with pytest.raises(ParseError, match="invalid or out of range long constant"):
            long_numeric(word(str(2**31)), 1)

    def test_eof(self):
        with pytest.raises(ParseError, match="EOF while expecting long-integer constant"):
            long_numeric(None, 3)

    def test_quoted_string_rejected(self):
        with pytest.raises(ParseError):
            long_numeric(Token(TokenKind.STRING, "12", 1), 1)

    def test_error_carries_line(self):
        with pytest.raises(ParseError) as exc:
            long_numeric(word("x"), 7)
        assert exc.value.line == 7


class TestByte:
    def test_bounds(self):
        assert byte_numeric(word("0"), 1) == 0
        assert byte_numeric(word("255"), 1) == 255
        assert byte_numeric(word("0xff"), 1) == 255

    def test_overflow(self):
        with pytest.raises(ParseError, match="invalid or out of range byte constant"):
            byte_numeric(word("256"), 1)

    def test_punctuation(self):
        with pytest.raises(ParseError):
            byte_numeric(Token(TokenKind.PUNCT, "}", 1), 1)

    def test_eof(self):
        with pytest.raises(ParseError, match="EOF while expecting byte constant"):
            byte_numeric(None, 1)


class TestDouble:
    @pytest.mark.parametrize("text,value", [
        ("1", 1.0), ("0.45455", 0.45455), (".5", 0.5), ("2.", 2.0), ("1e-3", 0.001),
    ])
    def test_valid(self, text, value):
        assert double_numeric(word(text), 1) == pytest.approx(value)

    @pytest.mark.parametrize("text", ["-0.5", "abc", "inf", "nan", "1.2.3", "."])
    def test_invalid(self, text):
        with pytest.raises(ParseError, match="invalid or out of range double-precision"):
            double_numeric(word(text), 1)

    def test_eof(self):
        with pytest.raises(ParseError, match="EOF while expecting double-precision"):
            double_numeric(None, 1)
