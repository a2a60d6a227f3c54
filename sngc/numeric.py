"""Validation of numeric literals inside chunk specifications.

Integers use C ``strtoul`` base-0 notation: ``0x`` prefix for hex, a
leading ``0`` for octal, decimal otherwise.
"""
from __future__ import annotations
import re
from typing import Optional

from .tokens import Token, TokenKind
from .errors import ParseError

PNG_LONG_MAX = 2**31 - 1

_HEX = re.compile(r"0[xX][0-9a-fA-F]+\Z")
_OCT = re.compile(r"0[0-7]*\Z")
_DEC = re.compile(r"[1-9][0-9]*\Z")
_DOUBLE = re.compile(r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\Z")


def parse_unsigned(text: str) -> Optional[int]:
    """Return the value of an unsigned integer literal, or None."""
    if _HEX.match(text):
        return int(text, 16)
    if _OCT.match(text):
        return int(text, 8)
    if _DEC.match(text):
        return int(text)
    return None


def _literal(token: Optional[Token], what: str, line: int) -> Token:
    if token is None:
        raise ParseError(f"EOF while expecting {what} constant", line)
    return token


def long_numeric(token: Optional[Token], line: int) -> int:
    """Validate ``token`` as a PNG long (0..2^31-1)."""
    tok = _literal(token, "long-integer", line)
    value = parse_unsigned(tok.text) if tok.kind == TokenKind.WORD else None
    if value is None or value > PNG_LONG_MAX:
        raise ParseError("invalid or out of range long constant", line)
    return value


def byte_numeric(token: Optional[Token], line: int) -> int:
    """Validate ``token`` as a byte (0..255)."""
    tok = _literal(token, "byte", line)
    value = parse_unsigned(tok.text) if tok.kind == TokenKind.WORD else None
    if value is None or value > 255:
        raise ParseError("invalid or out of range byte constant", line)
    return value


def double_numeric(token: Optional[Token], line: int) -> float:
    """Validate ``token`` as a non-negative double."""
    tok = _literal(token, "double-precision", line)
    if tok.kind != TokenKind.WORD or not _DOUBLE.match(tok.text):
        raise ParseError("invalid or out of range double-precision constant", line)
    return float(tok.text)
