"""Pixel data decoder for IDAT and IMAGE blocks.

A data block is the raw text between the chunk's braces. It comes in one of
two formats, whitespace ignored in both:

1. Compact: one character per sample, with values
   ``0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ``
   standing for 0..61.
2. Hex: two hex digits per byte, high nibble first.

The decoder doesn't know which format fits the image; the caller chooses.
"""
from __future__ import annotations
import logging
import string
from enum import Enum

from .lexer import Lexer
from .errors import LexError
from .records import HeaderRecord, ColorFlags

logger = logging.getLogger(__name__)

COMPACT_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
_COMPACT_VALUES = {ch: i for i, ch in enumerate(COMPACT_ALPHABET)}
_HEX_VALUES = {ch: int(ch, 16) for ch in string.hexdigits}

# Largest sample that always fits in one compact character
COMPACT_MAX_BITS = 5


class DataMode(Enum):
    COMPACT = "pixel-per-character"
    HEX = "hex"


def decode(lexer: Lexer, mode: DataMode, chunk_name: str = "IDAT") -> bytes:
    """Collect a data block up to and including its closing brace.

    An odd number of hex digits leaves the last byte with a zero low nibble.
    """
    logger.debug("collecting data in %s format", mode.value)
    buf = bytearray()
    pending = None    # high nibble waiting for its partner
    while True:
        ch = lexer.read_char()
        if ch is None:
            raise lexer.error("unexpected EOF in data segment", LexError)
        if ch == "}":
            break
        if ch.isspace():
            continue
        if mode is DataMode.COMPACT:
            value = _COMPACT_VALUES.get(ch)
            if value is None:
                raise lexer.error(f"bad character in {chunk_name} block")
            buf.append(value)
        else:
            value = _HEX_VALUES.get(ch)
            if value is None:
                raise lexer.error(f"bad character in {chunk_name} block")
            if pending is None:
                pending = value
            else:
                buf.append(pending << 4 | value)
                pending = None

    if pending is not None:
        logger.warning("line %d: odd number of hex digits in %s block, "
                       "last nibble padded with zero", lexer.line, chunk_name)
        buf.append(pending << 4)
    return bytes(buf)


# ============================================================
# Sample geometry
# ============================================================

def sample_size(header: HeaderRecord) -> int:
    """Bits per pixel of the unpacked input for the header's color model."""
    if header.color & ColorFlags.PALETTE:
        return 8
    channels = 3 if header.color & ColorFlags.COLOR else 1
    if header.color & ColorFlags.ALPHA:
        channels += 1
    return channels * header.bit_depth


def select_mode(header: HeaderRecord, palette_size: int) -> DataMode:
    """Compact when a sample fits one base-62 character, hex otherwise.

    That covers bit depths of 4 or less and palettes of 62 colors or fewer.
    """
    if sample_size(header) <= COMPACT_MAX_BITS:
        return DataMode.COMPACT
    if header.uses_palette and palette_size <= len(COMPACT_ALPHABET):
        return DataMode.COMPACT
    return DataMode.HEX


def bytes_per_sample(bits: int) -> int:
    """Sub-byte samples travel one per byte; the codec packs them."""
    return (bits + 7) // 8


def expected_size(header: HeaderRecord) -> int:
    return header.width * header.height * bytes_per_sample(sample_size(header))


def reshape(data: bytes, width: int, height: int, bytes_per_pixel: int) -> list[bytes]:
    """Split a flat buffer into ``height`` top-to-bottom rows."""
    stride = width * bytes_per_pixel
    if len(data) != stride * height:
        raise ValueError(f"{len(data)} bytes cannot form {height} rows of {stride}")
    return [bytes(data[i * stride:(i + 1) * stride]) for i in range(height)]
