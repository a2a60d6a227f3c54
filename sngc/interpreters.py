"""Grammar interpreters for the bodies of individual chunk specifications.

Each interpreter is entered just after the chunk's opening brace, consumes
tokens up to and including the closing brace, and returns a chunk record.
"""
from __future__ import annotations
from typing import TYPE_CHECKING

from .lexer import Lexer
from .tokens import TokenKind
from .errors import SemanticError
from .numeric import long_numeric, byte_numeric, double_numeric
from .records import (
    ColorFlags, HeaderRecord, PaletteRecord, PrimariesRecord, PixelPayload,
    HeaderChunk, PaletteChunk, PrimariesChunk, GammaChunk, StandardRGBChunk,
    DataChunk, ImageChunk,
)
from . import pixels

if TYPE_CHECKING:
    from .compiler import CompilationState


# ================================================
# IHDR
# ================================================

_COLOR_KEYWORDS = {
    "palette": ColorFlags.PALETTE,
    "color": ColorFlags.COLOR,
    "alpha": ColorFlags.ALPHA,
}

_SUGAR = ("using", "with")


def compile_IHDR(lexer: Lexer, state: CompilationState) -> HeaderChunk:
    line = lexer.line
    header = HeaderRecord()
    for tok in lexer.inner_tokens():
        word = tok.text
        if tok.kind != TokenKind.WORD:
            raise lexer.error(f"bad token `{word}' in IHDR specification")
        if word == "height":
            header.height = long_numeric(lexer.next_token(), lexer.line)
        elif word == "width":
            header.width = long_numeric(lexer.next_token(), lexer.line)
        elif word == "bitdepth":
            header.bit_depth = byte_numeric(lexer.next_token(), lexer.line)
        elif word in _COLOR_KEYWORDS:
            header.color |= _COLOR_KEYWORDS[word]
        elif word == "interlace":
            header.interlace = True
        elif word in _SUGAR:
            continue
        else:
            raise lexer.error(f"bad token `{word}' in IHDR specification")

    if not header.height:
        raise lexer.error("image height is zero or nonexistent", SemanticError)
    if not header.width:
        raise lexer.error("image width is zero or nonexistent", SemanticError)
    return HeaderChunk(line=line, header=header)


# ================================================
# PLTE
# ================================================

def compile_PLTE(lexer: Lexer, state: CompilationState) -> PaletteChunk:
    line = lexer.line
    palette = PaletteRecord()
    for tok in lexer.inner_tokens():
        if not tok.is_punct("("):
            raise lexer.error("bad syntax in PLTE description")
        if len(palette) >= PaletteRecord.MAX_ENTRIES:
            raise lexer.error("too many PLTE entries", SemanticError)
        red = byte_numeric(lexer.next_token(), lexer.line)
        lexer.require(",")
        green = byte_numeric(lexer.next_token(), lexer.line)
        lexer.require(",")
        blue = byte_numeric(lexer.next_token(), lexer.line)
        lexer.require(")")
        palette.add(red, green, blue)
    return PaletteChunk(line=line, palette=palette)


# ================================================
# Image data
# ================================================

def compile_IDAT(lexer: Lexer, state: CompilationState) -> DataChunk:
    """Raw hex data, written out as one chunk."""
    line = lexer.line
    data = pixels.decode(lexer, pixels.DataMode.HEX, "IDAT")
    return DataChunk(line=line, data=data)


def compile_IMAGE(lexer: Lexer, state: CompilationState) -> ImageChunk:
    line = lexer.line
    header = state.header
    palette_size = len(state.palette) if state.palette is not None else 0

    bits = pixels.sample_size(header)
    mode = pixels.select_mode(header, palette_size)
    data = pixels.decode(lexer, mode, "IMAGE")

    if len(data) != pixels.expected_size(header):
        raise lexer.error("size of IMAGE doesn't match height * width in IHDR",
                          SemanticError)

    rows = pixels.reshape(data, header.width, header.height,
                          pixels.bytes_per_sample(bits))
    return ImageChunk(line=line, payload=PixelPayload(data, bits), rows=rows)


# ================================================
# Color space
# ================================================

def compile_cHRM(lexer: Lexer, state: CompilationState) -> PrimariesChunk:
    line = lexer.line
    primaries = PrimariesRecord()
    for tok in lexer.inner_tokens():
        name = tok.text
        if tok.kind != TokenKind.WORD or name not in PrimariesRecord.NAMES:
            raise lexer.error("invalid color name in cHRM specification")
        if getattr(primaries, name) is not None:
            raise lexer.error(f"duplicate {name} point in cHRM specification",
                              SemanticError)
        lexer.require("(")
        x = double_numeric(lexer.next_token(), lexer.line)
        lexer.require(",")
        y = double_numeric(lexer.next_token(), lexer.line)
        lexer.require(")")
        setattr(primaries, name, (x, y))

    if not primaries.complete:
        raise lexer.error("cHRM specification is not complete", SemanticError)
    return PrimariesChunk(line=line, primaries=primaries)


def _close_single_value(lexer: Lexer, chunk_name: str):
    tok = lexer.next_token()
    if tok is None or not tok.is_punct("}"):
        raise lexer.error(f"bad token in {chunk_name} specification")


def compile_gAMA(lexer: Lexer, state: CompilationState) -> GammaChunk:
    line = lexer.line
    gamma = double_numeric(lexer.next_token(), lexer.line)
    _close_single_value(lexer, "gAMA")
    return GammaChunk(line=line, gamma=gamma)


def compile_sRGB(lexer: Lexer, state: CompilationState) -> StandardRGBChunk:
    line = lexer.line
    intent = byte_numeric(lexer.next_token(), lexer.line)
    _close_single_value(lexer, "sRGB")
    return StandardRGBChunk(line=line, intent=intent)


# ================================================
# Registered but not yet implemented
# ================================================

def unsupported(lexer: Lexer, name: str) -> SemanticError:
    """The error for a chunk kind that is registered but has no grammar yet."""
    if name == "private":
        return lexer.error("private chunk types are not supported yet", SemanticError)
    return lexer.error(f"{name} chunk type is not supported yet", SemanticError)

