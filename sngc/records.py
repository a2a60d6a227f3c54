"""Semantic records produced by the chunk interpreters."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Optional


# ============================================================
# Image properties
# ============================================================

class ColorFlags(IntFlag):
    """PNG color-type masks."""
    NONE = 0
    PALETTE = 1
    COLOR = 2
    ALPHA = 4


@dataclass
class HeaderRecord:
    width: int = 0
    height: int = 0
    bit_depth: int = 8
    color: ColorFlags = ColorFlags.NONE
    interlace: bool = False

    @property
    def color_type(self) -> int:
        return int(self.color)

    @property
    def uses_palette(self) -> bool:
        return bool(self.color & ColorFlags.PALETTE)


@dataclass
class PaletteRecord:
    entries: list[tuple[int, int, int]] = field(default_factory=list)

    MAX_ENTRIES = 256

    def __len__(self):
        return len(self.entries)

    def add(self, red: int, green: int, blue: int):
        self.entries.append((red, green, blue))


@dataclass
class PrimariesRecord:
    """Chromaticities of the white point and the three primaries."""
    white: Optional[tuple[float, float]] = None
    red: Optional[tuple[float, float]] = None
    green: Optional[tuple[float, float]] = None
    blue: Optional[tuple[float, float]] = None

    NAMES = ("white", "red", "green", "blue")

    @property
    def complete(self) -> bool:
        return all(getattr(self, name) is not None for name in self.NAMES)


@dataclass
class PixelPayload:
    data: bytes = b""
    sample_size: int = 8    # bits per pixel before packing


# ============================================================
# Chunk records — one variant per supported chunk kind
# ============================================================

@dataclass
class ChunkRecord:
    line: int = 0


@dataclass
class HeaderChunk(ChunkRecord):
    header: HeaderRecord = field(default_factory=HeaderRecord)


@dataclass
class PaletteChunk(ChunkRecord):
    palette: PaletteRecord = field(default_factory=PaletteRecord)


@dataclass
class PrimariesChunk(ChunkRecord):
    primaries: PrimariesRecord = field(default_factory=PrimariesRecord)


@dataclass
class GammaChunk(ChunkRecord):
    gamma: float = 0.0


@dataclass
class StandardRGBChunk(ChunkRecord):
    intent: int = 0


@dataclass
class DataChunk(ChunkRecord):
    """Opaque IDAT bytes, handed to the codec verbatim."""
    data: bytes = b""


@dataclass
class ImageChunk(ChunkRecord):
    """Decoded pixels reshaped into top-to-bottom scanlines."""
    payload: PixelPayload = field(default_factory=PixelPayload)
    rows: list[bytes] = field(default_factory=list)
