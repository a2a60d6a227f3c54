"""Image codec collaborators.

The compiler validates and orders chunks; a codec turns them into bytes.
``PngCodec`` writes a real PNG stream through pypng, ``RecordingCodec``
just remembers what it was asked to do.
"""
from __future__ import annotations
import io
import logging
import struct
from typing import Any, BinaryIO, Optional

import png

from .errors import CodecError
from .records import HeaderRecord, PaletteRecord, PrimariesRecord, ColorFlags

logger = logging.getLogger(__name__)

# Legal bit depths per PNG color type
ALLOWED_BIT_DEPTHS = {
    0: (1, 2, 4, 8, 16),
    2: (8, 16),
    3: (1, 2, 4, 8),
    4: (8, 16),
    6: (8, 16),
}

SRGB_INTENTS = ("perceptual", "relative colorimetric", "saturation",
                "absolute colorimetric")

# Values implied by an sRGB chunk
SRGB_GAMMA = 0.45455
SRGB_PRIMARIES = PrimariesRecord(
    white=(0.3127, 0.329), red=(0.64, 0.33), green=(0.3, 0.6), blue=(0.15, 0.06),
)

_PNG_FIXED_MAX = (2**31 - 1) / 100000


class ImageCodec:
    """Operations the compiler invokes, in this order:

    ``begin``, ``set_header``, any of ``set_primaries``/``set_gamma``/
    ``set_standard_rgb``, ``set_palette``, then ``write_raw_chunk`` calls or
    a single ``write_image``, and finally ``finalize``. ``close`` is called
    on every exit path.
    """

    def begin(self, writer: Optional[BinaryIO]):
        raise NotImplementedError

    def set_header(self, header: HeaderRecord):
        raise NotImplementedError

    def set_palette(self, palette: PaletteRecord):
        raise NotImplementedError

    def set_primaries(self, primaries: PrimariesRecord):
        raise NotImplementedError

    def set_gamma(self, gamma: float):
        raise NotImplementedError

    def set_standard_rgb(self, intent: int):
        raise NotImplementedError

    def write_raw_chunk(self, name: str, data: bytes):
        raise NotImplementedError

    def write_image(self, rows: list[bytes]):
        raise NotImplementedError

    def finalize(self):
        raise NotImplementedError

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class RecordingCodec(ImageCodec):
    """Keeps every call as ``(operation, argument)`` for inspection."""

    def __init__(self):
        self.calls: list[tuple[str, Any]] = []
        self.closed = False

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]

    def begin(self, writer):
        self.calls.append(("begin", writer))

    def set_header(self, header):
        self.calls.append(("set_header", header))

    def set_palette(self, palette):
        self.calls.append(("set_palette", palette))

    def set_primaries(self, primaries):
        self.calls.append(("set_primaries", primaries))

    def set_gamma(self, gamma):
        self.calls.append(("set_gamma", gamma))

    def set_standard_rgb(self, intent):
        self.calls.append(("set_standard_rgb", intent))

    def write_raw_chunk(self, name, data):
        self.calls.append(("write_raw_chunk", (name, bytes(data))))

    def write_image(self, rows):
        self.calls.append(("write_image", [bytes(r) for r in rows]))

    def finalize(self):
        self.calls.append(("finalize", None))

    def close(self):
        self.closed = True


def _fixed(value: float) -> int:
    """PNG fixed-point: value times 100000 as an unsigned 32-bit integer."""
    if value < 0 or value > _PNG_FIXED_MAX:
        raise CodecError(f"value {value} out of range for PNG fixed point")
    return int(round(value * 100000))


class PngCodec(ImageCodec):
    """Serializes chunks to a PNG byte stream using pypng.

    Everything before the image data (IHDR and the ancillary chunks that
    must precede PLTE, then PLTE) is held back until the first IDAT or
    image write, mirroring how libpng's ``png_write_info`` works.
    """

    def __init__(self, compression: Optional[int] = None):
        self.compression = compression
        self.out: Optional[BinaryIO] = None
        self.header: Optional[HeaderRecord] = None
        self.palette: Optional[PaletteRecord] = None
        self.primaries: Optional[PrimariesRecord] = None
        self.gamma: Optional[float] = None
        self.srgb_intent: Optional[int] = None
        self.info_written = False

    # ── setup ──

    def begin(self, writer):
        self.out = writer

    def set_header(self, header):
        allowed = ALLOWED_BIT_DEPTHS.get(header.color_type)
        if allowed is None:
            raise CodecError(f"invalid color type {header.color_type} in IHDR")
        if header.bit_depth not in allowed:
            raise CodecError(
                f"invalid bit depth {header.bit_depth} for color type {header.color_type}")
        self.header = header

    def set_palette(self, palette):
        self._require_header()
        if not 1 <= len(palette) <= 2 ** min(self.header.bit_depth, 8):
            raise CodecError(f"invalid number of palette entries ({len(palette)})")
        self.palette = palette

    def set_primaries(self, primaries):
        if not primaries.complete:
            raise CodecError("incomplete chromaticities")
        for name in PrimariesRecord.NAMES:
            for v in getattr(primaries, name):
                _fixed(v)
        self.primaries = primaries

    def set_gamma(self, gamma):
        if gamma <= 0:
            raise CodecError("gamma must be positive")
        _fixed(gamma)
        self.gamma = gamma

    def set_standard_rgb(self, intent):
        if intent >= len(SRGB_INTENTS):
            raise CodecError(f"invalid sRGB rendering intent {intent}")
        logger.debug("sRGB intent: %s", SRGB_INTENTS[intent])
        self.srgb_intent = intent

    # ── output ──

    def _require_header(self):
        if self.header is None:
            raise CodecError("no IHDR set before image data")

    def _write_chunk(self, tag: bytes, data: bytes = b""):
        if self.out is None:
            raise CodecError("codec has no output stream")
        png.write_chunk(self.out, tag, data)

    def write_info(self):
        """Emit the signature and every chunk that precedes the image data."""
        if self.info_written:
            return
        self._require_header()
        if self.out is None:
            raise CodecError("codec has no output stream")
        h = self.header
        self.out.write(png.signature)
        self._write_chunk(b"IHDR", struct.pack(
            "!2I5B", h.width, h.height, h.bit_depth, h.color_type, 0, 0,
            1 if h.interlace else 0))

        primaries = self.primaries
        gamma = self.gamma
        if self.srgb_intent is not None:
            primaries = primaries or SRGB_PRIMARIES
            gamma = gamma or SRGB_GAMMA
        if primaries is not None:
            values = []
            for name in PrimariesRecord.NAMES:
                values.extend(_fixed(v) for v in getattr(primaries, name))
            self._write_chunk(b"cHRM", struct.pack("!8I", *values))
        if gamma is not None:
            self._write_chunk(b"gAMA", struct.pack("!I", _fixed(gamma)))
        if self.srgb_intent is not None:
            self._write_chunk(b"sRGB", struct.pack("B", self.srgb_intent))
        if self.palette is not None:
            self._write_chunk(b"PLTE", b"".join(
                struct.pack("3B", *entry) for entry in self.palette.entries))
        elif h.color & ColorFlags.PALETTE:
            raise CodecError("palette image without a PLTE chunk")
        self.info_written = True

    def write_raw_chunk(self, name, data):
        self.write_info()
        self._write_chunk(name.encode("ascii"), bytes(data))

    def _samples(self, rows: list[bytes]) -> list[list[int]]:
        """Turn byte rows into rows of sample values for pypng."""
        h = self.header
        if h.color & ColorFlags.PALETTE:
            limit = len(self.palette)
        else:
            limit = 2 ** h.bit_depth
        result = []
        for y, row in enumerate(rows):
            if h.bit_depth == 16:
                values = [row[i] << 8 | row[i + 1] for i in range(0, len(row) - 1, 2)]
            else:
                values = list(row)
            for v in values:
                if v >= limit:
                    raise CodecError(f"sample value {v} out of range in row {y}")
            result.append(values)
        return result

    def write_image(self, rows):
        self.write_info()
        h = self.header
        palette = self.palette.entries if h.color & ColorFlags.PALETTE else None
        try:
            writer = png.Writer(
                h.width, h.height,
                greyscale=not h.color & (ColorFlags.COLOR | ColorFlags.PALETTE),
                alpha=bool(h.color & ColorFlags.ALPHA),
                bitdepth=h.bit_depth,
                palette=palette,
                interlace=h.interlace,
                compression=self.compression,
            )
            encoded = io.BytesIO()
            writer.write(encoded, self._samples(rows))
            chunks = list(png.Reader(bytes=encoded.getvalue()).chunks())
        except (png.Error, ValueError, OverflowError) as e:
            raise CodecError(f"png: {e}") from e
        for tag, data in chunks:
            if tag == b"IDAT":
                self._write_chunk(tag, data)

    def finalize(self):
        self.write_info()
        self._write_chunk(b"IEND")
        if hasattr(self.out, "flush"):
            self.out.flush()
