"""The SNG compiler driver: reads chunk headers, enforces PNG chunk ordering,
dispatches to the chunk interpreters and feeds the results to a codec."""
from __future__ import annotations
import io
import logging
from dataclasses import dataclass, field
from typing import Optional

from .lexer import Lexer
from .tokens import TokenKind
from .errors import CodecError, SemanticError
from .options import CompileOptions
from .chunks import (
    ChunkKind, ChunkRegistry, GLOBAL_PROPERTY_CHUNKS, BEFORE_DATA_CHUNKS,
    IHDR, PLTE, IDAT, IMAGE, cHRM, gAMA, sRGB, bKGD, hIST, tRNS,
)
from .records import (
    HeaderRecord, PaletteRecord, PrimariesRecord, ChunkRecord,
    HeaderChunk, PaletteChunk, PrimariesChunk, GammaChunk, StandardRGBChunk,
    DataChunk, ImageChunk,
)
from .codec import ImageCodec, PngCodec
from . import interpreters

logger = logging.getLogger(__name__)


@dataclass
class CompilationState:
    """Everything one compile knows so far. Never shared between compiles."""
    registry: ChunkRegistry = field(default_factory=ChunkRegistry)
    header: Optional[HeaderRecord] = None
    palette: Optional[PaletteRecord] = None
    primaries: Optional[PrimariesRecord] = None
    previous: Optional[ChunkKind] = None
    chunks: list[ChunkRecord] = field(default_factory=list)

    @property
    def payload_seen(self) -> bool:
        """Has any image data (IDAT or IMAGE) been compiled yet?"""
        return self.registry.seen(IDAT) or self.registry.seen(IMAGE)

    @property
    def needs_palette(self) -> bool:
        return self.header is not None and self.header.uses_palette


@dataclass
class CompileResult:
    chunks: list[ChunkRecord]
    header: Optional[HeaderRecord]
    palette: Optional[PaletteRecord]

    def records(self, cls: type) -> list:
        return [c for c in self.chunks if isinstance(c, cls)]


class Compiler:
    """Compiles one SNG source through one codec."""

    def __init__(self, source: str, codec: ImageCodec,
                 options: Optional[CompileOptions] = None):
        self.options = options or CompileOptions()
        self.lexer = Lexer(source, max_token_length=self.options.max_token_length)
        self.codec = codec
        self.state = CompilationState()
        self.at_eof = False

    # ================================================
    # Driver loop
    # ================================================

    def run(self, writer=None) -> CompileResult:
        """Compile the whole source. Raises CompileError on the first problem."""
        try:
            self._call(self.codec.begin, writer)
            while True:
                tok = self.lexer.next_token()
                if tok is None:
                    break
                kind = None
                if tok.kind == TokenKind.WORD:
                    kind = self.state.registry.lookup(tok.text)
                if kind is None:
                    raise self.lexer.error("unknown chunk type")
                self._compile_chunk(kind)
            self.at_eof = True
            self._check_end()
            self._call(self.codec.finalize)
        finally:
            self.codec.close()
        return CompileResult(self.state.chunks, self.state.header, self.state.palette)

    def _compile_chunk(self, kind: ChunkKind):
        lexer = self.lexer
        tok = lexer.next_token()
        if tok is None:
            raise lexer.error("unexpected EOF")
        if not tok.is_punct("{"):
            raise lexer.error("missing chunk delimiter")
        if self.state.registry.repeat_forbidden(kind):
            raise lexer.error("illegal repeated chunk", SemanticError)

        self._check_order(kind)
        record = self._dispatch(kind)
        self._emit(record)

        logger.debug("%s specification processed", kind.name)
        self.state.chunks.append(record)
        self.state.previous = kind
        self.state.registry.record(kind)

    def _check_end(self):
        """End-of-input consistency checks, reported against EOF."""
        state = self.state
        if state.needs_palette and not state.registry.seen(PLTE):
            raise SemanticError("palette property set, but no PLTE chunk found")
        if not state.payload_seen:
            raise SemanticError("no image data")

    # ================================================
    # Ordering rules
    # ================================================

    def _check_order(self, kind: ChunkKind):
        state = self.state
        seen = state.registry.seen

        def fail(msg: str):
            raise self.lexer.error(msg, SemanticError)

        if kind is IHDR:
            if state.previous is not None:
                fail("IHDR chunk must come first")

        elif kind is PLTE:
            if state.payload_seen:
                fail("PLTE chunk must come before IDAT")
            if seen(bKGD):
                fail("PLTE chunk encountered after bKGD")
            if seen(tRNS):
                fail("PLTE chunk encountered after tRNS")
            if not state.needs_palette:
                fail("PLTE chunk specified for non-palette image type")

        elif kind is IDAT or kind is IMAGE:
            if state.header is None:
                fail(f"IHDR chunk must come before {kind.name}")
            if seen(IMAGE if kind is IDAT else IDAT):
                fail("can't mix IDAT and IMAGE specs")
            if kind is IDAT and seen(IDAT) and state.previous is not IDAT:
                fail("IDAT chunks must be contiguous")
            if state.needs_palette and not seen(PLTE):
                fail(f"PLTE chunk must come before {kind.name} in a palette image")

        elif kind in GLOBAL_PROPERTY_CHUNKS:
            if seen(PLTE) or state.payload_seen:
                fail(f"{kind.name} chunk must come before PLTE and IDAT")

        elif kind is bKGD or kind is tRNS:
            if state.payload_seen:
                fail(f"{kind.name} chunk must come between PLTE (if any) and IDAT")

        elif kind is hIST:
            if not seen(PLTE) or state.payload_seen:
                fail("hIST chunk must come between PLTE and IDAT")

        elif kind in BEFORE_DATA_CHUNKS:
            if state.payload_seen:
                fail(f"{kind.name} chunk must come before IDAT")

    # ================================================
    # Interpreter dispatch and codec emission
    # ================================================

    def _dispatch(self, kind: ChunkKind) -> ChunkRecord:
        lexer, state = self.lexer, self.state
        if not kind.supported:
            raise interpreters.unsupported(lexer, kind.name)
        if kind is IHDR:
            record = interpreters.compile_IHDR(lexer, state)
            state.header = record.header
            return record
        if kind is PLTE:
            record = interpreters.compile_PLTE(lexer, state)
            state.palette = record.palette
            return record
        if kind is IDAT:
            return interpreters.compile_IDAT(lexer, state)
        if kind is IMAGE:
            return interpreters.compile_IMAGE(lexer, state)
        if kind is cHRM:
            record = interpreters.compile_cHRM(lexer, state)
            state.primaries = record.primaries
            return record
        if kind is gAMA:
            return interpreters.compile_gAMA(lexer, state)
        if kind is sRGB:
            return interpreters.compile_sRGB(lexer, state)
        raise TypeError(f"no interpreter for supported chunk kind {kind.name}")

    def _emit(self, record: ChunkRecord):
        codec = self.codec
        if isinstance(record, HeaderChunk):
            self._call(codec.set_header, record.header)
        elif isinstance(record, PaletteChunk):
            self._call(codec.set_palette, record.palette)
        elif isinstance(record, PrimariesChunk):
            self._call(codec.set_primaries, record.primaries)
        elif isinstance(record, GammaChunk):
            self._call(codec.set_gamma, record.gamma)
        elif isinstance(record, StandardRGBChunk):
            self._call(codec.set_standard_rgb, record.intent)
        elif isinstance(record, DataChunk):
            self._call(codec.write_raw_chunk, "IDAT", record.data)
        elif isinstance(record, ImageChunk):
            self._call(codec.write_image, record.rows)
        else:
            raise TypeError(f"no codec operation for {type(record).__name__}")

    def _call(self, operation, *args):
        """Invoke a codec operation, pinning any rejection to the current line."""
        try:
            operation(*args)
        except CodecError as e:
            if e.line is None and not self.at_eof:
                e.line = self.lexer.line
            raise


def compile_source(source: str, codec: ImageCodec,
                   options: Optional[CompileOptions] = None,
                   writer=None) -> CompileResult:
    """Compile ``source`` with a fresh compiler; raises CompileError on failure."""
    return Compiler(source, codec, options).run(writer)


def compile_to_png(source: str, options: Optional[CompileOptions] = None,
                   compression: Optional[int] = None) -> bytes:
    """Compile ``source`` straight to PNG bytes. Nothing is returned on failure."""
    buf = io.BytesIO()
    compile_source(source, PngCodec(compression=compression), options, writer=buf)
    return buf.getvalue()

