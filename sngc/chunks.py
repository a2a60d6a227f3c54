"""Chunk registry: which chunk kinds exist and how often they may occur."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ChunkKind:
    name: str
    allows_multiple: bool = False
    supported: bool = False


# PNG 1.0 chunks in the order of the PNG summary table. IEND is implied.
IHDR = ChunkKind("IHDR", supported=True)
PLTE = ChunkKind("PLTE", supported=True)
IDAT = ChunkKind("IDAT", allows_multiple=True, supported=True)
cHRM = ChunkKind("cHRM", supported=True)
gAMA = ChunkKind("gAMA", supported=True)
iCCP = ChunkKind("iCCP")
sBIT = ChunkKind("sBIT")
sRGB = ChunkKind("sRGB", supported=True)
bKGD = ChunkKind("bKGD")
hIST = ChunkKind("hIST")
tRNS = ChunkKind("tRNS")
pHYs = ChunkKind("pHYs")
sPLT = ChunkKind("sPLT", allows_multiple=True)
tIME = ChunkKind("tIME")
iTXt = ChunkKind("iTXt", allows_multiple=True)
tEXt = ChunkKind("tEXt", allows_multiple=True)
zTXt = ChunkKind("zTXt", allows_multiple=True)
# Special-purpose chunks from the PNG 1.2 extensions
oFFs = ChunkKind("oFFs")
pCAL = ChunkKind("pCAL")
sCAL = ChunkKind("sCAL")
gIFg = ChunkKind("gIFg")
gIFt = ChunkKind("gIFt")
gIFx = ChunkKind("gIFx")
fRAc = ChunkKind("fRAc")
# Whole-image pseudo-chunk
IMAGE = ChunkKind("IMAGE", supported=True)
PRIVATE = ChunkKind("private", allows_multiple=True)

KNOWN_CHUNKS: tuple[ChunkKind, ...] = (
    IHDR, PLTE, IDAT, cHRM, gAMA, iCCP, sBIT, sRGB, bKGD, hIST, tRNS, pHYs,
    sPLT, tIME, iTXt, tEXt, zTXt, oFFs, pCAL, sCAL, gIFg, gIFt, gIFx, fRAc,
    IMAGE, PRIVATE,
)

# Global-property chunks that must precede PLTE and any image data
GLOBAL_PROPERTY_CHUNKS = frozenset({cHRM, gAMA, iCCP, sBIT, sRGB})

# Chunks that must come before image data but are indifferent to PLTE
BEFORE_DATA_CHUNKS = frozenset({pHYs, sPLT, oFFs, pCAL, sCAL})

class ChunkRegistry:
    """Per-compile occurrence counters over the known chunk kinds."""

    def __init__(self, kinds: tuple[ChunkKind, ...] = KNOWN_CHUNKS):
        self.kinds = {kind.name: kind for kind in kinds}
        self.counts: dict[str, int] = {kind.name: 0 for kind in kinds}

    def lookup(self, name: str) -> Optional[ChunkKind]:
        return self.kinds.get(name)

    def count(self, kind: ChunkKind) -> int:
        return self.counts.get(kind.name, 0)

    def seen(self, kind: ChunkKind) -> bool:
        return self.count(kind) > 0

    def record(self, kind: ChunkKind):
        self.counts[kind.name] += 1

    def repeat_forbidden(self, kind: ChunkKind) -> bool:
        """Would another occurrence of ``kind`` break its cardinality?"""
        return not kind.allows_multiple and self.seen(kind)
