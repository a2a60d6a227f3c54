"""Token types for SNG source."""
from enum import Enum, auto
from dataclasses import dataclass


class TokenKind(Enum):
    WORD = auto()      # bare run: keywords, chunk names, numbers
    STRING = auto()    # '...' or "..."
    PUNCT = auto()     # single punctuation character: { } ( ) ,


@dataclass
class Token:
    kind: TokenKind
    text: str
    line: int = 0

    def is_punct(self, ch: str) -> bool:
        return self.kind == TokenKind.PUNCT and self.text == ch

    def __repr__(self):
        return f"Token({self.kind.name}, {self.text!r}, L{self.line})"
