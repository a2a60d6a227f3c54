"""Error taxonomy for the SNG compiler.

Every failure is fatal: the first error raised aborts the whole compile and
is reported once by the top-level handler.
"""
from __future__ import annotations
from typing import Optional


class CompileError(Exception):
    """Base for all compile failures. ``line`` is None at end of input."""

    kind = "error"

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line

    def diagnostic(self, source_name: str) -> str:
        where = "EOF" if self.line is None else str(self.line)
        return f"{source_name}:{where}: {self.message}"


class LexError(CompileError):
    """Runaway or oversized token, end of input inside a token."""
    kind = "lex error"


class ParseError(CompileError):
    """Missing delimiter, unknown chunk name, malformed literal, bad token."""
    kind = "syntax error"


class SemanticError(CompileError):
    """Ordering, cardinality, incomplete group or size mismatch."""
    kind = "semantic error"


class CodecError(CompileError):
    """The image codec rejected a value."""
    kind = "codec error"
