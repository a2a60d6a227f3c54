"""Compiler configuration."""
from __future__ import annotations
from dataclasses import dataclass

DEFAULT_MAX_TOKEN_LENGTH = 80


@dataclass
class CompileOptions:
    source_name: str = "stdin"                    # used in diagnostics
    max_token_length: int = DEFAULT_MAX_TOKEN_LENGTH

    def __post_init__(self):
        if self.max_token_length < 1:
            raise ValueError("max_token_length must be positive")
