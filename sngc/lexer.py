"""Lexer for SNG source — tokenizes chunk specifications on demand."""
from __future__ import annotations
import logging
import string
from typing import Iterator, Optional

from .tokens import Token, TokenKind
from .errors import LexError, ParseError
from .options import DEFAULT_MAX_TOKEN_LENGTH

logger = logging.getLogger(__name__)

PUNCTUATION = frozenset(string.punctuation)
QUOTES = ("'", '"')


class Lexer:
    """Pull-style lexer with a single slot of token pushback.

    Unlike a whole-file tokenizer, tokens are produced one at a time because
    the pixel decoder needs to read the raw characters of a data block
    between two tokens.
    """

    def __init__(self, source: str, max_token_length: int = DEFAULT_MAX_TOKEN_LENGTH):
        self.source = source
        self.pos = 0
        self.line = 1
        self.max_token_length = max_token_length
        self.token: Optional[Token] = None    # most recently delivered
        self._pushed: Optional[Token] = None

    def error(self, msg: str, cls: type = ParseError):
        return cls(msg, self.line)

    @property
    def current(self) -> str:
        if self.pos >= len(self.source):
            return "\0"
        return self.source[self.pos]

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def read_char(self) -> Optional[str]:
        """Return the next raw character, or None at end of input."""
        if self.pos >= len(self.source):
            return None
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
        return ch

    def skip_whitespace_and_comments(self):
        while not self.at_end():
            ch = self.current
            if ch.isspace():
                self.read_char()
            elif ch == "#":
                while not self.at_end() and self.current != "\n":
                    self.pos += 1
            else:
                break

    def read_string(self, quote: str, line: int) -> Token:
        """Read a quoted token; no escapes, no embedded newlines."""
        self.read_char()  # opening quote
        chars = []
        while True:
            if self.at_end():
                raise self.error("unexpected EOF in string", LexError)
            ch = self.current
            if ch == "\n":
                raise self.error("runaway string", LexError)
            self.pos += 1
            if ch == quote:
                break
            if len(chars) >= self.max_token_length:
                raise self.error("string token too long", LexError)
            chars.append(ch)
        return Token(TokenKind.STRING, "".join(chars), line)

    def read_word(self, line: int) -> Token:
        """Read a bare token. ``.`` continues a word so decimals stay whole."""
        start = self.pos
        while True:
            if self.at_end():
                raise self.error("unexpected EOF in token", LexError)
            ch = self.current
            if ch.isspace() or (ch in PUNCTUATION and ch != "."):
                break
            if self.pos - start >= self.max_token_length:
                raise self.error("token too long", LexError)
            self.pos += 1
        return Token(TokenKind.WORD, self.source[start:self.pos], line)

    def next_token(self) -> Optional[Token]:
        """Deliver the next token, or None at end of input."""
        if self._pushed is not None:
            tok, self._pushed = self._pushed, None
            logger.debug("saved token: %s", tok.text)
            self.token = tok
            return tok

        self.skip_whitespace_and_comments()
        if self.at_end():
            return None

        ch = self.current
        line = self.line
        if ch in QUOTES:
            tok = self.read_string(ch, line)
        elif ch in PUNCTUATION and ch != ".":
            self.pos += 1
            tok = Token(TokenKind.PUNCT, ch, line)
        else:
            tok = self.read_word(line)

        logger.debug("token: %s", tok.text)
        self.token = tok
        return tok

    def push_token(self):
        """Push back the last delivered token for exactly one re-delivery."""
        if self._pushed is not None:
            raise RuntimeError("token pushed back twice without a read")
        if self.token is None:
            raise RuntimeError("no token to push back")
        logger.debug("pushing token: %s", self.token.text)
        self._pushed = self.token

    def token_equals(self, text: str) -> bool:
        return self.token is not None and self.token.text == text

    # ================================================
    # Chunk-body helpers
    # ================================================

    def next_inner_token(self) -> Optional[Token]:
        """Next token within a chunk body; None on the closing brace."""
        tok = self.next_token()
        if tok is None:
            raise self.error("unexpected EOF")
        if tok.is_punct("}"):
            return None
        return tok

    def inner_tokens(self) -> Iterator[Token]:
        """Iterate over a chunk body, stopping after its closing brace."""
        while True:
            tok = self.next_inner_token()
            if tok is None:
                return
            yield tok

    def require(self, text: str) -> Token:
        """Croak unless the next token is ``text``."""
        tok = self.next_token()
        if tok is None:
            raise self.error("unexpected EOF")
        if tok.text != text:
            raise self.error(f"unexpected token {tok.text}")
        return tok

    def tokenize(self) -> list[Token]:
        """Tokenize the remaining source into a list (diagnostic helper)."""
        tokens = []
        while True:
            tok = self.next_token()
            if tok is None:
                return tokens
            tokens.append(tok)
