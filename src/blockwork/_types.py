"""Token types shared by the lexer and parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """Kinds of lexer tokens.

    DATA is literal text, VARIABLE the interior of ``{{ ... }}``, BLOCK the
    interior of ``{% ... %}``. EOF always terminates the stream.
    """

    DATA = "data"
    VARIABLE = "variable"
    BLOCK = "block"
    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    """A lexer token with its source position.

    Attributes:
        type: Token kind
        value: Literal text (DATA) or raw tag interior (VARIABLE, BLOCK)
        lineno: 1-based line of the token start
        col_offset: 0-based column of the token start
    """

    type: TokenType
    value: str
    lineno: int
    col_offset: int

    @property
    def keyword(self) -> str:
        """First word of a BLOCK token interior ('' when empty)."""
        parts = self.value.split(None, 1)
        return parts[0] if parts else ""

    @property
    def arguments(self) -> str:
        """Interior text after the keyword, stripped."""
        parts = self.value.split(None, 1)
        return parts[1].strip() if len(parts) > 1 else ""

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.lineno}:{self.col_offset})"
