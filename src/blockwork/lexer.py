"""Lexer for blockwork templates.

Splits template source into a flat token stream:

    "Hi {{ user.name }}{% block body %}x{% endblock %}"
    → DATA("Hi ") VARIABLE("user.name") BLOCK("block body") DATA("x")
      BLOCK("endblock") EOF

Delimiters:
- ``{{ ... }}``: variable tag, interior kept verbatim (the parser trims)
- ``{% ... %}``: control tag, interior kept verbatim
- everything else is DATA; a lone ``{`` is ordinary text

Text containing neither ``{{`` nor ``{%`` always lexes to a single DATA
token equal to the input.

Errors:
An opening delimiter without its closing counterpart raises
TemplateSyntaxError (UNCLOSED_VARIABLE / UNCLOSED_TAG) pointing at the
opening delimiter.

"""

from __future__ import annotations

import re

from blockwork._types import Token, TokenType
from blockwork.environment.exceptions import ErrorCode, TemplateSyntaxError

VARIABLE_START = "{{"
VARIABLE_END = "}}"
BLOCK_START = "{%"
BLOCK_END = "%}"

# Compiled once at module level (immutable)
_TAG_START_RE = re.compile(r"\{\{|\{%")

_CLOSERS = {
    VARIABLE_START: (VARIABLE_END, TokenType.VARIABLE, ErrorCode.UNCLOSED_VARIABLE, "variable"),
    BLOCK_START: (BLOCK_END, TokenType.BLOCK, ErrorCode.UNCLOSED_TAG, "tag"),
}


class Lexer:
    """Single-pass, position-tracking template lexer.

    Example:
            >>> [t.type.name for t in Lexer("a{{ b }}c").tokenize()]
            ['DATA', 'VARIABLE', 'DATA', 'EOF']

    """

    __slots__ = ("_filename", "_line", "_line_start", "_name", "_pos", "_scanned", "_source", "_tokens")

    def __init__(self, source: str, name: str | None = None, filename: str | None = None):
        self._source = source
        self._name = name
        self._filename = filename
        self._pos = 0
        self._tokens: list[Token] = []
        # Line bookkeeping up to offset _scanned; positions are asked for in
        # increasing offset order, so each newline is counted once
        self._line = 1
        self._line_start = 0
        self._scanned = 0

    def tokenize(self) -> list[Token]:
        """Tokenize the whole source. The last token is always EOF."""
        source = self._source
        while self._pos < len(source):
            match = _TAG_START_RE.search(source, self._pos)
            if match is None:
                self._emit(TokenType.DATA, source[self._pos :], self._pos)
                self._pos = len(source)
                break
            if match.start() > self._pos:
                self._emit(TokenType.DATA, source[self._pos : match.start()], self._pos)
            self._read_tag(match.group(), match.start())

        line, col = self._position(len(source))
        self._tokens.append(Token(TokenType.EOF, "", line, col))
        return self._tokens

    def _read_tag(self, opener: str, start: int) -> None:
        closer, token_type, code, kind = _CLOSERS[opener]
        interior_start = start + len(opener)
        end = self._source.find(closer, interior_start)
        if end == -1:
            line, col = self._position(start)
            raise TemplateSyntaxError(
                f"Unclosed {kind} '{opener}', expected '{closer}' before end of input",
                lineno=line,
                col_offset=col,
                name=self._name,
                filename=self._filename,
                source=self._source,
                code=code,
            )
        self._emit(token_type, self._source[interior_start:end], start)
        self._pos = end + len(closer)

    def _emit(self, token_type: TokenType, value: str, offset: int) -> None:
        line, col = self._position(offset)
        self._tokens.append(Token(token_type, value, line, col))

    def _position(self, offset: int) -> tuple[int, int]:
        """Convert an absolute offset to (1-based line, 0-based column).

        Offsets must not decrease between calls.
        """
        source = self._source
        newlines = source.count("\n", self._scanned, offset)
        if newlines:
            self._line += newlines
            self._line_start = source.rfind("\n", self._scanned, offset) + 1
        self._scanned = offset
        return self._line, offset - self._line_start


def tokenize(source: str, name: str | None = None, filename: str | None = None) -> list[Token]:
    """Tokenize template source (convenience wrapper around Lexer)."""
    return Lexer(source, name=name, filename=filename).tokenize()
