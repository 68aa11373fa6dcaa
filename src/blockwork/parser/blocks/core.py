"""Shared parser state: token navigation and the open-block stack."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from blockwork._types import Token, TokenType
from blockwork.environment.exceptions import ErrorCode, TemplateSyntaxError

if TYPE_CHECKING:
    from blockwork.nodes import Node

# Compiled once at module level (immutable)
IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*\Z")
DOTTED_PATH_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z0-9_]+)*\Z")
QUOTED_RE = re.compile(r"(['\"])([^'\"]*)\1\Z")


class TokenNavigationMixin:
    """Cursor over the token list plus error construction.

    Required Host Attributes:
        - _tokens: list[Token]
        - _pos: int
        - _name, _filename, _source: for error messages
    """

    _tokens: list[Token]
    _pos: int
    _name: str | None
    _filename: str | None
    _source: str | None

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _at_eof(self) -> bool:
        return self._current.type == TokenType.EOF

    def _error(
        self,
        message: str,
        token: Token | None = None,
        code: ErrorCode = ErrorCode.INVALID_TAG,
    ) -> TemplateSyntaxError:
        token = token or self._current
        return TemplateSyntaxError(
            message,
            lineno=token.lineno,
            col_offset=token.col_offset,
            name=self._name,
            filename=self._filename,
            source=self._source,
            code=code,
        )


class BlockStackMixin(TokenNavigationMixin):
    """Track open blocks so close tags can be matched and reported.

    Each entry is ``(keyword, opening_token)``.
    """

    _block_stack: list[tuple[str, Token]]

    if TYPE_CHECKING:

        def _parse_body(self) -> list[Node]: ...

    def _push_block(self, keyword: str, token: Token) -> None:
        self._block_stack.append((keyword, token))

    def _consume_end_tag(self, keyword: str) -> Token:
        """Consume ``{% end<keyword> %}`` closing the innermost open block.

        Raises:
            TemplateSyntaxError: UNCLOSED_BLOCK at end of input, or
                UNEXPECTED_TAG when a different end tag closes the block.
        """
        _, opening = self._block_stack[-1]
        token = self._current
        if token.type == TokenType.EOF:
            raise self._error(
                f"Unclosed '{keyword}' tag, expected {{% end{keyword} %}} "
                f"before end of input",
                token=opening,
                code=ErrorCode.UNCLOSED_BLOCK,
            )
        expected = f"end{keyword}"
        if token.keyword != expected:
            raise self._error(
                f"Unexpected {{% {token.keyword} %}}: the '{keyword}' tag opened on "
                f"line {opening.lineno} must be closed with {{% {expected} %}}",
                code=ErrorCode.UNEXPECTED_TAG,
            )
        self._block_stack.pop()
        return self._advance()
