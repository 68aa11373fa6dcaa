"""Template structure block parsing for the blockwork parser.

Provides mixin for parsing template structure statements (block, extends,
include).
"""

from __future__ import annotations

from blockwork._types import Token
from blockwork.environment.exceptions import ErrorCode
from blockwork.nodes import Block, Include, Named
from blockwork.parser.blocks.core import IDENTIFIER_RE, QUOTED_RE, BlockStackMixin


class TemplateStructureBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing template structure blocks.

    Required Host Attributes:
        - All from BlockStackMixin
        - _block_names: set[str] (named blocks seen in this file)
        - _parse_body: method
    """

    _block_names: set[str]

    def _parse_block_tag(self) -> Block:
        """Parse {% block name %}...{% endblock %}.

        The name may be bare (``content``) or quoted (``"content"``). The
        close tag may repeat the name: ``{% endblock content %}``.
        """
        start = self._advance()  # consume 'block'
        name = self._parse_block_name(start)
        if name in self._block_names:
            raise self._error(
                f"Block '{name}' defined twice",
                token=start,
                code=ErrorCode.DUPLICATE_BLOCK,
            )
        self._block_names.add(name)

        self._push_block("block", start)
        body = self._parse_body()
        end = self._consume_end_tag("block")

        if end.arguments and self._unquote_name(end.arguments) != name:
            raise self._error(
                f"Mismatched {{% endblock {end.arguments} %}} closing block '{name}'",
                token=end,
                code=ErrorCode.UNEXPECTED_TAG,
            )

        return Block(
            lineno=start.lineno,
            col_offset=start.col_offset,
            tag=Named(name),
            children=tuple(body),
        )

    def _parse_block_name(self, start: Token) -> str:
        args = start.arguments
        if not args:
            raise self._error(
                "Expected block name after 'block'",
                token=start,
                code=ErrorCode.UNEXPECTED_EOF,
            )
        name = self._unquote_name(args)
        if name is None:
            raise self._error(
                f"Invalid block name {args!r}",
                token=start,
            )
        return name

    @staticmethod
    def _unquote_name(text: str) -> str | None:
        """Return a bare or quoted block name, or None if malformed."""
        if IDENTIFIER_RE.match(text):
            return text
        quoted = QUOTED_RE.match(text)
        if quoted and quoted.group(2):
            return quoted.group(2)
        return None

    def _parse_quoted_path(self, start: Token) -> str:
        """Parse the single quoted path argument of include/extends."""
        keyword = start.keyword
        args = start.arguments
        if not args:
            raise self._error(
                f"Expected quoted template path after '{keyword}'",
                token=start,
                code=ErrorCode.UNEXPECTED_EOF,
            )
        quoted = QUOTED_RE.match(args)
        if quoted is None or not quoted.group(2):
            raise self._error(
                f"Expected quoted template path after '{keyword}', got {args!r}",
                token=start,
            )
        return quoted.group(2)

    def _parse_include(self) -> Block:
        """Parse {% include "partial.html" %} (no body, no close tag)."""
        start = self._advance()  # consume 'include'
        path = self._parse_quoted_path(start)
        return Block(
            lineno=start.lineno,
            col_offset=start.col_offset,
            tag=Include(path),
        )

    def _parse_extends_header(self) -> str:
        """Parse {% extends "base.html" %} and return the parent path."""
        start = self._advance()  # consume 'extends'
        return self._parse_quoted_path(start)

    def _parse_misplaced_extends(self) -> Block:
        raise self._error(
            "{% extends %} must be the first tag in the template",
            code=ErrorCode.MISPLACED_EXTENDS,
        )
