"""Keyword dispatch for {% ... %} tags.

Maps each recognised keyword to the name of the parser method handling
it. Keywords outside the table parse as Unrecognized blocks, except end
keywords, which close the innermost open block.
"""

from __future__ import annotations

from blockwork._types import TokenType
from blockwork.nodes import Block, Node, ParentMarker, Unrecognized
from blockwork.parser.blocks import (
    ControlFlowBlockParsingMixin,
    TemplateStructureBlockParsingMixin,
)

_BLOCK_PARSERS: dict[str, str] = {
    "block": "_parse_block_tag",
    "for": "_parse_for",
    "include": "_parse_include",
    "extends": "_parse_misplaced_extends",
}

_END_KEYWORDS: frozenset[str] = frozenset({"endblock", "endfor"})

PARENT_CALL = "parent()"


class StatementParsingMixin(
    TemplateStructureBlockParsingMixin,
    ControlFlowBlockParsingMixin,
):
    """Dispatch a BLOCK token to its parser method."""

    def _parse_statement(self) -> Node:
        token = self._current
        if token.value.strip() == PARENT_CALL:
            self._advance()
            return ParentMarker(lineno=token.lineno, col_offset=token.col_offset)

        method_name = _BLOCK_PARSERS.get(token.keyword)
        if method_name is not None:
            return getattr(self, method_name)()

        # Unknown directive: consume only this tag
        self._advance()
        return Block(
            lineno=token.lineno,
            col_offset=token.col_offset,
            tag=Unrecognized(token.keyword),
        )

    def _is_end_tag(self) -> bool:
        token = self._current
        return token.type == TokenType.BLOCK and token.keyword in _END_KEYWORDS
