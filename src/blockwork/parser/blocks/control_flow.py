"""Control flow block parsing for the blockwork parser."""

from __future__ import annotations

import re

from blockwork.environment.exceptions import ErrorCode
from blockwork.nodes import Block, Loop
from blockwork.parser.blocks.core import DOTTED_PATH_RE, IDENTIFIER_RE, BlockStackMixin

_FOR_RE = re.compile(r"(\S+)\s+in\s+(\S+)\Z")


class ControlFlowBlockParsingMixin(BlockStackMixin):
    """Mixin for parsing loops.

    Required Host Attributes:
        - All from BlockStackMixin
        - _parse_body: method
    """

    def _parse_for(self) -> Block:
        """Parse {% for item in collection.path %}...{% endfor %}."""
        start = self._advance()  # consume 'for'
        args = start.arguments
        words = args.split()

        # Arguments stop short: {% for %}, {% for x %}, {% for x in %}
        if len(words) < 3 and (len(words) < 2 or words[1] == "in"):
            raise self._error(
                "Expected '<item> in <collection>' after 'for'",
                token=start,
                code=ErrorCode.UNEXPECTED_EOF,
            )

        match = _FOR_RE.match(args)
        if match is None:
            raise self._error(
                f"Invalid loop {args!r}, expected '<item> in <collection>'",
                token=start,
            )
        item_name, collection = match.groups()
        if not IDENTIFIER_RE.match(item_name):
            raise self._error(f"Invalid loop variable name {item_name!r}", token=start)
        if not DOTTED_PATH_RE.match(collection):
            raise self._error(f"Invalid loop collection path {collection!r}", token=start)

        self._push_block("for", start)
        body = self._parse_body()
        self._consume_end_tag("for")

        return Block(
            lineno=start.lineno,
            col_offset=start.col_offset,
            tag=Loop(item_name, collection),
            children=tuple(body),
        )
