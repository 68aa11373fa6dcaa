"""Recursive-descent parser for blockwork templates.

Turns a token stream into a Module or an Extends node:

    "{% extends 'base.html' %}{% block body %}Hi{% endblock %}"
    → Extends(parent_path='base.html', blocks={'body': Block(...)})

    "Hi {{ name }}"
    → Module(children=(Text('Hi '), Var('name')))

Grammar, by priority at each content position:
1. ``{% extends "p" %}``: only as the first non-whitespace token
2. ``{{ parent() }}`` / ``{% parent() %}``: ParentMarker
3. ``{{ path }}``: Var
4. ``{% keyword ... %}``: dispatched via the keyword table
5. anything else: Text

Every failure is a TemplateSyntaxError; no partial tree is returned.

"""

from __future__ import annotations

from blockwork._types import Token, TokenType
from blockwork.environment.exceptions import ErrorCode
from blockwork.nodes import Block, Extends, Module, Node, ParentMarker, TemplateNode, Text, Var
from blockwork.parser.statements import PARENT_CALL, StatementParsingMixin


class Parser(StatementParsingMixin):
    """Parse one template's tokens into a tree.

    A Parser instance is single-use: construct it per template.

    Example:
            >>> from blockwork.lexer import tokenize
            >>> Parser(tokenize("a{{ b }}")).parse()
            Module(lineno=1, col_offset=0, children=(Text(...), Var(...)), name=None)

    """

    __slots__ = (
        "_block_names",
        "_block_stack",
        "_filename",
        "_name",
        "_pos",
        "_source",
        "_tokens",
    )

    def __init__(
        self,
        tokens: list[Token],
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
    ):
        self._tokens = tokens
        self._name = name
        self._filename = filename
        self._source = source
        self._pos = 0
        self._block_stack: list[tuple[str, Token]] = []
        self._block_names: set[str] = set()

    def parse(self) -> TemplateNode:
        """Parse the token stream into a Module or Extends node."""
        first = self._first_significant()
        if first is not None and first.type == TokenType.BLOCK and first.keyword == "extends":
            return self._parse_extends_template(first)

        body = self._parse_body()
        return Module(lineno=1, col_offset=0, children=tuple(body), name=self._name)

    def _first_significant(self) -> Token | None:
        """First token that is not whitespace-only text."""
        for token in self._tokens:
            if token.type == TokenType.DATA and not token.value.strip():
                continue
            if token.type == TokenType.EOF:
                return None
            return token
        return None

    def _parse_extends_template(self, first: Token) -> Extends:
        while self._current is not first:
            self._advance()  # leading whitespace
        parent_path = self._parse_extends_header()
        body = self._parse_body()

        # Only top-level named blocks are inheritable; other content is dropped
        blocks: dict[str, Block] = {}
        for node in body:
            if isinstance(node, Block) and node.name is not None:
                blocks[node.name] = node

        return Extends(
            lineno=first.lineno,
            col_offset=first.col_offset,
            parent_path=parent_path,
            blocks=blocks,
            name=self._name,
        )

    def _parse_body(self) -> list[Node]:
        """Parse content until end of input or an end tag.

        At top level, an end tag has nothing to close and is an error. Inside
        a block, the end tag is left for the block parser to consume.
        """
        nodes: list[Node] = []
        while not self._at_eof():
            token = self._current
            if token.type == TokenType.DATA:
                self._advance()
                nodes.append(Text(lineno=token.lineno, col_offset=token.col_offset, value=token.value))
            elif token.type == TokenType.VARIABLE:
                nodes.append(self._parse_variable())
            elif self._is_end_tag():
                if not self._block_stack:
                    raise self._error(
                        f"Unexpected {{% {token.keyword} %}} with no open block",
                        code=ErrorCode.UNEXPECTED_TAG,
                    )
                return nodes
            else:
                nodes.append(self._parse_statement())
        return nodes

    def _parse_variable(self) -> Node:
        token = self._advance()
        path = token.value.strip()
        if path == PARENT_CALL:
            return ParentMarker(lineno=token.lineno, col_offset=token.col_offset)
        return Var(lineno=token.lineno, col_offset=token.col_offset, path=path)
