"""Parser for blockwork templates.

Entry point is `parse()`; `Parser` is exposed for callers that already
hold a token list.
"""

from __future__ import annotations

from blockwork.lexer import tokenize
from blockwork.nodes import TemplateNode
from blockwork.parser.core import Parser


def parse(source: str, name: str | None = None, filename: str | None = None) -> TemplateNode:
    """Parse template source into a Module or Extends node.

    Raises:
        TemplateSyntaxError: On any lexing or parsing failure.
    """
    tokens = tokenize(source, name=name, filename=filename)
    return Parser(tokens, name=name, filename=filename, source=source).parse()


__all__ = ["Parser", "parse"]
