"""Tree-walking renderer.

Walks a resolved Module and writes output into a list buffer, joined once
at the end (StringBuilder pattern, O(n) in output size).

Node handling:
- Text: verbatim
- Var: ``scopes.get(path)``, empty text when unresolved
- ParentMarker: the bound ancestor block, or the missing-parent sentinel
- Block: a fresh scope is pushed for its duration, then by tag:
    Named         children in order
    Loop          children once per list element, item and ``loop`` bound
                  in the loop's single scope
    Include       the included Module's children, in the current scopes
    Unrecognized  nothing

Failure policy:
- A loop over a non-list raises NotIterableError (fatal).
- An include that cannot be loaded or parsed, or that would exceed the
  include depth limit, renders its error inline and the render goes on.
- An included template using ``{% extends %}`` renders a placeholder.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from blockwork.environment.exceptions import (
    NotIterableError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
)
from blockwork.nodes import Block, Extends, Module, Node, ParentMarker, TemplateNode
from blockwork.render_context import (
    DEFAULT_MAX_INCLUDE_DEPTH,
    get_render_context,
    get_render_context_required,
    render_context,
    reset_render_context,
    set_render_context,
)
from blockwork.scope import ScopeStack
from blockwork.template.loop_context import iterate
from blockwork.values import is_list

logger = logging.getLogger(__name__)

IncludeLoader = Callable[[str], TemplateNode]

MISSING_PARENT_TEXT = "MISSING PARENT BLOCK"

INCLUDE_EXTENDS_PLACEHOLDER = (
    "[include '{path}': template inheritance is not supported in included templates]"
)
INCLUDE_ERROR_TEXT = "[include '{path}': {error}]"


class Renderer:
    """Render resolved template trees against a scope stack.

    A Renderer holds configuration only; all per-render state lives in the
    ScopeStack and the RenderContext, so one Renderer can serve any number
    of renders.

    Example:
            >>> from blockwork.parser import parse
            >>> Renderer().render(parse("Hi {{ name }}"), ScopeStack({"name": "Ann"}))
            'Hi Ann'

    """

    __slots__ = ("_block_dispatch", "_include", "_max_include_depth", "_missing_parent_text", "_node_dispatch")

    def __init__(
        self,
        include: IncludeLoader | None = None,
        *,
        missing_parent_text: str = MISSING_PARENT_TEXT,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
    ):
        self._include = include
        self._missing_parent_text = missing_parent_text
        self._max_include_depth = max_include_depth
        self._node_dispatch: dict[str, Callable[[Any, ScopeStack, list[str]], None]] = {
            "Text": self._render_text,
            "Var": self._render_var,
            "ParentMarker": self._render_parent_marker,
            "Block": self._render_block,
            "Module": self._render_module,
            "Extends": self._render_extends,
        }
        self._block_dispatch: dict[str, Callable[[Block, ScopeStack, list[str]], None]] = {
            "Named": self._render_named,
            "Loop": self._render_loop,
            "Include": self._render_include,
            "Unrecognized": self._render_unrecognized,
        }

    def render(self, node: Node, scopes: ScopeStack) -> str:
        """Render a node (normally a resolved Module) to text.

        Establishes a RenderContext when called outside of one.

        Raises:
            NotIterableError: A loop target is not a list
        """
        buf: list[str] = []
        if get_render_context() is None:
            name = node.name if isinstance(node, Module) else None
            with render_context(template_name=name, max_include_depth=self._max_include_depth):
                self._render_node(node, scopes, buf)
        else:
            self._render_node(node, scopes, buf)
        return "".join(buf)

    def _render_node(self, node: Node, scopes: ScopeStack, buf: list[str]) -> None:
        self._node_dispatch[type(node).__name__](node, scopes, buf)

    def _render_children(self, children: Sequence[Node], scopes: ScopeStack, buf: list[str]) -> None:
        render_node = self._render_node
        for child in children:
            render_node(child, scopes, buf)

    # ─────────────────────────────────────────────────────────────────────
    # Node kinds
    # ─────────────────────────────────────────────────────────────────────

    def _render_text(self, node: Any, scopes: ScopeStack, buf: list[str]) -> None:
        buf.append(node.value)

    def _render_var(self, node: Any, scopes: ScopeStack, buf: list[str]) -> None:
        text = scopes.get(node.path)
        if text is not None:
            buf.append(text)

    def _render_parent_marker(self, node: ParentMarker, scopes: ScopeStack, buf: list[str]) -> None:
        if node.block is None:
            buf.append(self._missing_parent_text)
        else:
            self._render_block(node.block, scopes, buf)

    def _render_module(self, node: Module, scopes: ScopeStack, buf: list[str]) -> None:
        self._render_children(node.children, scopes, buf)

    def _render_extends(self, node: Extends, scopes: ScopeStack, buf: list[str]) -> None:
        raise TemplateRuntimeError(
            f"Template extending '{node.parent_path}' must be resolved before rendering",
            template_name=node.name,
        )

    def _render_block(self, node: Block, scopes: ScopeStack, buf: list[str]) -> None:
        with scopes.scoped():
            self._block_dispatch[type(node.tag).__name__](node, scopes, buf)

    # ─────────────────────────────────────────────────────────────────────
    # Block tags (called with the block's scope already pushed)
    # ─────────────────────────────────────────────────────────────────────

    def _render_named(self, block: Block, scopes: ScopeStack, buf: list[str]) -> None:
        self._render_children(block.children, scopes, buf)

    def _render_unrecognized(self, block: Block, scopes: ScopeStack, buf: list[str]) -> None:
        pass

    def _render_loop(self, block: Block, scopes: ScopeStack, buf: list[str]) -> None:
        tag = block.tag
        collection = scopes.get_value(tag.collection_path)
        if not is_list(collection):
            render_ctx = get_render_context_required()
            raise NotIterableError(
                tag.collection_path,
                collection,
                template_name=render_ctx.template_name,
                lineno=block.lineno,
                template_stack=render_ctx.template_stack,
            )

        # `loop` hides a host value of that name until the block ends
        for item, loop in iterate(collection):
            scopes.set("loop", loop)
            scopes.set(tag.item_name, item)
            self._render_children(block.children, scopes, buf)

    def _render_include(self, block: Block, scopes: ScopeStack, buf: list[str]) -> None:
        path = block.tag.path
        render_ctx = get_render_context_required()
        try:
            render_ctx.check_include_depth(path)
            if self._include is None:
                raise TemplateNotFoundError(f"Cannot include '{path}': no loader configured")
            included = self._include(path)
        except TemplateError as exc:
            logger.warning("Include of '%s' failed: %s", path, exc.format_inline())
            buf.append(INCLUDE_ERROR_TEXT.format(path=path, error=exc.format_inline()))
            return

        if isinstance(included, Extends):
            buf.append(INCLUDE_EXTENDS_PLACEHOLDER.format(path=path))
            return

        token = set_render_context(render_ctx.child_context(path, block.lineno))
        try:
            self._render_children(included.children, scopes, buf)
        finally:
            reset_render_context(token)


def render(
    node: Node,
    scopes: ScopeStack,
    include: IncludeLoader | None = None,
) -> str:
    """Render a resolved tree with a one-off Renderer."""
    return Renderer(include).render(node, scopes)
