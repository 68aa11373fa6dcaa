"""Template inheritance resolution.

Collapses an ``{% extends %}`` chain into a single renderable Module:

    page.html    {% extends "layout.html" %}{% block x %}C{{ parent() }}{% endblock %}
    layout.html  {% extends "base.html" %}{% block x %}B{{ parent() }}{% endblock %}
    base.html    <{% block x %}A{% endblock %}>

    resolve("page.html") → Module  <x: C → B → A>  renders "<CBA>"

Algorithm:
1. Load the leaf. A Module is returned unchanged.
2. Walk up the extends chain, merging each level's blocks into an override
   set. A block name already present gets the incoming (less derived)
   block attached at the end of its override chain.
3. At the root Module, every named block whose name has overrides is
   replaced by the chain head, with the root's own block attached as the
   last link. Named blocks nested in any link of a chain take their own
   overrides the same way, except inside a chain of the same name.

Override chains:
Each link's ``parent`` points at the next less derived version, and every
``{{ parent() }}`` marker in a link is bound to that same block. Binding
never rewrites parsed nodes: ``attach`` returns new nodes, so cached parse
results stay pristine and can be resolved again.

Restrictions:
- Overrides must target a block the root declares (directly, or nested in
  a block that ends up rendering); other overrides are dropped.
- Ancestry is linear (single ``extends`` per template); a name repeating
  in the chain is a circular-extends error.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace

from blockwork.environment.exceptions import ErrorCode, TemplateRuntimeError
from blockwork.nodes import Block, Extends, Module, Named, Node, ParentMarker, TemplateNode

logger = logging.getLogger(__name__)

TemplateLoader = Callable[[str], TemplateNode]

DEFAULT_MAX_EXTENDS_DEPTH = 50


def attach(block: Block, ancestor: Block) -> Block:
    """Attach ``ancestor`` as the least derived link of ``block``'s chain.

    Walks the chain to its first empty slot and fills it; the parent
    markers of the link that gains a parent are bound to it.

    Returns:
        A new head block; ``block`` and ``ancestor`` are not modified.
    """
    if block.parent is None:
        parent = ancestor
    else:
        parent = attach(block.parent, ancestor)
    return replace(block, children=bind_markers(block.children, parent), parent=parent)


def bind_markers(children: Sequence[Node], target: Block) -> tuple[Node, ...]:
    """Bind every parent marker owned by a block body to ``target``.

    Descends into loop, include and unrecognized blocks but not into nested
    named blocks, whose markers refer to their own override chain.
    """
    bound: list[Node] = []
    for child in children:
        if isinstance(child, ParentMarker):
            child = replace(child, block=target)
        elif isinstance(child, Block) and not isinstance(child.tag, Named):
            child = replace(child, children=bind_markers(child.children, target))
        bound.append(child)
    return tuple(bound)


def merge_overrides(override_set: dict[str, Block], incoming: Mapping[str, Block]) -> None:
    """Merge one ancestor level's blocks into the override set (in place).

    ``incoming`` always belongs to a level farther from the leaf than
    anything already merged.
    """
    for name, block in incoming.items():
        existing = override_set.get(name)
        if existing is None:
            override_set[name] = block
        else:
            override_set[name] = attach(existing, block)


def apply_overrides(root: Module, overrides: Mapping[str, Block]) -> Module:
    """Swap the root's named blocks for their override chains."""
    applied: set[str] = set()
    children = _apply(root.children, overrides, applied)

    dropped = sorted(set(overrides) - applied)
    if dropped:
        logger.debug(
            "Overrides for blocks not declared in '%s' dropped: %s",
            root.name or "<template>",
            ", ".join(dropped),
        )
    return replace(root, children=children)


def _apply(
    children: Sequence[Node],
    overrides: Mapping[str, Block],
    applied: set[str],
    active: frozenset[str] = frozenset(),
) -> tuple[Node, ...]:
    """Replace overridden named blocks among ``children``, at any depth.

    ``active`` holds the names whose chains enclose these children; a name
    is never applied inside its own chain, which keeps the walk finite.
    """
    result: list[Node] = []
    for child in children:
        if isinstance(child, Block):
            name = child.name
            if name is not None and name in overrides and name not in active:
                applied.add(name)
                child = _apply_chain(attach(overrides[name], child), overrides, applied, active | {name})
            else:
                child = replace(child, children=_apply(child.children, overrides, applied, active))
        result.append(child)
    return tuple(result)


def _apply_chain(
    block: Block,
    overrides: Mapping[str, Block],
    applied: set[str],
    active: frozenset[str],
) -> Block:
    # Every link renders through parent(), so nested blocks of each link
    # (root original included) take overrides; markers follow the new links.
    parent = _apply_chain(block.parent, overrides, applied, active) if block.parent is not None else None
    children = _apply(block.children, overrides, applied, active)
    if parent is not None:
        children = bind_markers(children, parent)
    return replace(block, children=children, parent=parent)


def resolve_template(
    template: TemplateNode,
    load: TemplateLoader,
    *,
    max_depth: int = DEFAULT_MAX_EXTENDS_DEPTH,
) -> Module:
    """Resolve an already parsed template into a renderable Module.

    Args:
        template: Parsed leaf template (Module or Extends)
        load: Callable returning the parsed template for a path; its
            errors (not found, syntax) propagate unchanged
        max_depth: Maximum number of extends levels

    Raises:
        TemplateRuntimeError: CIRCULAR_EXTENDS or EXTENDS_DEPTH
    """
    if isinstance(template, Module):
        return template

    leaf_name = template.name
    override_set: dict[str, Block] = {}
    seen: list[str] = [leaf_name] if leaf_name else []
    current: TemplateNode = template
    depth = 0

    while isinstance(current, Extends):
        merge_overrides(override_set, current.blocks)
        parent_path = current.parent_path

        if parent_path in seen:
            chain = " → ".join([*seen, parent_path])
            raise TemplateRuntimeError(
                f"Circular extends: {chain}",
                template_name=leaf_name,
                suggestion="A template cannot extend itself, directly or through ancestors",
                code=ErrorCode.CIRCULAR_EXTENDS,
            )
        depth += 1
        if depth > max_depth:
            raise TemplateRuntimeError(
                f"Maximum extends depth exceeded ({max_depth}) when extending '{parent_path}'",
                template_name=leaf_name,
                code=ErrorCode.EXTENDS_DEPTH,
            )
        seen.append(parent_path)

        logger.debug("Resolving '%s': loading ancestor '%s'", leaf_name or "<template>", parent_path)
        current = load(parent_path)

    resolved = apply_overrides(current, override_set)
    return replace(resolved, name=leaf_name or resolved.name)


def resolve(name: str, load: TemplateLoader, *, max_depth: int = DEFAULT_MAX_EXTENDS_DEPTH) -> Module:
    """Load ``name`` and resolve its extends chain into one Module."""
    return resolve_template(load(name), load, max_depth=max_depth)
