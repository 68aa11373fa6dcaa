"""Template structure nodes: blocks, parent markers and template roots."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from blockwork.nodes.base import Node

# ---------------------------------------------------------------------------
# Block tags
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Named:
    """{% block name %}: the only kind of block that can be overridden."""

    name: str


@dataclass(frozen=True, slots=True)
class Loop:
    """{% for item_name in collection_path %}"""

    item_name: str
    collection_path: str


@dataclass(frozen=True, slots=True)
class Include:
    """{% include "path" %}"""

    path: str


@dataclass(frozen=True, slots=True)
class Unrecognized:
    """Any other {% keyword ... %}: parsed, kept childless, renders nothing."""

    keyword: str = ""


BlockTag = Named | Loop | Include | Unrecognized


# ---------------------------------------------------------------------------
# Content nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Block(Node):
    """A named, looped, included or unrecognized sub-tree.

    ``parent`` is the override chain: when set, it is the next less derived
    version of this same named block. It is only ever set by inheritance
    resolution.
    """

    tag: BlockTag
    children: Sequence[Node] = ()
    parent: Block | None = None

    @property
    def name(self) -> str | None:
        """Block name for Named blocks, None otherwise."""
        return self.tag.name if isinstance(self.tag, Named) else None


@dataclass(frozen=True, slots=True)
class ParentMarker(Node):
    """{{ parent() }}: renders the overridden block's previous version.

    ``block`` is None until inheritance resolution binds an ancestor; an
    unbound marker renders the missing-parent sentinel.
    """

    block: Block | None = None


# ---------------------------------------------------------------------------
# Template roots
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Module(Node):
    """A template with no inheritance dependency: the unit that renders."""

    children: Sequence[Node]
    name: str | None = None


@dataclass(frozen=True, slots=True)
class Extends(Node):
    """A template declaring {% extends "parent_path" %}.

    Only its top-level named blocks survive parsing; any other top-level
    content of an extends file is discarded.
    """

    parent_path: str
    blocks: Mapping[str, Block]
    name: str | None = None


TemplateNode = Module | Extends
