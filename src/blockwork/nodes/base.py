"""Base node class for the blockwork template tree."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all tree nodes.

    All nodes track their source location for error reporting.
    Nodes are immutable: inheritance resolution builds new nodes instead of
    rewriting parsed ones, so a parsed tree can be cached and resolved any
    number of times.

    """

    lineno: int
    col_offset: int
