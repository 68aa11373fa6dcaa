"""Output nodes: literal text and variable interpolation."""

from __future__ import annotations

from dataclasses import dataclass

from blockwork.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Raw text between template constructs, rendered verbatim."""

    value: str


@dataclass(frozen=True, slots=True)
class Var(Node):
    """Variable interpolation: {{ user.name }}

    ``path`` is the trimmed tag interior. It is resolved at render time,
    never at parse time.
    """

    path: str
