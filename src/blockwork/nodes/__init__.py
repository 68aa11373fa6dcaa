"""Immutable template tree.

Content nodes: Text, Var, Block, ParentMarker.
Block tags: Named, Loop, Include, Unrecognized.
Template roots: Module (renderable), Extends (needs resolution).
"""

from blockwork.nodes.base import Node
from blockwork.nodes.output import Text, Var
from blockwork.nodes.structure import (
    Block,
    BlockTag,
    Extends,
    Include,
    Loop,
    Module,
    Named,
    ParentMarker,
    TemplateNode,
    Unrecognized,
)

__all__ = [
    "Block",
    "BlockTag",
    "Extends",
    "Include",
    "Loop",
    "Module",
    "Named",
    "Node",
    "ParentMarker",
    "TemplateNode",
    "Text",
    "Unrecognized",
    "Var",
]
