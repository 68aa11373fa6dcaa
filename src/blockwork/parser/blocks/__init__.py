"""Parser mixins, one per family of control tags."""

from blockwork.parser.blocks.control_flow import ControlFlowBlockParsingMixin
from blockwork.parser.blocks.core import BlockStackMixin, TokenNavigationMixin
from blockwork.parser.blocks.template_structure import TemplateStructureBlockParsingMixin

__all__ = [
    "BlockStackMixin",
    "ControlFlowBlockParsingMixin",
    "TemplateStructureBlockParsingMixin",
    "TokenNavigationMixin",
]
