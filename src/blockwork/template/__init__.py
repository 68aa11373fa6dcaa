"""Renderable template objects."""

from blockwork.template.core import Template
from blockwork.template.loop_context import LoopContext

__all__ = ["LoopContext", "Template"]
