"""RenderContext: per-render state kept out of the user's data context.

Holds the bookkeeping a render needs besides variables: which template is
rendering (for error messages), how deep the include chain is, and the
chain itself for error traces. It lives in a ContextVar so the renderer
and the include machinery can reach it without threading it through
every call, and so concurrent renders in different threads never share it.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field

from blockwork.environment.exceptions import ErrorCode, TemplateRuntimeError

# 50 is deep enough for any real include hierarchy while catching
# include cycles (A → B → A) early.
DEFAULT_MAX_INCLUDE_DEPTH = 50


@dataclass
class RenderContext:
    """Per-render state isolated from user context.

    Attributes:
        template_name: Current template name for error messages
        include_depth: Current include depth
        max_include_depth: Maximum allowed include depth
        template_stack: (template_name, line) pairs of the include chain
    """

    template_name: str | None = None
    include_depth: int = 0
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH
    template_stack: list[tuple[str, int]] = field(default_factory=list)

    def check_include_depth(self, template_name: str) -> None:
        """Check if include depth limit exceeded.

        Raises:
            TemplateRuntimeError: If depth >= max_include_depth
        """
        if self.include_depth >= self.max_include_depth:
            raise TemplateRuntimeError(
                f"Maximum include depth exceeded ({self.max_include_depth}) "
                f"when including '{template_name}'",
                template_name=self.template_name,
                template_stack=self.template_stack,
                suggestion="Check for circular includes: A → B → A",
                code=ErrorCode.INCLUDE_DEPTH,
            )

    def child_context(self, template_name: str, lineno: int = 0) -> RenderContext:
        """Create child context for an include with incremented depth.

        Appends the include site to template_stack for error traces.
        """
        new_stack = self.template_stack.copy()
        if self.template_name:
            new_stack.append((self.template_name, lineno))

        return RenderContext(
            template_name=template_name,
            include_depth=self.include_depth + 1,
            max_include_depth=self.max_include_depth,
            template_stack=new_stack,
        )


# Module-level ContextVar
_render_context: ContextVar[RenderContext | None] = ContextVar(
    "render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Get current render context (None if not in render)."""
    return _render_context.get()


def get_render_context_required() -> RenderContext:
    """Get current render context, raise if not in render.

    Raises:
        RuntimeError: If not in a render context
    """
    ctx = _render_context.get()
    if ctx is None:
        raise RuntimeError("Not in a render context")
    return ctx


@contextmanager
def render_context(
    template_name: str | None = None,
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
) -> Iterator[RenderContext]:
    """Context manager for render-scoped state.

    Creates a new RenderContext and sets it as the current context for
    the duration of the with block. Automatically restores the previous
    context when exiting.

    Example:
        with render_context(template_name="page.html") as ctx:
            html = renderer.render(module, scopes)
    """
    ctx = RenderContext(template_name=template_name, max_include_depth=max_include_depth)
    token = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)


def set_render_context(ctx: RenderContext) -> Token[RenderContext | None]:
    """Set a RenderContext and return the reset token.

    Low-level function for nested include calls that restore context
    manually.
    """
    return _render_context.set(ctx)


def reset_render_context(token: Token[RenderContext | None]) -> None:
    """Reset render context using a token from set_render_context."""
    _render_context.reset(token)
