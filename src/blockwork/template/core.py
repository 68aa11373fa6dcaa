"""Template: a resolved tree bound to its Environment, ready to render.

Architecture:
    ```
    Template
    ├── _env: Environment   # renderer, field getter, limits
    ├── _module: Module     # fully resolved tree (no Extends left)
    └── _name               # for error messages
    ```

Thread-Safety:
- Templates are immutable after construction
- ``render()`` creates only local state (scope stack, output buffer)
- Multiple threads can call ``render()`` concurrently; includes load
  through the Environment cache, which is locked

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from blockwork.render_context import render_context
from blockwork.scope import Scope, ScopeStack

if TYPE_CHECKING:
    from blockwork.environment import Environment
    from blockwork.nodes import Module


class Template:
    """Resolved template ready for rendering.

    Attributes:
        name: Template identifier (for error messages)
        module: The resolved tree

    Example:
            >>> t = env.from_string("Hello, {{ name }}!")
            >>> t.render({"name": "World"})
            'Hello, World!'
            >>> t.render(name="World")
            'Hello, World!'

    """

    __slots__ = ("_env", "_module", "_name")

    def __init__(self, env: Environment, module: Module, name: str | None = None):
        self._env = env
        self._module = module
        self._name = name

    @property
    def name(self) -> str | None:
        """Template name."""
        return self._name

    @property
    def module(self) -> Module:
        """Resolved tree."""
        return self._module

    def render(self, context: Any = None, /, **kwargs: Any) -> str:
        """Render template with given context.

        Args:
            context: Root data context (usually a dict); read-only
            **kwargs: Extra variables, visible above the root context

        Returns:
            Rendered template as string

        Raises:
            NotIterableError: A ``{% for %}`` target is not a list
        """
        env = self._env
        scopes = ScopeStack(context, field_getter=env.field_getter)
        if kwargs:
            scopes.push(Scope(overlay=kwargs))
        with render_context(template_name=self._name, max_include_depth=env.max_include_depth):
            return env.renderer.render(self._module, scopes)

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"
