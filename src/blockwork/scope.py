"""Scope stack for variable lookup during one render.

One ScopeStack exists per render call. The renderer pushes a Scope when it
enters any block and pops it when it leaves, so the stack depth always
matches the block nesting depth.

Lookup of ``item.name``:
1. Split off the first segment (``item``).
2. Walk scopes innermost → outermost. Within a scope, engine-injected
   bindings (loop variables) win over the scope's host overlay. The first
   scope binding ``item`` owns the lookup (inner bindings shadow outer ones).
3. Otherwise fall back to the root context.
4. Resolve the rest of the path (``name``) against the found value.

Missing names and missing intermediate segments yield UNDEFINED; lookup
never raises.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from blockwork.values import (
    UNDEFINED,
    FieldGetter,
    get_field,
    get_segment,
    is_scalar,
    resolve_path,
    split_path,
    to_text,
)


@dataclass
class Scope:
    """One stack frame.

    Attributes:
        injected: Engine-assigned bindings, e.g. the loop item and ``loop``
        overlay: Optional host value whose keys/fields act as bindings
    """

    injected: dict[str, Any] = field(default_factory=dict)
    overlay: Any = None

    def lookup(self, name: str, field_getter: FieldGetter = get_field) -> Any:
        """Binding for ``name`` in this frame, or UNDEFINED."""
        if name in self.injected:
            return self.injected[name]
        if self.overlay is not None:
            return get_segment(self.overlay, name, field_getter)
        return UNDEFINED


class ScopeStack:
    """Lexically scoped name resolution over a read-only root context.

    Example:
            >>> scopes = ScopeStack({"user": {"name": "Ann"}})
            >>> scopes.get("user.name")
            'Ann'
            >>> with scopes.scoped():
            ...     scopes.set("user", {"name": "Bob"})
            ...     scopes.get("user.name")
            'Bob'
            >>> scopes.get("user.name")
            'Ann'

    """

    __slots__ = ("_context", "_field_getter", "_scopes")

    def __init__(self, context: Any = None, field_getter: FieldGetter = get_field):
        self._context = {} if context is None else context
        self._field_getter = field_getter
        self._scopes: list[Scope] = []

    @property
    def context(self) -> Any:
        return self._context

    @property
    def depth(self) -> int:
        return len(self._scopes)

    def push(self, scope: Scope | None = None) -> Scope:
        """Push a frame (a fresh empty one by default) and return it."""
        scope = scope if scope is not None else Scope()
        self._scopes.append(scope)
        return scope

    def pop(self) -> Scope:
        """Pop the innermost frame.

        Raises:
            RuntimeError: If the stack is empty
        """
        if not self._scopes:
            raise RuntimeError("Cannot pop from an empty scope stack")
        return self._scopes.pop()

    @contextmanager
    def scoped(self, scope: Scope | None = None) -> Iterator[Scope]:
        """Push a frame for the duration of a ``with`` block.

        The frame is popped on every exit path, including exceptions.
        """
        frame = self.push(scope)
        try:
            yield frame
        finally:
            self.pop()

    def set(self, name: str, value: Any) -> None:
        """Bind ``name`` in the innermost frame only.

        Raises:
            RuntimeError: If no frame has been pushed
        """
        if not self._scopes:
            raise RuntimeError(f"Cannot set '{name}' outside of a scope")
        self._scopes[-1].injected[name] = value

    def get_value(self, path: str) -> Any:
        """Resolve a dotted path to a value, or UNDEFINED."""
        head, rest = split_path(path)
        for scope in reversed(self._scopes):
            found = scope.lookup(head, self._field_getter)
            if found is not UNDEFINED:
                return resolve_path(found, rest, self._field_getter)
        found = get_segment(self._context, head, self._field_getter)
        if found is UNDEFINED:
            return UNDEFINED
        return resolve_path(found, rest, self._field_getter)

    def get(self, path: str) -> str | None:
        """Resolve a dotted path to text.

        Returns None unless the value is a scalar: lists, maps, nulls and
        missing names have no textual form.
        """
        value = self.get_value(path)
        if is_scalar(value):
            return to_text(value)
        return None

    def __repr__(self) -> str:
        return f"<ScopeStack depth={len(self._scopes)}>"
