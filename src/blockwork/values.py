"""Value model: how host data is seen by templates.

Templates never see a dedicated value type. Host values are classified at
the boundary into the kinds a template can act on:

    NULL     None, or the UNDEFINED sentinel (name/path not found)
    SCALAR   str, int, float, bool, Decimal (renderable as text)
    LIST     list, tuple (iterable by {% for %})
    MAP      any Mapping (dotted lookup by key)
    OBJECT   anything else (dotted lookup by field)

Dotted paths (``user.address.city``) resolve one segment at a time and
short-circuit to UNDEFINED as soon as a segment is missing. Resolution
never raises.

Thread-Safety:
All functions are pure; UNDEFINED is an immutable singleton.

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

FieldGetter = Callable[[Any, str], Any]


class _Undefined:
    """Sentinel for a name or path that did not resolve.

    Stringifies as ``""`` and is falsy, so it can flow into output without
    special casing, while ``value is UNDEFINED`` still tells "missing" apart
    from an explicit ``None``.
    """

    __slots__ = ()
    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __str__(self) -> str:
        return ""

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Any = _Undefined()

_SCALAR_TYPES = (str, int, float, bool, Decimal)


class ValueKind(Enum):
    """Classification of a host value."""

    NULL = "null"
    SCALAR = "scalar"
    LIST = "list"
    MAP = "map"
    OBJECT = "object"


def kind_of(value: Any) -> ValueKind:
    """Classify a host value.

    Example:
        >>> kind_of("Ann"), kind_of([1]), kind_of({"a": 1}), kind_of(None)
        (<ValueKind.SCALAR: 'scalar'>, <ValueKind.LIST: 'list'>, <ValueKind.MAP: 'map'>, <ValueKind.NULL: 'null'>)
    """
    if value is None or value is UNDEFINED:
        return ValueKind.NULL
    if isinstance(value, _SCALAR_TYPES):
        return ValueKind.SCALAR
    if isinstance(value, (list, tuple)):
        return ValueKind.LIST
    if isinstance(value, Mapping):
        return ValueKind.MAP
    return ValueKind.OBJECT


def is_scalar(value: Any) -> bool:
    return isinstance(value, _SCALAR_TYPES)


def is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def to_text(value: Any) -> str:
    """Textual form of a scalar.

    Booleans render as ``true``/``false``; everything else uses ``str()``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def get_field(obj: Any, name: str) -> Any:
    """Default field getter for object-like host values.

    Only public attributes are exposed: names starting with ``_`` never
    resolve, so templates cannot reach dunder or private state.
    """
    if not name or name.startswith("_"):
        return UNDEFINED
    return getattr(obj, name, UNDEFINED)


def get_segment(value: Any, name: str, field_getter: FieldGetter = get_field) -> Any:
    """Resolve one path segment against a value.

    Maps resolve by key, objects by field; scalars, lists and nulls have no
    named members. Returns UNDEFINED when the segment does not resolve.
    """
    kind = kind_of(value)
    if kind is ValueKind.MAP:
        try:
            return value[name]
        except KeyError:
            return UNDEFINED
    if kind is ValueKind.OBJECT:
        return field_getter(value, name)
    return UNDEFINED


def split_path(path: str) -> tuple[str, str | None]:
    """Split a dotted path on its first dot.

    Example:
        >>> split_path("user.address.city")
        ('user', 'address.city')
        >>> split_path("user")
        ('user', None)
    """
    head, sep, rest = path.partition(".")
    return head, (rest if sep else None)


def resolve_path(value: Any, path: str | None, field_getter: FieldGetter = get_field) -> Any:
    """Resolve a dotted path against a value, recursing segment by segment.

    A ``None`` path returns the value itself. A missing intermediate
    segment makes the whole path UNDEFINED.

    Example:
        >>> resolve_path({"user": {"name": "Ann"}}, "user.name")
        'Ann'
        >>> resolve_path({"user": {"name": "Ann"}}, "user.missing.deep")
        UNDEFINED
    """
    if path is None:
        return value
    head, rest = split_path(path)
    found = get_segment(value, head, field_getter)
    if found is UNDEFINED:
        return UNDEFINED
    return resolve_path(found, rest, field_getter)
