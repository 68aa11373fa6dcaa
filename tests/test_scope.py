"""Tests for the per-render scope stack."""

from __future__ import annotations

import pytest

from blockwork.scope import Scope, ScopeStack
from blockwork.values import UNDEFINED


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y


class TestPushPop:
    """Frame discipline."""

    def test_push_pop_depth(self):
        """push and pop track depth."""
        scopes = ScopeStack()
        assert scopes.depth == 0
        frame = scopes.push()
        assert isinstance(frame, Scope)
        assert scopes.depth == 1
        assert scopes.pop() is frame
        assert scopes.depth == 0

    def test_pop_empty(self):
        """Popping an empty stack is an error."""
        with pytest.raises(RuntimeError):
            ScopeStack().pop()

    def test_set_without_scope(self):
        """set needs a frame."""
        with pytest.raises(RuntimeError, match="outside of a scope"):
            ScopeStack().set("x", 1)

    def test_scoped_pops_on_error(self):
        """The scoped() frame is popped when the body raises."""
        scopes = ScopeStack()
        with pytest.raises(ValueError), scopes.scoped():
            scopes.set("x", 1)
            raise ValueError("boom")
        assert scopes.depth == 0
        assert scopes.get_value("x") is UNDEFINED

    def test_none_context_is_empty(self):
        """A missing context behaves as an empty map."""
        assert ScopeStack().context == {}


class TestLookup:
    """Name resolution order."""

    def test_root_context(self):
        """Names fall back to the root context."""
        scopes = ScopeStack({"user": {"name": "Ann"}})
        assert scopes.get("user.name") == "Ann"

    def test_innermost_wins(self):
        """Inner bindings shadow outer ones and the root."""
        scopes = ScopeStack({"x": "root"})
        scopes.push()
        scopes.set("x", "outer")
        scopes.push()
        scopes.set("x", "inner")
        assert scopes.get("x") == "inner"
        scopes.pop()
        assert scopes.get("x") == "outer"
        scopes.pop()
        assert scopes.get("x") == "root"

    def test_outer_binding_visible_in_inner_scope(self):
        """An empty inner frame sees outer bindings."""
        scopes = ScopeStack()
        with scopes.scoped():
            scopes.set("item", {"name": "A"})
            with scopes.scoped():
                assert scopes.get("item.name") == "A"

    def test_first_segment_shadows_whole_path(self):
        """The scope binding the head name owns the lookup."""
        scopes = ScopeStack({"user": {"name": "root"}})
        with scopes.scoped():
            scopes.set("user", {"email": "a@b"})
            assert scopes.get("user.name") is None
            assert scopes.get_value("user.name") is UNDEFINED

    def test_injected_wins_over_overlay(self):
        """Within a frame, engine bindings beat the overlay."""
        scopes = ScopeStack()
        scopes.push(Scope(overlay={"x": "overlay", "y": "overlay"}))
        scopes.set("x", "injected")
        assert scopes.get("x") == "injected"
        assert scopes.get("y") == "overlay"

    def test_overlay_object(self):
        """An object overlay binds its public fields."""
        scopes = ScopeStack()
        scopes.push(Scope(overlay=Point(1, 2)))
        assert scopes.get("x") == "1"
        assert scopes.get("y") == "2"

    def test_object_fields_via_field_getter(self):
        """Object fields resolve through the configured getter."""
        scopes = ScopeStack({"p": Point(3, 4)}, field_getter=lambda obj, name: f"[{name}]")
        assert scopes.get("p.x") == "[x]"

    def test_set_only_touches_top_frame(self):
        """set never writes to an outer frame."""
        scopes = ScopeStack()
        outer = scopes.push()
        inner = scopes.push()
        scopes.set("k", 1)
        assert "k" in inner.injected
        assert "k" not in outer.injected


class TestTextForm:
    """get() returns text for scalars only."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("Ann", "Ann"),
            (3, "3"),
            (False, "false"),
            ([1, 2], None),
            ({"a": 1}, None),
            (None, None),
        ],
    )
    def test_get(self, value, expected):
        """Lists, maps and nulls have no text form."""
        assert ScopeStack({"v": value}).get("v") == expected

    def test_missing_is_none(self):
        """Unresolved names never raise."""
        scopes = ScopeStack({"a": 1})
        assert scopes.get("nope") is None
        assert scopes.get("a.b.c") is None

    def test_non_mapping_context(self):
        """A scalar root context resolves nothing."""
        assert ScopeStack("just text").get("x") is None
