"""Tests for extends-chain resolution and override chains."""

from __future__ import annotations

import logging

import pytest

from blockwork.environment.exceptions import (
    ErrorCode,
    TemplateNotFoundError,
    TemplateRuntimeError,
)
from blockwork.inheritance import attach, bind_markers, merge_overrides, resolve, resolve_template
from blockwork.nodes import Block, Loop, Module, Named, ParentMarker, Text
from blockwork.parser import parse
from blockwork.renderer import render
from blockwork.scope import ScopeStack


def make_load(sources: dict[str, str]):
    """Loader over parsed sources, counting calls per name."""
    calls: dict[str, int] = {}

    def load(name):
        calls[name] = calls.get(name, 0) + 1
        if name not in sources:
            raise TemplateNotFoundError(f"Template '{name}' not found")
        return parse(sources[name], name=name)

    load.calls = calls
    return load


def render_resolved(name: str, sources: dict[str, str], context=None) -> str:
    module = resolve(name, make_load(sources))
    return render(module, ScopeStack(context))


def named(name: str, *children, parent=None) -> Block:
    return Block(lineno=1, col_offset=0, tag=Named(name), children=tuple(children), parent=parent)


def marker() -> ParentMarker:
    return ParentMarker(lineno=1, col_offset=0)


def text(value: str) -> Text:
    return Text(lineno=1, col_offset=0, value=value)


TEMPLATES = {
    "R": '{% block "x" %}A{% endblock %}',
    "C": '{% extends "R" %}{% block "x" %}B{{ parent() }}{% endblock %}',
    "G": '{% extends "C" %}{% block "x" %}C2{{ parent() }}{% endblock %}',
}


class TestChains:
    """Override chain rendering through one or more levels."""

    def test_module_returned_unchanged(self):
        """A template without extends resolves to itself."""
        node = parse("x")
        assert resolve_template(node, make_load({})) is node

    def test_single_level(self):
        """Child override with parent() renders BA."""
        assert render_resolved("C", TEMPLATES) == "BA"

    def test_multi_level(self):
        """Grandchild override renders C2BA."""
        assert render_resolved("G", TEMPLATES) == "C2BA"

    def test_override_without_parent_replaces(self):
        """An override without parent() replaces the root block."""
        sources = {
            "base": "<{% block x %}A{% endblock %}>",
            "page": "{% extends 'base' %}{% block x %}B{% endblock %}",
        }
        assert render_resolved("page", sources) == "<B>"

    def test_middle_level_without_parent_cuts_chain(self):
        """A level without parent() hides everything below it."""
        sources = {
            "R": "{% block x %}A{% endblock %}",
            "C": "{% extends 'R' %}{% block x %}B{% endblock %}",
            "G": "{% extends 'C' %}{% block x %}G{{ parent() }}{% endblock %}",
        }
        assert render_resolved("G", sources) == "GB"

    def test_level_skipping_block(self):
        """A middle level that does not override the block is transparent."""
        sources = {
            "R": "{% block x %}A{% endblock %}{% block y %}Y{% endblock %}",
            "C": "{% extends 'R' %}{% block y %}C{{ parent() }}{% endblock %}",
            "G": "{% extends 'C' %}{% block x %}G{{ parent() }}{% endblock %}",
        }
        assert render_resolved("G", sources) == "GACY"

    def test_parent_called_twice(self):
        """Every marker in one link binds to the same ancestor."""
        sources = {
            "R": "{% block x %}A{% endblock %}",
            "C": "{% extends 'R' %}{% block x %}{{ parent() }}-{{ parent() }}{% endblock %}",
        }
        assert render_resolved("C", sources) == "A-A"

    def test_parent_inside_loop(self):
        """Markers inside a loop of the override bind too."""
        sources = {
            "R": "{% block x %}A{% endblock %}",
            "C": "{% extends 'R' %}{% block x %}{% for i in xs %}{{ parent() }}{% endfor %}{% endblock %}",
        }
        assert render_resolved("C", sources, {"xs": [1, 2, 3]}) == "AAA"

    def test_root_parent_marker_is_missing(self):
        """The root's own marker stays unbound."""
        sources = {"R": '{% block "x" %}{{ parent() }}{% endblock %}'}
        assert render_resolved("R", sources) == "MISSING PARENT BLOCK"

    def test_chain_ending_in_root_marker(self):
        """A chain reaching a root-level marker renders the sentinel at the end."""
        sources = {
            "R": "{% block x %}A{{ parent() }}{% endblock %}",
            "C": "{% extends 'R' %}{% block x %}B{{ parent() }}{% endblock %}",
        }
        assert render_resolved("C", sources) == "BAMISSING PARENT BLOCK"

    def test_nested_block_override(self):
        """Named blocks nested in root blocks are overridable."""
        sources = {
            "R": "{% block outer %}[{% block inner %}i{% endblock %}]{% endblock %}",
            "C": "{% extends 'R' %}{% block inner %}I{{ parent() }}{% endblock %}",
        }
        assert render_resolved("C", sources) == "[Ii]"

    def test_block_nested_in_override(self):
        """A block declared inside an override can be overridden further down."""
        sources = {
            "R": "{% block outer %}R{% endblock %}",
            "C": "{% extends 'R' %}{% block outer %}({% block inner %}c{% endblock %}){% endblock %}",
            "G": "{% extends 'C' %}{% block inner %}g{% endblock %}",
        }
        assert render_resolved("G", sources) == "(g)"

    def test_nested_override_inside_parent_call(self):
        """A nested override survives when its enclosing block renders parent()."""
        sources = {
            "R": "{% block outer %}[{% block inner %}i{% endblock %}]{% endblock %}",
            "C": "{% extends 'R' %}{% block outer %}<{{ parent() }}>{% endblock %}"
            "{% block inner %}I{% endblock %}",
        }
        assert render_resolved("C", sources) == "<[I]>"

    def test_nested_override_in_middle_link(self):
        """Blocks nested in a middle link of the chain take overrides too."""
        sources = {
            "R": "{% block outer %}R{% endblock %}",
            "C": "{% extends 'R' %}{% block outer %}({% block inner %}c{% endblock %}{{ parent() }}){% endblock %}",
            "G": "{% extends 'C' %}{% block outer %}<{{ parent() }}>{% endblock %}{% block inner %}g{% endblock %}",
        }
        assert render_resolved("G", sources) == "<(gR)>"

    def test_block_nesting_its_enclosing_name(self):
        """An override nesting a block of the enclosing chain's name resolves."""
        sources = {
            "R": "{% block outer %}[{% block inner %}i{% endblock %}]{% endblock %}",
            "C": "{% extends 'R' %}{% block outer %}<{{ parent() }}>{% endblock %}",
            "G": "{% extends 'C' %}{% block inner %}({% block outer %}o{% endblock %}){% endblock %}",
        }
        assert render_resolved("G", sources) == "<[(o)]>"

    def test_undeclared_override_dropped(self, caplog):
        """Overrides for blocks the root lacks are dropped and logged."""
        sources = {
            "R": "{% block x %}A{% endblock %}",
            "C": "{% extends 'R' %}{% block nope %}N{% endblock %}",
        }
        with caplog.at_level(logging.DEBUG, logger="blockwork.inheritance"):
            assert render_resolved("C", sources) == "A"
        assert "nope" in caplog.text

    def test_extends_content_outside_blocks_discarded(self):
        """Top-level text in an extends file is not rendered."""
        sources = {
            "R": "{% block x %}A{% endblock %}",
            "C": "{% extends 'R' %}IGNORED{% block x %}B{% endblock %}",
        }
        assert render_resolved("C", sources) == "B"

    def test_resolved_name_is_leaf(self):
        """The resolved Module takes the leaf template's name."""
        module = resolve("G", make_load(TEMPLATES))
        assert isinstance(module, Module)
        assert module.name == "G"


class TestErrors:
    """Resolution failures."""

    def test_missing_ancestor(self):
        """A missing ancestor propagates the loader error."""
        sources = {"C": "{% extends 'nowhere' %}"}
        with pytest.raises(TemplateNotFoundError, match="nowhere"):
            resolve("C", make_load(sources))

    def test_circular_extends(self):
        """A template extending itself through ancestors is an error."""
        sources = {
            "a": "{% extends 'b' %}",
            "b": "{% extends 'a' %}",
        }
        with pytest.raises(TemplateRuntimeError) as exc_info:
            resolve("a", make_load(sources))
        assert exc_info.value.code == ErrorCode.CIRCULAR_EXTENDS
        assert "a → b → a" in exc_info.value.message

    def test_self_extends(self):
        """Direct self-extension is circular."""
        with pytest.raises(TemplateRuntimeError) as exc_info:
            resolve("a", make_load({"a": "{% extends 'a' %}"}))
        assert exc_info.value.code == ErrorCode.CIRCULAR_EXTENDS

    def test_extends_depth(self):
        """Chains deeper than max_depth are rejected."""
        sources = {f"t{i}": f"{{% extends 't{i + 1}' %}}" for i in range(10)}
        sources["t10"] = "end"
        with pytest.raises(TemplateRuntimeError) as exc_info:
            resolve("t0", make_load(sources), max_depth=5)
        assert exc_info.value.code == ErrorCode.EXTENDS_DEPTH
        assert render(resolve("t0", make_load(sources)), ScopeStack()) == "end"


class TestImmutability:
    """Resolution never mutates parsed trees."""

    def test_parsed_nodes_untouched(self):
        """Resolving twice from the same parsed nodes gives equal chains."""
        parsed = {name: parse(src, name=name) for name, src in TEMPLATES.items()}

        def load(name):
            return parsed[name]

        first = resolve("G", load)
        second = resolve("G", load)
        assert first == second
        assert parsed["C"].blocks["x"].parent is None
        marker_node = parsed["C"].blocks["x"].children[1]
        assert isinstance(marker_node, ParentMarker)
        assert marker_node.block is None

    def test_render_twice_identical(self):
        """Rendering a resolved Module twice gives identical output."""
        module = resolve("G", make_load(TEMPLATES))
        assert render(module, ScopeStack()) == render(module, ScopeStack()) == "C2BA"


class TestSurgery:
    """attach / bind_markers / merge_overrides building blocks."""

    def test_attach_sets_parent_and_binds(self):
        """The link gaining a parent binds its markers to it."""
        child = named("x", text("B"), marker())
        root = named("x", text("A"))
        head = attach(child, root)
        assert head.parent is root
        assert head.children[1].block is root
        assert child.parent is None

    def test_attach_walks_to_first_empty_slot(self):
        """Attaching to a chain fills the last link's slot."""
        a = named("x", text("A"))
        b = named("x", text("B"), marker())
        c = named("x", text("C"), marker())
        head = attach(attach(c, b), a)
        assert head.children[1].block is head.parent
        assert head.parent.parent is a
        assert head.parent.children[1].block is a

    def test_bind_markers_skips_nested_named(self):
        """Nested named blocks keep their own markers."""
        target = named("x", text("T"))
        loop = Block(lineno=1, col_offset=0, tag=Loop("i", "xs"), children=(marker(),))
        inner = named("y", marker())
        bound = bind_markers((loop, inner), target)
        assert bound[0].children[0].block is target
        assert bound[1].children[0].block is None

    def test_merge_overrides(self):
        """Existing names gain the incoming block as their ancestor."""
        override_set = {"x": named("x", marker())}
        merge_overrides(override_set, {"x": named("x", text("A")), "y": named("y")})
        assert override_set["x"].parent.children[0].value == "A"
        assert override_set["y"].parent is None
