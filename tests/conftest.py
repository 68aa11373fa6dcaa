"""Pytest configuration and fixtures for blockwork tests."""

import pytest

from blockwork import DictLoader, Environment


@pytest.fixture
def env():
    """Create a basic Environment (no loader)."""
    return Environment()


@pytest.fixture
def templates():
    """Source of the templates served by ``env_with_loader``."""
    return {
        "base.html": (
            "<html>"
            "<head>{% block head %}{% endblock %}</head>"
            "<body>{% block body %}{% endblock %}</body>"
            "</html>"
        ),
        "child.html": '{% extends "base.html" %}{% block body %}Hello World{% endblock %}',
        "partial.html": "<p>Partial content</p>",
        "greeting.html": "Hi {{ name }}",
        "R": '{% block "x" %}A{% endblock %}',
        "C": '{% extends "R" %}{% block "x" %}B{{ parent() }}{% endblock %}',
        "G": '{% extends "C" %}{% block "x" %}C2{{ parent() }}{% endblock %}',
    }


@pytest.fixture
def env_with_loader(templates):
    """Create an Environment with a DictLoader over ``templates``."""
    return Environment(loader=DictLoader(templates))


def assert_contains(template_result: str, *expected_parts: str) -> None:
    """Assert template result contains all expected parts.

    Args:
        template_result: The actual template rendering result.
        expected_parts: Strings that should all be present in the result.
    """
    for part in expected_parts:
        assert part in template_result, (
            f"Template output missing expected content:\n"
            f"  Missing: {part!r}\n"
            f"  Actual: {template_result!r}"
        )
