"""blockwork: a small block-inheritance template engine.

Literal text, ``{{ variable.paths }}``, named blocks, loops, includes and
multi-level ``{% extends %}`` inheritance with ``{{ parent() }}``.

Quickstart:
    >>> from blockwork import Environment
    >>> env = Environment()
    >>> env.from_string("Hello, {{ name }}!").render(name="World")
    'Hello, World!'

Inheritance:
    >>> from blockwork import DictLoader, Environment
    >>> env = Environment(loader=DictLoader({
    ...     "base.html": "<{% block body %}A{% endblock %}>",
    ...     "page.html": "{% extends 'base.html' %}{% block body %}B{{ parent() }}{% endblock %}",
    ... }))
    >>> env.get_template("page.html").render()
    '<BA>'

Architecture:
Template Source → Lexer → Parser → Module | Extends → Resolver → Module → Renderer

Pipeline stages:
1. **Lexer**: Tokenizes template source into DATA / VARIABLE / BLOCK tokens
2. **Parser**: Builds an immutable node tree from tokens
3. **Resolver**: Collapses an extends chain into one Module with override chains
4. **Renderer**: Walks the Module against a scope stack (StringBuilder output)

Thread-Safety:
- Nodes are frozen; parsed and resolved trees can be shared freely
- Rendering uses only local state (scope stack, output buffer, RenderContext)

"""

from blockwork.environment import (
    ChoiceLoader,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    FunctionLoader,
    Loader,
    NotIterableError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
)
from blockwork.inheritance import resolve, resolve_template
from blockwork.parser import parse
from blockwork.renderer import Renderer, render
from blockwork.scope import Scope, ScopeStack
from blockwork.template import LoopContext, Template
from blockwork.values import UNDEFINED, ValueKind, kind_of

__version__ = "0.1.0"

__all__ = [
    "UNDEFINED",
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FunctionLoader",
    "Loader",
    "LoopContext",
    "NotIterableError",
    "Renderer",
    "Scope",
    "ScopeStack",
    "Template",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "ValueKind",
    "__version__",
    "kind_of",
    "parse",
    "render",
    "resolve",
    "resolve_template",
]
