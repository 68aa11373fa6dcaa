"""Environment, loaders and exceptions."""

from blockwork.environment.core import Environment
from blockwork.environment.exceptions import (
    ErrorCode,
    NotIterableError,
    SourceSnippet,
    TemplateError,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    build_source_snippet,
)
from blockwork.environment.loaders import (
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    FunctionLoader,
    Loader,
)

__all__ = [
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FunctionLoader",
    "Loader",
    "NotIterableError",
    "SourceSnippet",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplateRuntimeError",
    "TemplateSyntaxError",
    "build_source_snippet",
]
