"""Environment: configuration hub and template cache.

The Environment ties the pieces together:

    loader → parse (cached) → resolve extends chain → Template → render

Configuration is plain constructor keywords:

    >>> env = Environment(
    ...     loader=FileSystemLoader("templates/"),
    ...     max_include_depth=20,
    ... )

Caching:
Parsed template nodes are immutable, so they are cached by name in a
bounded LRU and shared by every resolution and include that needs them.
Resolution itself builds new nodes and never touches the cache entries.
All cache access holds one lock, so an Environment can be shared by
threads rendering concurrently.

"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any

from blockwork.environment.exceptions import TemplateError, TemplateNotFoundError
from blockwork.environment.loaders import Loader
from blockwork.inheritance import DEFAULT_MAX_EXTENDS_DEPTH, resolve, resolve_template
from blockwork.nodes import TemplateNode
from blockwork.parser import parse
from blockwork.render_context import DEFAULT_MAX_INCLUDE_DEPTH
from blockwork.renderer import MISSING_PARENT_TEXT, Renderer
from blockwork.template.core import Template
from blockwork.values import FieldGetter, get_field

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Environment:
    """Central configuration and template management hub.

    Attributes:
        loader: Template source provider (None: only from_string works)
        cache_size: Parsed-template cache capacity; 0 disables caching
        max_include_depth: Include nesting limit
        max_extends_depth: Extends chain limit
        missing_parent_text: Output for ``{{ parent() }}`` with no ancestor
        field_getter: Field lookup for object-like host values

    Example:
            >>> env = Environment(loader=DictLoader({"hi.html": "Hi {{ name }}"}))
            >>> env.get_template("hi.html").render({"name": "Ann"})
            'Hi Ann'

    """

    loader: Loader | None = None
    cache_size: int = 400
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH
    max_extends_depth: int = DEFAULT_MAX_EXTENDS_DEPTH
    missing_parent_text: str = MISSING_PARENT_TEXT
    field_getter: FieldGetter = get_field

    _cache: OrderedDict[str, TemplateNode] = field(
        default_factory=OrderedDict, init=False, repr=False
    )
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _renderer: Renderer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.cache_size < 0:
            raise ValueError(f"cache_size must be >= 0, got {self.cache_size}")
        if self.max_include_depth < 1:
            raise ValueError(f"max_include_depth must be >= 1, got {self.max_include_depth}")
        if self.max_extends_depth < 1:
            raise ValueError(f"max_extends_depth must be >= 1, got {self.max_extends_depth}")
        self._renderer = Renderer(
            self.load,
            missing_parent_text=self.missing_parent_text,
            max_include_depth=self.max_include_depth,
        )

    @property
    def renderer(self) -> Renderer:
        return self._renderer

    def parse(self, source: str, name: str | None = None, filename: str | None = None) -> TemplateNode:
        """Parse source into a Module or Extends node (not cached).

        Raises:
            TemplateSyntaxError: On invalid syntax
        """
        return parse(source, name=name, filename=filename)

    def load(self, name: str) -> TemplateNode:
        """Load and parse a template by name, using the cache.

        Raises:
            TemplateNotFoundError: No loader, or the loader lacks ``name``
            TemplateSyntaxError: The source does not parse
        """
        with self._lock:
            cached = self._cache.get(name)
            if cached is not None:
                self._cache.move_to_end(name)
        if cached is not None:
            logger.debug("Template cache hit: '%s'", name)
            return cached

        if self.loader is None:
            raise TemplateNotFoundError(
                f"Template '{name}' not found: no loader configured"
            )
        source, filename = self.loader.get_source(name)
        logger.debug("Loaded template '%s' from %s", name, filename or "<memory>")
        node = parse(source, name=name, filename=filename)

        if self.cache_size:
            with self._lock:
                self._cache[name] = node
                self._cache.move_to_end(name)
                if len(self._cache) > self.cache_size:
                    self._cache.popitem(last=False)
        return node

    def get_template(self, name: str) -> Template:
        """Load a template and resolve its inheritance chain.

        Raises:
            TemplateNotFoundError: The template or an ancestor is missing
            TemplateSyntaxError: The template or an ancestor does not parse
            TemplateRuntimeError: Circular or too deep extends chain
        """
        module = resolve(name, self.load, max_depth=self.max_extends_depth)
        return Template(self, module, name)

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Build a template from source text.

        ``{% extends %}`` and ``{% include %}`` still go through the loader.
        """
        node = parse(source, name=name)
        module = resolve_template(node, self.load, max_depth=self.max_extends_depth)
        return Template(self, module, name)

    def render(self, name: str, context: Any = None, /, **kwargs: Any) -> str:
        """Load, resolve and render a template; failures become the output.

        Every fatal condition (missing template, syntax error, loop over a
        non-list, ...) is logged and its formatted message is returned in
        place of the rendered text, so a failure is never a silently empty
        page. Use ``get_template(name).render(...)`` to get exceptions
        instead.

        ``name`` and ``context`` are positional-only, so template variables
        of those names can be passed as keywords.
        """
        try:
            return self.get_template(name).render(context, **kwargs)
        except TemplateError as exc:
            logger.error("Rendering '%s' failed: %s", name, exc.format_inline())
            return exc.format_compact()

    def clear_cache(self) -> None:
        """Drop all cached parse results."""
        with self._lock:
            self._cache.clear()

    @property
    def cache_info(self) -> dict[str, int]:
        """Current cache occupancy."""
        return {"size": len(self._cache), "max_size": self.cache_size}
