"""Template sources for the Environment.

A loader maps the logical path used by ``get_template``, ``{% include %}``
and ``{% extends %}`` to ``(source, filename)``. ``filename`` only feeds
error messages; None means the template has no location worth showing.
An unknown path raises TemplateNotFoundError, which the renderer turns
into inline include text and ``Environment.render`` into error output.

Logical paths are slash separated and relative. ``..`` segments are
refused by every built-in loader, so an include path can never reach
outside the loader's root:

    >>> FileSystemLoader("templates").get_source("../secrets.txt")
    TemplateNotFoundError: Template '../secrets.txt' not found: path leaves the template root

Anything with a matching ``get_source`` satisfies the Loader protocol.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from difflib import get_close_matches
from pathlib import Path
from typing import Protocol

from blockwork.environment.exceptions import TemplateNotFoundError

logger = logging.getLogger(__name__)

# Names listed when a DictLoader lookup has no close match
MAX_LISTED_NAMES = 10


class Loader(Protocol):
    """Anything that can turn a logical template path into source text."""

    def get_source(self, name: str) -> tuple[str, str | None]: ...


def split_template_path(name: str) -> list[str]:
    """Split a logical path into segments, refusing parent references.

    Empty and ``.`` segments are dropped, so ``a//b`` and ``./a/b`` name
    the same template as ``a/b``.

    Raises:
        TemplateNotFoundError: The path is empty or contains ``..``
    """
    segments = [part for part in name.split("/") if part not in ("", ".")]
    if ".." in segments:
        raise TemplateNotFoundError(
            f"Template '{name}' not found: path leaves the template root"
        )
    if not segments:
        raise TemplateNotFoundError(f"Template '{name}' not found: empty path")
    return segments


class FileSystemLoader:
    """Read templates from one or more directories, first hit wins.

    Example:
            >>> loader = FileSystemLoader(["site/", "shared/"])
            >>> loader.get_source("pages/about.html")[1]
            'site/pages/about.html'

    """

    __slots__ = ("encoding", "roots")

    def __init__(self, roots: str | Path | Sequence[str | Path], encoding: str = "utf-8"):
        if isinstance(roots, (str, Path)):
            roots = [roots]
        self.roots = tuple(Path(root) for root in roots)
        self.encoding = encoding

    def get_source(self, name: str) -> tuple[str, str]:
        segments = split_template_path(name)
        for root in self.roots:
            candidate = root.joinpath(*segments)
            if not candidate.is_file():
                continue
            try:
                source = candidate.read_text(self.encoding)
            except (OSError, UnicodeDecodeError) as exc:
                raise TemplateNotFoundError(
                    f"Template '{name}' could not be read from {candidate}: {exc}"
                ) from exc
            return source, str(candidate)

        logger.debug("Template '%s' not under any of %d roots", name, len(self.roots))
        raise TemplateNotFoundError(
            f"Template '{name}' not found in: {', '.join(map(str, self.roots))}"
        )


class DictLoader:
    """Serve templates from a name → source mapping.

    The mapping is read on every lookup, so later changes show up once the
    Environment cache is cleared. A miss names the closest known template,
    or lists what is available.
    """

    __slots__ = ("templates",)

    def __init__(self, templates: Mapping[str, str]):
        self.templates = templates

    def get_source(self, name: str) -> tuple[str, None]:
        key = "/".join(split_template_path(name))
        try:
            return self.templates[key], None
        except KeyError:
            raise TemplateNotFoundError(self._missing(name)) from None

    def _missing(self, name: str) -> str:
        known = sorted(self.templates)
        close = get_close_matches(name, known, n=1, cutoff=0.6)
        if close:
            return f"Template '{name}' not found. Did you mean '{close[0]}'?"
        if not known:
            return f"Template '{name}' not found"
        listed = ", ".join(known[:MAX_LISTED_NAMES])
        if len(known) > MAX_LISTED_NAMES:
            listed += f" ... ({len(known)} total)"
        return f"Template '{name}' not found. Available: {listed}"


# What a FunctionLoader callable may return
LoadResult = str | tuple[str, str | None] | None


class FunctionLoader:
    """Adapt a ``name -> source`` callable to the Loader protocol.

    The callable returns the source, a ``(source, filename)`` pair, or None
    for an unknown name. Bare sources get ``"<function>"`` as filename.
    """

    __slots__ = ("func",)

    def __init__(self, func: Callable[[str], LoadResult]):
        self.func = func

    def get_source(self, name: str) -> tuple[str, str | None]:
        split_template_path(name)
        result = self.func(name)
        if result is None:
            raise TemplateNotFoundError(f"Template '{name}' not found")
        if isinstance(result, str):
            return result, "<function>"
        source, filename = result
        return source, filename


class ChoiceLoader:
    """Consult several loaders in order (theme over defaults).

    Only TemplateNotFoundError moves on to the next loader; any other error
    propagates from the loader that raised it.
    """

    __slots__ = ("loaders",)

    def __init__(self, loaders: Sequence[Loader]):
        self.loaders = tuple(loaders)

    def get_source(self, name: str) -> tuple[str, str | None]:
        for position, loader in enumerate(self.loaders):
            try:
                return loader.get_source(name)
            except TemplateNotFoundError as exc:
                logger.debug("Loader %d of %d missed '%s': %s", position + 1, len(self.loaders), name, exc)
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self.loaders)} loaders"
        )
