"""Exceptions for the blockwork template system.

Exception Hierarchy:
TemplateError (base)
├── TemplateNotFoundError     # Template not found by loader
├── TemplateSyntaxError       # Parse-time syntax error
└── TemplateRuntimeError      # Render/resolution error with context
    └── NotIterableError      # Loop target is not a list

Error Messages:
All exceptions carry an ErrorCode and, where known, the template name,
line number and a source snippet:

    ```
    Syntax Error: Unclosed block 'content', expected {% endblock %}
      --> page.html:3:0
       |
     3 | {% block content %}
       | ^
    ```

Unresolved variables and unbound parent markers are NOT errors; they
render as empty text and the missing-parent sentinel respectively.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from blockwork.values import UNDEFINED

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for blockwork template errors.

    Format: BW-{CATEGORY}-{NUMBER}
    Categories: LEX (lexer), PAR (parser), RUN (runtime), TPL (template loading)
    """

    # Lexer errors (BW-LEX-xxx)
    UNCLOSED_TAG = "BW-LEX-001"
    UNCLOSED_VARIABLE = "BW-LEX-002"

    # Parser errors (BW-PAR-xxx)
    UNCLOSED_BLOCK = "BW-PAR-001"
    UNEXPECTED_EOF = "BW-PAR-002"
    INVALID_TAG = "BW-PAR-003"
    UNEXPECTED_TAG = "BW-PAR-004"
    MISPLACED_EXTENDS = "BW-PAR-005"
    DUPLICATE_BLOCK = "BW-PAR-006"

    # Runtime errors (BW-RUN-xxx)
    NOT_ITERABLE = "BW-RUN-001"
    INCLUDE_DEPTH = "BW-RUN-002"
    EXTENDS_DEPTH = "BW-RUN-003"
    CIRCULAR_EXTENDS = "BW-RUN-004"
    RUNTIME_ERROR = "BW-RUN-005"

    # Template loading errors (BW-TPL-xxx)
    TEMPLATE_NOT_FOUND = "BW-TPL-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'lexer', 'parser', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "lexer",
            "PAR": "parser",
            "RUN": "runtime",
            "TPL": "template",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source snippets
# ---------------------------------------------------------------------------


def format_template_stack(stack: list[tuple[str, int]] | None) -> str:
    """Format the include chain for error messages.

    Example:
        >>> print(format_template_stack([("base.html", 4), ("nav.html", 2)]))
        Template stack:
          • base.html:4
          • nav.html:2
    """
    if not stack:
        return ""

    lines = ["Template stack:"]
    for template_name, line_num in stack:
        lines.append(f"  • {template_name}:{line_num}")
    return "\n".join(lines)


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template source context around an error line.

    Attributes:
        lines: Tuple of (line_number, line_content) pairs around the error.
        error_line: The 1-based line number where the error occurred.
        column: Optional column offset for caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        """Format snippet in Rust-inspired diagnostic style."""
        parts: list[str] = ["   |"]
        for lineno, content in self.lines:
            marker = ">" if lineno == self.error_line else " "
            parts.append(f"{marker}{lineno:>2} | {content}")
            if lineno == self.error_line and self.column is not None:
                parts.append(f"   | {' ' * self.column}^")
        parts.append("   |")
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    error_line: int,
    *,
    context_lines: int = 2,
    column: int | None = None,
) -> SourceSnippet:
    """Build a SourceSnippet from template source.

    Args:
        source: Full template source text.
        error_line: 1-based line number of the error.
        context_lines: Number of lines to show before/after the error line.
        column: Optional column offset for caret pointer.
    """
    all_lines = source.splitlines()
    start = max(0, error_line - 1 - context_lines)
    end = min(len(all_lines), error_line + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=error_line, column=column)


class TemplateError(Exception):
    """Base exception for all blockwork template errors.

    All template-related exceptions inherit from this class, enabling
    broad exception handling:

        >>> try:
        ...     template.render(context)
        ... except TemplateError as e:
        ...     log.error("Template error: %s", e)

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    @property
    def message(self) -> str:
        return str(self)

    def format_compact(self) -> str:
        """Format error as a structured, human-readable summary.

        Format::

            BW-RUN-001: Cannot iterate over 'items' (str) in page.html:3
        """
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header

    def format_inline(self) -> str:
        """Single-line form used when an error is embedded in rendered output."""
        text = " ".join(self.message.split())
        if self.code:
            return f"{self.code.value}: {text}"
        return text


class TemplateNotFoundError(TemplateError):
    """Template not found by the configured loader.

    Raised when `Environment.get_template(name)` cannot locate the template,
    including any ancestor named by `{% extends %}`.

    Example:
            >>> env.get_template("nonexistent.html")
        TemplateNotFoundError: Template 'nonexistent.html' not found in: templates/

    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND


class TemplateSyntaxError(TemplateError):
    """Parse-time syntax error in template source.

    Raised by the Lexer and Parser when template syntax is invalid. A syntax
    error is terminal for the file: no partial tree is returned.

    When ``source`` and ``lineno`` are provided, the error message includes
    a source snippet with the offending line.  If ``col_offset`` is also
    given, a caret (``^``) points at the exact column.
    """

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        name: str | None = None,
        filename: str | None = None,
        source: str | None = None,
        col_offset: int | None = None,
        code: ErrorCode = ErrorCode.INVALID_TAG,
    ):
        self._message = message
        self.lineno = lineno
        self.name = name
        self.filename = filename
        self.source = source
        self.col_offset = col_offset
        self.code = code
        super().__init__(self._format_message())

    @property
    def message(self) -> str:
        return self._message

    @property
    def location(self) -> str:
        location = self.filename or self.name or "<template>"
        if self.lineno:
            location += f":{self.lineno}"
            if self.col_offset is not None:
                location += f":{self.col_offset}"
        return location

    def _format_message(self) -> str:
        header = f"Syntax Error: {self._message}\n  --> {self.location}"

        # Show source snippet when available
        if self.source and self.lineno:
            lines = self.source.splitlines()
            if 0 < self.lineno <= len(lines):
                error_line = lines[self.lineno - 1]
                snippet = f"\n   |\n{self.lineno:>3} | {error_line}"
                if self.col_offset is not None:
                    snippet += f"\n   | {' ' * self.col_offset}^"
                return header + snippet

        return header

    def format_compact(self) -> str:
        """Format syntax error as structured terminal diagnostic."""
        parts = [f"{self.code.value}: {self._message}", f"  --> {self.location}"]
        if self.source and self.lineno:
            snippet = build_source_snippet(
                self.source, self.lineno, context_lines=1, column=self.col_offset
            )
            parts.append(snippet.format())
        return "\n".join(parts)

    def format_inline(self) -> str:
        return f"{self.code.value}: {self._message} ({self.location})"


class TemplateRuntimeError(TemplateError):
    """Render-time or resolution-time error with debugging context.

    Output Format:
            ```
            Runtime Error: Cannot iterate over 'items' (str)
              Location: page.html:3
              Values:
                items = 'abc' (str)
              Suggestion: Pass a list for 'items'
            ```

    Attributes:
        message: Error description
        values: Dict of variable names → values for context
        template_name: Name of the template
        lineno: Line number in template source
        suggestion: Actionable fix suggestion
        template_stack: (template_name, line) pairs of the include chain
    """

    code: ErrorCode | None = ErrorCode.RUNTIME_ERROR

    def __init__(
        self,
        message: str,
        *,
        values: dict[str, Any] | None = None,
        template_name: str | None = None,
        lineno: int | None = None,
        suggestion: str | None = None,
        source_snippet: SourceSnippet | None = None,
        template_stack: list[tuple[str, int]] | None = None,
        code: ErrorCode | None = None,
    ):
        self._message = message
        self.values = values or {}
        self.template_name = template_name
        self.lineno = lineno
        self.suggestion = suggestion
        self.source_snippet = source_snippet
        self.template_stack = template_stack or []
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    @property
    def message(self) -> str:
        return self._message

    def _location(self) -> str:
        loc = self.template_name or "<template>"
        if self.lineno:
            loc += f":{self.lineno}"
        return loc

    def _format_message(self) -> str:
        parts = [f"Runtime Error: {self._message}"]

        if self.template_name or self.lineno:
            parts.append(f"  Location: {self._location()}")

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))

        # Values with types
        if self.values:
            parts.append("  Values:")
            for name, value in self.values.items():
                type_name = type(value).__name__
                value_repr = repr(value)
                if len(value_repr) > 80:
                    value_repr = value_repr[:77] + "..."
                parts.append(f"    {name} = {value_repr} ({type_name})")

        if self.suggestion:
            parts.append(f"\n  Suggestion: {self.suggestion}")

        return "\n".join(parts)

    def format_compact(self) -> str:
        """Format runtime error as structured terminal diagnostic."""
        code_prefix = f"{self.code.value}: " if self.code else ""
        parts = [f"{code_prefix}{self._message}", f"  Location: {self._location()}"]

        if self.source_snippet:
            parts.append(self.source_snippet.format())

        if self.template_stack:
            parts.append("")
            parts.append(format_template_stack(self.template_stack))

        if self.suggestion:
            parts.append(f"  Hint: {self.suggestion}")

        return "\n".join(parts)

    def format_inline(self) -> str:
        code_prefix = f"{self.code.value}: " if self.code else ""
        return f"{code_prefix}{self._message} ({self._location()})"


class NotIterableError(TemplateRuntimeError):
    """A ``{% for %}`` target did not resolve to a list.

    Fatal for the render: iterating a scalar, a mapping or an undefined
    name is reported instead of silently producing nothing. An undefined
    name and a name bound to None get distinct messages.

    Example:
            >>> {% for x in title %}...{% endfor %}
        NotIterableError: Cannot iterate over 'title' (str)

    """

    code: ErrorCode | None = ErrorCode.NOT_ITERABLE

    def __init__(self, path: str, value: Any, **kwargs: Any):
        self.path = path
        if value is UNDEFINED:
            msg = f"Cannot iterate over '{path}': name is not defined"
            values = None
        elif value is None:
            msg = f"Cannot iterate over '{path}': value is null"
            values = None
        else:
            msg = f"Cannot iterate over '{path}' ({type(value).__name__})"
            values = {path: value}
        super().__init__(
            msg,
            values=values,
            suggestion=f"Pass a list or tuple for '{path}'",
            **kwargs,
        )
