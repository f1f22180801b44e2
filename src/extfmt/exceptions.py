"""extfmt Exceptions

Typed errors raised while parsing and rendering templates.
"""

from __future__ import annotations

from typing import Sequence


class ExtFmtError(Exception):
    """Base exception for all extfmt errors."""

    pass


class ParseError(ExtFmtError):
    """Raised when template source is malformed.

    `position` is the zero-based code-point offset where parsing stopped.
    """

    def __init__(self, message: str, position: int, source: str = ""):
        self.reason = message
        self.position = position
        self.source = source
        super().__init__(self._format())

    def _format(self) -> str:
        if not self.source:
            return f"{self.reason} (at position {self.position})"

        # Show the offending line with a caret under the failing column
        line_start = self.source.rfind("\n", 0, self.position) + 1
        line_end = self.source.find("\n", self.position)
        if line_end == -1:
            line_end = len(self.source)
        line = self.source[line_start:line_end]
        lineno = self.source.count("\n", 0, line_start) + 1
        column = self.position - line_start
        caret = " " * column + "^"
        return (
            f"{self.reason} (line {lineno}, column {column + 1})\n"
            f"  {line}\n"
            f"  {caret}"
        )


class NestingTooDeepError(ExtFmtError):
    """Raised when groups nest deeper than the configured limit."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Template too deeply nested (limit is {max_depth} groups)")


class RenderError(ExtFmtError):
    """Raised when a parsed template cannot be rendered against its bindings."""

    pass


class MissingBindingError(RenderError):
    """Raised when one or more referenced names have no binding."""

    def __init__(self, names: Sequence[str]):
        self.names = list(names)
        joined = ", ".join(repr(n) for n in self.names)
        super().__init__(f"No binding for {joined}")


class TypeMismatchError(RenderError):
    """Raised when a scalar is used as a sequence or vice versa."""

    def __init__(self, name: str, expected: str, actual: object):
        self.name = name
        self.expected = expected
        self.actual = type(actual).__name__
        super().__init__(
            f"Variable '{name}' must be a {expected}, got {self.actual}"
        )


class LaneLengthMismatchError(RenderError):
    """Raised under the strict length policy when zipped lanes differ in length."""

    def __init__(self, lengths: dict[str, int]):
        self.lengths = dict(lengths)
        detail = ", ".join(f"{name}={size}" for name, size in self.lengths.items())
        super().__init__(f"Zipped variables have different lengths: {detail}")


class BindingsLoadError(ExtFmtError):
    """Raised when a bindings file cannot be read or decoded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Could not load bindings from {path}: {reason}")
