"""Recursive-descent parser turning template text into a node list.

The parser works on text that has already been escape-decoded (see
`extfmt.preprocess`). Its own backslash handling only protects the next
character from being read as syntax.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from extfmt.ast.node import Group, HiddenVariable, Literal, Node, Variable
from extfmt.config import DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT
from extfmt.exceptions import NestingTooDeepError, ParseError

log = logging.getLogger(__name__)

ESCAPE = "\\"
VARIABLE_SIGIL = "$"
HIDDEN_SIGIL = "@"
GROUP_OPEN = "("
GROUP_CLOSE = ")"
REPEAT = "*"


class _Cursor:
    """Index-advancing view over the source with one character of lookahead."""

    __slots__ = ("source", "pos")

    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self) -> Optional[str]:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return None

    def advance(self) -> Optional[str]:
        ch = self.peek()
        if ch is not None:
            self.pos += 1
        return ch

    def error(self, message: str, position: Optional[int] = None) -> ParseError:
        return ParseError(
            message,
            self.pos if position is None else position,
            self.source,
        )


class Parser:
    """Parses template source into a list of nodes.

    Args:
        max_depth: Maximum number of nested groups before
            `NestingTooDeepError` is raised. At most `MAX_DEPTH_LIMIT`.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        if not 1 <= max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}")
        self.max_depth = max_depth

    def parse(self, source: str) -> List[Node]:
        """Parse `source` and return its top-level nodes.

        Raises:
            ParseError: If the source is malformed.
            NestingTooDeepError: If groups nest deeper than `max_depth`.
        """
        if not isinstance(source, str):
            raise TypeError("`source` must be a string")

        cursor = _Cursor(source)
        nodes = self._parse_sequence(cursor, depth=0)
        log.debug(f"Parsed {len(nodes)} top-level nodes from {len(source)} chars")
        return nodes

    def _parse_sequence(
        self, cursor: _Cursor, depth: int, opened_at: int = 0
    ) -> List[Node]:
        """Parse nodes until end of input, or until the closing paren of a group.

        At depth 0 the whole input is consumed. Inside a group the closing
        `)` is consumed and the caller parses the separator.
        """
        nodes: List[Node] = []
        literal: List[str] = []
        parens = 0

        def flush() -> None:
            if literal:
                nodes.append(Literal("".join(literal)))
                literal.clear()

        while not cursor.at_end():
            ch = cursor.advance()

            if ch == ESCAPE:
                escaped = cursor.advance()
                if escaped is None:
                    raise cursor.error(
                        "Dangling escape at end of input", cursor.pos - 1
                    )
                literal.append(escaped)
            elif ch == VARIABLE_SIGIL:
                flush()
                nodes.append(self._parse_binding(cursor, depth))
            elif ch == HIDDEN_SIGIL:
                flush()
                name, alias = self._parse_reference(cursor)
                nodes.append(HiddenVariable(name, alias))
            elif depth > 0 and ch == GROUP_OPEN:
                parens += 1
                literal.append(ch)
            elif depth > 0 and ch == GROUP_CLOSE:
                if parens == 0:
                    flush()
                    return nodes
                parens -= 1
                literal.append(ch)
            else:
                literal.append(ch)

        if depth > 0:
            raise cursor.error("Unterminated group", opened_at)

        flush()
        return nodes

    def _parse_binding(self, cursor: _Cursor, depth: int) -> Node:
        """Parse what follows `$`: a group or a variable reference."""
        if cursor.peek() == GROUP_OPEN:
            return self._parse_group(cursor, depth)
        name, alias = self._parse_reference(cursor)
        return Variable(name, alias)

    def _parse_group(self, cursor: _Cursor, depth: int) -> Group:
        # Errors point at the `$` that opened the group
        start = cursor.pos - 1
        cursor.advance()
        if depth + 1 > self.max_depth:
            raise NestingTooDeepError(self.max_depth)

        children = self._parse_sequence(cursor, depth + 1, opened_at=start)

        separator = self._parse_separator(cursor)
        return Group(children=tuple(children), separator=separator)

    def _parse_separator(self, cursor: _Cursor) -> Optional[str]:
        """Parse `*`, `c*` or `(text)*` directly after a group's `)`."""
        ch = cursor.advance()
        if ch is None:
            raise cursor.error("Expected separator or '*' after group")
        if ch == REPEAT:
            return None

        if ch == GROUP_OPEN:
            start = cursor.pos - 1
            chars: List[str] = []
            while True:
                nxt = cursor.advance()
                if nxt is None:
                    raise cursor.error("Unterminated separator", start)
                if nxt == GROUP_CLOSE:
                    break
                chars.append(nxt)
            separator = "".join(chars)
        else:
            separator = ch

        if cursor.peek() != REPEAT:
            raise cursor.error("Expected '*' after group separator")
        cursor.advance()
        return separator

    def _parse_reference(self, cursor: _Cursor) -> Tuple[str, Optional[str]]:
        """Parse `ident`, `{ident}` or `{ident:alias}`."""
        if cursor.peek() != "{":
            return self._parse_ident(cursor), None

        cursor.advance()
        name = self._parse_ident(cursor)
        ch = cursor.advance()
        if ch == "}":
            return name, None
        if ch is None:
            raise cursor.error("Expected ':' or '}' in binding")
        if ch != ":":
            raise cursor.error("Expected ':' or '}' in binding", cursor.pos - 1)

        alias = self._parse_ident(cursor)
        if cursor.peek() != "}":
            raise cursor.error("Expected '}' to close binding")
        cursor.advance()
        return name, alias

    def _parse_ident(self, cursor: _Cursor) -> str:
        start = cursor.pos
        first = cursor.peek()
        if first is None or not (first.isalpha() or first == "_"):
            raise cursor.error("Expected identifier", start)

        cursor.advance()
        while True:
            ch = cursor.peek()
            if ch is None or not (ch.isalnum() or ch == "_"):
                break
            cursor.advance()
        return cursor.source[start : cursor.pos]


def parse(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Node]:
    """Parse `source` with a default `Parser`."""
    return Parser(max_depth=max_depth).parse(source)
