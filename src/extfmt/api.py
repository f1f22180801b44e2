"""High-level entry points.

Typical use:

    >>> from extfmt import ext_format
    >>> ext_format("Numbers: $($numbers),*", numbers=[1, 2, 3])
    'Numbers: 1,2,3'

`compile` and `render` expose the two stages separately for callers that
preprocess source themselves or render one template many times.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from extfmt.ast.node import Node
from extfmt.ast.parser import Parser
from extfmt.compiler.analysis import free_names
from extfmt.compiler.renderer import Renderer
from extfmt.config import RenderOptions
from extfmt.preprocess import unescape, unindent


def compile(template: str, *, max_depth: Optional[int] = None) -> List[Node]:
    """Parse already-decoded template text into an AST.

    The caller is responsible for escape decoding (`unescape`) and, for
    multi-line sources, dedenting (`unindent`).
    """
    if max_depth is None:
        max_depth = RenderOptions().max_depth
    return Parser(max_depth=max_depth).parse(template)


def render(
    ast: List[Node],
    bindings: Mapping[str, Any],
    *,
    options: Optional[RenderOptions] = None,
) -> str:
    """Render a compiled AST. `bindings` must cover every free name."""
    return Renderer(options).render(ast, bindings)


def _merge_bindings(
    bindings: Optional[Mapping[str, Any]], kwargs: Dict[str, Any]
) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(bindings or {})
    merged.update(kwargs)
    return merged


def _prepare(raw: str, unindented: bool) -> str:
    source = unindent(raw) if unindented else raw
    return unescape(source)


class Template:
    """A template preprocessed and parsed once, renderable many times.

    Args:
        raw: Template source with backslash escapes still encoded.
        unindented: Strip common leading indentation before decoding.
        options: Render options; parse depth comes from `max_depth`.
    """

    def __init__(
        self,
        raw: str,
        *,
        unindented: bool = False,
        options: Optional[RenderOptions] = None,
    ):
        self.raw = raw
        self.options = options or RenderOptions()
        self.source = _prepare(raw, unindented)
        self.nodes: tuple[Node, ...] = tuple(
            Parser(max_depth=self.options.max_depth).parse(self.source)
        )
        self._renderer = Renderer(self.options)

    @property
    def names(self) -> List[str]:
        """Free names this template needs bindings for."""
        return free_names(self.nodes)

    def render(
        self, bindings: Optional[Mapping[str, Any]] = None, /, **kwargs: Any
    ) -> str:
        env = _merge_bindings(bindings, kwargs)
        return self._renderer.render(self.nodes, env)

    def __repr__(self) -> str:
        return f"Template({self.raw!r})"


def ext_format(
    raw: str,
    bindings: Optional[Mapping[str, Any]] = None,
    /,
    *,
    options: Optional[RenderOptions] = None,
    **kwargs: Any,
) -> str:
    """Decode, parse and render `raw` in one call.

    Bindings come from `bindings`, keyword arguments, or both; keyword
    arguments win on conflict. `options` is reserved as a keyword, so a
    template variable named `options` must be passed in `bindings`.
    """
    return Template(raw, options=options).render(bindings, **kwargs)


def ext_format_unindented(
    raw: str,
    bindings: Optional[Mapping[str, Any]] = None,
    /,
    *,
    options: Optional[RenderOptions] = None,
    **kwargs: Any,
) -> str:
    """Like `ext_format`, but strips common indentation first.

    Useful for templates written as indented triple-quoted strings.
    """
    return Template(raw, unindented=True, options=options).render(bindings, **kwargs)
