"""Renderer - evaluates a parsed template against an environment."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from extfmt.ast.node import (
    Group,
    HiddenVariable,
    Literal,
    Node,
    Variable,
    bound_name,
)
from extfmt.compiler.lanes import Lane, plan_lanes
from extfmt.compiler.scope import Scope, is_sequence
from extfmt.config import RenderOptions
from extfmt.exceptions import (
    LaneLengthMismatchError,
    NestingTooDeepError,
    RenderError,
    TypeMismatchError,
)

log = logging.getLogger(__name__)


class Renderer:
    """Renders node lists to text.

    A Renderer holds only its options, so one instance can be shared between
    threads. All per-call state lives in the `Scope` built for each call.
    """

    def __init__(self, options: Optional[RenderOptions] = None):
        self.options = options or RenderOptions()

    def render(
        self,
        nodes: Sequence[Node],
        env: Mapping[str, Any],
        aliases: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Render `nodes` with names resolved from `env`.

        Args:
            nodes: Parsed template.
            env: Name -> scalar or sequence bindings. Never modified.
            aliases: Optional initial name -> key mapping applied before
                falling back to `env`.

        Returns:
            The rendered text.

        Raises:
            MissingBindingError: A referenced name has no binding.
            TypeMismatchError: A scalar was iterated or a sequence emitted.
            LaneLengthMismatchError: Lanes differ in length under the
                strict length policy.
            NestingTooDeepError: Groups nest deeper than `max_depth`.
        """
        scope = Scope.root(env, aliases)
        return "".join(self._render_nodes(nodes, scope, depth=0))

    def _render_nodes(
        self, nodes: Sequence[Node], scope: Scope, depth: int
    ) -> List[str]:
        out: List[str] = []
        for node in nodes:
            if isinstance(node, Literal):
                out.append(node.text)
            elif isinstance(node, Variable):
                value = scope.resolve(node.name)
                if is_sequence(value):
                    raise TypeMismatchError(node.name, "scalar", value)
                out.append(str(value))
                alias = bound_name(node)
                if alias is not None:
                    scope.bind(alias, value)
            elif isinstance(node, HiddenVariable):
                value = scope.resolve(node.name)
                alias = bound_name(node)
                if alias is not None:
                    scope.bind(alias, value)
            elif isinstance(node, Group):
                out.extend(self._render_group(node, scope, depth + 1))
            else:
                raise TypeError(f"Unknown node type: {type(node).__name__}")
        return out

    def _render_group(self, group: Group, scope: Scope, depth: int) -> List[str]:
        if depth > self.options.max_depth:
            raise NestingTooDeepError(self.options.max_depth)

        lanes = plan_lanes(group.children, depth)
        if not lanes:
            raise RenderError(
                "Repetition group contains no variables to iterate over"
            )

        sequences = [self._resolve_lane(scope, lane) for lane in lanes]
        count = self._iteration_count(lanes, sequences)

        # One layer holds the lane keys for every iteration; each iteration
        # gets its own child layer for sibling bindings.
        inner = scope.child()
        for lane in lanes:
            inner.alias(lane.name, lane.key)
            if lane.explicit:
                inner.alias(lane.key, lane.key)

        out: List[str] = []
        for i in range(count):
            for lane, seq in zip(lanes, sequences):
                inner.set(lane.key, seq[i])
            out.extend(self._render_nodes(group.children, inner.child(), depth))
            if group.separator is not None and i < count - 1:
                out.append(group.separator)
        return out

    def _resolve_lane(self, scope: Scope, lane: Lane) -> Sequence[Any]:
        value = scope.resolve(lane.name)
        if not is_sequence(value):
            raise TypeMismatchError(lane.name, "sequence", value)
        return value

    def _iteration_count(
        self, lanes: List[Lane], sequences: List[Sequence[Any]]
    ) -> int:
        """Length of the shortest lane, checked against the length policy."""
        lengths: Dict[str, int] = {
            lane.name: len(seq) for lane, seq in zip(lanes, sequences)
        }
        count = min(lengths.values())

        if count != max(lengths.values()):
            if self.options.strict:
                raise LaneLengthMismatchError(lengths)
            log.debug(f"Truncating group to {count} iterations: {lengths}")

        return count


def render(
    nodes: Sequence[Node],
    env: Mapping[str, Any],
    aliases: Optional[Mapping[str, str]] = None,
    options: Optional[RenderOptions] = None,
) -> str:
    """Render `nodes` with a one-off `Renderer`."""
    return Renderer(options).render(nodes, env, aliases)
