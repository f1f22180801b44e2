"""Static checks over a parsed template."""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, List, Mapping, Sequence

from extfmt.ast.node import Group, HiddenVariable, Node, Variable, bound_name
from extfmt.compiler.lanes import plan_lanes
from extfmt.exceptions import MissingBindingError


def free_names(nodes: Sequence[Node]) -> List[str]:
    """Names the template reads from its environment, in first-use order.

    Names bound earlier by an alias, or iterated by an enclosing group, are
    not free.
    """
    found: Dict[str, None] = {}
    _collect(nodes, frozenset(), found)
    return list(found)


def _collect(
    nodes: Sequence[Node], bound: FrozenSet[str], found: Dict[str, None]
) -> None:
    local = set(bound)
    for node in nodes:
        if isinstance(node, (Variable, HiddenVariable)):
            if node.name not in local:
                found.setdefault(node.name)
            alias = bound_name(node)
            if alias is not None:
                local.add(alias)
        elif isinstance(node, Group):
            lanes = plan_lanes(node.children, depth=0)
            inner = set(local)
            for lane in lanes:
                if lane.name not in local:
                    found.setdefault(lane.name)
                inner.add(lane.name)
                if lane.explicit:
                    inner.add(lane.key)
            _collect(node.children, frozenset(inner), found)


def check_bindings(nodes: Sequence[Node], env: Mapping[str, Any]) -> None:
    """Raise MissingBindingError naming every free name absent from `env`."""
    missing = [name for name in free_names(nodes) if name not in env]
    if missing:
        raise MissingBindingError(missing)
