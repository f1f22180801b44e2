"""Lane planning for repetition groups.

A lane is one variable that a group iterates over. Lanes are taken from the
group's direct children only; references inside nested groups belong to
those groups.
"""

from __future__ import annotations

from typing import Iterable, List, NamedTuple, Set

from extfmt.ast.node import HiddenVariable, Node, Variable, bound_name
from extfmt.exceptions import RenderError

# '#' can never appear in a template identifier
LANE_KEY_SEPARATOR = "#"


class Lane(NamedTuple):
    name: str  # variable name as written in the template
    key: str  # binding key the current element is stored under
    explicit: bool  # True when `key` is a user-given alias


def lane_key(name: str, depth: int) -> str:
    """Internal binding key for an unaliased lane at `depth`."""
    return f"{name}{LANE_KEY_SEPARATOR}{depth}"


def plan_lanes(children: Iterable[Node], depth: int) -> List[Lane]:
    """Return the lanes for a group's direct children, in first-use order.

    - Repeated references to a name share the first reference's lane.
    - A name bound as an alias by an earlier sibling is a reference to that
      alias, not a new lane.
    - `@{name:_}` iterates `name` without binding it to a visible alias.

    Raises:
        RenderError: Two lanes would share one binding key, i.e. a new lane
            reuses an explicit alias or takes the name of an earlier lane.
    """
    lanes: List[Lane] = []
    seen: Set[str] = set()
    introduced: Set[str] = set()
    keys: Set[str] = set()  # explicit lane aliases

    for node in children:
        if not isinstance(node, (Variable, HiddenVariable)):
            continue

        alias = bound_name(node)
        if node.name not in seen and node.name not in introduced:
            seen.add(node.name)
            if alias is not None:
                if alias in keys or (alias != node.name and alias in seen):
                    raise RenderError(
                        f"Alias '{alias}' for '{node.name}' clashes with "
                        "another iterated variable in the same group"
                    )
                keys.add(alias)
                lanes.append(Lane(node.name, alias, True))
            else:
                lanes.append(Lane(node.name, lane_key(node.name, depth), False))

        if alias is not None:
            introduced.add(alias)

    return lanes
