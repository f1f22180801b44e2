from __future__ import annotations

from typing import Iterable, List, Optional, Tuple, Union

import msgspec

DISCARD = "_"


class NodeBase(msgspec.Struct, frozen=True, tag=True):
    pass


class Literal(NodeBase, tag="literal"):
    """Text emitted verbatim."""

    text: str


class Variable(NodeBase, tag="variable"):
    """`$name` or `${name:alias}` - emits the value, optionally binding `alias`."""

    name: str
    alias: Optional[str] = None


class HiddenVariable(NodeBase, tag="hidden"):
    """`@name` or `@{name:alias}` - takes part in iteration but emits nothing."""

    name: str
    alias: Optional[str] = None


class Group(NodeBase, tag="group"):
    """`$( ... )sep*` - repeats `children` once per zipped element."""

    children: Tuple["Node", ...] = ()
    separator: Optional[str] = None


Node = Union[Literal, Variable, HiddenVariable, Group]
Reference = Union[Variable, HiddenVariable]


def bound_name(ref: Reference) -> Optional[str]:
    """The name `ref` binds for later siblings, or None when it binds nothing."""
    if ref.alias is None or ref.alias == DISCARD:
        return None
    return ref.alias


def group(children: Iterable[Node], separator: Optional[str] = None) -> Group:
    """Build a Group from any iterable of children."""
    return Group(children=tuple(children), separator=separator)


def dump_ast(nodes: Iterable[Node]) -> bytes:
    """Serialise a node list to JSON."""
    return msgspec.json.encode(list(nodes))


def load_ast(data: Union[bytes, str]) -> List[Node]:
    """Decode a node list previously produced by `dump_ast`."""
    return msgspec.json.decode(data, type=List[Node])
