"""Lexical scope used while rendering.

A scope has two layered maps:

- `aliases`: template name -> binding key (lane keys pushed by groups)
- `values`: binding key -> value, with the caller's environment at the bottom

Each group pushes a new layer on both maps. Writes only ever touch the top
layer, so the environment and outer scopes are never modified.
"""

from __future__ import annotations

from collections import ChainMap
from collections.abc import Sequence
from typing import Any, Mapping, Optional

from extfmt.exceptions import MissingBindingError

_SCALAR_SEQUENCES = (str, bytes, bytearray)


def is_sequence(value: Any) -> bool:
    """True for values a group can iterate; strings count as scalars."""
    return isinstance(value, Sequence) and not isinstance(value, _SCALAR_SEQUENCES)


class Scope:
    __slots__ = ("aliases", "values")

    def __init__(self, aliases: ChainMap, values: ChainMap):
        self.aliases = aliases
        self.values = values

    @classmethod
    def root(
        cls, env: Mapping[str, Any], aliases: Optional[Mapping[str, str]] = None
    ) -> "Scope":
        return cls(ChainMap(dict(aliases or {})), ChainMap({}, env))

    def child(self) -> "Scope":
        """New scope whose writes are invisible to this one."""
        return Scope(self.aliases.new_child(), self.values.new_child())

    def key_for(self, name: str) -> str:
        return self.aliases.get(name, name)

    def resolve(self, name: str) -> Any:
        key = self.key_for(name)
        try:
            return self.values[key]
        except KeyError:
            raise MissingBindingError([name]) from None

    def bind(self, name: str, value: Any) -> None:
        """Bind `name` to `value` in the top layer, shadowing any lane alias."""
        self.aliases[name] = name
        self.values[name] = value

    def alias(self, name: str, key: str) -> None:
        self.aliases[name] = key

    def set(self, key: str, value: Any) -> None:
        self.values[key] = value
