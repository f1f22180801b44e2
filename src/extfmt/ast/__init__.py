"""Template AST - node types and the parser that produces them."""

from extfmt.ast.node import (
    DISCARD,
    Group,
    HiddenVariable,
    Literal,
    Node,
    Reference,
    Variable,
    bound_name,
    dump_ast,
    group,
    load_ast,
)
from extfmt.ast.parser import Parser, parse

__all__ = [
    "DISCARD",
    "Group",
    "HiddenVariable",
    "Literal",
    "Node",
    "Parser",
    "Reference",
    "Variable",
    "bound_name",
    "dump_ast",
    "group",
    "load_ast",
    "parse",
]
