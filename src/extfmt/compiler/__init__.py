"""extfmt compiler - renders parsed templates against an environment."""

from extfmt.compiler.analysis import check_bindings, free_names
from extfmt.compiler.lanes import Lane, plan_lanes
from extfmt.compiler.renderer import Renderer, render
from extfmt.compiler.scope import Scope, is_sequence

__all__ = [
    "Lane",
    "Renderer",
    "Scope",
    "check_bindings",
    "free_names",
    "is_sequence",
    "plan_lanes",
    "render",
]
