"""extfmt - template strings with zipped, nested repetition groups"""

from extfmt._version import __version__

# Re-export from api
from extfmt.api import (
    Template,
    compile,
    ext_format,
    ext_format_unindented,
    render,
)

# Re-export from ast
from extfmt.ast import (
    Group,
    HiddenVariable,
    Literal,
    Node,
    Parser,
    Variable,
    dump_ast,
    load_ast,
)

# Re-export from compiler
from extfmt.compiler import Renderer, check_bindings, free_names
from extfmt.config import LengthPolicy, RenderOptions
from extfmt.exceptions import (
    BindingsLoadError,
    ExtFmtError,
    LaneLengthMismatchError,
    MissingBindingError,
    NestingTooDeepError,
    ParseError,
    RenderError,
    TypeMismatchError,
)
from extfmt.preprocess import unescape, unindent

__all__ = [
    "__version__",
    # api
    "Template",
    "compile",
    "ext_format",
    "ext_format_unindented",
    "render",
    # ast
    "Group",
    "HiddenVariable",
    "Literal",
    "Node",
    "Parser",
    "Variable",
    "dump_ast",
    "load_ast",
    # compiler
    "Renderer",
    "check_bindings",
    "free_names",
    # config
    "LengthPolicy",
    "RenderOptions",
    # errors
    "BindingsLoadError",
    "ExtFmtError",
    "LaneLengthMismatchError",
    "MissingBindingError",
    "NestingTooDeepError",
    "ParseError",
    "RenderError",
    "TypeMismatchError",
    # preprocess
    "unescape",
    "unindent",
]
