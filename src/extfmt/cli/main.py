"""extfmt CLI Main Entry Point

Usage:
    extfmt render TEMPLATE -b vars.yaml      # Render with bindings from a file
    extfmt render - -D name=Alice            # Read template from stdin
    extfmt parse TEMPLATE                    # Print the AST as JSON
    extfmt vars TEMPLATE                     # List names the template needs
    extfmt --version                         # Show version
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import msgspec
import typer
from pydantic import ValidationError
from rich.table import Table

from extfmt._version import __version__
from extfmt.api import Template
from extfmt.ast.node import dump_ast
from extfmt.cli.bindings import load_bindings, parse_defines
from extfmt.cli.utils import console, exit_with_error, setup_logging
from extfmt.config import MAX_DEPTH_LIMIT, LengthPolicy, RenderOptions
from extfmt.exceptions import BindingsLoadError, ExtFmtError

log = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_USAGE = 2

typer_app = typer.Typer(
    help="Render template strings with zipped, nested repetition groups.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"extfmt {__version__}")
        raise typer.Exit()


@typer_app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """extfmt - template strings with zipped, nested repetition groups."""


def read_template(template: str) -> str:
    """Read template text from a path, or from stdin when `template` is '-'."""
    if template == "-":
        return typer.get_text_stream("stdin").read()

    path = Path(template)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        exit_with_error(
            f"Could not read template {path}: {exc.strerror}", EXIT_USAGE
        )


def _load_template(
    template: str, unindent: bool, options: Optional[RenderOptions] = None
) -> Template:
    raw = read_template(template)
    try:
        return Template(raw, unindented=unindent, options=options)
    except ExtFmtError as exc:
        exit_with_error(str(exc), EXIT_ERROR)


@typer_app.command("render")
def render_command(
    template: str = typer.Argument(..., help="Template file, or '-' for stdin."),
    bindings: Optional[Path] = typer.Option(
        None, "-b", "--bindings", help="JSON or YAML file with bindings."
    ),
    define: Optional[List[str]] = typer.Option(
        None, "-D", "--define", help="Scalar binding as name=value (repeatable)."
    ),
    unindent: bool = typer.Option(
        False, "--unindent", help="Strip common indentation before parsing."
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Fail when zipped variables differ in length."
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth",
        min=1,
        max=MAX_DEPTH_LIMIT,
        help="Maximum group nesting depth.",
    ),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write result to file instead of stdout."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging."),
) -> None:
    """Render TEMPLATE with the given bindings."""
    setup_logging(verbose)

    try:
        options = RenderOptions.from_env(
            length_policy=LengthPolicy.STRICT if strict else None,
            max_depth=max_depth,
        )
    except ValidationError as exc:
        exit_with_error(f"Invalid render options: {exc}", EXIT_USAGE)

    env: Dict[str, Any] = {}
    try:
        if bindings is not None:
            env.update(load_bindings(bindings))
        env.update(parse_defines(define or []))
    except BindingsLoadError as exc:
        exit_with_error(str(exc), EXIT_USAGE)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="'-D'") from exc

    tmpl = _load_template(template, unindent, options)
    try:
        text = tmpl.render(env)
    except ExtFmtError as exc:
        exit_with_error(str(exc), EXIT_ERROR)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        log.info(f"Wrote {len(text)} chars to {output}")
    else:
        typer.echo(text, nl=False)


@typer_app.command("parse")
def parse_command(
    template: str = typer.Argument(..., help="Template file, or '-' for stdin."),
    unindent: bool = typer.Option(
        False, "--unindent", help="Strip common indentation before parsing."
    ),
) -> None:
    """Print the parsed AST of TEMPLATE as JSON."""
    tmpl = _load_template(template, unindent)
    formatted = msgspec.json.format(dump_ast(tmpl.nodes), indent=2)
    typer.echo(formatted.decode("utf-8"))


@typer_app.command("vars")
def vars_command(
    template: str = typer.Argument(..., help="Template file, or '-' for stdin."),
    unindent: bool = typer.Option(
        False, "--unindent", help="Strip common indentation before parsing."
    ),
) -> None:
    """List the variables TEMPLATE needs bindings for."""
    tmpl = _load_template(template, unindent)
    try:
        names = tmpl.names
    except ExtFmtError as exc:
        exit_with_error(str(exc), EXIT_ERROR)

    if not names:
        console.print("[yellow]No variables found[/yellow]")
        return

    table = Table()
    table.add_column("#", style="dim")
    table.add_column("Name", style="cyan")
    for i, name in enumerate(names, start=1):
        table.add_row(str(i), name)

    console.print(table)


def app() -> None:
    """Entry point for the installed `extfmt` script."""
    typer_app()


if __name__ == "__main__":
    app()
