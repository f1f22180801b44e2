"""Shared utilities for CLI commands"""

from __future__ import annotations

import logging
import os
from typing import NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

DEBUG_ENV = "EXTFMT_DEBUG"

# Rendered text goes to stdout, so diagnostics go to stderr
console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the extfmt CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level
    - Debug (EXTFMT_DEBUG=1): DEBUG level - parse and render details
    """
    debug = bool(os.environ.get(DEBUG_ENV))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("extfmt")
    logger.setLevel(level)
    logger.handlers = [handler]
    logger.propagate = False


def exit_with_error(message: str, exit_code: int = 1) -> NoReturn:
    """Print an error to stderr and exit."""
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=exit_code)
