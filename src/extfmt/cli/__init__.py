"""extfmt command line interface"""

from extfmt.cli.main import app, typer_app

__all__ = ["app", "typer_app"]
