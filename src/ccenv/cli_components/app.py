from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from .constants import APP_HELP
from .state import err_console


for _name in ("httpx", "httpcore", "werkzeug", "urllib3"):
    _log = logging.getLogger(_name)
    _log.setLevel(logging.WARNING)


def configure_logging(verbose: bool = False) -> None:
    """Route package logs to stderr through rich; DEBUG with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


app = typer.Typer(
    add_completion=False,
    help=APP_HELP.strip(),
    no_args_is_help=False,
)
