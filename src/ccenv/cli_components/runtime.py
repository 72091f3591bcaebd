from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import typer

from ..config import ProfileStore
from ..errors import CcenvError
from .display import error
from .state import err_console

logger = logging.getLogger(__name__)


def store_from(ctx: typer.Context) -> ProfileStore:
    """The store the root callback attached to the context (or a default one)."""
    root = ctx.find_root()
    if not isinstance(root.obj, ProfileStore):
        root.obj = ProfileStore()
    return root.obj


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Turn ccenv errors into a red message and exit status 1."""
    try:
        yield
    except CcenvError as exc:
        logger.debug("Command failed", exc_info=True)
        err_console.print(error(str(exc)))
        raise typer.Exit(1)
