"""
Modular CLI package that wires together the Typer app and individual commands.

Each group of commands lives in its own module under ``commands``; the
entrypoint only registers them and builds the profile store they share.
"""

from __future__ import annotations

from .entrypoint import app, main

__all__ = ["app", "main"]
