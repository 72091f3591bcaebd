"""Shared runtime state for the ccx CLI."""

from rich.console import Console

console = Console()
# Notices for script-producing commands go here so `eval "$(ccx use x)"` only sees the script.
err_console = Console(stderr=True)
