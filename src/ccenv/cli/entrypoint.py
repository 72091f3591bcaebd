from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from .commands.models import model, models
from .commands.profile import create, delete, edit, env, export, import_, list_profiles, show, templates
from .commands.system import current, official, reset, run, serve, use
from .commands.wizard import quick, setup
from ..cli_components.app import app, configure_logging
from ..cli_components.display import print_banner
from ..cli_components.env import load_env_files
from ..cli_components.state import console
from ..config import ProfileStore


# Typer command registration -------------------------------------------------
app.command(name="list", help="List all profiles.")(list_profiles)
app.command(name="ls", hidden=True)(list_profiles)
app.command(help="Show one profile (API key masked).")(show)
app.command(help="Create a profile from a template or a base URL.")(create)
app.command(help='Change profile fields. Use --model "" to clear the model.')(edit)
app.command(help="Edit a profile's extra environment variables in your editor.")(env)
app.command(help="Delete a profile (requires --force).")(delete)
app.command(help='Print the activation script. bash/zsh: eval "$(ccx use NAME)".')(use)
app.command(help='Print the reset script. bash/zsh: eval "$(ccx reset)".')(reset)
app.command(help="Show the active profile and the current backend variables.")(current)
app.command(help="List provider templates.")(templates)
app.command(help="Print a profile as JSON without its API key.")(export)
app.command(name="import", help="Import a profile from JSON.")(import_)
app.command(help="Run claude with a profile applied to its environment.")(run)
app.command(help="Run claude with all ccx variables removed.")(official)
app.command(help="Interactive profile setup wizard.")(setup)
app.command(help="Quick setup from a template.")(quick)
app.command(help="Browse OpenRouter models.")(models)
app.command(help="Show details for one OpenRouter model.")(model)
app.command(help="Serve the local web UI and JSON API.")(serve)


@app.callback(invoke_without_command=True)
def _default_entry(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", envvar="CCX_CONFIG", dir_okay=False, help="Path to the profile store (default: per-user config dir)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
):
    """Build the shared profile store; with no subcommand show the banner and profiles."""
    configure_logging(verbose)
    load_env_files(Path.cwd(), override_existing=False)
    if not isinstance(ctx.obj, ProfileStore):
        ctx.obj = ProfileStore(config)
    if ctx.invoked_subcommand:
        return
    print_banner(console, subtitle="Environment profiles for the Claude CLI")
    list_profiles(ctx)


def main() -> None:
    app()


__all__ = ["main"]
