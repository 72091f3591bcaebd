from __future__ import annotations

import os
import shutil
import subprocess
from typing import Dict, List, Optional

import typer
from rich.text import Text

from ... import profiles as ops
from ...cli_components.constants import (
    ACTIVE_PROFILE_VAR,
    AMBIENT_KEY_VAR,
    AUTH_TOKEN_VAR,
    BASE_URL_VAR,
    CLAUDE_BIN_ENVVAR,
    DEFAULT_CLAUDE_BIN,
    MODEL_VAR,
    SECRET_MASK,
)
from ...cli_components.display import error, header, key_value, not_set
from ...cli_components.runtime import reporting_errors, store_from
from ...cli_components.state import console, err_console
from ...shell import ShellType, apply_env_vars, detect_shell, generate_env_vars
from ...static_values import DEFAULT_HOST, DEFAULT_PORT, RESET_VARS


def use(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile to activate."),
    shell: Optional[ShellType] = typer.Option(None, "--shell", "-s", case_sensitive=False, help="Target shell (default: detected)."),
):
    """Print the activation script. Evaluate it in your shell: eval "$(ccx use NAME)"."""
    store = store_from(ctx)
    with reporting_errors():
        script = ops.activate_profile(store, name, shell or detect_shell())
    typer.echo(script)


def reset(
    ctx: typer.Context,
    shell: Optional[ShellType] = typer.Option(None, "--shell", "-s", case_sensitive=False, help="Target shell (default: detected)."),
):
    """Print a script that removes every variable ccx sets."""
    store = store_from(ctx)
    with reporting_errors():
        script = ops.reset_profile(store, shell or detect_shell())
    typer.echo(script)


def current(ctx: typer.Context):
    store = store_from(ctx)
    active = store.get_active_profile()
    shell_active = os.environ.get(ACTIVE_PROFILE_VAR)

    console.print(header("Current Status"))
    console.print(key_value([
        ("Config active", Text(active, style="green") if active else Text("(none)", style="dim")),
        ("Shell active", Text(shell_active, style="green") if shell_active else Text("(none)", style="dim")),
    ]))
    console.print()
    console.print(Text("  Environment Variables", style="bold cyan"))
    console.print()

    def _secret(var: str) -> Text:
        return Text(SECRET_MASK, style="green") if os.environ.get(var) else not_set()

    base_url = os.environ.get(BASE_URL_VAR)
    model = os.environ.get(MODEL_VAR)
    console.print(key_value([
        (BASE_URL_VAR, base_url or not_set()),
        (AUTH_TOKEN_VAR, _secret(AUTH_TOKEN_VAR)),
        (MODEL_VAR, Text(model, style="yellow") if model else not_set()),
        (AMBIENT_KEY_VAR, _secret(AMBIENT_KEY_VAR)),
    ]))
    console.print()


def _claude_command() -> List[str]:
    binary = os.environ.get(CLAUDE_BIN_ENVVAR) or DEFAULT_CLAUDE_BIN
    resolved = shutil.which(binary)
    if not resolved:
        err_console.print(error(f'"{binary}" not found on PATH. Set {CLAUDE_BIN_ENVVAR} to the assistant binary.'))
        raise typer.Exit(127)
    return [resolved]


def _spawn(args: List[str], env: Dict[str, str]) -> None:
    cmd = _claude_command() + list(args)
    try:
        code = subprocess.call(cmd, env=env)
    except KeyboardInterrupt:
        code = 130
    raise typer.Exit(code)


def run(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile to launch with."),
    args: Optional[List[str]] = typer.Argument(None, help="Extra arguments passed to claude."),
):
    """Launch claude with a profile applied, without touching the current shell."""
    store = store_from(ctx)
    with reporting_errors():
        profile = ops.require_profile(store, name)
        child_env = apply_env_vars(os.environ, generate_env_vars(profile))
        child_env[ACTIVE_PROFILE_VAR] = name
        store.set_active_profile(name)

    console.print(header("Launching Claude", f"Profile: {name}"))
    console.print(key_value([
        ("Model", Text(profile.model, style="yellow") if profile.model else "(default)"),
        ("Provider", profile.provider),
    ]))
    console.print()
    _spawn(args or [], child_env)


def official(
    ctx: typer.Context,
    args: Optional[List[str]] = typer.Argument(None, help="Extra arguments passed to claude."),
):
    """Launch claude with every ccx variable removed."""
    store = store_from(ctx)
    child_env = dict(os.environ)
    for var in RESET_VARS:
        child_env.pop(var, None)
    with reporting_errors():
        store.set_active_profile(None)

    console.print(header("Launching Claude", "Default settings"))
    console.print()
    _spawn(args or [], child_env)


def serve(
    ctx: typer.Context,
    host: str = typer.Option(DEFAULT_HOST, "--host", help="Interface to bind."),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", help="Port to listen on."),
    debug: bool = typer.Option(False, "--debug", help="Flask debug mode."),
):
    """Serve the JSON API (and the web UI, when built) on localhost."""
    from ...web.server import create_app, run_server

    app = create_app(store=store_from(ctx))
    console.print(Text.assemble(("\n  ccenv web UI running at ", "bold"), (f"http://{host}:{port}\n", "bold cyan")))
    run_server(app, host=host, port=port, debug=debug)


__all__ = ["use", "reset", "current", "run", "official", "serve"]
