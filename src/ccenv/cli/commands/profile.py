from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel
from rich.text import Text

from ... import profiles as ops
from ...cli_components.display import (
    activation_hint,
    header,
    hint,
    info,
    key_value,
    profile_list,
    profile_rows,
    success,
    template_list,
)
from ...cli_components.editors import edit_text, env_changes
from ...cli_components.env import env_to_text, parse_env_text
from ...cli_components.runtime import reporting_errors, store_from
from ...cli_components.state import console
from ...cli_components.constants import CLI_NAME
from ...errors import ValidationError
from ...templates import get_template, list_templates


def list_profiles(ctx: typer.Context):
    store = store_from(ctx)
    with reporting_errors():
        profiles = store.get_profiles()
    active = store.get_active_profile()

    if not profiles:
        console.print(header("No Profiles", "Get started by creating your first profile"))
        console.print(info("Create one with:"))
        console.print(hint(f"{CLI_NAME} create <name> --template openrouter"))
        console.print()
        console.print(info("Or run the setup wizard:"))
        console.print(hint(f"{CLI_NAME} setup"))
        console.print()
        return

    console.print(header("Profiles", f"{len(profiles)} configured"))
    console.print()
    console.print(profile_list(profiles.values(), active))


def show(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile name."),
):
    store = store_from(ctx)
    with reporting_errors():
        profile = ops.require_profile(store, name)
    is_active = store.get_active_profile() == name
    console.print(header(f"Profile: {profile.name}", "Currently active" if is_active else None))
    console.print(key_value(profile_rows(profile)))
    console.print()


def create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile name (letters, digits, - and _)."),
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Provider template (see `ccx templates`)."),
    base_url: Optional[str] = typer.Option(None, "--base-url", "-u", help="Anthropic-compatible base URL."),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model id for ANTHROPIC_MODEL."),
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help="API key, exported as ANTHROPIC_AUTH_TOKEN."),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    clear_key: Optional[bool] = typer.Option(
        None, "--clear-key/--keep-key", help="Unset ANTHROPIC_API_KEY when the profile is activated."
    ),
):
    store = store_from(ctx)
    with reporting_errors():
        profile = ops.build_profile(
            name,
            template=template,
            base_url=base_url,
            model=model,
            api_key=api_key,
            description=description,
            clear_key=clear_key,
        )
        ops.create_profile(store, profile)

    tpl = get_template(template) if template else None
    if tpl is not None and tpl.requires_api_key and not api_key:
        console.print()
        console.print(info("This template requires an API key."))
        if tpl.setup_instructions:
            console.print(info(tpl.setup_instructions))
        console.print(hint(f"{CLI_NAME} edit {name} --api-key YOUR_KEY"))

    console.print()
    console.print(success(f'Profile "{name}" created successfully.'))
    console.print()
    console.print(activation_hint(name))


def edit(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile name."),
    base_url: Optional[str] = typer.Option(None, "--base-url", "-u"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help='New model id; pass "" to clear it.'),
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help='New API key; pass "" to remove it.'),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    clear_key: Optional[bool] = typer.Option(None, "--clear-key/--keep-key"),
):
    store = store_from(ctx)
    with reporting_errors():
        ops.edit_profile(
            store,
            name,
            base_url=base_url,
            model=model,
            api_key=api_key,
            description=description,
            clear_key=clear_key,
        )
    console.print(success(f'Profile "{name}" updated successfully.'))


def env(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile name."),
    env_file: Optional[Path] = typer.Option(
        None, "--from-file", "-f", exists=True, dir_okay=False, help="Replace extra env with the contents of a .env file."
    ),
):
    """Edit the extra environment variables a profile exports."""
    store = store_from(ctx)
    with reporting_errors():
        profile = ops.require_profile(store, name)
        original = env_to_text(profile.extra_env, title=f"Extra environment for profile {name}")

        if env_file is not None:
            edited: Optional[str] = env_file.read_text(encoding="utf-8")
        else:
            edited = edit_text(original)

        if edited is None or edited == original:
            console.print(Panel.fit(Text("No changes saved.", style="yellow"), border_style="yellow"))
            return

        values = parse_env_text(edited)
        for key in values:
            if not ops.is_env_name(key):
                raise ValidationError(f'Invalid environment variable name "{key}".')
        ops.edit_profile(store, name, extra_env=values)

    changes = env_changes(profile.extra_env or {}, values)
    summary = Text.from_markup(f"Saved extra env for [bold]{name}[/bold] ({len(values)} variable(s))")
    for label, style in (("added", "green"), ("removed", "red"), ("changed", "yellow")):
        if changes[label]:
            summary.append(f"\n{label}: {', '.join(changes[label])}", style=style)
    console.print(Panel.fit(summary, border_style="green"))


def delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile name."),
    force: bool = typer.Option(False, "--force", "-f", help="Actually delete."),
):
    store = store_from(ctx)
    with reporting_errors():
        if not force:
            ops.require_profile(store, name)
            console.print(info("To confirm deletion, run:"))
            console.print(hint(f"{CLI_NAME} delete {name} --force"))
            return
        ops.remove_profile(store, name)
    console.print(success(f'Profile "{name}" deleted.'))


def templates():
    console.print(header("Provider Templates", "Pre-configured AI providers"))
    console.print()
    console.print(template_list(list_templates()))
    console.print(info("Usage:"))
    console.print(hint(f"{CLI_NAME} create <name> --template <template-name>"))
    console.print()


def export(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile name."),
):
    """Print a profile as JSON, without its API key."""
    store = store_from(ctx)
    with reporting_errors():
        data = ops.export_profile(store, name)
    typer.echo(json.dumps(data, indent=2))


def import_(
    ctx: typer.Context,
    data: Optional[str] = typer.Argument(None, help="Profile JSON (as printed by `ccx export`)."),
    file: Optional[Path] = typer.Option(None, "--file", "-f", exists=True, dir_okay=False, help="Read the JSON from a file."),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Store under this name instead."),
):
    store = store_from(ctx)
    with reporting_errors():
        if file is not None:
            data = file.read_text(encoding="utf-8")
        if not data:
            raise ValidationError("Pass the profile JSON as an argument or with --file.")
        profile = ops.import_profile(store, data, name=name)

    console.print(success(f'Profile "{profile.name}" imported successfully.'))
    if not profile.api_key:
        console.print(info("No API key was imported. Add one with:"))
        console.print(hint(f"{CLI_NAME} edit {profile.name} --api-key YOUR_KEY"))


__all__ = ["list_profiles", "show", "create", "edit", "env", "delete", "templates", "export", "import_"]
