from __future__ import annotations

import sys
from typing import List, Optional, Tuple

import typer
from rich import box
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.text import Text

from ... import profiles as ops
from ...cli_components.display import activation_hint, error, header, info, success
from ...cli_components.picker import select
from ...cli_components.runtime import reporting_errors, store_from
from ...cli_components.state import console
from ...config import ProfileStore
from ...errors import CcenvError
from ...openrouter import fetch_models, format_context, search_models
from ...templates import ProviderTemplate, get_template, list_templates

SEARCH_PAGE = 30
_BACK = "__back__"
_BACK_MENU = "__back_menu__"


def _ask(message: str, *, default: Optional[str] = None, secret: bool = False) -> str:
    # Hidden input needs a real terminal; piped stdin gets a plain prompt.
    hidden = secret and sys.stdin.isatty()
    if default is None:
        return Prompt.ask(f"[cyan]?[/cyan] {message}", console=console, password=hidden).strip()
    return Prompt.ask(f"[cyan]?[/cyan] {message}", console=console, password=hidden, default=default).strip()


def _confirm(message: str, *, default: bool) -> bool:
    return Confirm.ask(f"[cyan]?[/cyan] {message}", console=console, default=default)


def _ask_profile_name(store: ProfileStore, default: Optional[str] = None) -> str:
    while True:
        name = _ask("Profile name:", default=default)
        try:
            ops.validate_name(name)
        except CcenvError as exc:
            console.print(error(str(exc)))
            continue
        if store.profile_exists(name):
            console.print(error("Profile already exists"))
            continue
        return name


def _ask_manual_model(default_model: Optional[str]) -> Optional[str]:
    model = _ask("Model ID:", default=default_model or "")
    return model or default_model


def select_model_interactive(default_model: Optional[str] = None) -> Optional[str]:
    """Pick a model: template default, OpenRouter search, or typed by hand."""
    while True:
        method = select(
            "How would you like to select a model?",
            [
                (f"[green]●[/green] Use default ([yellow]{default_model or 'none'}[/yellow])", "default"),
                ("[cyan]◎[/cyan] Search models from OpenRouter", "search"),
                ("[dim]○[/dim] Enter model ID manually", "manual"),
            ],
        )
        if method in (None, "default"):
            return default_model
        if method == "manual":
            return _ask_manual_model(default_model)

        console.print()
        console.print(info("Fetching models from OpenRouter..."))
        models = fetch_models()
        if not models:
            console.print(error("Failed to fetch models. Falling back to manual entry."))
            return _ask_manual_model(default_model)

        while True:
            term = _ask('Search models [dim](e.g. "glm", "minimax", "claude")[/dim]:', default="")
            filtered = search_models(models, term, include_description=False)
            if not filtered:
                console.print(error(f'No models found matching "{term}". Try another search.'))
                console.print()
                continue

            if len(filtered) > SEARCH_PAGE:
                console.print()
                console.print(info(f"Showing first {SEARCH_PAGE} of {len(filtered)} matches."))

            choices: List[Tuple[str, str]] = [
                ("[yellow]←[/yellow] Back to search", _BACK),
                ("[red]←[/red] Back to selection method", _BACK_MENU),
            ]
            for m in filtered[:SEARCH_PAGE]:
                ctx = format_context(m.context_length)
                choices.append((f"{m.id:<38} [dim]{ctx:<8}[/dim] [green]${m.prompt_price:.2f}/1M[/green]", m.id))

            picked = select("Select a model:", choices, default_index=2, page_size=17)
            if picked == _BACK:
                continue
            if picked in (None, _BACK_MENU):
                break
            return picked


def _ask_base_url(template: ProviderTemplate) -> str:
    if template.name == "custom" or not template.base_url:
        while True:
            url = _ask("API Base URL:")
            if url:
                return url
            console.print(error("URL is required"))
    if _confirm(f"Use default URL ([yellow]{template.base_url}[/yellow])?", default=True):
        return template.base_url
    return _ask("Custom API Base URL:", default=template.base_url) or template.base_url


def _ask_model(template: ProviderTemplate) -> Optional[str]:
    if template.is_openrouter:
        return select_model_interactive(template.default_model)
    if template.default_model:
        if _confirm(f"Use default model ([yellow]{template.default_model}[/yellow])?", default=True):
            return template.default_model
        return _ask("Model name:", default=template.default_model)
    return _ask("Model name (optional):", default="") or None


def _ask_api_key(template: ProviderTemplate) -> Optional[str]:
    if template.requires_api_key:
        if template.setup_instructions:
            console.print()
            console.print(info(template.setup_instructions))
            console.print()
        return _ask("API Key:", secret=True) or None
    if _confirm("Add an API key? (optional)", default=False):
        return _ask("API Key:", secret=True) or None
    return None


def _print_created(name: str, title: str) -> None:
    console.print()
    console.print(success(title))
    console.print()
    console.print(activation_hint(name))


def setup(ctx: typer.Context):
    """Interactive wizard that creates a profile step by step."""
    store = store_from(ctx)
    console.print()
    console.print(Panel.fit(
        Text("Claude Env - Profile Setup Wizard", style="bold cyan"),
        border_style="cyan",
        box=box.ROUNDED,
        padding=(0, 5),
    ))
    console.print()

    with reporting_errors():
        name = _ask_profile_name(store)
        templates = list_templates()
        template_name = select(
            "Select a provider:",
            [(f"[cyan]{t.display_name}[/cyan] [dim]- {t.description}[/dim]", t.name) for t in templates],
        )
        if template_name is None:
            console.print(info("Setup cancelled."))
            raise typer.Exit(1)
        template = get_template(template_name)

        base_url = _ask_base_url(template)
        model = _ask_model(template)
        api_key = _ask_api_key(template)
        description = _ask("Description (optional):", default=template.description)
        clear_key = _confirm("Unset ANTHROPIC_API_KEY when using this profile?", default=template.clear_anthropic_key)

        profile = ops.build_profile(
            name,
            base_url=base_url,
            model=model,
            api_key=api_key,
            description=description,
            clear_key=clear_key,
            provider=template.name,
        )
        ops.create_profile(store, profile)

    _print_created(name, "Profile created successfully!")


def quick(
    ctx: typer.Context,
    template_name: str = typer.Argument(..., metavar="TEMPLATE", help="Template to start from."),
):
    """Create a profile from a template with as few questions as possible."""
    store = store_from(ctx)
    template = get_template(template_name)
    if template is None:
        console.print(error(f'Template "{template_name}" not found.'))
        console.print()
        console.print(info("Available templates:"))
        for t in list_templates():
            console.print(Text(f"   {t.name}", style="cyan"))
        raise typer.Exit(1)

    console.print()
    console.print(header(f"Quick Setup: {template.display_name}"))
    if template.setup_instructions:
        console.print(info(template.setup_instructions))
        console.print()

    with reporting_errors():
        name = _ask_profile_name(store, default=template_name)
        base_url = None if template.base_url else _ask_base_url(template)
        model = template.default_model
        if template.is_openrouter:
            model = select_model_interactive(template.default_model)

        api_key = None
        if template.requires_api_key:
            while not api_key:
                api_key = _ask("API Key:", secret=True)
                if not api_key:
                    console.print(error("API key is required for this provider"))

        profile = ops.build_profile(
            name,
            template=template.name,
            base_url=base_url,
            model=model,
            api_key=api_key,
        )
        ops.create_profile(store, profile)

    _print_created(name, "Profile created!")


__all__ = ["setup", "quick", "select_model_interactive"]
