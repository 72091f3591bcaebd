from __future__ import annotations

import textwrap
from typing import Optional

import typer
from rich.text import Text

from ...cli_components.constants import CLI_NAME
from ...cli_components.display import error, hint, info, key_value, models_table, print_banner, success
from ...cli_components.state import console
from ...openrouter import fetch_models, find_model, format_context, search_models


def models(
    search: Optional[str] = typer.Argument(None, help="Filter by id, name or description."),
    limit: int = typer.Option(30, "--limit", "-l", min=1, help="Maximum rows to show."),
):
    """Browse the models available on OpenRouter."""
    print_banner(text="MODELS", subtitle="OpenRouter Model Browser", font="small")
    console.print(info("Fetching models..."))
    console.print()

    available = fetch_models()
    if not available:
        console.print(error("No models found or failed to fetch."))
        raise typer.Exit(1)

    filtered = search_models(available, search)
    if not filtered:
        console.print(error(f'No models found matching "{search}"'))
        raise typer.Exit(1)

    match_text = f' matching "{search}"' if search else ""
    console.print(success(f"Found {len(filtered)} models{match_text}"))
    if len(filtered) > limit:
        console.print(info(f"Showing first {limit}, use --limit to show more"))
    console.print()
    console.print(models_table(filtered[:limit]))
    console.print()
    console.print(info("Usage:"))
    console.print(hint(f"{CLI_NAME} create <profile> --template openrouter --model <model-id>"))
    console.print()


def model(
    model_id: str = typer.Argument(..., help="OpenRouter model id, e.g. anthropic/claude-sonnet-4."),
):
    """Show pricing and context details for one model."""
    print_banner(text="MODEL", subtitle="Model Details", font="small")
    console.print(info("Fetching model details..."))
    console.print()

    found = find_model(fetch_models(), model_id)
    if found is None:
        console.print(error(f'Model "{model_id}" not found.'))
        raise typer.Exit(1)

    console.print(Text.assemble(("  ❯ ", "cyan"), (found.id, "bold cyan")))
    console.print()
    console.print(key_value([
        ("Name", found.name),
        ("Context", Text(f"{format_context(found.context_length)} tokens", style="yellow")),
        ("Prompt", Text(f"${found.prompt_price:.4f} / 1M tokens", style="green")),
        ("Completion", Text(f"${found.completion_price:.4f} / 1M tokens", style="green")),
    ]))
    if found.description:
        console.print()
        console.print(Text("  Description:", style="dim"))
        for line in textwrap.wrap(found.description, width=70):
            console.print(Text(f"  {line}", style="dim italic"))
    console.print()


__all__ = ["models", "model"]
