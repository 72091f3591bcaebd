from __future__ import annotations

from functools import lru_cache
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from pyfiglet import Figlet
from rich import box
from rich.color import Color, blend_rgb
from rich.console import Console, Group
from rich.panel import Panel
from rich.rule import Rule
from rich.style import Style
from rich.table import Table
from rich.text import Text

from ..openrouter import OpenRouterModel, format_context
from ..profiles import Profile
from ..templates import ProviderTemplate
from .constants import CLI_NAME, SECRET_MASK
from .state import console as default_console

BANNER_FROM = "#0e7490"
BANNER_TO = "#a5f3fc"


def _column_styles(columns: int) -> List[Style]:
    start = Color.parse(BANNER_FROM).get_truecolor()
    end = Color.parse(BANNER_TO).get_truecolor()
    span = max(columns - 1, 1)
    return [
        Style(color=Color.from_triplet(blend_rgb(start, end, col / span)), bold=True)
        for col in range(columns)
    ]


@lru_cache(maxsize=32)
def _figlet_banner(width: int, text: str, font: str) -> Group:
    rows = Figlet(font=font, width=width).renderText(text).rstrip("\n").splitlines()
    if not rows:
        return Group()
    styles = _column_styles(max(len(row) for row in rows))
    rendered: List[Text] = []
    for row in rows:
        line = Text()
        for col, ch in enumerate(row):
            line.append(ch, style=None if ch == " " else styles[col])
        rendered.append(line)
    return Group(*rendered)


def ascii_renderable(width: int, text: str = "CCX", font: str = "ansi_shadow") -> Group:
    # Figlet output wraps badly on narrow terminals.
    if width < 40:
        return Group(Text(text, style="bold cyan"))
    return _figlet_banner(width, text, font)


def print_banner(
    console: Optional[Console] = None,
    text: str = "CCX",
    *,
    subtitle: Optional[str] = None,
    font: str = "ansi_shadow",
) -> None:
    console = console or default_console
    width = getattr(console.size, "width", 80)
    console.print(ascii_renderable(width, text, font))
    if subtitle:
        console.print(Text(subtitle, style="dim"))
    console.print(Rule(style="cyan"))


def header(title: str, subtitle: Optional[str] = None) -> Panel:
    body = Text(title, style="bold cyan")
    if subtitle:
        body.append("\n")
        body.append(subtitle, style="dim")
    return Panel.fit(body, border_style="cyan", box=box.ROUNDED, padding=(0, 2))


def success(message: str) -> Text:
    return Text.assemble(("✓ ", "bold green"), (message, "green"))


def error(message: str) -> Text:
    return Text.assemble(("✗ ", "bold red"), (message, "red"))


def info(message: str) -> Text:
    return Text.assemble(("→ ", "bold cyan"), (message, ""))


def hint(command: str) -> Text:
    return Text("   " + command, style="bold cyan")


def not_set() -> Text:
    return Text("(not set)", style="dim")


def key_value(items: Sequence[Tuple[str, Any]]) -> Table:
    grid = Table.grid(padding=(0, 2))
    grid.add_column("Key", style="bold")
    grid.add_column("Value")
    for key, value in items:
        grid.add_row(f"  {key}", value if isinstance(value, Text) else Text(str(value)))
    return grid


def profile_rows(profile: Profile) -> List[Tuple[str, Any]]:
    rows: List[Tuple[str, Any]] = [
        ("Provider", profile.provider),
        ("Base URL", profile.base_url),
        ("Model", Text(profile.model, style="yellow") if profile.model else Text("(default)", style="dim")),
        ("API Key", Text(SECRET_MASK, style="green") if profile.api_key else not_set()),
        ("Clear Key", "Yes" if profile.clear_anthropic_key else "No"),
    ]
    if profile.extra_env:
        rows.append(("Extra env", ", ".join(sorted(profile.extra_env))))
    if profile.description:
        rows.append(("Description", profile.description))
    rows.append(("Created", Text(profile.created_at, style="dim")))
    rows.append(("Updated", Text(profile.updated_at, style="dim")))
    return rows


def profile_list(profiles: Iterable[Profile], active: Optional[str]) -> Group:
    parts: List[Any] = []
    for profile in sorted(profiles, key=lambda p: p.name):
        is_active = profile.name == active
        color = "green" if is_active else "cyan"
        line = Text.assemble(("  ❯ ", color), (profile.name, f"bold {color}"))
        if is_active:
            line.append("  ACTIVE", style="bold black on green")
        parts.append(line)
        parts.append(Text(f"    Provider: {profile.provider}", style="dim"))
        if profile.model:
            parts.append(Text.assemble(("    Model: ", "dim"), (profile.model, "yellow")))
        parts.append(Text(""))
    return Group(*parts)


def template_list(templates: Iterable[ProviderTemplate]) -> Group:
    parts: List[Any] = []
    for template in templates:
        parts.append(Text.assemble(("  ❯ ", "cyan"), (template.name, "bold cyan")))
        parts.append(Text(f"    {template.display_name}"))
        parts.append(Text(f"    {template.description}", style="dim"))
        if template.default_model:
            parts.append(Text.assemble(("    Default model: ", "dim"), (template.default_model, "yellow")))
        parts.append(Text(""))
    return Group(*parts)


def models_table(models: Sequence[OpenRouterModel]) -> Table:
    table = Table(box=box.SIMPLE_HEAD, header_style="bold cyan")
    table.add_column("Model ID", overflow="fold")
    table.add_column("Context", justify="right")
    table.add_column("Price (per 1M tokens)", justify="right")
    for model in models:
        price = Text.assemble(
            (f"${model.prompt_price:.2f}", "green"),
            (" / ", "dim"),
            (f"${model.completion_price:.2f}", "green"),
        )
        table.add_row(model.id, format_context(model.context_length), price)
    return table


def activation_hint(name: str) -> Group:
    return Group(
        info("Activate it with:"),
        hint(f'eval "$({CLI_NAME} use {name})"'),
        Text(""),
    )
