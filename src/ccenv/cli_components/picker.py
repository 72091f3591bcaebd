"""Arrow-key list picker for the setup wizard.

Draws the choices with rich.live and reads raw keys from the terminal. When
stdin is not a TTY (pipes, tests) it degrades to a numbered prompt.
"""

from __future__ import annotations

import os
import sys
from typing import List, Optional, Sequence, Tuple, TypeVar

try:
    import termios  # type: ignore
    import tty  # type: ignore
except ImportError:  # pragma: no cover (Windows)
    termios = None  # type: ignore
    tty = None  # type: ignore

try:
    import msvcrt  # type: ignore
except ImportError:  # pragma: no cover (POSIX)
    msvcrt = None  # type: ignore

from rich import box
from rich.console import Group
from rich.live import Live
from rich.panel import Panel
from rich.prompt import IntPrompt
from rich.text import Text

from .state import console

T = TypeVar("T")


class Key:
    UP = "UP"
    DOWN = "DOWN"
    ENTER = "ENTER"
    ESC = "ESC"
    Q = "Q"
    OTHER = "OTHER"


def read_key() -> str:
    if msvcrt:
        ch = msvcrt.getch()
        if ch in (b"\x00", b"\xe0"):
            second = msvcrt.getch()
            codes = {b"H": Key.UP, b"P": Key.DOWN}
            return codes.get(second, Key.OTHER)
        if ch in (b"\r", b"\n"):
            return Key.ENTER
        if ch in (b"\x1b",):
            return Key.ESC
        if ch in (b"q", b"Q"):
            return Key.Q
        if ch in (b"k", b"K"):
            return Key.UP
        if ch in (b"j", b"J"):
            return Key.DOWN
        return Key.OTHER

    if not sys.stdin.isatty() or not termios or not tty:
        return Key.ENTER

    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        seq = os.read(fd, 3)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)

    if seq in (b"\x1b[A", b"k"):
        return Key.UP
    if seq in (b"\x1b[B", b"j"):
        return Key.DOWN
    if seq in (b"\r", b"\n"):
        return Key.ENTER
    if seq == b"\x1b":
        return Key.ESC
    if seq in (b"q", b"Q"):
        return Key.Q
    return Key.OTHER


def render_choice(label: str, focused: bool) -> Text:
    prefix = "❯ " if focused else "  "
    style = "bold cyan" if focused else "white"
    return Text.from_markup(prefix, style=style) + Text.from_markup(label, style=style)


def _window(count: int, focus: int, page_size: int) -> Tuple[int, int]:
    if count <= page_size:
        return 0, count
    start = max(0, min(focus - page_size // 2, count - page_size))
    return start, start + page_size


def build_picker_view(title: str, labels: Sequence[str], focus: int, page_size: int) -> Panel:
    start, end = _window(len(labels), focus, page_size)
    rows: List[Text] = [render_choice(labels[i], i == focus) for i in range(start, end)]
    footer = Text(f"up/down move  Enter select  q/Esc cancel   ({focus + 1}/{len(labels)})", style="dim")
    return Panel(
        Group(*rows, Text(""), footer),
        title=title,
        border_style="cyan",
        box=box.ROUNDED,
        padding=(0, 1),
    )


def _numbered_select(title: str, choices: Sequence[Tuple[str, T]], default_index: int) -> Optional[T]:
    console.print(Text(title, style="bold"))
    for idx, (label, _value) in enumerate(choices, 1):
        console.print(Text.from_markup(f"  {idx}. {label}"))
    picked = IntPrompt.ask(
        "Choice",
        console=console,
        choices=[str(i) for i in range(1, len(choices) + 1)],
        show_choices=False,
        default=default_index + 1,
    )
    return choices[picked - 1][1]


def select(
    title: str,
    choices: Sequence[Tuple[str, T]],
    *,
    default_index: int = 0,
    page_size: int = 15,
) -> Optional[T]:
    """Let the user pick one of ``(label, value)`` pairs. Returns None on cancel."""
    if not choices:
        return None
    if not sys.stdin.isatty():
        return _numbered_select(title, choices, default_index)

    labels = [label for label, _ in choices]
    focus = min(max(default_index, 0), len(choices) - 1)
    with Live(build_picker_view(title, labels, focus, page_size), console=console, auto_refresh=False, transient=True) as live:
        while True:
            key = read_key()
            if key == Key.UP:
                focus = (focus - 1) % len(choices)
            elif key == Key.DOWN:
                focus = (focus + 1) % len(choices)
            elif key == Key.ENTER:
                break
            elif key in (Key.ESC, Key.Q):
                return None
            live.update(build_picker_view(title, labels, focus, page_size), refresh=True)
    console.print(Text.assemble((f"{title}: ", "bold"), Text.from_markup(labels[focus])))
    return choices[focus][1]
