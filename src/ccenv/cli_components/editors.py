from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import click
from rich.panel import Panel
from rich.text import Text

from .constants import EDITOR_ENVVAR
from .state import console


def read_until_eof_marker(current: str) -> str:
    """
    Last-resort editor: read KEY=value lines from stdin until a line "EOF"
    (or end of input). Used when no terminal editor can be launched.
    """
    console.print(Panel.fit(
        Text("Enter KEY=value lines. Finish with a line containing only: EOF", style="bold"),
        border_style="cyan",
        title="Extra environment",
    ))
    if current.strip():
        console.print(Text("Current values (your input replaces them):", style="dim"))
        console.print(Text(current.rstrip()))
    collected: List[str] = []
    while True:
        try:
            line = input()
        except EOFError:
            break
        if line.strip() == "EOF":
            break
        collected.append(line)
    return "\n".join(collected) + "\n"


def editor_command() -> Optional[List[str]]:
    """
    argv for the user's editor:
      1) $CCX_EDITOR
      2) $VISUAL, then $EDITOR
      3) the first of nvim, vim, vi, nano on PATH
    """
    for var in (EDITOR_ENVVAR, "VISUAL", "EDITOR"):
        value = os.environ.get(var)
        if value:
            return value.split()
    for candidate in ("nvim", "vim", "vi", "nano"):
        if shutil.which(candidate):
            return [candidate]
    return None


def _run_editor(path: Path) -> bool:
    cmd = editor_command()
    if not cmd:
        return False
    try:
        subprocess.run([*cmd, str(path)], check=False)
    except OSError as exc:
        console.print(f"[yellow]Could not start {cmd[0]}: {exc}[/yellow]")
        return False
    return True


def edit_text(initial_text: str, *, suffix: str = ".env") -> Optional[str]:
    """Edit ``initial_text`` in the user's editor and return the result.

    Tries the configured terminal editor on a temp file, then click.edit, then
    the stdin reader. None means click's editor exited without saving.
    """
    fd, tmp_name = tempfile.mkstemp(prefix="ccx-", suffix=suffix)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(initial_text)
        if _run_editor(tmp_path):
            return tmp_path.read_text(encoding="utf-8")
    finally:
        tmp_path.unlink(missing_ok=True)

    try:
        return click.edit(initial_text, extension=suffix, require_save=True)
    except click.ClickException:
        return read_until_eof_marker(initial_text)


def env_changes(before: Mapping[str, str], after: Mapping[str, str]) -> Dict[str, List[str]]:
    """Variable names added, removed and changed between two env mappings."""
    return {
        "added": sorted(set(after) - set(before)),
        "removed": sorted(set(before) - set(after)),
        "changed": sorted(k for k in set(before) & set(after) if before[k] != after[k]),
    }
