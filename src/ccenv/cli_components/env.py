from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import dotenv_values, load_dotenv

from .constants import ENV_FILENAMES

logger = logging.getLogger(__name__)


def load_env_files(project_dir: Path, *, override_existing: bool = False) -> List[Path]:
    """
    Load .env files from project_dir (.env.local wins over .env).
    Lets users keep CCX_* settings next to a project without exporting them.
    """
    found = [project_dir / name for name in ENV_FILENAMES if (project_dir / name).is_file()]
    for path in reversed(found):
        load_dotenv(path, override=override_existing)
    if found:
        logger.debug("Loaded env files: %s", ", ".join(str(p) for p in found))
    return found


def parse_env_text(text: str) -> Dict[str, str]:
    """Parse dotenv-formatted text; keys without a value map to ""."""
    parsed = dotenv_values(stream=io.StringIO(text), interpolate=False)
    return {key: (value or "") for key, value in parsed.items()}


def env_to_text(values: Optional[Dict[str, str]], *, title: str) -> str:
    """Render a mapping as dotenv text with a short header for the editor."""
    lines: List[str] = [
        f"# {title}",
        "# One KEY=value per line. An empty value unsets the variable on activation.",
        "",
    ]
    for key in sorted(values or {}):
        value = values[key]
        if any(ch in value for ch in " #'\"\\\n\r") or value != value.strip():
            escaped = (
                value.replace("\\", "\\\\")
                .replace('"', '\\"')
                .replace("\n", "\\n")
                .replace("\r", "\\r")
            )
            lines.append(f'{key}="{escaped}"')
        else:
            lines.append(f"{key}={value}")
    return "\n".join(lines) + "\n"
