"""Shell script generation for profile activation and reset.

A subprocess cannot change its parent's environment, so ``ccx use`` prints a
script for the calling shell to evaluate. Each supported dialect is a small
strategy class owning its quoting rules; the public functions only decide
*which* variables are set or unset and in what order.
"""

from __future__ import annotations

import logging
import os
import platform
import re
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Tuple, Union

from .static_values import (
    ACTIVE_PROFILE_VAR,
    AMBIENT_KEY_VAR,
    AUTH_TOKEN_VAR,
    BASE_URL_VAR,
    MODEL_VAR,
    RESET_VARS,
)

if TYPE_CHECKING:
    from .profiles import Profile

logger = logging.getLogger(__name__)

# PowerShell also closes single-quoted strings on the typographic quotes U+2018..U+201B.
_PS_QUOTES = re.compile("['\u2018\u2019\u201a\u201b]")

# (name, value) where a value of None means "unset this variable".
EnvEntry = Tuple[str, Optional[str]]


class ShellType(str, Enum):
    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"
    POWERSHELL = "powershell"
    CMD = "cmd"


class Dialect:
    """Statement emitter for one shell."""

    def quote(self, value: str) -> str:
        raise NotImplementedError

    def set_line(self, name: str, value: str) -> str:
        raise NotImplementedError

    def unset_line(self, name: str) -> str:
        raise NotImplementedError


class PosixDialect(Dialect):
    """bash and zsh: single quotes, with embedded quotes spliced as '"'"'."""

    def quote(self, value: str) -> str:
        return "'" + value.replace("'", "'\"'\"'") + "'"

    def set_line(self, name: str, value: str) -> str:
        return f"export {name}={self.quote(value)}"

    def unset_line(self, name: str) -> str:
        return f"unset {name}"


class FishDialect(Dialect):
    """fish single quotes only honour \\\\ and \\' as escapes."""

    def quote(self, value: str) -> str:
        return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"

    def set_line(self, name: str, value: str) -> str:
        return f"set -gx {name} {self.quote(value)}"

    def unset_line(self, name: str) -> str:
        return f"set -e {name}"


class PowerShellDialect(Dialect):
    """Verbatim single-quoted strings; any quote character is written twice."""

    def quote(self, value: str) -> str:
        return "'" + _PS_QUOTES.sub(lambda m: m.group(0) * 2, value) + "'"

    def set_line(self, name: str, value: str) -> str:
        return f"$env:{name} = {self.quote(value)}"

    def unset_line(self, name: str) -> str:
        return f"Remove-Item Env:{name} -ErrorAction SilentlyContinue"


class CmdDialect(Dialect):
    """cmd.exe has no real quoting; metacharacters get a caret.

    Known limitation: ``%`` and ``!`` expansion and embedded newlines cannot
    be expressed in a ``set`` line. Such values are emitted unchanged and a
    warning is logged.
    """

    special = '^&|<>()"'
    unrepresentable = ("%", "!", "\n", "\r")

    def quote(self, value: str) -> str:
        if any(ch in value for ch in self.unrepresentable):
            logger.warning("cmd cannot safely represent %r; the value may be altered by the shell", value)
        return "".join("^" + ch if ch in self.special else ch for ch in value)

    def set_line(self, name: str, value: str) -> str:
        return f"set {name}={self.quote(value)}"

    def unset_line(self, name: str) -> str:
        return f"set {name}="


_POSIX = PosixDialect()
DIALECTS: Dict[ShellType, Dialect] = {
    ShellType.BASH: _POSIX,
    ShellType.ZSH: _POSIX,
    ShellType.FISH: FishDialect(),
    ShellType.POWERSHELL: PowerShellDialect(),
    ShellType.CMD: CmdDialect(),
}


def resolve_shell(value: Union[str, ShellType, None]) -> ShellType:
    """Parse a dialect name; unknown names fall back to bash with a warning."""
    if isinstance(value, ShellType):
        return value
    if not value:
        return ShellType.BASH
    try:
        return ShellType(value.strip().lower())
    except ValueError:
        logger.warning("Unknown shell %r, falling back to bash", value)
        return ShellType.BASH


def dialect_for(shell: Union[str, ShellType]) -> Dialect:
    return DIALECTS[resolve_shell(shell)]


def detect_shell(environ: Optional[Mapping[str, str]] = None, system: Optional[str] = None) -> ShellType:
    """Best guess at the invoking shell. Every command also accepts --shell."""
    env = os.environ if environ is None else environ
    system = (system or platform.system()).lower()

    sh = os.path.basename(env.get("SHELL", "")).lower()
    for candidate in (ShellType.FISH, ShellType.ZSH, ShellType.BASH):
        if candidate.value in sh:
            return candidate

    if system == "windows":
        return ShellType.POWERSHELL if env.get("PSModulePath") else ShellType.CMD
    return ShellType.BASH


def environment_mapping(profile: "Profile") -> List[EnvEntry]:
    entries: List[EnvEntry] = [
        (BASE_URL_VAR, profile.base_url),
        (AUTH_TOKEN_VAR, profile.api_key or None),
    ]
    if profile.model is not None:
        entries.append((MODEL_VAR, profile.model or None))
    if profile.clear_anthropic_key:
        entries.append((AMBIENT_KEY_VAR, None))
    for key in sorted(profile.extra_env or {}):
        entries.append((key, profile.extra_env[key] or None))
    return entries


def _render(entries: List[EnvEntry], dialect: Dialect) -> str:
    lines = [
        dialect.unset_line(name) if value is None else dialect.set_line(name, value)
        for name, value in entries
    ]
    return "\n".join(lines)


def generate_shell_script(profile: "Profile", shell: Union[str, ShellType]) -> str:
    entries = environment_mapping(profile)
    entries.append((ACTIVE_PROFILE_VAR, profile.name))
    return _render(entries, dialect_for(shell))


def generate_reset_script(shell: Union[str, ShellType]) -> str:
    return _render([(name, None) for name in RESET_VARS], dialect_for(shell))


def generate_env_vars(profile: "Profile") -> Dict[str, str]:
    """The activation mapping as plain strings; ``""`` means remove the variable."""
    return {name: ("" if value is None else value) for name, value in environment_mapping(profile)}


def apply_env_vars(base: Mapping[str, str], env_vars: Mapping[str, str]) -> Dict[str, str]:
    """Return a copy of ``base`` with ``env_vars`` applied for a child process."""
    env = dict(base)
    for key, value in env_vars.items():
        if value == "":
            env.pop(key, None)
        else:
            env[key] = value
    return env
