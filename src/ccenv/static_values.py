"""Shared static values used across the ccenv package."""

from __future__ import annotations

APP_HELP = """
ccx - profile switcher for the Claude CLI.

Keep several backends (OpenRouter, Z.ai, MiniMax, a local proxy...) as named
profiles and point your shell at one of them with a single command.

Activate a profile in the current shell:
  \x07 bash/zsh     eval "$(ccx use work)"
  \x07 fish         ccx use work --shell fish | source
  \x07 PowerShell   iex (ccx use work --shell powershell)
  \x07 cmd          ccx use work --shell cmd   (copy the printed lines)

Go back to the official defaults:
  \x07 eval "$(ccx reset)"

Examples:
  \x07 ccx setup                                   (interactive wizard)
  \x07 ccx create work --template openrouter --api-key sk-or-...
  \x07 ccx create local --base-url http://localhost:4000 --model big-model
  \x07 ccx run work                                (launch claude with the profile applied)
  \x07 ccx models glm                              (browse OpenRouter models)
  \x07 ccx serve                                   (local web UI + JSON API)
""".strip()

APP_NAME = "ccenv"
CLI_NAME = "ccx"

CONFIG_FILENAME = "config.json"
CONFIG_DIR_ENVVAR = "CCX_CONFIG_DIR"
CLAUDE_BIN_ENVVAR = "CCX_CLAUDE_BIN"
OPENROUTER_URL_ENVVAR = "CCX_OPENROUTER_URL"
WEB_DIST_ENVVAR = "CCX_WEB_DIST"
EDITOR_ENVVAR = "CCX_EDITOR"

ENV_FILENAMES = (".env", ".env.local")

DEFAULT_CLAUDE_BIN = "claude"
OPENROUTER_MODELS_URL = "https://openrouter.ai/api/v1/models"

# Variables the generated scripts own.
BASE_URL_VAR = "ANTHROPIC_BASE_URL"
AUTH_TOKEN_VAR = "ANTHROPIC_AUTH_TOKEN"
MODEL_VAR = "ANTHROPIC_MODEL"
AMBIENT_KEY_VAR = "ANTHROPIC_API_KEY"
ACTIVE_PROFILE_VAR = "CCX_ACTIVE_PROFILE"

RESET_VARS = (BASE_URL_VAR, AUTH_TOKEN_VAR, MODEL_VAR, ACTIVE_PROFILE_VAR)

PROFILE_NAME_PATTERN = r"[A-Za-z0-9_-]+"
# Matched with re.fullmatch
ENV_NAME_PATTERN = r"[A-Za-z_][A-Za-z0-9_]*"
SECRET_MASK = "********"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
