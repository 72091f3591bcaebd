"""Shared constants for the ccx CLI."""

from ..static_values import (
    ACTIVE_PROFILE_VAR,
    AMBIENT_KEY_VAR,
    APP_HELP,
    AUTH_TOKEN_VAR,
    BASE_URL_VAR,
    CLAUDE_BIN_ENVVAR,
    CLI_NAME,
    DEFAULT_CLAUDE_BIN,
    EDITOR_ENVVAR,
    ENV_FILENAMES,
    MODEL_VAR,
    SECRET_MASK,
)
