from __future__ import annotations

from pathlib import Path

import pytest

from ccenv import openrouter
from ccenv.config import ProfileStore
from ccenv.profiles import Profile


@pytest.fixture()
def store(tmp_path: Path) -> ProfileStore:
    return ProfileStore(tmp_path / "ccenv" / "config.json")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path):
    """Never touch the real user config or inherit backend vars from the host."""
    monkeypatch.setenv("CCX_CONFIG_DIR", str(tmp_path / "user-config"))
    for var in (
        "ANTHROPIC_BASE_URL",
        "ANTHROPIC_AUTH_TOKEN",
        "ANTHROPIC_MODEL",
        "ANTHROPIC_API_KEY",
        "CCX_ACTIVE_PROFILE",
        "CCX_CONFIG",
        "CCX_CLAUDE_BIN",
        "CCX_OPENROUTER_URL",
        "CCX_EDITOR",
    ):
        monkeypatch.delenv(var, raising=False)
    openrouter.clear_cache()
    yield
    openrouter.clear_cache()


def _make_profile(**overrides) -> Profile:
    data = {
        "name": "work",
        "provider": "custom",
        "baseUrl": "https://api.example.com",
        "clearAnthropicKey": True,
        "createdAt": "2025-01-01T00:00:00.000Z",
        "updatedAt": "2025-01-01T00:00:00.000Z",
    }
    data.update(overrides)
    return Profile.model_validate(data)


@pytest.fixture()
def make_profile():
    return _make_profile
