"""Profile store: one JSON file holding every profile plus the active pointer.

    {"profiles": {"work": {...}}, "activeProfile": "work"}

The file is re-read on each call so a running ``ccx serve`` and a CLI
invocation see each other's writes. Concurrent writers are not coordinated;
the last write wins.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import pydantic

from .errors import StoreError
from .profiles import Profile
from .static_values import APP_NAME, CONFIG_DIR_ENVVAR, CONFIG_FILENAME

logger = logging.getLogger(__name__)


def user_config_dir() -> Path:
    """Cross-platform config dir: $CCX_CONFIG_DIR | APPDATA | XDG | ~/.config/ccenv."""
    if os.getenv(CONFIG_DIR_ENVVAR):
        return Path(os.environ[CONFIG_DIR_ENVVAR]).expanduser()
    if platform.system().lower() == "windows":
        base = os.getenv("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(base) / APP_NAME
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def default_config_path() -> Path:
    return user_config_dir() / CONFIG_FILENAME


class ProfileStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else default_config_path()

    # -- raw file access ---------------------------------------------------

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"profiles": {}, "activeProfile": None}
        try:
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw) if raw.strip() else {}
        except (OSError, ValueError) as exc:
            raise StoreError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Cannot read {self.path}: expected a JSON object")
        profiles = data.get("profiles") or {}
        if not isinstance(profiles, dict):
            raise StoreError(f"Cannot read {self.path}: 'profiles' must be an object")
        return {"profiles": profiles, "activeProfile": data.get("activeProfile")}

    def _write(self, data: Dict[str, Any]) -> None:
        """Write atomically: temp file in the same directory, then rename over."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".config-", suffix=".tmp", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                    f.write("\n")
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreError(f"Cannot write {self.path}: {exc}") from exc
        logger.debug("Wrote %d profile(s) to %s", len(data.get("profiles", {})), self.path)

    # -- profiles ------------------------------------------------------------

    def get_profiles(self) -> Dict[str, Profile]:
        profiles: Dict[str, Profile] = {}
        for name, record in self._read()["profiles"].items():
            try:
                profiles[name] = Profile.model_validate(record)
            except pydantic.ValidationError as exc:
                raise StoreError(f'Profile "{name}" in {self.path} is malformed: {exc}') from exc
        return profiles

    def get_profile(self, name: str) -> Optional[Profile]:
        return self.get_profiles().get(name)

    def profile_exists(self, name: str) -> bool:
        return name in self._read()["profiles"]

    def save_profile(self, profile: Profile) -> None:
        data = self._read()
        data["profiles"][profile.name] = profile.to_dict()
        self._write(data)

    def delete_profile(self, name: str) -> None:
        data = self._read()
        if data["profiles"].pop(name, None) is None:
            return
        self._write(data)

    # -- active pointer ----------------------------------------------------

    def get_active_profile(self) -> Optional[str]:
        try:
            active = self._read()["activeProfile"]
        except StoreError as exc:
            logger.warning("Active profile unavailable: %s", exc)
            return None
        return active if isinstance(active, str) and active else None

    def set_active_profile(self, name: Optional[str]) -> None:
        data = self._read()
        data["activeProfile"] = name
        self._write(data)
