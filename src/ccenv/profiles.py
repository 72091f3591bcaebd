"""Profile model and the operations the CLI, wizard and web API share.

The store (``ccenv.config``) only persists what it is given; everything that
decides *whether* a profile may be written lives here: name and URL checks,
template defaults, conflict detection and timestamping.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ProfileExistsError, ProfileNotFoundError, ValidationError
from .static_values import ENV_NAME_PATTERN, PROFILE_NAME_PATTERN, SECRET_MASK
from .shell import generate_reset_script, generate_shell_script
from .templates import get_template, list_templates

_NAME_RE = re.compile(PROFILE_NAME_PATTERN)
_ENV_NAME_RE = re.compile(ENV_NAME_PATTERN)


def now_iso() -> str:
    """UTC timestamp in the same shape as JavaScript's Date.toISOString()."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Profile(BaseModel):
    """One named backend configuration, stored with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    description: Optional[str] = None
    provider: str = "custom"
    base_url: str = Field(..., alias="baseUrl")
    model: Optional[str] = None
    api_key: Optional[str] = Field(None, alias="apiKey")
    clear_anthropic_key: bool = Field(True, alias="clearAnthropicKey")
    extra_env: Optional[Dict[str, str]] = Field(None, alias="extraEnv")
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")

    @field_validator("extra_env")
    @classmethod
    def _check_env_names(cls, value: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        # Names are written unquoted into shell scripts.
        for key in value or {}:
            if not is_env_name(key):
                raise ValueError(f"invalid environment variable name {key!r}")
        return value

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def masked(self) -> Dict[str, Any]:
        data = self.to_dict()
        if self.api_key:
            data["apiKey"] = SECRET_MASK
        else:
            data.pop("apiKey", None)
        return data

    def exported(self) -> Dict[str, Any]:
        data = self.to_dict()
        data.pop("apiKey", None)
        return data


def is_env_name(name: str) -> bool:
    return isinstance(name, str) and _ENV_NAME_RE.fullmatch(name) is not None


def validate_name(name: Optional[str]) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Profile name is required.")
    if not _NAME_RE.fullmatch(name):
        raise ValidationError(
            f'Invalid profile name "{name}": only letters, digits, dash and underscore are allowed.'
        )
    return name


def validate_base_url(base_url: Optional[str]) -> str:
    if not isinstance(base_url, str) or not base_url.strip():
        raise ValidationError("A base URL is required.")
    return base_url


def build_profile(
    name: str,
    *,
    template: Optional[str] = None,
    base_url: Optional[str] = None,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    description: Optional[str] = None,
    clear_key: Optional[bool] = None,
    provider: Optional[str] = None,
    extra_env: Optional[Dict[str, str]] = None,
) -> Profile:
    """Assemble a new, validated profile. Template values fill whatever is not given."""
    validate_name(name)

    if template:
        tpl = get_template(template)
        if tpl is None:
            available = ", ".join(t.name for t in list_templates())
            raise ValidationError(f'Template "{template}" not found. Available: {available}')
        provider = tpl.name
        base_url = base_url or tpl.base_url
        model = model or tpl.default_model
        description = description or tpl.description
        if clear_key is None:
            clear_key = tpl.clear_anthropic_key
    elif not base_url:
        raise ValidationError("Either a template or a base URL is required.")

    stamp = now_iso()
    try:
        return Profile(
            name=name,
            description=description or None,
            provider=provider or "custom",
            base_url=validate_base_url(base_url),
            model=model or None,
            api_key=api_key or None,
            clear_anthropic_key=True if clear_key is None else clear_key,
            extra_env=extra_env or None,
            created_at=stamp,
            updated_at=stamp,
        )
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid profile data: {exc}") from exc


def create_profile(store, profile: Profile) -> Profile:
    if store.profile_exists(profile.name):
        raise ProfileExistsError(profile.name)
    store.save_profile(profile)
    return profile


def require_profile(store, name: str) -> Profile:
    profile = store.get_profile(name)
    if profile is None:
        raise ProfileNotFoundError(name)
    return profile


def edit_profile(
    store,
    name: str,
    *,
    base_url: Optional[str] = None,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    description: Optional[str] = None,
    clear_key: Optional[bool] = None,
    extra_env: Optional[Dict[str, str]] = None,
) -> Profile:
    """Apply the given fields to an existing profile. ``None`` leaves a field alone.

    An empty ``model`` is kept as ``""`` so activation unsets ANTHROPIC_MODEL
    instead of silently leaving a previous value in place.
    """
    profile = require_profile(store, name)
    changes: Dict[str, Any] = {}
    if base_url is not None:
        changes["base_url"] = validate_base_url(base_url)
    if model is not None:
        changes["model"] = model
    if api_key is not None:
        changes["api_key"] = api_key or None
    if description is not None:
        changes["description"] = description
    if clear_key is not None:
        changes["clear_anthropic_key"] = clear_key
    if extra_env is not None:
        changes["extra_env"] = dict(extra_env) or None
    changes["updated_at"] = now_iso()
    try:
        updated = Profile.model_validate({**profile.model_dump(), **changes})
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid profile data: {exc}") from exc
    store.save_profile(updated)
    return updated


def remove_profile(store, name: str) -> None:
    if not store.profile_exists(name):
        raise ProfileNotFoundError(name)
    store.delete_profile(name)
    if store.get_active_profile() == name:
        store.set_active_profile(None)


def import_profile(store, data: Union[str, Dict[str, Any]], name: Optional[str] = None) -> Profile:
    """Create a profile from exported JSON (string or already-decoded dict)."""
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON: expected an object.")

    record = dict(data)
    if name:
        record["name"] = name
    validate_name(record.get("name"))
    validate_base_url(record.get("baseUrl") or record.get("base_url"))
    if store.profile_exists(record["name"]):
        raise ProfileExistsError(record["name"])

    stamp = now_iso()
    for key in ("createdAt", "updatedAt", "created_at", "updated_at"):
        record.pop(key, None)
    record["createdAt"] = stamp
    record["updatedAt"] = stamp
    try:
        profile = Profile.model_validate(record)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"Invalid profile data: {exc.error_count()} error(s)\n{exc}") from exc
    store.save_profile(profile)
    return profile


def export_profile(store, name: str) -> Dict[str, Any]:
    return require_profile(store, name).exported()


def activate_profile(store, name: str, shell) -> str:
    profile = require_profile(store, name)
    script = generate_shell_script(profile, shell)
    store.set_active_profile(name)
    return script


def reset_profile(store, shell) -> str:
    script = generate_reset_script(shell)
    store.set_active_profile(None)
    return script
