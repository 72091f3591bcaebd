"""
Profile API routes.

GET    /api/status                       → profiles (masked) + active pointer
GET    /api/profiles                     → masked profile list
GET    /api/profiles/<name>              → one masked profile
POST   /api/profiles                     → create
PUT    /api/profiles/<name>              → edit
DELETE /api/profiles/<name>              → delete
GET    /api/templates                    → provider templates
POST   /api/profiles/<name>/activate     → activation script (?shell=)
POST   /api/reset                        → reset script (?shell=)
GET    /api/profiles/<name>/export       → profile without its key
POST   /api/profiles/import              → import {name?, data}
GET    /api/models                       → OpenRouter listing (?search=&limit=)
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from .. import profiles as ops
from ..config import ProfileStore
from ..errors import ValidationError
from ..openrouter import fetch_models, search_models
from ..shell import resolve_shell
from ..templates import list_templates

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _store() -> ProfileStore:
    return current_app.config["PROFILE_STORE"]


def _body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _masked_list():
    profiles = _store().get_profiles()
    return [profiles[name].masked() for name in sorted(profiles)]


# ── Status / listing ────────────────────────────────────────────────


@api_bp.route("/status")
def api_status():  # type: ignore[no-untyped-def]
    profiles = _masked_list()
    return jsonify({
        "profiles": profiles,
        "activeProfile": _store().get_active_profile(),
        "totalProfiles": len(profiles),
    })


@api_bp.route("/profiles")
def api_profiles():  # type: ignore[no-untyped-def]
    return jsonify(_masked_list())


@api_bp.route("/profiles/<name>")
def api_profile(name: str):  # type: ignore[no-untyped-def]
    return jsonify(ops.require_profile(_store(), name).masked())


@api_bp.route("/templates")
def api_templates():  # type: ignore[no-untyped-def]
    return jsonify([t.to_dict() for t in list_templates()])


# ── Create / edit / delete ──────────────────────────────────────────


@api_bp.route("/profiles", methods=["POST"])
def api_create():  # type: ignore[no-untyped-def]
    body = _body()
    if not body.get("name") or not body.get("baseUrl"):
        raise ValidationError("Name and baseUrl are required")
    profile = ops.build_profile(
        body["name"],
        base_url=body["baseUrl"],
        model=body.get("model"),
        api_key=body.get("apiKey"),
        description=body.get("description"),
        clear_key=body.get("clearAnthropicKey"),
        provider=body.get("provider"),
        extra_env=body.get("extraEnv"),
    )
    ops.create_profile(_store(), profile)
    logger.info("Created profile %s", profile.name)
    return jsonify({"success": True, "profile": profile.masked()})


@api_bp.route("/profiles/<name>", methods=["PUT"])
def api_update(name: str):  # type: ignore[no-untyped-def]
    body = _body()
    extra_env = body.get("extraEnv")
    if extra_env is not None and not isinstance(extra_env, dict):
        raise ValidationError("extraEnv must be an object")
    profile = ops.edit_profile(
        _store(),
        name,
        base_url=body.get("baseUrl"),
        model=body.get("model"),
        api_key=body.get("apiKey"),
        description=body.get("description"),
        clear_key=body.get("clearAnthropicKey"),
        extra_env=extra_env,
    )
    return jsonify({"success": True, "profile": profile.masked()})


@api_bp.route("/profiles/<name>", methods=["DELETE"])
def api_delete(name: str):  # type: ignore[no-untyped-def]
    ops.remove_profile(_store(), name)
    logger.info("Deleted profile %s", name)
    return jsonify({"success": True})


# ── Activation ──────────────────────────────────────────────────────


@api_bp.route("/profiles/<name>/activate", methods=["POST"])
def api_activate(name: str):  # type: ignore[no-untyped-def]
    shell = resolve_shell(request.args.get("shell"))
    script = ops.activate_profile(_store(), name, shell)
    return jsonify({"script": script, "shell": shell.value})


@api_bp.route("/reset", methods=["POST"])
def api_reset():  # type: ignore[no-untyped-def]
    shell = resolve_shell(request.args.get("shell"))
    script = ops.reset_profile(_store(), shell)
    return jsonify({"script": script, "shell": shell.value})


# ── Import / export ─────────────────────────────────────────────────


@api_bp.route("/profiles/<name>/export")
def api_export(name: str):  # type: ignore[no-untyped-def]
    return jsonify(ops.export_profile(_store(), name))


@api_bp.route("/profiles/import", methods=["POST"])
def api_import():  # type: ignore[no-untyped-def]
    body = _body()
    data = body.get("data")
    if data is None:
        raise ValidationError("Invalid JSON")
    profile = ops.import_profile(_store(), data, name=body.get("name"))
    return jsonify({"success": True, "profile": profile.masked()})


# ── Models ──────────────────────────────────────────────────────────


@api_bp.route("/models")
def api_models():  # type: ignore[no-untyped-def]
    limit = request.args.get("limit", default=50, type=int)
    models = search_models(fetch_models(), request.args.get("search"))
    return jsonify({
        "total": len(models),
        "models": [m.to_dict() for m in models[: max(limit, 0)]],
    })
