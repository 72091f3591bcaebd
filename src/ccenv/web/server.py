"""
Web server: Flask app factory.

Serves the JSON API under /api and, when a built single-page app is
available, its static files with an index.html fallback.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, request, send_from_directory

from ..config import ProfileStore
from ..errors import CcenvError
from ..static_values import DEFAULT_HOST, DEFAULT_PORT, WEB_DIST_ENVVAR

logger = logging.getLogger(__name__)

# Package directory; a built SPA may be dropped in web/dist
_PACKAGE_DIR = Path(__file__).parent


def default_static_dir() -> Path:
    override = os.getenv(WEB_DIST_ENVVAR)
    if override:
        return Path(override).expanduser()
    return _PACKAGE_DIR / "dist"


def create_app(
    store: Optional[ProfileStore] = None,
    static_dir: Optional[Path] = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        store: Profile store the routes operate on (default: per-user config).
        static_dir: Directory holding the built web UI.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__, static_folder=None)

    app.config["PROFILE_STORE"] = store or ProfileStore()
    app.config["STATIC_DIR"] = str(static_dir or default_static_dir())

    from .routes_api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    @app.errorhandler(CcenvError)
    def _ccenv_error(exc: CcenvError):  # type: ignore[no-untyped-def]
        if exc.http_status >= 500:
            logger.error("Request failed: %s", exc)
        return jsonify({"error": str(exc)}), exc.http_status

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def _spa(path: str):  # type: ignore[no-untyped-def]
        if request.path.startswith("/api"):
            return jsonify({"error": "Not found"}), 404
        dist = Path(app.config["STATIC_DIR"])
        if path and (dist / path).is_file():
            return send_from_directory(dist, path)
        if (dist / "index.html").is_file():
            return send_from_directory(dist, "index.html")
        return jsonify({"error": "Web UI is not built", "staticDir": str(dist)}), 404

    logger.info("Web app created (store=%s)", app.config["PROFILE_STORE"].path)
    return app


def run_server(
    app: Flask,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    debug: bool = False,
) -> None:
    """Run the Flask development server."""
    logger.info("Starting web UI on %s:%d", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False)
