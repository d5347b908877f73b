"""
Print Agent package

This module provides an application factory with minimal wiring:
- Configures logging through print_agent.core.logging
- Opens the persistent store (generating the pairing secret on first run)
- Applies the CORS policy and short-circuits OPTIONS preflight requests
- Registers the API and health blueprints
"""

from __future__ import annotations

__version__ = "0.1.0"

import importlib
import uuid
from collections.abc import Sequence
from typing import Optional

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from print_agent.core.config import get_allowed_origins, get_max_content_length
from print_agent.core.logging import configure_logging
from print_agent.core.signing import SIGNATURE_HEADER
from print_agent.core.store import Store, open_store


STORE_EXTENSION = "print_agent.store"

DEFAULT_BLUEPRINTS = [
    ("print_agent.web.api", "api_bp"),  # info / select / print
    ("print_agent.web.health", "health_bp"),  # health endpoint
]


def _register_blueprint(app: Flask, import_path: str, attr: str) -> None:
    mod = importlib.import_module(import_path)
    app.register_blueprint(getattr(mod, attr))
    app.logger.debug(f"Registered blueprint: {import_path}.{attr}")


def _set_request_id() -> None:
    """
    Assign a request ID for logging.
    """
    g.request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex


def _apply_cors(response, allowed_origins: Sequence[str]):
    """
    Echo the Origin back for first-party origins; any other origin gets the
    wildcard. The signature on /print is the real access boundary.
    """
    origin = request.headers.get("Origin")
    if origin and origin in allowed_origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.vary.add("Origin")
    else:
        # TODO: tighten to the allow-list once every first-party client is listed there
        response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = f"Content-Type, {SIGNATURE_HEADER}"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return response


def create_app(
    store: Optional[Store] = None,
    store_path: Optional[str] = None,
    config_overrides: Optional[dict] = None,
    blueprints: Optional[Sequence[tuple[str, str]]] = None,
) -> Flask:
    """
    Application factory.

    Parameters:
    - store: an already opened Store; when None one is opened from store_path
      (or PRINTAGENT_STORE_PATH / ./store.json)
    - config_overrides: values to inject into app.config after defaults
    - blueprints: optional list of (import_path, attribute) tuples to register

    Returns:
    - Flask app instance
    """
    configure_logging()

    app = Flask("print_agent")
    app.config["MAX_CONTENT_LENGTH"] = get_max_content_length()
    app.config["ALLOWED_ORIGINS"] = get_allowed_origins()
    app.url_map.strict_slashes = False
    if config_overrides:
        app.config.update(config_overrides)

    # The secret must exist before the first request is served
    app.extensions[STORE_EXTENSION] = store or open_store(store_path)

    @app.before_request
    def _before_request():
        _set_request_id()
        if request.method == "OPTIONS":
            return "", 200
        return None

    @app.after_request
    def _after_request(response):
        return _apply_cors(response, app.config["ALLOWED_ORIGINS"])

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return jsonify({"error": e.name}), e.code

    for import_path, attr in blueprints or DEFAULT_BLUEPRINTS:
        _register_blueprint(app, import_path, attr)

    app.logger.info("Print Agent app created (store=%s)", app.extensions[STORE_EXTENSION].path)
    return app


__all__ = ["STORE_EXTENSION", "__version__", "create_app"]
