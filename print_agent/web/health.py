from __future__ import annotations

"""
Health endpoint for the Print Agent.

`/healthz` reports:
- Overall status ("ok" or "degraded")
- Whether the store holds a secret
- How many printers discovery currently sees
"""

from typing import Any, Dict

from flask import Blueprint

from print_agent import __version__
from print_agent.printing.discovery import list_printers
from .api import get_store

health_bp = Blueprint("health", __name__)


@health_bp.get("/healthz")
def healthz():
    status: Dict[str, Any] = {"status": "ok", "version": __version__}

    store = get_store()
    status["store_ok"] = bool(store.secret)
    if not status["store_ok"]:
        status["status"] = "degraded"
        status["reason"] = "no_secret"

    printers = list_printers()
    status["printers"] = len(printers)
    if not printers and status["status"] == "ok":
        status["status"] = "degraded"
        status["reason"] = "no_printers"

    return status, 200
