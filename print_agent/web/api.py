from __future__ import annotations

"""
JSON API for the Print Agent.

Endpoints:
- GET  /agent/info      : agent identity, pairing secret, default printer, discovered printers
- POST /printer/select  : persist the default printer ({"printer": str | null})
- POST /print           : signed print job (X-Signature: hex HMAC-SHA256 of the body)

Payload shape (POST /print):
{
  "type": "raw" | "order",
  "receipt": str,                      # type == "raw"
  "order": {"id": str, "items": [{"name": str, "quantity": int, "amount": int}], "total": number},
  "printerName": str                   # optional, overrides the stored default
}
"""

from typing import Any, Dict, Optional

from flask import Blueprint, current_app, g, jsonify, request
from pydantic import ValidationError

from print_agent import STORE_EXTENSION, __version__
from print_agent.core.config import AGENT_NAME
from print_agent.core.signing import SIGNATURE_HEADER, verify
from print_agent.core.store import Store
from print_agent.printing.discovery import list_printers
from print_agent.printing.dispatch import classify_target, dispatch
from print_agent.printing.render import encode_raw_receipt, render_receipt
from . import schemas

api_bp = Blueprint("api", __name__)

VALUE_ERROR_PREFIX = "Value error, "


def get_store() -> Store:
    return current_app.extensions[STORE_EXTENSION]


def _json_error(msg: str, code: int = 400, details: Optional[str] = None):
    body: Dict[str, Any] = schemas.ErrorResponse(error=msg, details=details).model_dump(exclude_none=True)
    return jsonify(body), code


def _validation_message(e: ValidationError) -> str:
    try:
        first_err = e.errors()[0]
        loc = ".".join(str(p) for p in first_err.get("loc", ()) if p != "__root__")
        msg = first_err.get("msg") or str(e)
        # custom validators surface as "Value error, <message>"
        if msg.startswith(VALUE_ERROR_PREFIX):
            msg = msg[len(VALUE_ERROR_PREFIX):]
        return f"{loc}: {msg}" if loc else msg
    except Exception:
        return str(e)


def _requested_printer(data: Dict[str, Any]) -> Optional[str]:
    # read before schema validation: a job with no printer is rejected as such
    name = data.get("printerName")
    if isinstance(name, str) and name.strip():
        return name.strip()
    return None


@api_bp.get("/agent/info")
def agent_info():
    """
    Identity and pairing information. Unauthenticated: callers on the local
    machine or first-party origins need the secret to sign print jobs.
    """
    store = get_store()
    printers = list_printers()
    info = schemas.AgentInfo(
        name=AGENT_NAME,
        version=__version__,
        secret=store.secret or "",
        default_printer=store.default_printer,
        printers=printers,
    )
    current_app.logger.info("GET /agent/info printers=%d", len(printers))
    return jsonify(info.model_dump(by_alias=True))


@api_bp.post("/printer/select")
def select_printer():
    """
    Persist the given printer name/address as the new default.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("invalid JSON payload", 400)
    try:
        req = schemas.SelectPrinterRequest.model_validate(data)
    except ValidationError as e:
        return _json_error(_validation_message(e), 400)

    get_store().select_printer(req.printer)
    return jsonify(schemas.OkResponse().model_dump())


@api_bp.post("/print")
def print_job():
    """
    Verify the request signature, resolve the target printer, build the
    payload and dispatch it synchronously.
    """
    store = get_store()
    body = request.get_data(cache=True)
    if not verify(store.secret, body, request.headers.get(SIGNATURE_HEADER)):
        current_app.logger.info("Rejected print job from %s: invalid signature", request.remote_addr)
        return _json_error("Invalid signature", 401)

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("invalid JSON payload", 400)

    printer = _requested_printer(data) or store.default_printer
    if not printer:
        return _json_error("No printer selected", 400)
    target = classify_target(printer)
    g.print_target = str(target)

    try:
        req = schemas.PrintJobRequest.model_validate(data)
    except ValidationError as e:
        return _json_error(_validation_message(e), 400)

    try:
        payload = encode_raw_receipt(req.receipt or "") if req.is_raw else render_receipt(req.order)
    except Exception as e:
        current_app.logger.exception("Failed to build print payload: %s", e)
        return _json_error("Print failed", 500, details=str(e))

    result = dispatch(target, payload)
    if not result.ok:
        current_app.logger.error("Print to %s failed via %s: %s", target, result.transport, result.error)
        return _json_error("Print failed", 500, details=result.error)

    current_app.logger.info("Printed %d bytes to %s via %s", len(payload), target, result.transport)
    return jsonify(schemas.OkResponse().model_dump())


__all__ = ["api_bp", "get_store"]
