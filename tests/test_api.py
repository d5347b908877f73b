import json
import re
from typing import Any, Dict, List

import pytest

import print_agent.web.api as api
from print_agent import create_app
from print_agent.core.signing import sign
from print_agent.printing.dispatch import DispatchResult, LocalTarget, NetworkTarget


def _secret(client) -> str:
    return client.get("/agent/info").get_json()["secret"]


def _signed_post(client, payload: Dict[str, Any], secret: str, **headers):
    body = json.dumps(payload)
    hdrs = {"Content-Type": "application/json", "X-Signature": sign(secret, body)}
    hdrs.update(headers)
    return client.post("/print", data=body, headers=hdrs)


@pytest.fixture
def dispatched(monkeypatch) -> List[Any]:
    calls: List[Any] = []

    def fake_dispatch(target, payload, timeout=None):
        calls.append((target, payload))
        return DispatchResult(ok=True, transport="tcp" if isinstance(target, NetworkTarget) else "spooler")

    monkeypatch.setattr(api, "dispatch", fake_dispatch)
    return calls


ORDER = {"id": "A-1", "items": [{"quantity": 2, "name": "Coffee", "amount": 350}], "total": 7.0}


def test_agent_info_shape(client):
    r = client.get("/agent/info")
    assert r.status_code == 200
    body = r.get_json()
    assert body["name"] == "KeepOS Print Agent"
    assert body["version"]
    assert re.fullmatch(r"[0-9a-f]{40}", body["secret"])
    assert body["defaultPrinter"] is None
    assert body["printers"] == ["Kitchen-Printer", "Bar"]


def test_select_then_info_and_reload(client, store_path, monkeypatch):
    r = client.post("/printer/select", json={"printer": "X"})
    assert r.status_code == 200
    assert r.get_json() == {"ok": True}
    assert client.get("/agent/info").get_json()["defaultPrinter"] == "X"

    # restart-equivalent: a fresh app over the same store file
    monkeypatch.setattr(api, "list_printers", lambda: [])
    fresh = create_app(store_path=str(store_path)).test_client()
    info = fresh.get("/agent/info").get_json()
    assert info["defaultPrinter"] == "X"
    assert info["secret"] == _secret(client)


def test_select_null_clears_default(client):
    client.post("/printer/select", json={"printer": "X"})
    r = client.post("/printer/select", json={"printer": None})
    assert r.status_code == 200
    assert client.get("/agent/info").get_json()["defaultPrinter"] is None


@pytest.mark.parametrize("body", [{}, {"printer": "   "}, {"printer": 5}])
def test_select_rejects_invalid_body(client, body):
    r = client.post("/printer/select", json=body)
    assert r.status_code == 400
    assert "error" in r.get_json()


def test_select_rejects_non_json(client):
    r = client.post("/printer/select", data="printer=X", headers={"Content-Type": "text/plain"})
    assert r.status_code == 400


def test_print_without_signature_is_401(client, dispatched):
    r = client.post("/print", json={"type": "raw", "receipt": "hi", "printerName": "Bar"})
    assert r.status_code == 401
    assert r.get_json() == {"error": "Invalid signature"}
    assert dispatched == []


def test_print_with_wrong_signature_is_401(client, dispatched):
    body = json.dumps({"type": "raw", "receipt": "hi", "printerName": "Bar"})
    r = client.post(
        "/print",
        data=body,
        headers={"Content-Type": "application/json", "X-Signature": sign("not-the-secret", body)},
    )
    assert r.status_code == 401
    assert dispatched == []


def test_print_signature_covers_exact_body(client, dispatched):
    secret = _secret(client)
    signed = json.dumps({"type": "raw", "receipt": "hi", "printerName": "Bar"})
    sent = json.dumps({"type": "raw", "receipt": "hi", "printerName": "Bar"}, indent=2)
    r = client.post(
        "/print",
        data=sent,
        headers={"Content-Type": "application/json", "X-Signature": sign(secret, signed)},
    )
    assert r.status_code == 401
    assert dispatched == []


def test_print_without_any_printer_is_400(client, dispatched):
    r = _signed_post(client, {"type": "raw", "receipt": "hi"}, _secret(client))
    assert r.status_code == 400
    assert r.get_json() == {"error": "No printer selected"}
    assert dispatched == []


@pytest.mark.parametrize("payload", [{"type": "order"}, {"type": "raw", "printerName": "  "}])
def test_print_incomplete_job_without_printer_reports_printer(client, dispatched, payload):
    r = _signed_post(client, payload, _secret(client))
    assert r.status_code == 400
    assert r.get_json() == {"error": "No printer selected"}
    assert dispatched == []


def test_print_raw_uses_stored_default(client, dispatched):
    secret = _secret(client)
    client.post("/printer/select", json={"printer": "Kitchen-Printer"})
    r = _signed_post(client, {"type": "raw", "receipt": "\x1b@Hello\n"}, secret)
    assert r.status_code == 200, r.get_data(as_text=True)
    assert r.get_json() == {"ok": True}
    assert dispatched == [(LocalTarget("Kitchen-Printer"), b"\x1b@Hello\n")]


def test_print_override_beats_default(client, dispatched):
    secret = _secret(client)
    client.post("/printer/select", json={"printer": "Kitchen-Printer"})
    r = _signed_post(client, {"type": "raw", "receipt": "x", "printerName": "192.168.1.50:9101"}, secret)
    assert r.status_code == 200
    assert dispatched[0][0] == NetworkTarget("192.168.1.50", 9101)


def test_print_order_renders_receipt(client, dispatched):
    r = _signed_post(client, {"type": "order", "order": ORDER, "printerName": "192.168.1.50"}, _secret(client))
    assert r.status_code == 200, r.get_data(as_text=True)
    target, payload = dispatched[0]
    assert target == NetworkTarget("192.168.1.50", 9100)
    assert b"2x Coffee 3.50\n" in payload
    assert b"TOTAL: 7.00\n" in payload


def test_print_order_without_type_renders(client, dispatched):
    r = _signed_post(client, {"order": ORDER, "printerName": "Bar"}, _secret(client))
    assert r.status_code == 200
    assert b"TOTAL: 7.00" in dispatched[0][1]


@pytest.mark.parametrize(
    "payload",
    [
        {"type": "raw", "printerName": "Bar"},
        {"type": "order", "printerName": "Bar"},
        {"type": "order", "order": {"id": "1", "items": [{"name": "x"}], "total": 1}, "printerName": "Bar"},
    ],
)
def test_print_invalid_job_is_400(client, dispatched, payload):
    r = _signed_post(client, payload, _secret(client))
    assert r.status_code == 400
    assert "error" in r.get_json()
    assert dispatched == []


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"type": "raw", "printerName": "Bar"}, "receipt required for raw print jobs"),
        ({"type": "order", "printerName": "Bar"}, "order required for order print jobs"),
    ],
)
def test_print_invalid_job_message_is_clean(client, dispatched, payload, message):
    r = _signed_post(client, payload, _secret(client))
    assert r.status_code == 400
    assert r.get_json() == {"error": message}


def test_print_accepts_null_items(client, dispatched):
    order = {"id": 7, "items": None, "total": 0}
    r = _signed_post(client, {"type": "order", "order": order, "printerName": "Bar"}, _secret(client))
    assert r.status_code == 200, r.get_data(as_text=True)
    assert b"TOTAL: 0.00" in dispatched[0][1]


def test_print_dispatch_failure_is_500(client, monkeypatch):
    monkeypatch.setattr(
        api,
        "dispatch",
        lambda target, payload, timeout=None: DispatchResult(ok=False, transport="tcp", error="[Errno 111] Connection refused"),
    )
    r = _signed_post(client, {"type": "raw", "receipt": "x", "printerName": "10.0.0.9"}, _secret(client))
    assert r.status_code == 500
    assert r.get_json() == {"error": "Print failed", "details": "[Errno 111] Connection refused"}


def test_cors_echoes_allowed_origin(client):
    r = client.get("/agent/info", headers={"Origin": "https://keep-os.com"})
    assert r.headers["Access-Control-Allow-Origin"] == "https://keep-os.com"
    assert "Origin" in r.headers.get("Vary", "")
    assert "X-Signature" in r.headers["Access-Control-Allow-Headers"]
    assert r.headers["Access-Control-Allow-Methods"] == "GET, POST, OPTIONS"


def test_cors_wildcard_for_other_origins(client):
    r = client.get("/agent/info", headers={"Origin": "https://elsewhere.example"})
    assert r.headers["Access-Control-Allow-Origin"] == "*"
    r = client.get("/agent/info")
    assert r.headers["Access-Control-Allow-Origin"] == "*"


def test_cors_headers_on_error_responses(client):
    r = client.post("/print", json={}, headers={"Origin": "http://localhost:3000"})
    assert r.status_code == 401
    assert r.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"


@pytest.mark.parametrize("path", ["/print", "/printer/select", "/agent/info", "/does-not-exist"])
def test_options_preflight_short_circuits(client, dispatched, path):
    r = client.options(path, headers={"Origin": "https://www.keep-os.com"})
    assert r.status_code == 200
    assert r.headers["Access-Control-Allow-Origin"] == "https://www.keep-os.com"
    assert dispatched == []


def test_allowed_origins_from_env(store_path, monkeypatch):
    monkeypatch.setenv("PRINTAGENT_ALLOWED_ORIGINS", "https://pos.example, https://admin.example")
    monkeypatch.setattr(api, "list_printers", lambda: [])
    client = create_app(store_path=str(store_path)).test_client()
    r = client.get("/agent/info", headers={"Origin": "https://admin.example"})
    assert r.headers["Access-Control-Allow-Origin"] == "https://admin.example"
    r = client.get("/agent/info", headers={"Origin": "https://keep-os.com"})
    assert r.headers["Access-Control-Allow-Origin"] == "*"


def test_unknown_route_is_json_404(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.get_json() == {"error": "Not Found"}


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    body = r.get_json()
    assert body["status"] == "ok"
    assert body["store_ok"] is True
    assert body["printers"] == 2


def test_healthz_degraded_without_printers(client, monkeypatch):
    import print_agent.web.health as health

    monkeypatch.setattr(health, "list_printers", lambda: [])
    body = client.get("/healthz").get_json()
    assert body["status"] == "degraded"
    assert body["reason"] == "no_printers"
