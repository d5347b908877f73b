import json
import logging

from flask import g

from print_agent.core.logging import PLAIN_FORMAT, JsonFormatter, RequestIdFilter


def _record(msg="Printed 12 bytes"):
    return logging.LogRecord("print_agent.web.api", logging.INFO, __file__, 1, msg, None, None)


def test_filter_outside_request_fills_placeholders():
    record = _record()
    assert RequestIdFilter().filter(record) is True
    assert (record.request_id, record.path, record.client, record.print_target) == ("-", "-", "-", "-")


def test_filter_attaches_request_and_print_target(app):
    with app.test_request_context("/print", method="POST", environ_base={"REMOTE_ADDR": "127.0.0.1"}):
        g.request_id = "req-1"
        g.print_target = "192.168.1.50:9100"
        record = _record()
        RequestIdFilter().filter(record)

    assert record.request_id == "req-1"
    assert record.path == "/print"
    assert record.client == "127.0.0.1"
    assert record.print_target == "192.168.1.50:9100"


def test_print_target_absent_until_resolved(app):
    with app.test_request_context("/agent/info"):
        g.request_id = "req-2"
        record = _record()
        RequestIdFilter().filter(record)
    assert record.print_target == "-"


def test_json_formatter_includes_set_fields_only():
    record = _record()
    RequestIdFilter().filter(record)
    record.print_target = "Kitchen-Printer"
    body = json.loads(JsonFormatter().format(record))
    assert body["msg"] == "Printed 12 bytes"
    assert body["request_id"] == "-"
    assert body["print_target"] == "Kitchen-Printer"
    assert "path" not in body and "client" not in body


def test_plain_format_renders_context():
    record = _record()
    RequestIdFilter().filter(record)
    record.print_target = "Bar"
    line = logging.Formatter(PLAIN_FORMAT).format(record)
    assert line.endswith("print_agent.web.api: Printed 12 bytes (printer=Bar)")
