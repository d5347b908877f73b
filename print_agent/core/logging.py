"""
Logging utilities for the Print Agent.

- RequestIdFilter attaches request_id, path, client and the resolved print
  target when inside a Flask request context
- JsonFormatter emits structured logs when PRINTAGENT_JSON_LOGS=true
- configure_logging() initializes root logging with journald or console and
  makes Flask's logger propagate to root
"""

from __future__ import annotations

import logging
import os

NO_VALUE = "-"

# attribute name -> LogRecord field, in output order
_CONTEXT_FIELDS = ("request_id", "path", "client", "print_target")


class RequestIdFilter(logging.Filter):
    """
    Attach request-scoped metadata to log records:
    request_id, path, client (remote address) and print_target (the printer
    a /print job resolved to, once known). Every field is "-" outside of a
    Flask request context.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for name in _CONTEXT_FIELDS:
            setattr(record, name, NO_VALUE)
        try:
            from flask import g, has_request_context, request  # lazy import

            if has_request_context():
                record.request_id = getattr(g, "request_id", NO_VALUE)
                record.path = request.path
                record.client = request.remote_addr or NO_VALUE
                record.print_target = getattr(g, "print_target", NO_VALUE)
        except Exception:
            pass
        return True


class JsonFormatter(logging.Formatter):
    """
    JSON formatter: timestamp, level, logger, message, plus whichever request
    fields are set.
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        from json import dumps

        base = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", NO_VALUE),
        }
        for name in _CONTEXT_FIELDS[1:]:
            value = getattr(record, name, NO_VALUE)
            if value != NO_VALUE:
                base[name] = value
        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)
        return dumps(base, ensure_ascii=False)


PLAIN_FORMAT = "[%(asctime)s] %(levelname)s %(request_id)s %(client)s %(name)s: %(message)s (printer=%(print_target)s)"


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure root logging for the agent.

    Behavior:
    - Sets root logger level (INFO by default)
    - Replaces existing root handlers so repeated factory calls do not duplicate output
    - Chooses JSON or plain formatter based on PRINTAGENT_JSON_LOGS
    - Prefers systemd's JournalHandler, falls back to StreamHandler
    - Adds RequestIdFilter so both formatters can reference the request fields
    - Routes Flask's and werkzeug's loggers through root

    Returns the configured root logger.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = []

    json_logs = os.environ.get("PRINTAGENT_JSON_LOGS", "false").lower() in ("1", "true", "yes")
    formatter: logging.Formatter = JsonFormatter() if json_logs else logging.Formatter(PLAIN_FORMAT)

    try:
        from systemd.journal import JournalHandler  # type: ignore

        handler: logging.Handler = JournalHandler(SYSLOG_IDENTIFIER="print-agent")
    except ImportError:
        handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())
    root.addHandler(handler)

    for name in ("flask.app", "werkzeug"):
        lg = logging.getLogger(name)
        lg.handlers = []
        lg.propagate = True

    return root


__all__ = ["JsonFormatter", "PLAIN_FORMAT", "RequestIdFilter", "configure_logging"]
