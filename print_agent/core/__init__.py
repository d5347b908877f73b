"""
Core utilities for the Print Agent.

This package groups non-Flask helpers used across the agent:
- config: environment-driven settings, JSON load/save helpers
- logging: request-id aware logging filters/formatters and root logger config
- store: the persisted secret / default printer
- signing: HMAC request signatures

Exports are explicit to keep static analyzers happy.
"""

from .config import (
    AGENT_NAME,
    get_store_path,
    load_json,
    save_json,
)
from .logging import (
    JsonFormatter,
    RequestIdFilter,
    configure_logging,
)
from .signing import SIGNATURE_HEADER, sign, verify
from .store import Store, open_store

__all__ = [
    # config
    "AGENT_NAME",
    "get_store_path",
    "load_json",
    "save_json",
    # logging
    "configure_logging",
    "RequestIdFilter",
    "JsonFormatter",
    # signing
    "SIGNATURE_HEADER",
    "sign",
    "verify",
    # store
    "Store",
    "open_store",
]
