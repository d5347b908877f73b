"""
Config utilities for the Print Agent.

Responsibilities:
- Resolve the store path and runtime settings from the environment
- Provide JSON load/save helpers used by the persistent store
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, List, Optional

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9100
DEFAULT_PRINTER_PORT = 9100
DEFAULT_BUSINESS_NAME = "KEEP OS RESTAURANT"
DEFAULT_ALLOWED_ORIGINS = (
    "https://keep-os.com",
    "https://www.keep-os.com",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)

AGENT_NAME = "KeepOS Print Agent"


def env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except Exception:
        return default


def env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except Exception:
        return default


def default_store_path() -> str:
    """
    The store lives next to the process: <cwd>/store.json
    """
    return str(Path.cwd() / "store.json")


def get_store_path() -> str:
    """
    Return the store path honoring PRINTAGENT_STORE_PATH override.
    """
    return os.environ.get("PRINTAGENT_STORE_PATH") or default_store_path()


def get_host() -> str:
    return os.environ.get("PRINTAGENT_HOST", DEFAULT_HOST)


def get_port() -> int:
    return env_int("PRINTAGENT_PORT", DEFAULT_PORT)


def get_dispatch_timeout() -> float:
    return env_float("PRINTAGENT_DISPATCH_TIMEOUT", 30.0)


def get_discovery_timeout() -> float:
    return env_float("PRINTAGENT_DISCOVERY_TIMEOUT", 10.0)


def get_max_content_length() -> int:
    return env_int("PRINTAGENT_MAX_CONTENT_LENGTH", 1024 * 1024)  # 1 MiB


def get_business_name() -> str:
    return os.environ.get("PRINTAGENT_BUSINESS_NAME") or DEFAULT_BUSINESS_NAME


def get_allowed_origins() -> List[str]:
    """
    Comma separated PRINTAGENT_ALLOWED_ORIGINS, else the first-party defaults.
    """
    raw = os.environ.get("PRINTAGENT_ALLOWED_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or list(DEFAULT_ALLOWED_ORIGINS)


def load_json(path: str) -> Optional[Any]:
    """
    Load a JSON document if it exists; return None if missing.

    Raises:
        json.JSONDecodeError if the file exists but contains invalid JSON.
        OSError for I/O errors other than missing file.
    """
    p = Path(path)
    if not p.exists():
        return None
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def save_json(data: Any, path: str) -> None:
    """
    Save a JSON document, creating parent directories as needed.

    Writes atomically by using a temporary file and os.replace().
    Raises OSError on I/O failures.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = p.with_suffix(p.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp_path, p)


__all__ = [
    "AGENT_NAME",
    "DEFAULT_ALLOWED_ORIGINS",
    "DEFAULT_BUSINESS_NAME",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_PRINTER_PORT",
    "default_store_path",
    "env_float",
    "env_int",
    "get_allowed_origins",
    "get_business_name",
    "get_discovery_timeout",
    "get_dispatch_timeout",
    "get_host",
    "get_max_content_length",
    "get_port",
    "get_store_path",
    "load_json",
    "save_json",
]
