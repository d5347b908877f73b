"""
Persistent key/value store for the Print Agent.

Holds the installation secret and the selected default printer in a single
JSON object on disk. Every mutation is written through immediately; a missing
or corrupt file is treated as an empty store.
"""

from __future__ import annotations

import json
import logging
import secrets
import threading
from typing import Any, Dict, Optional

from print_agent.core.config import get_store_path, load_json, save_json

logger = logging.getLogger(__name__)

SECRET_KEY = "secret"
DEFAULT_PRINTER_KEY = "defaultPrinter"
SECRET_BYTES = 20


class Store:
    """
    File-backed store. Reads and writes go through a re-entrant lock because
    the HTTP server handles requests on multiple threads.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or get_store_path()
        self._lock = threading.RLock()
        self._data: Dict[str, Any] = {}

    def load(self) -> Dict[str, Any]:
        """
        Return the last saved mapping, or {} when the file is missing or
        unparsable. Never raises.
        """
        try:
            data = load_json(self.path)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Store at %s unreadable, starting empty: %s", self.path, e)
            data = None
        if not isinstance(data, dict):
            if data is not None:
                logger.warning("Store at %s is not a JSON object, starting empty", self.path)
            data = {}
        with self._lock:
            self._data = dict(data)
            return dict(self._data)

    def save(self, data: Optional[Dict[str, Any]] = None) -> None:
        """
        Overwrite the backing file with the given mapping (or the current state).
        """
        with self._lock:
            if data is not None:
                self._data = dict(data)
            save_json(self._data, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = value
            self.save()

    def ensure_secret(self) -> str:
        """
        Generate and persist the installation secret on first run.
        Returns the (possibly pre-existing) secret.
        """
        with self._lock:
            current = self._data.get(SECRET_KEY)
            if isinstance(current, str) and current:
                return current
            secret = secrets.token_hex(SECRET_BYTES)
            self._data[SECRET_KEY] = secret
            self.save()
        logger.info("Generated new agent secret, stored at %s", self.path)
        return secret

    @property
    def secret(self) -> Optional[str]:
        return self.get(SECRET_KEY)

    @property
    def default_printer(self) -> Optional[str]:
        return self.get(DEFAULT_PRINTER_KEY)

    def select_printer(self, printer: Optional[str]) -> None:
        """
        Persist a new default printer. None clears the selection.
        """
        self.set(DEFAULT_PRINTER_KEY, printer)
        logger.info("Default printer set to %r", printer)


def open_store(path: Optional[str] = None) -> Store:
    """
    Load the store from disk and make sure a secret exists before use.
    """
    store = Store(path)
    store.load()
    store.ensure_secret()
    return store


__all__ = ["DEFAULT_PRINTER_KEY", "SECRET_KEY", "Store", "open_store"]
