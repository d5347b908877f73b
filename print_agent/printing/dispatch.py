"""
Print dispatch: deliver a rendered or raw payload to its printer.

A printer identifier is classified once into either a network target
(IPv4[:port], raw TCP, port 9100 by default) or a local target (an OS print
queue fed through `lp -o raw`). Dispatch never raises for delivery problems;
it returns a DispatchResult the HTTP layer maps to a status code. No retries
are attempted here.
"""

from __future__ import annotations

import ipaddress
import logging
import os
import re
import socket
import subprocess
import tempfile
from dataclasses import dataclass
from typing import Optional, Union

from print_agent.core.config import DEFAULT_PRINTER_PORT, get_dispatch_timeout

logger = logging.getLogger(__name__)

_NETWORK_TARGET = re.compile(r"^(\d{1,3}(?:\.\d{1,3}){3})(?::(\d{1,5}))?$")

TEMP_PREFIX = "print_agent_receipt_"
TEMP_SUFFIX = ".bin"


@dataclass(frozen=True)
class LocalTarget:
    """An OS-registered print queue."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class NetworkTarget:
    """A raw TCP printer endpoint."""
    host: str
    port: int = DEFAULT_PRINTER_PORT

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


Target = Union[LocalTarget, NetworkTarget]


@dataclass(frozen=True)
class DispatchResult:
    ok: bool
    transport: str  # "tcp" or "spooler"
    output: str = ""
    error: Optional[str] = None


def classify_target(value: str) -> Target:
    """
    IPv4[:port] strings are always network targets, regardless of any OS
    queue with the same name; everything else names an OS queue.
    """
    text = (value or "").strip()
    m = _NETWORK_TARGET.match(text)
    if m:
        host, port_s = m.group(1), m.group(2)
        try:
            ipaddress.IPv4Address(host)
            port = int(port_s) if port_s else DEFAULT_PRINTER_PORT
        except ValueError:
            port = -1
        if 0 < port <= 65535:
            return NetworkTarget(host=host, port=port)
    return LocalTarget(name=text)


def send_tcp(target: NetworkTarget, payload: bytes, timeout: float) -> DispatchResult:
    """
    Connect, write the payload, half-close and wait for the printer to close.
    Connect and send errors fail the dispatch. A printer that holds the
    connection open after receiving everything is treated as delivered once
    the drain wait times out.
    """
    logger.info("Sending %d bytes to %s over TCP", len(payload), target)
    try:
        sock = socket.create_connection((target.host, target.port), timeout=timeout)
    except OSError as e:
        logger.error("TCP connect to %s failed: %s", target, e)
        return DispatchResult(ok=False, transport="tcp", error=str(e) or type(e).__name__)

    try:
        sock.sendall(payload)
        sock.shutdown(socket.SHUT_WR)
        try:
            while sock.recv(4096):
                pass
        except socket.timeout:
            logger.debug("Printer %s kept the connection open after write", target)
    except OSError as e:
        logger.error("TCP send to %s failed: %s", target, e)
        return DispatchResult(ok=False, transport="tcp", error=str(e) or type(e).__name__)
    finally:
        sock.close()

    return DispatchResult(ok=True, transport="tcp", output="sent")


def send_spooler(target: LocalTarget, payload: bytes, timeout: float) -> DispatchResult:
    """
    Write the payload to a temp file and hand it to `lp -o raw -d <queue>`.
    The temp file is always removed.
    """
    path = None
    try:
        fd, path = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX)
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
    except OSError as e:
        logger.error("Could not write spool file for %s: %s", target, e)
        if path:
            _remove_quietly(path)
        return DispatchResult(ok=False, transport="spooler", error=f"spool file write failed: {e}")

    cmd = ["lp", "-o", "raw", "-d", target.name, path]
    logger.info("Spooling %d bytes to queue %r", len(payload), target.name)
    try:
        proc = subprocess.run(cmd, capture_output=True, timeout=timeout, check=False)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.error("Spooler command for %r failed: %s", target.name, e)
        return DispatchResult(ok=False, transport="spooler", error=str(e))
    finally:
        _remove_quietly(path)

    stdout = proc.stdout.decode("utf-8", errors="replace").strip()
    stderr = proc.stderr.decode("utf-8", errors="replace").strip()
    if proc.returncode != 0:
        err = stderr or f"lp exited with status {proc.returncode}"
        logger.error("Spooler rejected job for %r: %s", target.name, err)
        return DispatchResult(ok=False, transport="spooler", output=stdout, error=err)
    return DispatchResult(ok=True, transport="spooler", output=stdout or "ok")


def _remove_quietly(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove spool file %s: %s", path, e)


def dispatch(target: Target, payload: bytes, timeout: Optional[float] = None) -> DispatchResult:
    """
    Deliver payload to target and report the outcome once.
    """
    t = get_dispatch_timeout() if timeout is None else timeout
    if isinstance(target, NetworkTarget):
        return send_tcp(target, payload, t)
    return send_spooler(target, payload, t)


__all__ = [
    "DispatchResult",
    "LocalTarget",
    "NetworkTarget",
    "Target",
    "classify_target",
    "dispatch",
    "send_spooler",
    "send_tcp",
]
