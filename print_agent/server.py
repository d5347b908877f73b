"""
HTTP server bootstrap.

Binds the loopback listener, moving up one port at a time while the port is
taken, then serves the Flask app from a threaded werkzeug server on the
bound socket.
"""

from __future__ import annotations

import errno
import logging
import socket
import sys
from typing import Optional

from flask import Flask
from werkzeug.serving import BaseWSGIServer, make_server

from print_agent.core.config import get_host, get_port

logger = logging.getLogger(__name__)

LISTEN_BACKLOG = 128
MAX_PORT = 65535


def _port_in_use(e: OSError) -> bool:
    return e.errno in (errno.EADDRINUSE, getattr(errno, "WSAEADDRINUSE", errno.EADDRINUSE))


def bind_socket(host: str, port: int) -> socket.socket:
    """
    Return a listening socket on (host, port), or on the first higher port
    that is free. Errors other than "address in use" propagate.
    """
    while True:
        if port > MAX_PORT:
            raise OSError(errno.EADDRINUSE, f"No free port on {host} up to {MAX_PORT}")
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        if sys.platform != "win32":
            # Windows lets SO_REUSEADDR steal a port another process listens on
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
            sock.listen(LISTEN_BACKLOG)
        except OSError as e:
            sock.close()
            if not _port_in_use(e):
                raise
            logger.warning("Port %d in use. Trying %d...", port, port + 1)
            port += 1
            continue
        return sock


def create_server(app: Flask, host: Optional[str] = None, port: Optional[int] = None) -> BaseWSGIServer:
    """
    Bind (with port probing) and wrap the socket in a threaded WSGI server.
    """
    h = host or get_host()
    sock = bind_socket(h, port or get_port())
    try:
        server = make_server(h, sock.getsockname()[1], app, threaded=True, fd=sock.fileno())
    finally:
        # make_server duplicates the descriptor
        sock.close()
    return server


def serve(app: Flask, host: Optional[str] = None, port: Optional[int] = None) -> None:
    server = create_server(app, host, port)
    bound_host, bound_port = server.server_address[:2]
    logger.info("Print Agent running at http://%s:%d", bound_host, bound_port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()


__all__ = ["bind_socket", "create_server", "serve"]
