"""
Command-line entry point: `python -m print_agent` or `print-agent`.
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from print_agent.core.config import get_host, get_port, get_store_path


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="print-agent",
        description="Local print bridge: signed HTTP print jobs to OS spoolers or raw TCP printers.",
    )
    parser.add_argument("--host", default=get_host(), help="Listen address (default: %(default)s)")
    parser.add_argument(
        "--port",
        type=int,
        default=get_port(),
        help="First port to try; taken ports are skipped upward (default: %(default)s)",
    )
    parser.add_argument("--store", default=None, help=f"Store file (default: {get_store_path()})")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)

    from print_agent import create_app
    from print_agent.server import serve

    app = create_app(store_path=args.store)
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    serve(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
