"""
Receipt rendering for ESC/POS printers.

Orders are laid out on python-escpos's in-memory Dummy printer; the captured
output is the exact byte stream sent to a spooler or network printer.
Rendering is pure: the same order always yields the same bytes.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from escpos.printer import Dummy

from print_agent.core.config import get_business_name
from print_agent.printing.models import Order

logger = logging.getLogger(__name__)

SEPARATOR = "-" * 31
FOOTER = "Thank you for your patronage!"

_CENTS = Decimal("0.01")


def format_money(value: Union[Decimal, int, float, str]) -> str:
    """
    Two decimal places, half-up rounding.
    """
    d = value if isinstance(value, Decimal) else Decimal(str(value))
    return str(d.quantize(_CENTS, rounding=ROUND_HALF_UP))


def format_minor_units(amount: int) -> str:
    """Minor currency units (cents) as a 2-decimal amount: 350 -> '3.50'."""
    return format_money(Decimal(int(amount)) / 100)


def render_receipt(order: Order, business_name: Optional[str] = None) -> bytes:
    """
    Render an order to ESC/POS bytes: reset, centered bold header, order id,
    one line per item, total, footer and a paper cut.
    """
    name = business_name or get_business_name()
    p = Dummy()

    p.hw("INIT")
    p.set(align="center", bold=True)
    p.text(f"{name}\n")
    p.set(align="center", bold=False)
    p.text(f"Order: {order.id}\n")
    p.text(f"{SEPARATOR}\n")
    for item in order.items:
        p.text(f"{item.quantity}x {item.name} {format_minor_units(item.amount)}\n")
    p.text(f"{SEPARATOR}\n")
    p.text(f"TOTAL: {format_money(order.total)}\n")
    p.text(f"\n\n{FOOTER}\n\n\n")
    p.cut()

    data = p.output
    logger.debug("Rendered order %s: %d items, %d bytes", order.id, len(order.items), len(data))
    return data


def encode_raw_receipt(receipt: str) -> bytes:
    """
    Encode a raw receipt string byte-for-byte (latin-1), so control codes in
    the range \\x00-\\xff pass through unchanged. Characters outside latin-1
    become '?'.
    """
    return receipt.encode("latin-1", errors="replace")


__all__ = ["FOOTER", "SEPARATOR", "encode_raw_receipt", "format_minor_units", "format_money", "render_receipt"]
