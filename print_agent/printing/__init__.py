"""
Printing subsystem for the Print Agent.

- discovery: enumerate printers known to the host
- render: order -> ESC/POS bytes
- dispatch: target classification and delivery over TCP or the OS spooler
  (import dispatch() from print_agent.printing.dispatch)

Common functions are re-exported for easy import.
"""

from .discovery import list_printers
from .dispatch import DispatchResult, LocalTarget, NetworkTarget, classify_target
from .models import Order, OrderItem
from .render import encode_raw_receipt, render_receipt

__all__ = [
    "DispatchResult",
    "LocalTarget",
    "NetworkTarget",
    "Order",
    "OrderItem",
    "classify_target",
    "encode_raw_receipt",
    "list_printers",
    "render_receipt",
]
