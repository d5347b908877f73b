from __future__ import annotations

"""
Order models consumed by the receipt renderer.

Amounts on items are minor currency units (cents); the order total is a
decimal currency amount.
"""

from decimal import Decimal
from typing import List, Union

from pydantic import BaseModel, Field, field_validator


class OrderItem(BaseModel):
    """A single order line."""
    name: str = Field(description="Item name as printed on the receipt", examples=["Coffee"])
    quantity: int = Field(default=1, description="Number of units", examples=[2])
    amount: int = Field(description="Line amount in minor currency units", examples=[350])

    @field_validator("name")
    @classmethod
    def _name_one_line(cls, v: str) -> str:
        # receipt lines are newline-delimited
        return " ".join(str(v).split())


class Order(BaseModel):
    """An order to render as a receipt."""
    id: Union[str, int] = Field(description="Opaque order identifier", examples=["A-1001", 1001])
    items: List[OrderItem] = Field(default_factory=list)
    total: Decimal = Field(description="Order total in currency units", examples=["7.00"])

    @field_validator("items", mode="before")
    @classmethod
    def _null_items_is_empty(cls, v):
        return [] if v is None else v


__all__ = ["Order", "OrderItem"]
