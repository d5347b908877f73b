from __future__ import annotations

"""
Pydantic schemas for the Print Agent HTTP API.

These models validate incoming request bodies and shape the JSON responses.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from print_agent.printing.models import Order


def _has_control_chars(s: str) -> bool:
    return any(ord(c) < 32 or ord(c) == 127 for c in s)


class SelectPrinterRequest(BaseModel):
    """Body of POST /printer/select. A null printer clears the default."""
    printer: Optional[str] = Field(
        description="OS print queue name or IPv4[:port] of a network printer",
        examples=["Kitchen-Printer", "192.168.1.50", "192.168.1.50:9101", None],
    )

    @field_validator("printer")
    @classmethod
    def _printer_rules(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("printer name required")
        if _has_control_chars(v):
            raise ValueError("control characters not allowed")
        return v


class PrintJobRequest(BaseModel):
    """Body of POST /print."""
    model_config = ConfigDict(populate_by_name=True)

    type: Optional[str] = Field(
        default=None,
        description="'raw' passes the receipt through untouched; anything else renders the order",
        examples=["raw", "order"],
    )
    receipt: Optional[str] = Field(
        default=None,
        description="Raw ESC/POS data as a string (required when type is 'raw')",
    )
    order: Optional[Order] = Field(default=None, description="Order to render (required unless type is 'raw')")
    printer_name: Optional[str] = Field(
        default=None,
        alias="printerName",
        description="Overrides the stored default printer for this job",
    )

    @property
    def is_raw(self) -> bool:
        return self.type == "raw"

    @field_validator("printer_name")
    @classmethod
    def _blank_printer_is_none(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        return v or None

    @model_validator(mode="after")
    def _payload_present(self) -> "PrintJobRequest":
        if self.is_raw and self.receipt is None:
            raise ValueError("receipt required for raw print jobs")
        if not self.is_raw and self.order is None:
            raise ValueError("order required for order print jobs")
        return self


class OkResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class AgentInfo(BaseModel):
    """Response of GET /agent/info."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    version: str
    secret: str
    default_printer: Optional[str] = Field(default=None, alias="defaultPrinter")
    printers: List[str] = Field(default_factory=list)


__all__ = [
    "AgentInfo",
    "ErrorResponse",
    "OkResponse",
    "PrintJobRequest",
    "SelectPrinterRequest",
]
