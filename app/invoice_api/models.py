"""
Pydantic models for the invoice API.

Defines request/response payloads and the canonical invoice draft produced
by the AI parsing pipeline. JSON field names are camelCase on the wire
(clientName, unitPrice, aiError, ...) and snake_case in Python.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase while accepting either naming."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _parse_loose_date(value: Any) -> Any:
    """Accept ISO datetimes as well as written dates ("May 1, 2024")."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
        from dateutil import parser

        try:
            return parser.parse(value)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Unrecognized date: {value}") from e
    return value


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    version: str = Field(default="1.0.0")
    message: str | None = Field(default=None)


# =============================================================================
# AI Pipeline Models
# =============================================================================


class LineItemDraft(CamelModel):
    """
    A single line item recovered from free text or model output.

    Quantity and unit price always hold finite numbers so that totals
    computed downstream never see NaN.
    """

    name: str = Field(default="Item", description="Item or service description")
    quantity: float = Field(default=1.0, allow_inf_nan=False)
    unit_price: float = Field(default=0.0, allow_inf_nan=False)


class ParsedInvoiceDraft(CamelModel):
    """
    Canonical invoice draft.

    Produced by both the AI path and the deterministic fallback path;
    never persisted directly.
    """

    client_name: str = Field(default="")
    email: str = Field(default="")
    address: str = Field(default="")
    items: list[LineItemDraft] = Field(default_factory=list)


class ParseTextRequest(CamelModel):
    """Request body for POST /api/ai/parse-text."""

    text: str | None = Field(default=None, description="Free text to parse")


class ParseTextResponse(ParsedInvoiceDraft):
    """Parsed draft plus an advisory error when the AI path was abandoned."""

    ai_error: str | None = Field(default=None)


class GenerateReminderRequest(CamelModel):
    """Request body for POST /api/ai/generate-reminder."""

    invoice_id: str | None = Field(default=None)


class ReminderDraft(CamelModel):
    """Reminder email text ("Subject: ..." first line, then the body)."""

    reminder_text: str
    ai_error: str | None = Field(default=None)


class DashboardSummaryResponse(CamelModel):
    """Short actionable insights about the user's invoices."""

    insights: list[str] = Field(default_factory=list)
    ai_error: str | None = Field(default=None)


# =============================================================================
# Invoice Models
# =============================================================================


InvoiceStatusValue = Literal["Paid", "Unpaid"]


class BillFrom(CamelModel):
    """Issuing party."""

    business_name: str | None = None
    email: str | None = None
    address: str | None = None
    phone: str | None = None


class BillTo(CamelModel):
    """Billed client."""

    client_name: str | None = None
    email: str | None = None
    address: str | None = None
    phone: str | None = None


class InvoiceItemInput(CamelModel):
    """Line item as submitted by the client."""

    name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., ge=0, allow_inf_nan=False)
    unit_price: float = Field(..., ge=0, allow_inf_nan=False)
    tax_percent: float = Field(default=0.0, ge=0, le=100, allow_inf_nan=False)


class InvoiceItemResponse(InvoiceItemInput):
    """Line item with its computed total."""

    total: float


class InvoiceCreateRequest(CamelModel):
    """Request body for POST /api/invoices."""

    invoice_number: str = Field(..., min_length=1, max_length=100)
    invoice_date: datetime | None = None
    due_date: datetime | None = None
    bill_from: BillFrom = Field(default_factory=BillFrom)
    bill_to: BillTo = Field(default_factory=BillTo)
    items: list[InvoiceItemInput] = Field(default_factory=list)
    notes: str | None = None
    payment_terms: str = Field(default="Net 15", max_length=100)

    @field_validator("invoice_date", "due_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        """Accept loosely formatted dates."""
        return _parse_loose_date(v)


class InvoiceUpdateRequest(CamelModel):
    """Request body for PUT /api/invoices/{id}. Omitted fields are kept."""

    invoice_number: str | None = Field(default=None, min_length=1, max_length=100)
    invoice_date: datetime | None = None
    due_date: datetime | None = None
    bill_from: BillFrom | None = None
    bill_to: BillTo | None = None
    items: list[InvoiceItemInput] | None = None
    notes: str | None = None
    payment_terms: str | None = Field(default=None, max_length=100)
    status: InvoiceStatusValue | None = None

    @field_validator("invoice_date", "due_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        """Accept loosely formatted dates."""
        return _parse_loose_date(v)


class InvoiceResponse(CamelModel):
    """Persisted invoice."""

    id: str
    user_id: str
    invoice_number: str
    invoice_date: datetime
    due_date: datetime | None = None
    bill_from: BillFrom
    bill_to: BillTo
    items: list[InvoiceItemResponse]
    notes: str | None = None
    payment_terms: str
    status: InvoiceStatusValue
    subtotal: float
    tax_total: float
    total: float
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Auth Models
# =============================================================================


class RegisterRequest(CamelModel):
    """Request body for POST /api/auth/register."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Lower-case and validate the email shape."""
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v


class LoginRequest(CamelModel):
    """Request body for POST /api/auth/login."""

    email: str
    password: str


class UpdateProfileRequest(CamelModel):
    """Request body for PUT /api/auth/me."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    business_name: str | None = None
    address: str | None = None
    phone: str | None = None


class UserResponse(CamelModel):
    """Public view of a user account."""

    id: str
    name: str
    email: str
    business_name: str | None = None
    address: str | None = None
    phone: str | None = None


class AuthResponse(CamelModel):
    """Token issued on register/login."""

    token: str
    user: UserResponse


# =============================================================================
# Email Models
# =============================================================================


class SendReminderRequest(CamelModel):
    """Request body for POST /api/send-reminder."""

    client_email: str | None = None
    client_name: str | None = None
    reminder_text: str | None = None
    sender_name: str | None = None


class MessageResponse(BaseModel):
    """Plain status message."""

    message: str
