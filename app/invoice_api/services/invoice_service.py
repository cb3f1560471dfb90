"""
Invoice totals and ORM <-> API conversion.
"""

import uuid
from collections.abc import Sequence

from fastapi import HTTPException, status

from ..models import (
    BillFrom,
    BillTo,
    InvoiceItemInput,
    InvoiceItemResponse,
    InvoiceResponse,
)
from ..models_db import Invoice, InvoiceItem


def line_amounts(item: InvoiceItemInput) -> tuple[float, float]:
    """Return (net amount, tax amount) for one line."""
    net = item.unit_price * item.quantity
    return net, net * (item.tax_percent or 0.0) / 100


def compute_totals(items: Sequence[InvoiceItemInput]) -> tuple[float, float, float]:
    """
    Compute (subtotal, tax_total, total) for a list of line items.

    subtotal is the sum of quantity * unit price, tax_total the sum of each
    line's tax, and total their sum.
    """
    subtotal = 0.0
    tax_total = 0.0
    for item in items:
        net, tax = line_amounts(item)
        subtotal += net
        tax_total += tax
    return round(subtotal, 2), round(tax_total, 2), round(subtotal + tax_total, 2)


def build_items(items: Sequence[InvoiceItemInput]) -> list[InvoiceItem]:
    """Create ORM line items with their totals, keeping input order."""
    rows = []
    for position, item in enumerate(items):
        net, tax = line_amounts(item)
        rows.append(
            InvoiceItem(
                position=position,
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_percent=item.tax_percent,
                total=round(net + tax, 2),
            )
        )
    return rows


def invoice_to_response(invoice: Invoice) -> InvoiceResponse:
    """Convert a persisted invoice to its API representation."""
    return InvoiceResponse(
        id=str(invoice.id),
        user_id=str(invoice.user_id),
        invoice_number=invoice.invoice_number,
        invoice_date=invoice.invoice_date,
        due_date=invoice.due_date,
        bill_from=BillFrom.model_validate(invoice.bill_from or {}),
        bill_to=BillTo.model_validate(invoice.bill_to or {}),
        items=[
            InvoiceItemResponse(
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_percent=item.tax_percent,
                total=item.total,
            )
            for item in invoice.items
        ],
        notes=invoice.notes,
        payment_terms=invoice.payment_terms,
        status=invoice.status.value,
        subtotal=invoice.subtotal,
        tax_total=invoice.tax_total,
        total=invoice.total,
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
    )


def parse_invoice_id(invoice_id: str | None) -> uuid.UUID:
    """
    Parse an invoice id from a path or body value.

    Raises:
        HTTPException: 400 if the id is missing or not a UUID.
    """
    if not invoice_id or not str(invoice_id).strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invoice ID is required",
        )
    try:
        return uuid.UUID(str(invoice_id).strip())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid invoice ID format",
        )
