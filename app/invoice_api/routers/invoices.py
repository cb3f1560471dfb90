"""
Router for invoice CRUD endpoints.

Handles:
- Creating invoices with server-side totals
- Listing and reading the current user's invoices
- Updating (including status changes) and deleting invoices
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import (
    InvoiceCreateRequest,
    InvoiceResponse,
    InvoiceUpdateRequest,
    MessageResponse,
)
from ..models_db import Invoice, InvoiceStatus, User
from ..services.auth_service import get_current_user
from ..services.invoice_service import (
    build_items,
    compute_totals,
    invoice_to_response,
    parse_invoice_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def _get_owned_invoice(invoice_id: str, current_user: User, db: Session) -> Invoice:
    """Load an invoice, enforcing that it belongs to the current user."""
    invoice_uuid = parse_invoice_id(invoice_id)

    invoice = db.query(Invoice).filter(Invoice.id == invoice_uuid).first()
    if not invoice:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invoice not found",
        )
    if invoice.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized",
        )
    return invoice


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    request: InvoiceCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> InvoiceResponse:
    """
    Create an invoice for the current user.

    Line totals, subtotal, tax total and grand total are computed here;
    any totals sent by the client are ignored.

    Args:
        request: Invoice fields and line items.
        current_user: Authenticated user.
        db: Database session.

    Returns:
        The stored invoice.
    """
    subtotal, tax_total, total = compute_totals(request.items)

    invoice = Invoice(
        user_id=current_user.id,
        invoice_number=request.invoice_number,
        due_date=request.due_date,
        bill_from=request.bill_from.model_dump(by_alias=True),
        bill_to=request.bill_to.model_dump(by_alias=True),
        notes=request.notes,
        payment_terms=request.payment_terms,
        subtotal=subtotal,
        tax_total=tax_total,
        total=total,
        items=build_items(request.items),
    )
    if request.invoice_date is not None:
        invoice.invoice_date = request.invoice_date

    db.add(invoice)
    db.commit()
    db.refresh(invoice)

    logger.info(
        "Created invoice %s (id=%s, total=%.2f) for user %s",
        invoice.invoice_number,
        invoice.id,
        invoice.total,
        current_user.id,
    )

    return invoice_to_response(invoice)


@router.get("", response_model=list[InvoiceResponse])
async def list_invoices(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[InvoiceResponse]:
    """List the current user's invoices, newest first."""
    invoices = (
        db.query(Invoice)
        .filter(Invoice.user_id == current_user.id)
        .order_by(Invoice.created_at.desc())
        .all()
    )
    return [invoice_to_response(invoice) for invoice in invoices]


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> InvoiceResponse:
    """Get a single invoice by id."""
    return invoice_to_response(_get_owned_invoice(invoice_id, current_user, db))


@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: str,
    request: InvoiceUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> InvoiceResponse:
    """
    Update an invoice.

    Only fields present in the request are changed. Sending ``items``
    replaces all line items and recalculates the totals.

    Args:
        invoice_id: UUID of the invoice.
        request: Fields to update.
        current_user: Authenticated user.
        db: Database session.

    Returns:
        The updated invoice.
    """
    invoice = _get_owned_invoice(invoice_id, current_user, db)
    updates = request.model_dump(exclude_unset=True)

    for field_name in ("invoice_number", "invoice_date", "due_date", "notes", "payment_terms"):
        if field_name in updates and updates[field_name] is not None:
            setattr(invoice, field_name, updates[field_name])

    if "due_date" in updates and updates["due_date"] is None:
        invoice.due_date = None
    if "notes" in updates and updates["notes"] is None:
        invoice.notes = None

    if request.bill_from is not None:
        invoice.bill_from = request.bill_from.model_dump(by_alias=True)
    if request.bill_to is not None:
        invoice.bill_to = request.bill_to.model_dump(by_alias=True)
    if request.status is not None:
        invoice.status = InvoiceStatus(request.status)

    if request.items is not None:
        invoice.subtotal, invoice.tax_total, invoice.total = compute_totals(request.items)
        invoice.items = build_items(request.items)

    db.commit()
    db.refresh(invoice)

    logger.info("Updated invoice %s (fields=%s)", invoice.id, sorted(updates))

    return invoice_to_response(invoice)


@router.delete("/{invoice_id}", response_model=MessageResponse)
async def delete_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Delete an invoice and its line items."""
    invoice = _get_owned_invoice(invoice_id, current_user, db)

    db.delete(invoice)
    db.commit()

    logger.info("Deleted invoice %s", invoice_id)

    return MessageResponse(message="Invoice deleted successfully")
