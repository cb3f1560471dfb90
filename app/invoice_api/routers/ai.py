"""
Router for AI-assisted endpoints.

Handles:
- Turning free text into an invoice draft
- Drafting payment reminder emails
- Dashboard insight summaries

Model failures never fail these endpoints: each one degrades to its
deterministic fallback and reports the failure in ``aiError``.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import (
    DashboardSummaryResponse,
    GenerateReminderRequest,
    ParseTextRequest,
    ParseTextResponse,
    ReminderDraft,
)
from ..models_db import Invoice, User
from ..services.ai import AIService, get_ai_service
from ..services.auth_service import get_current_user
from ..services.invoice_service import parse_invoice_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post(
    "/parse-text",
    response_model=ParseTextResponse,
    response_model_exclude_none=True,
)
async def parse_text(
    request: ParseTextRequest,
    current_user: User = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
) -> ParseTextResponse:
    """
    Extract client details and line items from free text.

    Args:
        request: Body with the text to parse.
        current_user: Authenticated user.
        ai_service: AI service instance.

    Returns:
        Invoice draft; ``aiError`` is set when the regex fallback was used.
    """
    if not request.text or not request.text.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Text is required",
        )

    logger.info("Parsing %d chars of invoice text for user %s", len(request.text), current_user.id)
    return await ai_service.parse_invoice_text(request.text)


@router.post(
    "/generate-reminder",
    response_model=ReminderDraft,
    response_model_exclude_none=True,
)
async def generate_reminder(
    request: GenerateReminderRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
) -> ReminderDraft:
    """
    Draft a reminder email for one of the current user's invoices.

    Args:
        request: Body with the invoice id.
        current_user: Authenticated user.
        db: Database session.
        ai_service: AI service instance.

    Returns:
        Reminder text whose first line is ``Subject: ...``.
    """
    invoice_uuid = parse_invoice_id(request.invoice_id)

    invoice = (
        db.query(Invoice)
        .filter(Invoice.id == invoice_uuid, Invoice.user_id == current_user.id)
        .first()
    )
    if not invoice:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invoice not found",
        )

    return await ai_service.generate_reminder(invoice)


@router.get(
    "/dashboard-summary",
    response_model=DashboardSummaryResponse,
    response_model_exclude_none=True,
)
async def dashboard_summary(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai_service: AIService = Depends(get_ai_service),
) -> DashboardSummaryResponse:
    """Summarize the current user's invoices into a few insights."""
    invoices = (
        db.query(Invoice)
        .filter(Invoice.user_id == current_user.id)
        .order_by(Invoice.created_at.desc())
        .all()
    )
    return await ai_service.generate_insights(invoices)
