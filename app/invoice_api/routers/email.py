"""
Router for sending reminder emails.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..models import MessageResponse, SendReminderRequest
from ..models_db import User
from ..services.auth_service import get_current_user
from ..services.email_service import EmailDeliveryError, EmailService, get_email_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["email"])


@router.post("/send-reminder", response_model=MessageResponse)
async def send_reminder(
    request: SendReminderRequest,
    current_user: User = Depends(get_current_user),
    email_service: EmailService = Depends(get_email_service),
) -> MessageResponse:
    """
    Email a drafted reminder to a client.

    The ``Subject:`` line of the reminder becomes the email subject.

    Args:
        request: Recipient, client name, reminder text and optional sender name.
        current_user: Authenticated user.
        email_service: SMTP email service.

    Returns:
        Confirmation message.
    """
    if not (request.client_email and request.client_name and request.reminder_text):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields",
        )

    sender_name = request.sender_name or current_user.business_name or current_user.name
    try:
        email_service.send_reminder(
            to=request.client_email,
            reminder_text=request.reminder_text,
            sender_name=sender_name,
        )
    except EmailDeliveryError as e:
        logger.error("Reminder to %s failed: %s", request.client_email, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send email",
        )

    return MessageResponse(message="Reminder email sent successfully")
