"""
Reminder email drafting.

The model writes a reminder following a fixed contract ("Subject:" first
line, "Hi {client}," greeting, business name in the signature). Its answer
is cleaned up; when it is missing, too short, or the call fails, a
deterministic template is used instead.
"""

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...models import ReminderDraft
from ...models_db import Invoice, InvoiceStatus
from .exceptions import AIServiceError
from .response_text import extract_response_text

if TYPE_CHECKING:
    from . import AIService

logger = logging.getLogger(__name__)

# Shorter answers are treated as a failed generation
MIN_REMINDER_LENGTH = 50

SUBJECT_LINE_RE = re.compile(r"^[ \t]*Subject:", re.IGNORECASE | re.MULTILINE)
CLOSING_LINE_RE = re.compile(
    r"^[ \t]*(?:Best regards|Kind regards|Warm regards|Sincerely|Thank you|Thanks),?[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)


@dataclass
class ReminderDetails:
    """Invoice facts rendered into the prompt and the fallback template."""

    client_name: str
    invoice_number: str
    amount: str
    due_date: str
    business_name: str
    is_paid: bool


def reminder_details(invoice: Invoice) -> ReminderDetails:
    """Collect display values for an invoice, with defaults for gaps."""
    bill_to = invoice.bill_to or {}
    bill_from = invoice.bill_from or {}
    owner_business = invoice.user.business_name if invoice.user else None

    if isinstance(invoice.total, (int, float)):
        amount = f"${invoice.total:.2f}"
    else:
        amount = "an amount"

    if invoice.due_date:
        due = invoice.due_date
        due_date = f"{due:%B} {due.day}, {due.year}"
    else:
        due_date = "the due date"

    return ReminderDetails(
        client_name=bill_to.get("clientName") or "Valued Client",
        invoice_number=invoice.invoice_number or "Unknown",
        amount=amount,
        due_date=due_date,
        business_name=bill_from.get("businessName") or owner_business or "Our Company",
        is_paid=invoice.status == InvoiceStatus.PAID,
    )


def build_reminder_prompt(details: ReminderDetails) -> str:
    """Build the reminder prompt."""
    return f"""You are a professional and polite accounting assistant. Write a friendly reminder email to a client about an overdue or upcoming invoice payment.

Use the following details to personalize the email:
- Client Name: {details.client_name}
- Invoice Number: {details.invoice_number}
- Amount Due: {details.amount}
- Due Date: {details.due_date}
- Business Name: {details.business_name}

The email must:
- Start with "Subject:" as the first line.
- Begin the body with "Hi {details.client_name}," without any intro like "Of course!" or explanations.
- Maintain a friendly, clear, concise tone.
- End with a proper closing that includes the Business Name in the signature."""


def build_fallback_reminder(details: ReminderDetails) -> str:
    """
    Render the deterministic reminder template.

    The summary block uses the same labels the fallback parser recognizes,
    so a reminder pasted back into the parser yields the client and amount.
    """
    if details.is_paid:
        status_phrase = "marked as paid"
    else:
        status_phrase = f"due on {details.due_date}"

    return f"""Subject: Friendly reminder: Invoice #{details.invoice_number} due

Hi {details.client_name},

I hope you're well. This is a friendly reminder that the invoice below is {status_phrase}. Please let us know if you have any questions or need additional information.

Bill To: {details.client_name}
Invoice number: {details.invoice_number}
Amount due: {details.amount}
Due date: {details.due_date}

Thank you for your prompt attention.

Best regards,
{details.business_name}"""


def clean_reminder_text(text: str, business_name: str) -> str:
    """
    Enforce the reminder contract on a model answer.

    Drops any conversational preamble before the "Subject:" line and makes
    sure the business name appears in the signature.
    """
    subject = SUBJECT_LINE_RE.search(text)
    if subject:
        text = text[subject.start():]
    text = text.strip()

    if business_name.lower() in text.lower():
        return text

    closings = list(CLOSING_LINE_RE.finditer(text))
    if closings:
        end = closings[-1].end()
        return f"{text[:end]}\n{business_name}{text[end:]}"
    return f"{text}\n\n{business_name}"


async def generate_reminder(invoice: Invoice, ai_service: "AIService") -> ReminderDraft:
    """
    Draft a payment reminder for an invoice.

    Args:
        invoice: Persisted invoice to remind about.
        ai_service: Injected model client.

    Returns:
        ReminderDraft; ai_error is set when the template was used.
    """
    details = reminder_details(invoice)

    try:
        response = await ai_service.generate_async(build_reminder_prompt(details))
    except AIServiceError as e:
        logger.error("AI reminder generation failed for invoice %s: %s", invoice.id, e)
        return ReminderDraft(
            reminder_text=build_fallback_reminder(details),
            ai_error=str(e) or "AI generation failed",
        )

    reminder_text = extract_response_text(response).strip()
    if len(reminder_text) < MIN_REMINDER_LENGTH:
        logger.warning(
            "AI returned empty or short reminder (%d chars) for invoice %s, using fallback",
            len(reminder_text),
            invoice.id,
        )
        return ReminderDraft(
            reminder_text=build_fallback_reminder(details),
            ai_error="AI returned empty response",
        )

    logger.info("AI reminder drafted for invoice %s", invoice.id)
    return ReminderDraft(reminder_text=clean_reminder_text(reminder_text, details.business_name))
