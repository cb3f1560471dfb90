"""
Dashboard insight summaries.

Aggregates a user's invoices into counts and totals, asks the model for
two or three short actionable insights, and falls back to insights derived
from the same arithmetic when the model cannot be used.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from ...models import DashboardSummaryResponse
from ...models_db import Invoice, InvoiceStatus
from .exceptions import AIResponseFormatError, AIServiceError
from .parsing import parse_json_response
from .response_text import extract_response_text

if TYPE_CHECKING:
    from . import AIService

logger = logging.getLogger(__name__)

NO_DATA_INSIGHT = "No invoice data available to generate insights."
RECENT_INVOICE_COUNT = 5
MAX_INSIGHTS = 3


@dataclass
class InvoiceStats:
    """Aggregate figures over a user's invoices."""

    total_invoices: int = 0
    paid_count: int = 0
    unpaid_count: int = 0
    total_revenue: float = 0.0
    total_outstanding: float = 0.0
    recent: list[str] = field(default_factory=list)

    @property
    def paid_ratio(self) -> float:
        return self.paid_count / self.total_invoices if self.total_invoices else 0.0


def summarize_invoices(invoices: Sequence[Invoice]) -> InvoiceStats:
    """Count paid/unpaid invoices and sum revenue and outstanding amounts."""
    stats = InvoiceStats(total_invoices=len(invoices))
    for invoice in invoices:
        amount = invoice.total or 0.0
        if invoice.status == InvoiceStatus.PAID:
            stats.paid_count += 1
            stats.total_revenue += amount
        else:
            stats.unpaid_count += 1
            stats.total_outstanding += amount

    newest_first = sorted(
        invoices,
        key=lambda inv: inv.created_at or datetime.min,
        reverse=True,
    )
    stats.recent = [
        f"Invoice #{inv.invoice_number} for {(inv.total or 0.0):.2f} with status {inv.status.value}"
        for inv in newest_first[:RECENT_INVOICE_COUNT]
    ]
    return stats


def build_insights_prompt(stats: InvoiceStats) -> str:
    """Embed the invoice summary into the insights prompt."""
    data_summary = "\n".join(
        [
            f"- Total number of invoices: {stats.total_invoices}",
            f"- Total paid invoices: {stats.paid_count}",
            f"- Total unpaid/pending invoices: {stats.unpaid_count}",
            f"- Total revenue from paid invoices: {stats.total_revenue:.2f}",
            f"- Total outstanding amount from unpaid/pending invoices: {stats.total_outstanding:.2f}",
            f"- Recent invoices (last {RECENT_INVOICE_COUNT}): {', '.join(stats.recent)}",
        ]
    )
    return f"""You are a friendly and insightful financial analyst for a small business owner.
Based on the following summary of their invoice data, provide 2-3 concise and actionable insights.
Each insight should be a short string in a JSON array.
The insights should be encouraging and helpful. Do not just repeat the data.
For example, if there is a high outstanding amount, suggest sending reminders. If revenue is high, be encouraging.

Data Summary:
{data_summary}

Return your response as a valid JSON object with a single key "insights" which is an array of strings.
Example format: {{ "insights": ["Your revenue is looking strong this month!", "You have 5 overdue invoices. Consider sending reminders to get paid faster."] }}"""


def canned_insights(stats: InvoiceStats) -> list[str]:
    """Derive insights from the aggregate figures alone."""
    insights = []
    if stats.unpaid_count:
        insights.append(
            f"You have {stats.unpaid_count} unpaid invoice(s) totaling "
            f"${stats.total_outstanding:.2f}. Consider sending reminders to get paid faster."
        )
    if stats.paid_count:
        insights.append(
            f"You've collected ${stats.total_revenue:.2f} from {stats.paid_count} paid "
            f"invoice(s). Keep up the good work!"
        )
    insights.append(
        f"{stats.paid_ratio * 100:.0f}% of your {stats.total_invoices} invoice(s) are paid."
    )
    return insights[:MAX_INSIGHTS]


def _insights_from_json(data: object) -> list[str]:
    """Pull the insight strings out of the decoded model answer."""
    if isinstance(data, dict):
        data = data.get("insights")
    if not isinstance(data, list):
        raise AIResponseFormatError("Model answer has no 'insights' array")

    insights = [item.strip() for item in data if isinstance(item, str) and item.strip()]
    if not insights:
        raise AIResponseFormatError("Model answer contains no insight strings")
    return insights[:MAX_INSIGHTS]


async def generate_insights(
    invoices: Sequence[Invoice],
    ai_service: "AIService",
) -> DashboardSummaryResponse:
    """
    Produce dashboard insights for a set of invoices.

    An empty invoice set short-circuits without a model call. Model
    failures degrade to canned insights with ``ai_error`` set.

    Args:
        invoices: The user's invoices.
        ai_service: Injected model client.

    Returns:
        DashboardSummaryResponse with 1-3 insights.
    """
    if not invoices:
        return DashboardSummaryResponse(insights=[NO_DATA_INSIGHT])

    stats = summarize_invoices(invoices)

    try:
        response = await ai_service.generate_async(build_insights_prompt(stats))
        response_text = extract_response_text(response)
        insights = _insights_from_json(parse_json_response(response_text))
    except AIResponseFormatError as e:
        logger.warning("AI returned unusable insights, using canned insights: %s", e)
        return DashboardSummaryResponse(
            insights=canned_insights(stats),
            ai_error="AI returned invalid JSON",
        )
    except AIServiceError as e:
        logger.error("AI dashboard summary failed: %s", e)
        return DashboardSummaryResponse(
            insights=canned_insights(stats),
            ai_error=str(e) or "AI generation failed",
        )

    logger.info("AI produced %d dashboard insight(s)", len(insights))
    return DashboardSummaryResponse(insights=insights)
