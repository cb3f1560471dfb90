"""
Validation and normalization of model output into the canonical draft.

Handles:
- Numeric coercion of quantities and prices ("$1,200.00", "2", 3)
- Shape checks on the decoded JSON
- Defaulting of missing fields
"""

import logging
import math
import re
from typing import Any

from ...models import LineItemDraft, ParsedInvoiceDraft
from .exceptions import AIResponseFormatError

logger = logging.getLogger(__name__)


def parse_currency(value: Any) -> float | None:
    """
    Parse a currency string to float using price-parser.

    Handles international formats:
    - "$1,234.56", "€1.234,56", "1000 USD", "£500.00"

    Returns None for anything that does not contain a number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            return None
    if not isinstance(value, str):
        return None

    value = value.strip()
    if not value:
        return None

    try:
        from price_parser import Price

        price = Price.fromstring(value)
        if price.amount_float is not None:
            return price.amount_float

        # Fallback: plain number without currency context
        cleaned = re.sub(r"[^\d.\-]", "", value)
        return float(cleaned) if cleaned else None
    except (ValueError, AttributeError, OverflowError):
        return None


def coerce_number(value: Any, default: float) -> float:
    """
    Coerce a model-supplied number, returning ``default`` when unusable.

    Zero, NaN, infinities and unparsable values all map to ``default``.
    """
    number = parse_currency(value)
    if number is None or not math.isfinite(number) or number == 0:
        return default
    return number


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value.strip() if isinstance(value, str) else str(value)


def normalize_invoice_draft(data: Any) -> ParsedInvoiceDraft:
    """
    Validate decoded model JSON and build a ParsedInvoiceDraft from it.

    Args:
        data: Result of json.loads on the model answer.

    Returns:
        The canonical draft.

    Raises:
        AIResponseFormatError: If the JSON is not an invoice-shaped object.
    """
    if not isinstance(data, dict):
        raise AIResponseFormatError(
            f"Expected a JSON object, got {type(data).__name__}"
        )

    raw_items = data.get("items") or []
    if not isinstance(raw_items, list):
        raise AIResponseFormatError("'items' must be a JSON array")

    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            logger.debug("Skipping non-object item in model output: %r", raw)
            continue
        items.append(
            LineItemDraft(
                name=_text(raw.get("name")) or "Item",
                quantity=coerce_number(raw.get("quantity"), 1.0),
                unit_price=coerce_number(raw.get("unitPrice", raw.get("unit_price")), 0.0),
            )
        )

    return ParsedInvoiceDraft(
        client_name=_text(data.get("clientName", data.get("client_name"))),
        email=_text(data.get("email")),
        address=_text(data.get("address")),
        items=items,
    )
