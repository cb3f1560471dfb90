"""
Deterministic invoice parser used when the model is unavailable or its
answer cannot be used.

Recovers client name, email, address and line items from free text
(an invoice description, an email, a note) with layered regular
expressions. Line items are matched line by line against an ordered list
of patterns; the first pattern that matches a line wins.
"""

import logging
import math
import re
from collections.abc import Callable

from ...models import LineItemDraft, ParsedInvoiceDraft
from .validation import coerce_number

logger = logging.getLogger(__name__)


# =============================================================================
# Field Patterns
# =============================================================================

# "Invoice for Acme", "Bill To: Acme", "Client: Acme", "Client- Acme"
CLIENT_RE = re.compile(
    r"(?:\b(?:Invoice\s+for|Bill\s+To)\b\s*[:\-]?|\bClient\s*[:\-])\s*"
    r"([A-Z0-9][A-Za-z0-9 .,&'\-]{2,100})",
    re.IGNORECASE,
)

# Local part must start a token and is length-bounded, keeping the scan linear
EMAIL_RE = re.compile(
    r"(?<![A-Z0-9._%+\-])[A-Z0-9._%+\-]{1,64}@[A-Z0-9.\-]{1,255}\.[A-Z]{2,63}",
    re.IGNORECASE,
)

ADDRESS_RE = re.compile(r"Address[:\-]\s*(.{5,200})", re.IGNORECASE | re.DOTALL)

# Lines longer than this are prose, not a client name
CLIENT_FALLBACK_MAX_LENGTH = 60


# =============================================================================
# Line Item Patterns
# =============================================================================

# "1,200.50" or "1200.50"
PRICE = r"(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)"

# "2 hours of design at $150/hr", "3 x Widget - $20", "1 logo for $800"
QUANTITY_FIRST_RE = re.compile(
    r"(?<![\d.,$])(\d+(?:\.\d+)?)(?![\d.,])"
    r"\s*(?:[x×](?=\s))?"
    r"\s*(?:(?:hours|hour|hrs|hr|units|unit|pcs|pieces|piece)\b)?"
    r"\s*(?:of\b)?"
    r"\s*([A-Za-z][A-Za-z0-9 \-_.&()]{2,79}?)"
    r"\s*(?:at|@|for)?\s*\$?" + PRICE +
    r"(?:/hour|/hr| per hour)?",
    re.IGNORECASE,
)

# "Logo - $800", "Consulting: 450", "Website redesign - $1,200"
NAME_PRICE_RE = re.compile(
    r"([A-Za-z0-9 \-_.&()]{3,80}?)\s*[-:]\s*\$?" + PRICE,
    re.IGNORECASE,
)

# "$800 — Logo"
BARE_PRICE_RE = re.compile(r"\$?" + PRICE)

_LETTER_RE = re.compile(r"[A-Za-z]")
_SEPARATORS_RE = re.compile(r"[-—:]")


def _to_number(token: str | None, default: float) -> float:
    """Parse a numeric token, falling back to ``default`` for 0/NaN/garbage."""
    try:
        value = float(token)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value) or value == 0:
        return default
    return value


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip().strip("-:").strip()
    return cleaned or "Item"


def _quantity_first_item(match: re.Match, line: str) -> LineItemDraft | None:
    return LineItemDraft(
        name=_clean_name(match.group(2)),
        quantity=_to_number(match.group(1), 1.0),
        unit_price=coerce_number(match.group(3), 0.0),
    )


def _name_price_item(match: re.Match, line: str) -> LineItemDraft | None:
    return LineItemDraft(
        name=_clean_name(match.group(1)),
        quantity=1.0,
        unit_price=coerce_number(match.group(2), 0.0),
    )


def _bare_price_item(match: re.Match, line: str) -> LineItemDraft | None:
    if not _LETTER_RE.search(line):
        return None
    name = _SEPARATORS_RE.sub("", line.replace(match.group(0), "", 1)).strip()
    return LineItemDraft(
        name=name or "Item",
        quantity=1.0,
        unit_price=coerce_number(match.group(1), 0.0),
    )


# Checked in order; a line contributes at most one item
LINE_ITEM_PATTERNS: tuple[tuple[re.Pattern, Callable[[re.Match, str], LineItemDraft | None]], ...] = (
    (QUANTITY_FIRST_RE, _quantity_first_item),
    (NAME_PRICE_RE, _name_price_item),
    (BARE_PRICE_RE, _bare_price_item),
)


def parse_line_item(line: str) -> LineItemDraft | None:
    """
    Match a single line against the line-item patterns.

    Args:
        line: One physical line of text.

    Returns:
        The item from the first matching pattern, or None.
    """
    line = line.strip()
    if not line:
        return None

    for pattern, build_item in LINE_ITEM_PATTERNS:
        match = pattern.search(line)
        if match:
            item = build_item(match, line)
            if item is not None:
                return item
    return None


def simple_fallback_parse(text: str | None) -> ParsedInvoiceDraft:
    """
    Extract as much invoice data as possible from free text.

    Never raises. Fields that cannot be found stay empty.

    Args:
        text: Raw user-supplied text.

    Returns:
        A best-effort ParsedInvoiceDraft.
    """
    draft = ParsedInvoiceDraft()
    if not text or not isinstance(text, str):
        return draft

    client_match = CLIENT_RE.search(text)
    if client_match:
        draft.client_name = client_match.group(1).strip()

    email_match = EMAIL_RE.search(text)
    if email_match:
        draft.email = email_match.group(0).strip()

    address_match = ADDRESS_RE.search(text)
    if address_match:
        draft.address = address_match.group(1).splitlines()[0].strip()

    lines = text.splitlines()
    for line in lines:
        item = parse_line_item(line)
        if item is not None:
            draft.items.append(item)

    if not draft.client_name:
        first_line = next((line for line in lines if line.strip()), None)
        if first_line and len(first_line) < CLIENT_FALLBACK_MAX_LENGTH:
            draft.client_name = first_line.strip()

    logger.info(
        "Fallback parser recovered client=%r, %d item(s)",
        draft.client_name,
        len(draft.items),
    )
    return draft
