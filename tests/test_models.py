"""Tests for Pydantic models and invoice arithmetic."""

import math
from datetime import datetime

import pytest
from pydantic import ValidationError

from app.invoice_api.models import (
    InvoiceCreateRequest,
    InvoiceItemInput,
    LineItemDraft,
    ParseTextResponse,
    RegisterRequest,
)
from app.invoice_api.services.invoice_service import build_items, compute_totals


class TestLineItemDraft:
    """Tests for LineItemDraft model."""

    def test_defaults(self):
        """Test an empty item gets neutral defaults."""
        item = LineItemDraft()
        assert item.name == "Item"
        assert item.quantity == 1.0
        assert item.unit_price == 0.0

    def test_nan_rejected(self):
        """Test NaN and infinity are not accepted."""
        with pytest.raises(ValidationError):
            LineItemDraft(quantity=math.nan)
        with pytest.raises(ValidationError):
            LineItemDraft(unit_price=math.inf)

    def test_camel_case_serialization(self):
        """Test JSON uses camelCase names."""
        item = LineItemDraft(name="Logo", unit_price=800)
        assert item.model_dump(by_alias=True) == {"name": "Logo", "quantity": 1.0, "unitPrice": 800.0}

    def test_accepts_camel_case_input(self):
        """Test camelCase input populates snake_case fields."""
        assert LineItemDraft.model_validate({"unitPrice": 5}).unit_price == 5.0


class TestParseTextResponse:
    """Tests for ParseTextResponse model."""

    def test_ai_error_omitted_when_none(self):
        """Test aiError is dropped when excluding None."""
        data = ParseTextResponse(client_name="Acme").model_dump(by_alias=True, exclude_none=True)
        assert "aiError" not in data
        assert data["clientName"] == "Acme"


class TestInvoiceCreateRequest:
    """Tests for InvoiceCreateRequest model."""

    def test_loose_dates(self):
        """Test ISO and written dates are accepted."""
        request = InvoiceCreateRequest(
            invoice_number="INV-1",
            invoice_date="2024-05-01T10:00:00Z",
            due_date="June 3, 2024",
        )
        assert request.invoice_date.year == 2024
        assert request.due_date.replace(tzinfo=None) == datetime(2024, 6, 3)

    def test_invalid_date_rejected(self):
        """Test unparseable dates fail validation."""
        with pytest.raises(ValidationError):
            InvoiceCreateRequest(invoice_number="INV-1", due_date="someday soon-ish")

    def test_defaults(self):
        """Test payment terms and parties default."""
        request = InvoiceCreateRequest(invoice_number="INV-1")
        assert request.payment_terms == "Net 15"
        assert request.items == []
        assert request.bill_to.client_name is None

    def test_negative_quantity_rejected(self):
        """Test line items validate their numbers."""
        with pytest.raises(ValidationError):
            InvoiceItemInput(name="X", quantity=-1, unit_price=5)


class TestRegisterRequest:
    """Tests for RegisterRequest model."""

    def test_email_normalized(self):
        """Test emails are stripped and lower-cased."""
        request = RegisterRequest(name="A", email="  Me@Example.COM ", password="secret1")
        assert request.email == "me@example.com"

    def test_invalid_email_rejected(self):
        """Test emails without a local part or domain are rejected."""
        with pytest.raises(ValidationError):
            RegisterRequest(name="A", email="@example.com", password="secret1")


class TestInvoiceTotals:
    """Tests for invoice arithmetic."""

    def test_compute_totals(self):
        """Test subtotal, tax and total."""
        items = [
            InvoiceItemInput(name="Design", quantity=2, unit_price=150, tax_percent=10),
            InvoiceItemInput(name="Logo", quantity=1, unit_price=800),
        ]
        assert compute_totals(items) == (1100.0, 30.0, 1130.0)

    def test_compute_totals_empty(self):
        """Test an invoice without items totals zero."""
        assert compute_totals([]) == (0.0, 0.0, 0.0)

    def test_build_items_keeps_order_and_totals(self):
        """Test ORM rows carry position and line totals."""
        rows = build_items(
            [
                InvoiceItemInput(name="A", quantity=3, unit_price=10, tax_percent=20),
                InvoiceItemInput(name="B", quantity=1, unit_price=5),
            ]
        )
        assert [(row.position, row.name, row.total) for row in rows] == [(0, "A", 36.0), (1, "B", 5.0)]
