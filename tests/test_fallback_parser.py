"""Tests for the deterministic fallback invoice parser."""

import math
import time

from app.invoice_api.services.ai.fallback import parse_line_item, simple_fallback_parse


class TestSimpleFallbackParse:
    """Tests for simple_fallback_parse."""

    def test_full_example(self):
        """Test client, email and items are recovered."""
        text = "Bill To: Acme Corp\nEmail: a@b.com\n2 hours of design at $150\nLogo - $800"
        draft = simple_fallback_parse(text)

        assert draft.client_name == "Acme Corp"
        assert draft.email == "a@b.com"
        assert [(i.name, i.quantity, i.unit_price) for i in draft.items] == [
            ("design", 2.0, 150.0),
            ("Logo", 1.0, 800.0),
        ]

    def test_invoice_for_label(self):
        """Test the "Invoice for" label."""
        draft = simple_fallback_parse("Invoice for Wayne Enterprises\nAudit: 1200")
        assert draft.client_name == "Wayne Enterprises"

    def test_address_first_line(self):
        """Test only the first line of the address is kept."""
        draft = simple_fallback_parse("Client: Acme\nAddress: 12 High St\nSpringfield")
        assert draft.address == "12 High St"

    def test_first_line_used_as_client(self):
        """Test a short first line becomes the client name."""
        draft = simple_fallback_parse("Umbrella Ltd\nHosting - $40")
        assert draft.client_name == "Umbrella Ltd"

    def test_long_first_line_not_used_as_client(self):
        """Test prose is not mistaken for a client name."""
        text = "Please prepare a bill covering last month's work on the marketing site\n"
        draft = simple_fallback_parse(text)
        assert draft.client_name == ""

    def test_empty_and_none(self):
        """Test empty input yields an empty draft."""
        for text in ("", None):
            draft = simple_fallback_parse(text)
            assert draft.client_name == ""
            assert draft.items == []

    def test_numbers_always_finite(self):
        """Test quantities and prices never come back NaN or zero."""
        draft = simple_fallback_parse("0 x Widget - $0\nGadget: 0.0\nSupport $15")
        assert draft.items
        for item in draft.items:
            assert math.isfinite(item.quantity) and item.quantity > 0
            assert math.isfinite(item.unit_price)


class TestParseLineItem:
    """Tests for single-line matching and pattern priority."""

    def test_quantity_first_wins_over_name_price(self):
        """Test "3 x Widget - $20" uses the quantity-first pattern."""
        item = parse_line_item("3 x Widget - $20")
        assert item.name == "Widget"
        assert item.quantity == 3.0
        assert item.unit_price == 20.0

    def test_hourly_rate(self):
        """Test hourly phrasing."""
        item = parse_line_item("10 hrs consulting @ 95/hr")
        assert item.name == "consulting"
        assert item.quantity == 10.0
        assert item.unit_price == 95.0

    def test_name_price(self):
        """Test "name - price" lines."""
        item = parse_line_item("Logo design - $800.50")
        assert item.name == "Logo design"
        assert item.quantity == 1.0
        assert item.unit_price == 800.5

    def test_bare_price(self):
        """Test a price with surrounding words."""
        item = parse_line_item("$800 — Logo")
        assert item.name == "Logo"
        assert item.unit_price == 800.0

    def test_number_only_line_ignored(self):
        """Test lines without any letters yield no item."""
        assert parse_line_item("$800") is None

    def test_text_only_line_ignored(self):
        """Test lines without numbers yield no item."""
        assert parse_line_item("Thanks again for your business") is None

    def test_thousands_separator_name_price(self):
        """Test comma-grouped prices are read in full."""
        item = parse_line_item("Website redesign - $1,200")
        assert item.name == "Website redesign"
        assert item.unit_price == 1200.0

    def test_thousands_separator_quantity_first(self):
        """Test comma-grouped prices after a quantity."""
        item = parse_line_item("3 x Retainer - $1,250.50")
        assert item.quantity == 3.0
        assert item.unit_price == 1250.5

    def test_thousands_separator_bare_price(self):
        """Test comma-grouped bare prices."""
        item = parse_line_item("$2,500 — Annual support")
        assert item.name == "Annual support"
        assert item.unit_price == 2500.0


class TestFallbackParserPerformance:
    """Tests that the fallback scan stays linear on hostile input."""

    def test_long_run_without_at_sign(self):
        """Test a long token that looks like an email local part is scanned quickly."""
        start = time.perf_counter()
        draft = simple_fallback_parse("a" * 50_000)
        elapsed = time.perf_counter() - start

        assert draft.email == ""
        assert elapsed < 2.0

    def test_email_found_after_long_text(self):
        """Test an email is still found on a later line."""
        draft = simple_fallback_parse("note " * 2_000 + "\nContact: billing@acme.test")
        assert draft.email == "billing@acme.test"
