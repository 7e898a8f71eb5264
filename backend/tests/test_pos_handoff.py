"""
Tests for the POS summary text and the handoff gate.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from florist.schemas import POSSettings
from florist.services.pos_handoff import (
    ensure_handoff_allowed,
    format_money,
    format_pos_date,
    format_pos_summary,
    is_pos_ready,
)
from shared.utils.exceptions import MissingMarkupError, PosHandoffError

from tests.factories import STANDARD_MARKUP, make_line, make_order

HEAVY = "=" * 50
LIGHT = "-" * 50


def _dozen(**extra):
    return make_order(
        [make_line("Red Rose", "2.50", 12), make_line("Glass Vase", "8.00", 1, "vase")],
        name="Classic Dozen",
        total_wholesale="38.00",
        total_retail="91.00",
        order_id="order-42",
        **extra,
    )


class TestFormatPosSummary:
    """Tests for the copy-paste summary layout."""

    def test_full_summary(self):
        order = _dozen(staff_name="Ana", staff_id="S-7", notes="Deliver by noon")

        text = format_pos_summary(order, STANDARD_MARKUP)

        assert text == "\n".join(
            [
                HEAVY,
                "ARRANGEMENT: Classic Dozen",
                "STAFF: Ana (ID: S-7)",
                "DATE: 3/8/2024 3:30:00 PM",
                "ORDER ID: #order-42",
                HEAVY,
                "",
                "CUSTOMER NOTES:",
                "Deliver by noon",
                "",
                "ITEMS:",
                LIGHT,
                "1. Red Rose (stem)",
                "   Qty: 12 x $6.25 = $75.00",
                "",
                "2. Glass Vase (vase)",
                "   Qty: 1 x $16.00 = $16.00",
                "",
                LIGHT,
                "TOTAL AMOUNT: $91.00",
                "STAFF: Ana",
                HEAVY,
            ]
        )

    def test_minimal_summary_omits_optional_sections(self):
        order = _dozen(created_at=datetime(2024, 3, 8, 9, 5, 7, tzinfo=timezone.utc))

        lines = format_pos_summary(order, STANDARD_MARKUP).split("\n")

        assert lines[1] == "ARRANGEMENT: Classic Dozen"
        assert "STAFF: N/A" in lines
        assert "DATE: 3/8/2024 9:05:07 AM" in lines
        assert "CUSTOMER NOTES:" not in lines
        assert lines[-2] == "STAFF: N/A"

    def test_total_is_the_stored_total(self):
        # Markup changed since the order was saved; only unit prices follow it
        markup = {**STANDARD_MARKUP, "stem": Decimal("3.0")}

        text = format_pos_summary(_dozen(), markup)

        assert "   Qty: 12 x $7.50 = $90.00" in text
        assert "TOTAL AMOUNT: $91.00" in text

    def test_missing_markup_category_raises(self):
        with pytest.raises(MissingMarkupError):
            format_pos_summary(_dozen(), {"stem": Decimal("2.5")})

    def test_format_money_rounds_half_up(self):
        assert format_money(Decimal("2.345")) == "$2.35"
        assert format_money(Decimal("7")) == "$7.00"

    def test_header_has_no_store_line(self):
        lines = format_pos_summary(_dozen(), STANDARD_MARKUP).split("\n")

        assert [line.split(":")[0] for line in lines[1:5]] == ["ARRANGEMENT", "STAFF", "DATE", "ORDER ID"]
        assert not any(line.startswith("STORE") for line in lines)


class TestFormatPosDate:
    """Tests for the unpadded POS timestamp."""

    @pytest.mark.parametrize(
        "moment, expected",
        [
            (datetime(2024, 3, 8, 15, 30, 0), "3/8/2024 3:30:00 PM"),
            (datetime(2024, 3, 8, 9, 5, 7), "3/8/2024 9:05:07 AM"),
            (datetime(2024, 12, 25, 0, 0, 0), "12/25/2024 12:00:00 AM"),
            (datetime(2024, 1, 1, 12, 0, 9), "1/1/2024 12:00:09 PM"),
        ],
    )
    def test_no_leading_zeros(self, moment, expected):
        assert format_pos_date(moment) == expected


class TestHandoffGate:
    """Tests for ensure_handoff_allowed."""

    def test_staff_order_blocked_without_pos(self):
        with pytest.raises(PosHandoffError):
            ensure_handoff_allowed(_dozen(staff_name="Ana"), None)

    def test_staff_order_blocked_when_flag_unset(self):
        pos = POSSettings(store_name="Bloom", is_configured=False)
        with pytest.raises(PosHandoffError):
            ensure_handoff_allowed(_dozen(staff_name="Ana"), pos)

    def test_staff_order_allowed_when_configured(self):
        pos = POSSettings(store_name="Bloom", is_configured=True)
        ensure_handoff_allowed(_dozen(staff_name="Ana"), pos)

    def test_order_without_staff_is_never_blocked(self):
        ensure_handoff_allowed(_dozen(), None)

    def test_is_pos_ready_requires_store_name(self):
        assert not is_pos_ready(POSSettings(is_configured=True))
        assert is_pos_ready(POSSettings(store_name="Bloom", is_configured=True))
