"""
Tests for the pricing calculator.
"""

from decimal import Decimal

import pytest
from hypothesis import given, settings, strategies as st

from florist.schemas import MarkupSettings
from florist.services.pricing import (
    line_retail,
    line_wholesale,
    margin_percent,
    markup_for,
    price_order,
    retail_unit_price,
    to_money,
)
from shared.config.constants import DEFAULT_MARKUPS, PRODUCT_CATEGORIES
from shared.utils.exceptions import ConfigurationError, MissingMarkupError

from tests.factories import STANDARD_MARKUP, make_line


class TestMarkupLookup:
    """Tests for markup_for."""

    def test_returns_category_multiplier(self):
        assert markup_for("vase", STANDARD_MARKUP) == Decimal("2.0")

    def test_missing_category_raises(self):
        with pytest.raises(MissingMarkupError) as exc_info:
            markup_for("accessory", {"stem": Decimal("2.5")})
        assert exc_info.value.category == "accessory"

    def test_non_positive_multiplier_raises(self):
        with pytest.raises(MissingMarkupError):
            markup_for("stem", {"stem": Decimal("0")})

    def test_missing_markup_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            retail_unit_price(Decimal("1.00"), "other", {})

    def test_markup_fields_cover_every_category(self):
        assert set(MarkupSettings.model_fields) == set(PRODUCT_CATEGORIES) == set(DEFAULT_MARKUPS)

    def test_default_table_prices_every_category(self):
        table = MarkupSettings.defaults().as_table()

        assert list(table) == list(PRODUCT_CATEGORIES)
        for category in PRODUCT_CATEGORIES:
            assert markup_for(category, table) == DEFAULT_MARKUPS[category]


class TestLinePricing:
    """Tests for per-line derivations."""

    def test_retail_unit_price(self):
        assert retail_unit_price(Decimal("2.50"), "stem", STANDARD_MARKUP) == Decimal("6.25")

    def test_line_totals(self):
        assert line_wholesale(Decimal("2.50"), 12) == Decimal("30.00")
        assert line_retail(Decimal("2.50"), 12, "stem", STANDARD_MARKUP) == Decimal("75.00")

    def test_zero_quantity_line_is_free(self):
        assert line_retail(Decimal("8.00"), 0, "vase", STANDARD_MARKUP) == 0

    def test_margin_is_zero_without_revenue(self):
        assert margin_percent(Decimal("0"), Decimal("0")) == 0

    def test_to_money_rounds_half_up(self):
        assert to_money(Decimal("1.005")) == Decimal("1.01")
        assert to_money(Decimal("1.004")) == Decimal("1.00")


class TestPriceOrder:
    """Tests for order totals."""

    def test_rose_and_vase_order(self):
        lines = [make_line("Red Rose", "2.50", 12, "stem"), make_line("Vase", "8.00", 1, "vase")]

        totals = price_order(lines, STANDARD_MARKUP)

        assert totals.total_wholesale == Decimal("38.00")
        assert totals.total_retail == Decimal("91.00")
        assert totals.profit == Decimal("53.00")
        assert totals.margin_percent == Decimal("58.24")

    def test_profit_equals_retail_minus_wholesale(self):
        lines = [
            make_line("Tulip", "1.20", 10, "stem"),
            make_line("Ribbon", "0.75", 1, "accessory"),
            make_line("Wrap", "1.50", 1, "other"),
        ]

        totals = price_order(lines, STANDARD_MARKUP)

        assert totals.profit == totals.total_retail - totals.total_wholesale
        assert totals.as_fields() == {
            "total_wholesale": Decimal("14.25"),
            "total_retail": Decimal("35.25"),
            "profit": Decimal("21.00"),
        }

    def test_empty_order_has_zero_totals(self):
        totals = price_order([], STANDARD_MARKUP)
        assert totals.total_retail == 0
        assert totals.margin_percent == 0

    def test_missing_category_fails_fast(self):
        with pytest.raises(MissingMarkupError):
            price_order([make_line("Foam", "1.00", 1, "other")], {"stem": Decimal("2.5")})


class TestPricingProperties:
    """Property-based tests for pricing identities."""

    @given(
        cost=st.decimals(min_value=Decimal("0"), max_value=Decimal("10000"), places=2),
        quantity=st.integers(min_value=0, max_value=1000),
        multiplier=st.decimals(min_value=Decimal("0.001"), max_value=Decimal("100"), places=3),
    )
    @settings(max_examples=100)
    def test_retail_and_profit_identities(self, cost, quantity, multiplier):
        """Property: retail = c*m*q and profit = c*q*(m-1)."""
        table = {"stem": multiplier}

        retail = line_retail(cost, quantity, "stem", table)
        profit = retail - line_wholesale(cost, quantity)

        assert retail == cost * multiplier * quantity
        assert profit == cost * quantity * (multiplier - 1)
