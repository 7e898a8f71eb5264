"""
Tests for profit analytics over order history.
"""

from datetime import datetime, timezone
from decimal import Decimal

from florist.services.analytics import monthly_trends, product_performance, summarize_orders

from tests.factories import STANDARD_MARKUP, make_line, make_order

NOW = datetime(2024, 3, 20, tzinfo=timezone.utc)


def _history():
    return [
        make_order(
            [make_line("Red Rose", "2.50", 12), make_line("Glass Vase", "8.00", 1, "vase")],
            name="Dozen",
            total_wholesale="38.00",
            total_retail="91.00",
            created_at=datetime(2024, 3, 8, tzinfo=timezone.utc),
        ),
        make_order(
            [make_line("Tulip", "1.20", 10)],
            name="Tulips",
            total_wholesale="12.00",
            total_retail="18.00",
            created_at=datetime(2024, 2, 14, tzinfo=timezone.utc),
        ),
        make_order(
            [make_line("Red Rose", "2.50", 6)],
            name="Half Dozen",
            total_wholesale="15.00",
            total_retail="37.50",
            created_at=datetime(2023, 7, 1, tzinfo=timezone.utc),
        ),
    ]


class TestSummarizeOrders:
    """Tests for summarize_orders."""

    def test_empty_history(self):
        summary = summarize_orders([], STANDARD_MARKUP, now=NOW)

        assert summary.order_count == 0
        assert summary.total_revenue == Decimal("0")
        assert summary.average_margin == Decimal("0")
        assert summary.best_order is None
        assert len(summary.monthly_trends) == 6

    def test_totals_and_averages(self):
        summary = summarize_orders(_history(), STANDARD_MARKUP, now=NOW)

        assert summary.order_count == 3
        assert summary.total_revenue == Decimal("146.50")
        assert summary.total_cost == Decimal("65.00")
        assert summary.total_profit == Decimal("81.50")
        assert summary.average_margin == Decimal("55.63")
        assert summary.average_order_value == Decimal("48.83")

    def test_best_worst_and_low_margin(self):
        summary = summarize_orders(_history(), STANDARD_MARKUP, low_margin_threshold=40, now=NOW)

        assert summary.best_order.name == "Dozen"
        assert summary.worst_order.name == "Tulips"
        # 6 / 18 is 33.3%
        assert [o.name for o in summary.low_margin_orders] == ["Tulips"]

    def test_margin_at_threshold_is_not_low(self):
        order = make_order([make_line("Red Rose", "2.50")], total_wholesale="60.00", total_retail="100.00")

        summary = summarize_orders([order], STANDARD_MARKUP, low_margin_threshold=40, now=NOW)

        assert summary.low_margin_orders == []

    def test_top_products(self):
        summary = summarize_orders(_history(), STANDARD_MARKUP, top_n=2, now=NOW)

        assert [p.name for p in summary.top_products_by_profit] == ["Red Rose", "Tulip"]
        assert [p.name for p in summary.top_products_by_quantity] == ["Red Rose", "Tulip"]


class TestProductPerformance:
    def test_aggregates_per_name_and_category(self):
        products = {p.name: p for p in product_performance(_history(), STANDARD_MARKUP)}

        rose = products["Red Rose"]
        assert rose.total_quantity == 18
        assert rose.order_count == 2
        assert rose.total_cost == Decimal("45.00")
        assert rose.estimated_retail == Decimal("112.50")
        assert rose.estimated_profit == Decimal("67.50")


class TestMonthlyTrends:
    def test_last_six_months_oldest_first(self):
        trends = monthly_trends(_history(), months=6, now=NOW)

        assert [t.month for t in trends] == ["2023-10", "2023-11", "2023-12", "2024-01", "2024-02", "2024-03"]
        assert trends[-1].revenue == Decimal("91.00")
        assert trends[-2].orders == 1
        # July 2023 falls outside the window
        assert sum(t.orders for t in trends) == 2
