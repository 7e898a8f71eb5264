"""
Profit analytics over order history.

Read-only aggregation: revenue, cost, profit and margin totals, best and
worst orders, orders below a margin threshold, product performance and
monthly trends. Order figures are the stored totals; product retail
estimates use the current markup table.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from florist.schemas import OrderRecord
from florist.services.pricing import ZERO, MarkupTable, line_retail, line_wholesale, margin_percent, to_money


@dataclass
class ProductPerformance:
    name: str
    category: str
    total_quantity: int = 0
    total_cost: Decimal = ZERO
    estimated_retail: Decimal = ZERO
    order_count: int = 0

    @property
    def estimated_profit(self) -> Decimal:
        return self.estimated_retail - self.total_cost


@dataclass
class MonthlyTrend:
    month: str  # YYYY-MM
    revenue: Decimal = ZERO
    profit: Decimal = ZERO
    orders: int = 0


@dataclass
class ProfitSummary:
    order_count: int
    total_revenue: Decimal
    total_cost: Decimal
    total_profit: Decimal
    average_margin: Decimal
    average_order_value: Decimal
    best_order: OrderRecord | None = None
    worst_order: OrderRecord | None = None
    low_margin_orders: list[OrderRecord] = field(default_factory=list)
    top_products_by_profit: list[ProductPerformance] = field(default_factory=list)
    top_products_by_quantity: list[ProductPerformance] = field(default_factory=list)
    monthly_trends: list[MonthlyTrend] = field(default_factory=list)


def order_margin(order: OrderRecord) -> Decimal:
    return margin_percent(order.profit, order.total_retail)


def _month_key(moment: datetime) -> str:
    return f"{moment.year:04d}-{moment.month:02d}"


def _recent_months(now: datetime, count: int) -> list[str]:
    """The ``count`` calendar months ending with ``now``'s month, oldest first."""
    months = []
    year, month = now.year, now.month
    for _ in range(count):
        months.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def product_performance(orders: Sequence[OrderRecord], markup_table: MarkupTable) -> list[ProductPerformance]:
    """Per (name, category) totals across all orders, in first-seen order."""
    stats: dict[tuple[str, str], ProductPerformance] = {}
    for order in orders:
        seen_in_order: set[tuple[str, str]] = set()
        for item in order.line_items:
            key = (item.name, item.category)
            perf = stats.setdefault(key, ProductPerformance(name=item.name, category=item.category))
            perf.total_quantity += item.quantity
            perf.total_cost += line_wholesale(item.wholesale_cost, item.quantity)
            perf.estimated_retail += line_retail(item.wholesale_cost, item.quantity, item.category, markup_table)
            if key not in seen_in_order:
                perf.order_count += 1
                seen_in_order.add(key)
    return list(stats.values())


def monthly_trends(orders: Sequence[OrderRecord], months: int = 6, now: datetime | None = None) -> list[MonthlyTrend]:
    """Revenue, profit and order count for each of the last ``months`` months."""
    now = now or datetime.now(timezone.utc)
    trends = {key: MonthlyTrend(month=key) for key in _recent_months(now, months)}
    for order in orders:
        trend = trends.get(_month_key(order.created_at))
        if trend is None:
            continue
        trend.revenue += order.total_retail
        trend.profit += order.profit
        trend.orders += 1
    return list(trends.values())


def summarize_orders(
    orders: Sequence[OrderRecord],
    markup_table: MarkupTable,
    low_margin_threshold: Decimal | float = Decimal("40"),
    top_n: int = 5,
    trend_months: int = 6,
    now: datetime | None = None,
) -> ProfitSummary:
    """
    Aggregate an order history.

    An empty history yields zero totals and no best/worst order.
    """
    threshold = Decimal(str(low_margin_threshold))

    total_revenue = sum((o.total_retail for o in orders), ZERO)
    total_cost = sum((o.total_wholesale for o in orders), ZERO)
    total_profit = total_revenue - total_cost

    if not orders:
        return ProfitSummary(
            order_count=0,
            total_revenue=ZERO,
            total_cost=ZERO,
            total_profit=ZERO,
            average_margin=ZERO,
            average_order_value=ZERO,
            monthly_trends=monthly_trends(orders, trend_months, now),
        )

    products = product_performance(orders, markup_table)

    return ProfitSummary(
        order_count=len(orders),
        total_revenue=total_revenue,
        total_cost=total_cost,
        total_profit=total_profit,
        average_margin=to_money(margin_percent(total_profit, total_revenue)),
        average_order_value=to_money(total_revenue / len(orders)),
        # first order wins ties, as with a left-to-right scan
        best_order=max(orders, key=lambda o: o.profit),
        worst_order=min(orders, key=lambda o: o.profit),
        low_margin_orders=[o for o in orders if order_margin(o) < threshold],
        top_products_by_profit=sorted(products, key=lambda p: p.estimated_profit, reverse=True)[:top_n],
        top_products_by_quantity=sorted(products, key=lambda p: p.total_quantity, reverse=True)[:top_n],
        monthly_trends=monthly_trends(orders, trend_months, now),
    )
