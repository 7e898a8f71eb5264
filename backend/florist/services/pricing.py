"""
Pricing calculator.

Pure functions that derive every financial quantity from wholesale cost and
the per-category markup table. All arithmetic is Decimal; only order totals
are rounded to cents, when they are about to be stored.

Usage:
    from florist.services.pricing import price_order

    totals = price_order(draft.line_items, markup.as_table())
    totals.total_retail, totals.profit, totals.margin_percent
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from florist.schemas import LineItem
from shared.config.constants import Limits
from shared.utils.exceptions import MissingMarkupError

ZERO = Decimal("0")
HUNDRED = Decimal("100")

MarkupTable = Mapping[str, Decimal]


def to_money(value: Decimal) -> Decimal:
    """Round to cents, half up."""
    return value.quantize(Limits.MONEY_PLACES, rounding=ROUND_HALF_UP)


def markup_for(category: str, table: MarkupTable) -> Decimal:
    """
    Multiplier for a category.

    Raises:
        MissingMarkupError: If the category is absent or its multiplier is not positive.
    """
    multiplier = table.get(category)
    if multiplier is None:
        raise MissingMarkupError(category)
    if multiplier <= 0:
        raise MissingMarkupError(category, multiplier)
    return multiplier


def retail_unit_price(wholesale_cost: Decimal, category: str, table: MarkupTable) -> Decimal:
    return wholesale_cost * markup_for(category, table)


def line_wholesale(wholesale_cost: Decimal, quantity: int) -> Decimal:
    return wholesale_cost * quantity


def line_retail(wholesale_cost: Decimal, quantity: int, category: str, table: MarkupTable) -> Decimal:
    return retail_unit_price(wholesale_cost, category, table) * quantity


def margin_percent(profit: Decimal, total_retail: Decimal) -> Decimal:
    """Profit as a percentage of retail revenue; zero when there is no revenue."""
    if total_retail <= 0:
        return ZERO
    return profit / total_retail * HUNDRED


@dataclass(frozen=True)
class OrderTotals:
    """Stored financial summary of an order."""

    total_wholesale: Decimal
    total_retail: Decimal
    profit: Decimal
    margin_percent: Decimal

    def as_fields(self) -> dict[str, Decimal]:
        """Columns persisted with the order (margin is derived, never stored)."""
        return {
            "total_wholesale": self.total_wholesale,
            "total_retail": self.total_retail,
            "profit": self.profit,
        }


def price_order(lines: Iterable[LineItem], table: MarkupTable) -> OrderTotals:
    """
    Compute order totals with the given markup table.

    Raises:
        MissingMarkupError: If any line's category has no usable multiplier.
    """
    total_wholesale = ZERO
    total_retail = ZERO
    for line in lines:
        total_wholesale += line_wholesale(line.wholesale_cost, line.quantity)
        total_retail += line_retail(line.wholesale_cost, line.quantity, line.category, table)

    total_wholesale = to_money(total_wholesale)
    total_retail = to_money(total_retail)
    profit = total_retail - total_wholesale

    return OrderTotals(
        total_wholesale=total_wholesale,
        total_retail=total_retail,
        profit=profit,
        margin_percent=to_money(margin_percent(profit, total_retail)),
    )
