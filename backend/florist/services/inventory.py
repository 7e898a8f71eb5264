"""
Inventory reconciliation.

Stock counts are decremented once, when an order is committed. Order edits
and deletions never touch stock.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from florist.schemas import OrderRecord, ProductTemplate


def consumed_quantities(order: OrderRecord) -> dict[tuple[str, str], int]:
    """Total quantity per exact (name, category) across the order's lines."""
    consumed: dict[tuple[str, str], int] = defaultdict(int)
    for line in order.line_items:
        consumed[(line.name, line.category)] += line.quantity
    return dict(consumed)


def reconcile_inventory(order: OrderRecord, catalog: Iterable[ProductTemplate]) -> list[ProductTemplate]:
    """
    Return the catalog with stock reduced by the order.

    A template is affected only when a line has exactly its name and category.
    Counts are floored at zero; templates without a count are left alone.
    Unchanged templates are returned as-is; changed ones are new copies.
    """
    consumed = consumed_quantities(order)

    updated: list[ProductTemplate] = []
    for template in catalog:
        quantity = consumed.get((template.name, template.category), 0)
        if template.inventory_count is None or quantity == 0:
            updated.append(template)
            continue
        new_count = max(0, template.inventory_count - quantity)
        updated.append(template.model_copy(update={"inventory_count": new_count}))
    return updated


def changed_templates(
    before: Iterable[ProductTemplate],
    after: Iterable[ProductTemplate],
) -> list[ProductTemplate]:
    """Templates whose inventory count differs between two catalog versions."""
    previous = {t.id: t.inventory_count for t in before}
    return [t for t in after if previous.get(t.id) != t.inventory_count]


def is_low_stock(template: ProductTemplate) -> bool:
    if template.inventory_count is None:
        return False
    if template.inventory_count == 0:
        return True
    threshold = template.low_stock_threshold
    return threshold is not None and template.inventory_count <= threshold


def low_stock_templates(catalog: Iterable[ProductTemplate]) -> list[ProductTemplate]:
    """Tracked templates at or below their threshold, or out of stock."""
    return sorted(
        (t for t in catalog if is_low_stock(t)),
        key=lambda t: (t.inventory_count, t.name.casefold()),
    )
