"""
POS handoff.

Builds the plain-text order summary staff paste into the shop's POS. The
layout is fixed (50-character rules) so POS operators can rely on it.
Unit and line prices use the current markup table; the total is the order's
stored historical total.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from florist.schemas import OrderRecord, POSSettings
from florist.services.pricing import MarkupTable, retail_unit_price, to_money
from shared.config.constants import PosFormat
from shared.utils.exceptions import PosHandoffError


def format_money(amount: Decimal) -> str:
    return f"${to_money(amount):.2f}"


def is_pos_ready(pos: POSSettings | None) -> bool:
    """POS counts as configured only with the flag set and a store name."""
    return pos is not None and pos.is_configured and bool(pos.store_name)


def ensure_handoff_allowed(order: OrderRecord, pos: POSSettings | None) -> None:
    """
    Staff-attributed orders may only be handed off once the POS is configured.

    Raises:
        PosHandoffError: If the order has a staff name and the POS is not ready.
    """
    if order.staff_name and not is_pos_ready(pos):
        raise PosHandoffError(
            "Store POS is not configured; ask a manager to finish POS setup",
            order_id=order.id,
        )


def format_pos_date(moment: datetime) -> str:
    """Month, day and hour without leading zeros, e.g. ``3/8/2024 3:30:00 PM``."""
    hour = moment.hour % 12 or 12
    return f"{moment.month}/{moment.day}/{moment.year} {hour}:{moment:%M:%S} {moment:%p}"


def format_pos_summary(order: OrderRecord, markup_table: MarkupTable) -> str:
    """
    Render the copy-paste summary for one order.

    Raises:
        MissingMarkupError: If a line's category has no usable multiplier.
    """
    staff = order.staff_name or PosFormat.NO_STAFF
    staff_line = f"STAFF: {staff}"
    if order.staff_id:
        staff_line += f" (ID: {order.staff_id})"

    lines = [
        PosFormat.HEAVY_RULE,
        f"ARRANGEMENT: {order.name}",
        staff_line,
        f"DATE: {format_pos_date(order.created_at)}",
        f"ORDER ID: #{order.id}",
        PosFormat.HEAVY_RULE,
        "",
    ]

    if order.notes:
        lines.extend(["CUSTOMER NOTES:", order.notes, ""])

    lines.extend(["ITEMS:", PosFormat.LIGHT_RULE])
    for index, item in enumerate(order.line_items, start=1):
        unit = retail_unit_price(item.wholesale_cost, item.category, markup_table)
        lines.append(f"{index}. {item.name} ({item.category})")
        lines.append(f"   Qty: {item.quantity} x {format_money(unit)} = {format_money(unit * item.quantity)}")
        lines.append("")

    lines.extend(
        [
            PosFormat.LIGHT_RULE,
            f"TOTAL AMOUNT: {format_money(order.total_retail)}",
            f"STAFF: {staff}",
            PosFormat.HEAVY_RULE,
        ]
    )
    return "\n".join(lines)
