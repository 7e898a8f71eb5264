"""
Catalog Models: ProductTemplateRow.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import AccountOwnedMixin, Base, utcnow


class ProductTemplateRow(AccountOwnedMixin, Base):
    """
    Reusable catalog entry with the shop's wholesale cost.
    Inventory fields are optional: a NULL count means stock is not tracked.
    """

    __tablename__ = "product_templates"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    wholesale_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    last_used: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    inventory_count: Mapped[Optional[int]] = mapped_column(Integer)
    low_stock_threshold: Mapped[Optional[int]] = mapped_column(Integer)

    __table_args__ = (
        CheckConstraint("wholesale_cost >= 0", name="chk_template_cost_non_negative"),
        CheckConstraint(
            "inventory_count IS NULL OR inventory_count >= 0",
            name="chk_template_inventory_non_negative",
        ),
    )
