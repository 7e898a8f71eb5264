"""
Order Models: OrderRow, OrderProductRow.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AccountOwnedMixin, Base, new_uuid


class OrderRow(AccountOwnedMixin, Base):
    """
    A saved order. Totals are stored at save time and never recomputed on read.
    Line items are snapshots, not references to product templates.
    """

    __tablename__ = "orders"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    total_wholesale: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_retail: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    profit: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    photo: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    staff_name: Mapped[Optional[str]] = mapped_column(String(200))
    staff_id: Mapped[Optional[str]] = mapped_column(String(64))

    line_items: Mapped[list[OrderProductRow]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderProductRow.position",
        lazy="selectin",
    )


class OrderProductRow(Base):
    """One line item of an order, kept in its original position."""

    __tablename__ = "order_products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    wholesale_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    category: Mapped[str] = mapped_column(String(20), nullable=False)

    order: Mapped[OrderRow] = relationship(back_populates="line_items")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="chk_order_product_quantity_non_negative"),
    )
