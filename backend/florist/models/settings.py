"""
Per-account settings: MarkupSettingsRow, PosSettingsRow.
Both are singletons per account (unique account_id).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import AccountOwnedMixin, Base, utcnow


class MarkupSettingsRow(AccountOwnedMixin, Base):
    """One multiplier per product category."""

    __tablename__ = "markup_settings"

    stem: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False)
    vase: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False)
    accessory: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False)
    other: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    __table_args__ = (UniqueConstraint("account_id", name="uq_markup_settings_account"),)


class PosSettingsRow(AccountOwnedMixin, Base):
    """POS handoff configuration."""

    __tablename__ = "pos_settings"

    store_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    is_configured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    system: Mapped[Optional[str]] = mapped_column(String(100))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    __table_args__ = (UniqueConstraint("account_id", name="uq_pos_settings_account"),)
