"""
Recipe Models: RecipeRow, RecipeIngredientRow.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AccountOwnedMixin, Base, new_uuid, utcnow


class RecipeRow(AccountOwnedMixin, Base):
    """
    Arrangement recipe: a reusable composition of catalog ingredients,
    compared against the price the design sells for elsewhere.
    """

    __tablename__ = "arrangement_recipes"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    reference_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    photo: Mapped[Optional[str]] = mapped_column(Text)
    url: Mapped[Optional[str]] = mapped_column(Text)
    last_updated: Mapped[datetime] = mapped_column(
        "updated_at",
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    ingredients: Mapped[list[RecipeIngredientRow]] = relationship(
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredientRow.position",
        lazy="selectin",
    )


class RecipeIngredientRow(Base):
    """One ingredient line of a recipe (free-text name, matched at analysis time)."""

    __tablename__ = "recipe_ingredients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("arrangement_recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    recipe: Mapped[RecipeRow] = relationship(back_populates="ingredients")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="chk_recipe_ingredient_quantity_positive"),
    )
