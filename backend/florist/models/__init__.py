"""
SQLAlchemy models for the remote store.

Import from here:
    from florist.models import Base, ProductTemplateRow, OrderRow
"""

from .base import Base, AccountOwnedMixin
from .catalog import ProductTemplateRow
from .order import OrderRow, OrderProductRow
from .recipe import RecipeRow, RecipeIngredientRow
from .settings import MarkupSettingsRow, PosSettingsRow

__all__ = [
    "Base",
    "AccountOwnedMixin",
    "ProductTemplateRow",
    "OrderRow",
    "OrderProductRow",
    "RecipeRow",
    "RecipeIngredientRow",
    "MarkupSettingsRow",
    "PosSettingsRow",
]
