"""
Centralized constants for the pricing and synchronization core.

Usage:
    from shared.config.constants import PRODUCT_CATEGORIES, DEFAULT_MARKUPS

    if category in PRODUCT_CATEGORIES:
        ...
"""

from decimal import Decimal
from enum import Enum
from typing import Final, Literal, get_args


# =============================================================================
# Product Categories
# =============================================================================


# One markup multiplier per category
Category = Literal["stem", "vase", "accessory", "other"]

PRODUCT_CATEGORIES: Final[tuple[str, ...]] = get_args(Category)


# Multipliers used when an account has never saved markup settings
DEFAULT_MARKUPS: Final[dict[str, Decimal]] = {
    "stem": Decimal("2.5"),
    "vase": Decimal("2.0"),
    "accessory": Decimal("3.0"),
    "other": Decimal("2.0"),
}


# =============================================================================
# Store Modes and Collection State
# =============================================================================


class StoreMode(str, Enum):
    """Backing store selected for a session."""

    REMOTE = "remote"
    LOCAL = "local"


class CollectionState(str, Enum):
    """Lifecycle of one in-memory entity collection."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class Collections:
    """Entity collection names (also the local cache key suffixes)."""

    PRODUCT_TEMPLATES: Final[str] = "product_templates"
    MARKUP_SETTINGS: Final[str] = "markup_settings"
    ORDERS: Final[str] = "saved_orders"
    RECIPES: Final[str] = "arrangement_recipes"
    POS_SETTINGS: Final[str] = "pos_settings"

    ALL: Final[tuple[str, ...]] = (
        PRODUCT_TEMPLATES,
        MARKUP_SETTINGS,
        ORDERS,
        RECIPES,
        POS_SETTINGS,
    )


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_INGREDIENT_QUANTITY: Final[int] = 1
    MIN_LINE_QUANTITY: Final[int] = 0

    # Money limits
    MAX_WHOLESALE_COST: Final[Decimal] = Decimal("100000")
    MONEY_PLACES: Final[Decimal] = Decimal("0.01")
    MONEY_DECIMALS: Final[int] = 2
    MARKUP_DECIMALS: Final[int] = 3

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_NOTES_LENGTH: Final[int] = 2000
    MAX_URL_LENGTH: Final[int] = 2048


# =============================================================================
# POS Handoff
# =============================================================================


class PosFormat:
    """Layout constants for the copy-paste POS summary."""

    WIDTH: Final[int] = 50
    HEAVY_RULE: Final[str] = "=" * 50
    LIGHT_RULE: Final[str] = "-" * 50
    NO_STAFF: Final[str] = "N/A"
    WEBHOOK_SOURCE: Final[str] = "FlowerCost Pro"
    USER_AGENT: Final[str] = "FlowerCost-Pro/1.0"


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCodes:
    """Machine-readable codes carried by AppException subclasses."""

    VALIDATION: Final[str] = "validation_error"
    NOT_FOUND: Final[str] = "not_found"
    STORE: Final[str] = "store_error"
    CONFIGURATION: Final[str] = "configuration_error"
    POS_HANDOFF: Final[str] = "pos_handoff_error"
    NOT_READY: Final[str] = "not_ready"
