"""
Configuration module: Settings, logging, constants.
"""

from shared.config.settings import settings, get_settings, Settings
from shared.config.logging import get_logger, setup_logging, mask_account_id
from shared.config.constants import (
    Category,
    PRODUCT_CATEGORIES,
    DEFAULT_MARKUPS,
    StoreMode,
    CollectionState,
    Collections,
    Limits,
)

__all__ = [
    # settings
    "settings",
    "get_settings",
    "Settings",
    # logging
    "get_logger",
    "setup_logging",
    "mask_account_id",
    # constants
    "Category",
    "PRODUCT_CATEGORIES",
    "DEFAULT_MARKUPS",
    "StoreMode",
    "CollectionState",
    "Collections",
    "Limits",
]
