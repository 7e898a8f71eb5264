"""
Utilities module: Exceptions, validators.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    StoreError,
    ConfigurationError,
    MissingMarkupError,
    NotReadyError,
    PosHandoffError,
)
from shared.utils.validators import (
    validate_url,
)

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "ValidationError",
    "StoreError",
    "ConfigurationError",
    "MissingMarkupError",
    "NotReadyError",
    "PosHandoffError",
    # validators
    "validate_url",
]
