"""
Centralized exceptions for consistent error handling.

Every exception logs itself with structured context when constructed and
carries a machine-readable ``code`` plus a human-readable ``detail``.

Usage:
    from shared.utils.exceptions import NotFoundError, ValidationError, StoreError

    raise NotFoundError("Product template", template_id)
    raise ValidationError("Order name is required", field="name")
    raise StoreError("insert order", cause=exc)
"""

from typing import Any

from shared.config.constants import ErrorCodes
from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(Exception):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and result format.
    """

    code: str = "app_error"

    def __init__(
        self,
        detail: str,
        log_level: str = "warning",
        **log_context: Any,
    ):
        self.detail = detail
        self.context = log_context

        # Log the error with context
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, code=self.code, **log_context)

        super().__init__(detail)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error. Raised before any store is touched.

    Usage:
        raise ValidationError("Wholesale cost must be positive")
        raise ValidationError("Invalid quantity", field="quantity", value=-1)
    """

    code = ErrorCodes.VALIDATION

    def __init__(self, detail: str, field: str | None = None, **log_context: Any):
        self.field = field
        super().__init__(detail, log_level="warning", field=field, **log_context)


# =============================================================================
# Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found for the current account.

    Usage:
        raise NotFoundError("Order", order_id)
    """

    code = ErrorCodes.NOT_FOUND

    def __init__(self, entity: str, entity_id: str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# Store Errors
# =============================================================================


class StoreError(AppException):
    """
    A backing store failed (database error, unreadable cache, I/O).

    The original exception is kept on ``cause`` and chained by the raiser
    with ``raise StoreError(...) from exc``.

    Usage:
        except SQLAlchemyError as exc:
            raise StoreError("insert order", cause=exc) from exc
    """

    code = ErrorCodes.STORE

    def __init__(
        self,
        operation: str,
        cause: BaseException | None = None,
        **log_context: Any,
    ):
        detail = f"Store operation failed during {operation}"
        if cause is not None:
            detail = f"{detail}: {cause}"

        self.operation = operation
        self.cause = cause
        super().__init__(
            detail,
            log_level="error",
            operation=operation,
            cause_type=type(cause).__name__ if cause is not None else None,
            **log_context,
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(AppException):
    """
    Configuration is unusable for a computation (e.g. markup table missing a
    category). Never converted into a result: callers must fix the config.
    """

    code = ErrorCodes.CONFIGURATION

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(detail, log_level="error", **log_context)


class MissingMarkupError(ConfigurationError):
    """Markup table has no usable multiplier for a category."""

    def __init__(self, category: str, value: Any = None, **log_context: Any):
        if value is None:
            detail = f"Markup table has no multiplier for category '{category}'"
        else:
            detail = f"Markup multiplier for category '{category}' must be positive, got {value}"
        self.category = category
        super().__init__(detail, category=category, **log_context)


# =============================================================================
# State Errors
# =============================================================================


class NotReadyError(AppException):
    """A collection was used before it finished loading."""

    code = ErrorCodes.NOT_READY

    def __init__(self, collection: str, state: str, **log_context: Any):
        detail = f"Collection '{collection}' is not ready (state: {state})"
        super().__init__(detail, log_level="warning", collection=collection, state=state, **log_context)


class PosHandoffError(AppException):
    """Order cannot be handed off to the POS."""

    code = ErrorCodes.POS_HANDOFF

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(detail, log_level="warning", **log_context)
