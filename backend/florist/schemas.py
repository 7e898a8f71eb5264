"""
Pydantic schemas for the florist domain entities.
Centralized so both store adapters and the services share one model.

Entity schemas (ProductTemplate, OrderRecord, ...) describe stored data and
can be built from ORM rows (``from_attributes``). Create/Update schemas
describe write payloads; Update schemas are partial: only fields the caller
actually sent are applied, and an explicit None clears an optional field.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from shared.config.constants import DEFAULT_MARKUPS, PRODUCT_CATEGORIES, Category, Limits
from shared.utils.exceptions import ValidationError
from shared.utils.validators import validate_url

SchemaT = TypeVar("SchemaT", bound=BaseModel)


# =============================================================================
# Product Templates
# =============================================================================


class ProductTemplate(BaseModel):
    id: str
    name: str
    wholesale_cost: Decimal = Field(ge=0)
    category: Category
    last_used: datetime
    inventory_count: Optional[int] = Field(default=None, ge=0)
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)

    class Config:
        from_attributes = True


class ProductTemplateCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    wholesale_cost: Decimal = Field(gt=0, le=Limits.MAX_WHOLESALE_COST, decimal_places=Limits.MONEY_DECIMALS)
    category: Category
    inventory_count: Optional[int] = Field(default=None, ge=0)
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)

    class Config:
        str_strip_whitespace = True
        extra = "forbid"


# =============================================================================
# Markup Settings
# =============================================================================


class MarkupSettings(BaseModel):
    """One positive retail multiplier per product category."""

    stem: Decimal = Field(gt=0, decimal_places=Limits.MARKUP_DECIMALS)
    vase: Decimal = Field(gt=0, decimal_places=Limits.MARKUP_DECIMALS)
    accessory: Decimal = Field(gt=0, decimal_places=Limits.MARKUP_DECIMALS)
    other: Decimal = Field(gt=0, decimal_places=Limits.MARKUP_DECIMALS)

    class Config:
        from_attributes = True
        extra = "forbid"

    @classmethod
    def defaults(cls) -> "MarkupSettings":
        return cls(**DEFAULT_MARKUPS)

    def as_table(self) -> dict[str, Decimal]:
        """Category -> multiplier mapping used by the pricing functions."""
        return {category: getattr(self, category) for category in PRODUCT_CATEGORIES}


# =============================================================================
# Orders
# =============================================================================


class LineItem(BaseModel):
    """Snapshot of a product at the time it was added to an order."""

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    wholesale_cost: Decimal = Field(ge=0, decimal_places=Limits.MONEY_DECIMALS)
    quantity: int = Field(default=1, ge=Limits.MIN_LINE_QUANTITY)
    category: Category

    class Config:
        from_attributes = True
        str_strip_whitespace = True


class OrderRecord(BaseModel):
    id: str
    name: str
    created_at: datetime
    line_items: list[LineItem]
    total_wholesale: Decimal
    total_retail: Decimal
    profit: Decimal
    photo: Optional[str] = None
    notes: Optional[str] = None
    staff_name: Optional[str] = None
    staff_id: Optional[str] = None

    class Config:
        from_attributes = True


def _check_line_costs(items: list[LineItem]) -> list[LineItem]:
    for index, item in enumerate(items):
        if item.wholesale_cost <= 0:
            raise ValueError(f"line {index + 1} ({item.name}) must have a positive wholesale cost")
    return items


class OrderDraft(BaseModel):
    """Order being saved; totals are computed from the current markup."""

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    line_items: list[LineItem] = Field(min_length=1)
    photo: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)
    staff_name: Optional[str] = None
    staff_id: Optional[str] = None

    class Config:
        str_strip_whitespace = True
        extra = "forbid"

    @field_validator("line_items")
    @classmethod
    def check_line_costs(cls, v: list[LineItem]) -> list[LineItem]:
        return _check_line_costs(v)


# =============================================================================
# Recipes
# =============================================================================


class RecipeIngredient(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    quantity: int = Field(default=1, ge=Limits.MIN_INGREDIENT_QUANTITY)
    category: Category
    notes: Optional[str] = None

    class Config:
        from_attributes = True
        str_strip_whitespace = True


class ArrangementRecipe(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    reference_price: Decimal = Field(ge=0)
    ingredients: list[RecipeIngredient] = Field(default_factory=list)
    photo: Optional[str] = None
    url: Optional[str] = None
    last_updated: datetime

    class Config:
        from_attributes = True


class RecipeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: Optional[str] = None
    reference_price: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=Limits.MONEY_DECIMALS)
    ingredients: list[RecipeIngredient] = Field(default_factory=list)
    photo: Optional[str] = None
    url: Optional[str] = None

    class Config:
        str_strip_whitespace = True
        extra = "forbid"

    @field_validator("url")
    @classmethod
    def check_url(cls, v: Optional[str]) -> Optional[str]:
        return _url_or_value_error(v)


def _url_or_value_error(url: Optional[str]) -> Optional[str]:
    try:
        return validate_url(url)
    except ValidationError as exc:
        raise ValueError(exc.detail) from exc


# =============================================================================
# POS Settings
# =============================================================================


class POSSettings(BaseModel):
    store_name: str = Field(default="", max_length=Limits.MAX_NAME_LENGTH)
    is_configured: bool = False
    system: Optional[str] = None

    class Config:
        from_attributes = True
        str_strip_whitespace = True
        extra = "forbid"


# =============================================================================
# Partial updates
# =============================================================================


class PartialUpdate(BaseModel):
    """
    Base for partial update payloads.

    Fields listed in ``required_fields`` may be omitted but not cleared.
    """

    required_fields: ClassVar[tuple[str, ...]] = ()

    class Config:
        str_strip_whitespace = True
        extra = "forbid"

    @model_validator(mode="after")
    def reject_cleared_required(self) -> "PartialUpdate":
        for name in self.required_fields:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields the caller sent, as model instances (not dumped dicts)."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class ProductTemplateUpdate(PartialUpdate):
    required_fields: ClassVar[tuple[str, ...]] = ("name", "wholesale_cost", "category", "last_used")

    name: Optional[str] = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    wholesale_cost: Optional[Decimal] = Field(default=None, gt=0, le=Limits.MAX_WHOLESALE_COST, decimal_places=Limits.MONEY_DECIMALS)
    category: Optional[Category] = None
    last_used: Optional[datetime] = None
    inventory_count: Optional[int] = Field(default=None, ge=0)
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)


class OrderUpdate(PartialUpdate):
    required_fields: ClassVar[tuple[str, ...]] = ("name", "line_items")

    name: Optional[str] = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    line_items: Optional[list[LineItem]] = Field(default=None, min_length=1)
    photo: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)
    staff_name: Optional[str] = None
    staff_id: Optional[str] = None

    @field_validator("line_items")
    @classmethod
    def check_line_costs(cls, v: Optional[list[LineItem]]) -> Optional[list[LineItem]]:
        return v if v is None else _check_line_costs(v)


class RecipeUpdate(PartialUpdate):
    required_fields: ClassVar[tuple[str, ...]] = ("name", "reference_price", "ingredients")

    name: Optional[str] = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: Optional[str] = None
    reference_price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=Limits.MONEY_DECIMALS)
    ingredients: Optional[list[RecipeIngredient]] = None
    photo: Optional[str] = None
    url: Optional[str] = None

    @field_validator("url")
    @classmethod
    def check_url(cls, v: Optional[str]) -> Optional[str]:
        return _url_or_value_error(v)


# =============================================================================
# Payload parsing
# =============================================================================


def parse_payload(schema: type[SchemaT], data: Any, entity: str) -> SchemaT:
    """
    Validate a write payload and convert pydantic errors into the shared
    ValidationError.

    Usage:
        draft = parse_payload(OrderDraft, {"name": "Bridal", "line_items": [...]}, "order")
    """
    if isinstance(data, schema):
        return data

    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        detail = f"Invalid {entity}: {field}: {first['msg']}" if field else f"Invalid {entity}: {first['msg']}"
        raise ValidationError(detail, field=field, error_count=exc.error_count()) from exc
