"""
Persistence coordinator.

Holds the in-memory snapshot of the five collections for one session and
routes every read and write through the session's store adapter. The
snapshot only changes after the adapter acknowledges a write, and always
from the entity the adapter returned.

Collection lifecycle:
    UNINITIALIZED -> LOADING -> READY
                             -> ERROR

Mutations are serialized by an asyncio.Lock. Expected failures (validation,
unknown ids, store errors, POS gating) come back as failed OperationResults;
configuration and programming errors propagate.

Usage:
    store = open_store(SessionContext(account_id))
    coordinator = PersistenceCoordinator(SessionContext(account_id), store)
    await coordinator.load_all()

    result = await coordinator.save_order({"name": "Bridal", "line_items": [...]})
    if result.success:
        order = result.value
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Generic, TypeVar

from florist.repositories.base import StoreAdapter
from florist.schemas import (
    ArrangementRecipe,
    MarkupSettings,
    OrderDraft,
    OrderRecord,
    OrderUpdate,
    POSSettings,
    ProductTemplate,
    ProductTemplateCreate,
    ProductTemplateUpdate,
    RecipeCreate,
    RecipeUpdate,
    parse_payload,
)
from florist.services.analytics import ProfitSummary, summarize_orders
from florist.services.inventory import changed_templates, low_stock_templates, reconcile_inventory
from florist.services.matching import IngredientMatcher, SubstringIngredientMatcher, sort_catalog
from florist.services.pos_handoff import ensure_handoff_allowed, format_pos_summary
from florist.services.pos_webhook import PosWebhookClient, WebhookResponse
from florist.services.pricing import price_order
from florist.services.recipe_analysis import RecipeCostAnalysis, analyze_recipe, draft_lines_from_recipe
from florist.session import SessionContext
from shared.config.constants import CollectionState, Collections, StoreMode
from shared.config.logging import get_logger, mask_account_id
from shared.utils.exceptions import (
    AppException,
    ConfigurationError,
    NotFoundError,
    NotReadyError,
    PosHandoffError,
    StoreError,
    ValidationError,
)

logger = get_logger(__name__)

T = TypeVar("T")

# Failures reported as results; anything else propagates
EXPECTED_ERRORS = (ValidationError, NotFoundError, StoreError, NotReadyError, PosHandoffError)


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True, slots=True)
class OperationResult(Generic[T]):
    """
    Result of one coordinator operation.

    Attributes:
        success: Whether the operation succeeded.
        value: Stored entity (or derived value) if successful.
        error: The exception describing the failure.
    """

    success: bool
    value: T | None = None
    error: AppException | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> "OperationResult[T]":
        """Create successful result."""
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: AppException) -> "OperationResult[T]":
        """Create failed result."""
        return cls(success=False, error=error)

    @property
    def error_message(self) -> str | None:
        return self.error.detail if self.error is not None else None

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error is not None else None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _find(entities: list[Any], entity_id: str, entity_name: str) -> Any:
    for entity in entities:
        if entity.id == entity_id:
            return entity
    raise NotFoundError(entity_name, entity_id)


def _replace(entities: list[Any], entity: Any) -> list[Any]:
    return [entity if e.id == entity.id else e for e in entities]


def _fields_of(payload: Any) -> dict[str, Any]:
    """All declared fields of a validated payload, keeping nested models."""
    return {name: getattr(payload, name) for name in type(payload).model_fields}


# =============================================================================
# Coordinator
# =============================================================================


class PersistenceCoordinator:
    """
    In-memory snapshot plus write-through to one store adapter.

    Args:
        session: Identity of the current session
        store: Adapter selected for that session by open_store
        matcher: Ingredient matcher for recipe analysis (substring by default)
        low_margin_threshold: Margin percent below which analytics flags an order
    """

    def __init__(
        self,
        session: SessionContext,
        store: StoreAdapter,
        matcher: IngredientMatcher | None = None,
        low_margin_threshold: Decimal | float = Decimal("40"),
    ):
        self._session = session
        self._store = store
        self._matcher = matcher or SubstringIngredientMatcher()
        self._low_margin_threshold = low_margin_threshold
        self._lock = asyncio.Lock()
        self._reset()

    def _reset(self) -> None:
        self._states: dict[str, CollectionState] = {c: CollectionState.UNINITIALIZED for c in Collections.ALL}
        self._errors: dict[str, AppException] = {}
        self._templates: list[ProductTemplate] = []
        self._markup: MarkupSettings = MarkupSettings.defaults()
        self._orders: list[OrderRecord] = []
        self._recipes: list[ArrangementRecipe] = []
        self._pos: POSSettings = POSSettings()

    # -------------------------------------------------------------------------
    # Snapshot accessors
    # -------------------------------------------------------------------------

    @property
    def session(self) -> SessionContext:
        return self._session

    @property
    def mode(self) -> StoreMode:
        return self._store.mode

    @property
    def account_id(self) -> str | None:
        return self._session.account_id

    @property
    def templates(self) -> list[ProductTemplate]:
        return list(self._templates)

    @property
    def markup(self) -> MarkupSettings:
        return self._markup

    @property
    def orders(self) -> list[OrderRecord]:
        return list(self._orders)

    @property
    def recipes(self) -> list[ArrangementRecipe]:
        return list(self._recipes)

    @property
    def pos_settings(self) -> POSSettings:
        return self._pos

    @property
    def states(self) -> dict[str, CollectionState]:
        return dict(self._states)

    @property
    def errors(self) -> dict[str, AppException]:
        return dict(self._errors)

    def state(self, collection: str) -> CollectionState:
        return self._states[collection]

    @property
    def is_ready(self) -> bool:
        return all(s is CollectionState.READY for s in self._states.values())

    def _require_ready(self, *collections: str) -> None:
        for collection in collections:
            state = self._states[collection]
            if state is not CollectionState.READY:
                raise NotReadyError(collection, state.value)

    # -------------------------------------------------------------------------
    # Loading and session changes
    # -------------------------------------------------------------------------

    async def _load_templates(self) -> None:
        self._templates = sort_catalog(await self._store.templates.load(self.account_id))

    async def _load_markup(self) -> None:
        # Accounts that never saved markup get the defaults
        self._markup = await self._store.markup.load(self.account_id) or MarkupSettings.defaults()

    async def _load_orders(self) -> None:
        self._orders = await self._store.orders.load(self.account_id)

    async def _load_recipes(self) -> None:
        self._recipes = await self._store.recipes.load(self.account_id)

    async def _load_pos(self) -> None:
        self._pos = await self._store.pos.load(self.account_id) or POSSettings()

    async def _load_all_unlocked(self) -> OperationResult[None]:
        loaders: dict[str, Callable[[], Awaitable[None]]] = {
            Collections.PRODUCT_TEMPLATES: self._load_templates,
            Collections.MARKUP_SETTINGS: self._load_markup,
            Collections.ORDERS: self._load_orders,
            Collections.RECIPES: self._load_recipes,
            Collections.POS_SETTINGS: self._load_pos,
        }
        for collection in loaders:
            self._states[collection] = CollectionState.LOADING
        self._errors.clear()

        results = await asyncio.gather(*(load() for load in loaders.values()), return_exceptions=True)

        first_error: AppException | None = None
        for collection, result in zip(loaders, results):
            if result is None:
                self._states[collection] = CollectionState.READY
                continue

            self._states[collection] = CollectionState.ERROR
            if isinstance(result, ConfigurationError) or not isinstance(result, AppException):
                raise result
            self._errors[collection] = result
            first_error = first_error or result

        if first_error is not None:
            logger.warning(
                "Session load incomplete",
                account=mask_account_id(self.account_id),
                failed=sorted(self._errors),
            )
            return OperationResult.fail(first_error)

        logger.info(
            "Session loaded",
            account=mask_account_id(self.account_id),
            mode=self.mode.value,
            templates=len(self._templates),
            orders=len(self._orders),
            recipes=len(self._recipes),
        )
        return OperationResult.ok()

    async def load_all(self) -> OperationResult[None]:
        """Load all five collections concurrently."""
        async with self._lock:
            return await self._load_all_unlocked()

    async def change_session(self, session: SessionContext, store: StoreAdapter) -> OperationResult[None]:
        """Discard the current snapshot and reload for a new identity."""
        async with self._lock:
            logger.info(
                "Session changed",
                previous=mask_account_id(self.account_id),
                current=mask_account_id(session.account_id),
            )
            self._session = session
            self._store = store
            self._reset()
            return await self._load_all_unlocked()

    # -------------------------------------------------------------------------
    # Mutation plumbing
    # -------------------------------------------------------------------------

    async def _mutate(
        self,
        operation: str,
        collections: tuple[str, ...],
        action: Callable[[], Awaitable[T]],
    ) -> OperationResult[T]:
        async with self._lock:
            try:
                self._require_ready(*collections)
                value = await action()
            except EXPECTED_ERRORS as exc:
                logger.warning(
                    f"{operation} failed",
                    code=exc.code,
                    account=mask_account_id(self.account_id),
                )
                return OperationResult.fail(exc)
            return OperationResult.ok(value)

    def _read(self, collections: tuple[str, ...], action: Callable[[], T]) -> OperationResult[T]:
        try:
            self._require_ready(*collections)
            return OperationResult.ok(action())
        except EXPECTED_ERRORS as exc:
            return OperationResult.fail(exc)

    # -------------------------------------------------------------------------
    # Product templates
    # -------------------------------------------------------------------------

    async def _create_template(self, payload: ProductTemplateCreate) -> ProductTemplate:
        template = await self._store.templates.create(self.account_id, payload.model_dump())
        self._templates = sort_catalog([*self._templates, template])
        logger.info("Product template created", template_id=template.id)
        return template

    async def _update_template(self, template_id: str, changes: dict[str, Any]) -> ProductTemplate:
        current = _find(self._templates, template_id, "Product template")
        if not changes:
            return current
        template = await self._store.templates.update(self.account_id, template_id, changes)
        self._templates = sort_catalog(_replace(self._templates, template))
        return template

    async def create_template(self, data: Any) -> OperationResult[ProductTemplate]:
        async def action() -> ProductTemplate:
            payload = parse_payload(ProductTemplateCreate, data, "product template")
            return await self._create_template(payload)

        return await self._mutate("Create template", (Collections.PRODUCT_TEMPLATES,), action)

    async def update_template(self, template_id: str, partial: Any) -> OperationResult[ProductTemplate]:
        """Merge the fields present in ``partial``; ``{}`` leaves the template untouched."""

        async def action() -> ProductTemplate:
            payload = parse_payload(ProductTemplateUpdate, partial, "product template update")
            return await self._update_template(template_id, payload.changes())

        return await self._mutate("Update template", (Collections.PRODUCT_TEMPLATES,), action)

    async def delete_template(self, template_id: str) -> OperationResult[None]:
        async def action() -> None:
            _find(self._templates, template_id, "Product template")
            await self._store.templates.delete(self.account_id, template_id)
            self._templates = [t for t in self._templates if t.id != template_id]

        return await self._mutate("Delete template", (Collections.PRODUCT_TEMPLATES,), action)

    async def add_product(self, data: Any) -> OperationResult[ProductTemplate]:
        """
        Record a product: update the template with the same name
        (case-insensitive) and category, or create one.

        An existing template gets the new cost and a fresh ``last_used``;
        inventory fields change only when the payload includes them.
        """

        async def action() -> ProductTemplate:
            payload = parse_payload(ProductTemplateCreate, data, "product")
            name = payload.name.casefold()
            existing = next(
                (
                    t
                    for t in self._templates
                    if t.name.casefold() == name and t.category == payload.category
                ),
                None,
            )
            if existing is None:
                return await self._create_template(payload)

            changes: dict[str, Any] = {"wholesale_cost": payload.wholesale_cost, "last_used": _utcnow()}
            for field_name in ("inventory_count", "low_stock_threshold"):
                if field_name in payload.model_fields_set:
                    changes[field_name] = getattr(payload, field_name)
            return await self._update_template(existing.id, changes)

        return await self._mutate("Add product", (Collections.PRODUCT_TEMPLATES,), action)

    # -------------------------------------------------------------------------
    # Markup
    # -------------------------------------------------------------------------

    async def save_markup(self, settings: Any) -> OperationResult[MarkupSettings]:
        async def action() -> MarkupSettings:
            payload = parse_payload(MarkupSettings, settings, "markup settings")
            self._markup = await self._store.markup.save(self.account_id, payload)
            logger.info("Markup settings saved", account=mask_account_id(self.account_id))
            return self._markup

        return await self._mutate("Save markup", (Collections.MARKUP_SETTINGS,), action)

    # -------------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------------

    async def _reconcile(self, order: OrderRecord) -> None:
        """
        Decrement stock for a committed order.

        Each changed template is written separately; a failed write is logged
        and leaves that template's snapshot entry as it was.
        """
        before = self._templates
        for template in changed_templates(before, reconcile_inventory(order, before)):
            try:
                stored = await self._store.templates.update(
                    self.account_id, template.id, {"inventory_count": template.inventory_count}
                )
            except (StoreError, NotFoundError) as exc:
                logger.error(
                    "Inventory update failed",
                    order_id=order.id,
                    template_id=template.id,
                    code=exc.code,
                )
                continue
            self._templates = _replace(self._templates, stored)

    async def save_order(self, draft: Any) -> OperationResult[OrderRecord]:
        """
        Price, store and reconcile a new order.

        Totals use the current markup table. Saving the same draft twice
        stores two orders.
        """

        async def action() -> OrderRecord:
            payload = parse_payload(OrderDraft, draft, "order")
            totals = price_order(payload.line_items, self._markup.as_table())
            order = await self._store.orders.create(
                self.account_id, {**_fields_of(payload), **totals.as_fields()}
            )
            self._orders = [order, *self._orders]
            logger.info(
                "Order saved",
                order_id=order.id,
                account=mask_account_id(self.account_id),
                total_retail=str(order.total_retail),
            )
            await self._reconcile(order)
            return order

        return await self._mutate(
            "Save order",
            (Collections.ORDERS, Collections.PRODUCT_TEMPLATES, Collections.MARKUP_SETTINGS),
            action,
        )

    async def update_order(self, order_id: str, partial: Any) -> OperationResult[OrderRecord]:
        """
        Edit an order. Replacing line items recomputes totals with the
        current markup; stock is never reconciled again.
        """

        async def action() -> OrderRecord:
            payload = parse_payload(OrderUpdate, partial, "order update")
            current = _find(self._orders, order_id, "Order")
            changes = payload.changes()
            if not changes:
                return current
            if "line_items" in changes:
                changes.update(price_order(changes["line_items"], self._markup.as_table()).as_fields())
            order = await self._store.orders.update(self.account_id, order_id, changes)
            self._orders = _replace(self._orders, order)
            return order

        return await self._mutate(
            "Update order", (Collections.ORDERS, Collections.MARKUP_SETTINGS), action
        )

    async def delete_order(self, order_id: str) -> OperationResult[None]:
        """Remove an order. Stock consumed by the order is not restored."""

        async def action() -> None:
            _find(self._orders, order_id, "Order")
            await self._store.orders.delete(self.account_id, order_id)
            self._orders = [o for o in self._orders if o.id != order_id]

        return await self._mutate("Delete order", (Collections.ORDERS,), action)

    # -------------------------------------------------------------------------
    # Recipes
    # -------------------------------------------------------------------------

    async def create_recipe(self, data: Any) -> OperationResult[ArrangementRecipe]:
        async def action() -> ArrangementRecipe:
            payload = parse_payload(RecipeCreate, data, "recipe")
            recipe = await self._store.recipes.create(self.account_id, _fields_of(payload))
            self._recipes = sorted([*self._recipes, recipe], key=lambda r: (r.name.casefold(), r.id))
            return recipe

        return await self._mutate("Create recipe", (Collections.RECIPES,), action)

    async def update_recipe(self, recipe_id: str, partial: Any) -> OperationResult[ArrangementRecipe]:
        """Merge fields; a new ingredient list replaces the old one and refreshes ``last_updated``."""

        async def action() -> ArrangementRecipe:
            payload = parse_payload(RecipeUpdate, partial, "recipe update")
            current = _find(self._recipes, recipe_id, "Recipe")
            changes = payload.changes()
            if not changes:
                return current
            changes["last_updated"] = _utcnow()
            recipe = await self._store.recipes.update(self.account_id, recipe_id, changes)
            self._recipes = sorted(_replace(self._recipes, recipe), key=lambda r: (r.name.casefold(), r.id))
            return recipe

        return await self._mutate("Update recipe", (Collections.RECIPES,), action)

    async def delete_recipe(self, recipe_id: str) -> OperationResult[None]:
        async def action() -> None:
            _find(self._recipes, recipe_id, "Recipe")
            await self._store.recipes.delete(self.account_id, recipe_id)
            self._recipes = [r for r in self._recipes if r.id != recipe_id]

        return await self._mutate("Delete recipe", (Collections.RECIPES,), action)

    # -------------------------------------------------------------------------
    # POS settings
    # -------------------------------------------------------------------------

    async def save_pos_settings(self, settings: Any) -> OperationResult[POSSettings]:
        async def action() -> POSSettings:
            payload = parse_payload(POSSettings, settings, "POS settings")
            self._pos = await self._store.pos.save(self.account_id, payload)
            return self._pos

        return await self._mutate("Save POS settings", (Collections.POS_SETTINGS,), action)

    # -------------------------------------------------------------------------
    # Derived reads
    # -------------------------------------------------------------------------

    def analyze_recipe(self, recipe_id: str) -> OperationResult[RecipeCostAnalysis]:
        def action() -> RecipeCostAnalysis:
            recipe = _find(self._recipes, recipe_id, "Recipe")
            return analyze_recipe(recipe, self._templates, self._markup.as_table(), self._matcher)

        return self._read(
            (Collections.RECIPES, Collections.PRODUCT_TEMPLATES, Collections.MARKUP_SETTINGS), action
        )

    def draft_order_from_recipe(self, recipe_id: str, name: str | None = None) -> OperationResult[OrderDraft]:
        """Order draft pre-populated from a recipe; fails while any ingredient is missing."""

        def action() -> OrderDraft:
            recipe = _find(self._recipes, recipe_id, "Recipe")
            drafted = draft_lines_from_recipe(recipe, self._templates, self._matcher)
            if not drafted.complete:
                missing = ", ".join(drafted.missing_ingredients)
                raise ValidationError(
                    f"Recipe ingredients not in the product catalog: {missing}",
                    field="ingredients",
                    recipe_id=recipe_id,
                )
            return parse_payload(
                OrderDraft,
                {"name": name or recipe.name, "line_items": drafted.line_items},
                "order",
            )

        return self._read((Collections.RECIPES, Collections.PRODUCT_TEMPLATES), action)

    def low_stock(self) -> OperationResult[list[ProductTemplate]]:
        return self._read((Collections.PRODUCT_TEMPLATES,), lambda: low_stock_templates(self._templates))

    def pos_summary(self, order_id: str) -> OperationResult[str]:
        """Copy-paste POS text for an order; gated for staff orders."""

        def action() -> str:
            order = _find(self._orders, order_id, "Order")
            ensure_handoff_allowed(order, self._pos)
            return format_pos_summary(order, self._markup.as_table())

        return self._read(
            (Collections.ORDERS, Collections.MARKUP_SETTINGS, Collections.POS_SETTINGS), action
        )

    async def send_order_to_pos(self, order_id: str, client: PosWebhookClient) -> OperationResult[WebhookResponse]:
        """Deliver an order to the POS webhook; a rejected delivery is a failed result."""
        try:
            self._require_ready(Collections.ORDERS, Collections.MARKUP_SETTINGS, Collections.POS_SETTINGS)
            order = _find(self._orders, order_id, "Order")
            ensure_handoff_allowed(order, self._pos)
        except EXPECTED_ERRORS as exc:
            return OperationResult.fail(exc)

        response = await client.send_order(order, self._markup.as_table(), self._pos.store_name)
        if not response.success:
            return OperationResult.fail(
                PosHandoffError(f"POS webhook delivery failed: {response.error}", order_id=order_id)
            )
        return OperationResult.ok(response)

    def analytics(self, now: datetime | None = None) -> OperationResult[ProfitSummary]:
        return self._read(
            (Collections.ORDERS, Collections.MARKUP_SETTINGS),
            lambda: summarize_orders(
                self._orders,
                self._markup.as_table(),
                low_margin_threshold=self._low_margin_threshold,
                now=now,
            ),
        )
