"""
Remote store adapter (SQLAlchemy).

Used when the session has an authenticated identity. Every query filters on
account_id; an id owned by another account is reported as not found.

Repository methods are async but the ORM work is synchronous: each call runs
in a worker thread via asyncio.to_thread so the event loop is never blocked
and independent loads can proceed concurrently. Results are always rebuilt
from the rows the database returns.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel
from sqlalchemy import Engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from florist.models import (
    Base,
    MarkupSettingsRow,
    OrderProductRow,
    OrderRow,
    PosSettingsRow,
    ProductTemplateRow,
    RecipeIngredientRow,
    RecipeRow,
)
from florist.repositories.base import CollectionRepository, SingletonRepository, StoreAdapter
from florist.schemas import (
    ArrangementRecipe,
    MarkupSettings,
    OrderRecord,
    POSSettings,
    ProductTemplate,
)
from shared.config.constants import StoreMode
from shared.config.logging import get_logger, mask_account_id
from shared.infrastructure.db import safe_commit, session_scope
from shared.utils.exceptions import ConfigurationError, NotFoundError, StoreError

logger = get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)
ResultT = TypeVar("ResultT")


def init_remote_schema(engine: Engine) -> None:
    """Create all remote store tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)


def _require_account(account_id: str | None) -> str:
    if not account_id:
        raise ConfigurationError("Remote store requires an authenticated account")
    return account_id


class _SqlRepository:
    """Runs one unit of work per call in a worker thread."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    async def _run(self, operation: str, fn: Callable[..., ResultT], *args: Any) -> ResultT:
        return await asyncio.to_thread(self._run_sync, operation, fn, *args)

    def _run_sync(self, operation: str, fn: Callable[..., ResultT], *args: Any) -> ResultT:
        try:
            with session_scope(self._session_factory) as db:
                return fn(db, *args)
        except SQLAlchemyError as exc:
            raise StoreError(operation, cause=exc) from exc


class SqlCollectionRepository(_SqlRepository, CollectionRepository[SchemaT]):
    """
    Collection repository over one table, optionally with ordered child rows.

    Subclasses set:
    - model / schema: ORM row class and entity schema
    - children_field / child_model: relationship replaced wholesale on write
    """

    model: ClassVar[type[Any]]
    schema: ClassVar[type[BaseModel]]
    children_field: ClassVar[str | None] = None
    child_model: ClassVar[type[Any] | None] = None

    def _order_by(self) -> tuple[Any, ...]:
        return (self.model.id,)

    def _build_children(self, items: list[Any]) -> list[Any]:
        rows = []
        for position, item in enumerate(items):
            values = item if isinstance(item, dict) else item.model_dump()
            rows.append(self.child_model(position=position, **values))
        return rows

    def _apply(self, row: Any, fields: dict[str, Any]) -> None:
        for name, value in fields.items():
            if name == self.children_field:
                setattr(row, name, self._build_children(value))
            else:
                setattr(row, name, value)

    def _fetch(self, db: Session, account_id: str, entity_id: str) -> Any:
        row = db.scalars(
            select(self.model)
            .where(self.model.id == entity_id, self.model.account_id == account_id)
            .execution_options(populate_existing=True)
        ).first()
        if row is None:
            raise NotFoundError(self.entity_name, entity_id)
        return row

    def _load_sync(self, db: Session, account_id: str) -> list[SchemaT]:
        rows = db.scalars(
            select(self.model).where(self.model.account_id == account_id).order_by(*self._order_by())
        ).all()
        return [self.schema.model_validate(row) for row in rows]

    def _create_sync(self, db: Session, account_id: str, data: dict[str, Any]) -> SchemaT:
        row = self.model(account_id=account_id)
        self._apply(row, data)
        db.add(row)
        safe_commit(db)
        row = self._fetch(db, account_id, row.id)
        return self.schema.model_validate(row)

    def _update_sync(self, db: Session, account_id: str, entity_id: str, fields: dict[str, Any]) -> SchemaT:
        row = self._fetch(db, account_id, entity_id)
        if fields:
            self._apply(row, fields)
            safe_commit(db)
            row = self._fetch(db, account_id, entity_id)
        return self.schema.model_validate(row)

    def _delete_sync(self, db: Session, account_id: str, entity_id: str) -> None:
        row = self._fetch(db, account_id, entity_id)
        db.delete(row)
        safe_commit(db)

    async def load(self, account_id: str | None) -> list[SchemaT]:
        account = _require_account(account_id)
        return await self._run(f"load {self.model.__tablename__}", self._load_sync, account)

    async def create(self, account_id: str | None, data: dict[str, Any]) -> SchemaT:
        account = _require_account(account_id)
        entity = await self._run(f"insert {self.model.__tablename__}", self._create_sync, account, data)
        logger.debug(
            "Row inserted",
            table=self.model.__tablename__,
            entity_id=entity.id,
            account=mask_account_id(account),
        )
        return entity

    async def update(self, account_id: str | None, entity_id: str, fields: dict[str, Any]) -> SchemaT:
        account = _require_account(account_id)
        return await self._run(
            f"update {self.model.__tablename__}", self._update_sync, account, entity_id, fields
        )

    async def delete(self, account_id: str | None, entity_id: str) -> None:
        account = _require_account(account_id)
        await self._run(f"delete {self.model.__tablename__}", self._delete_sync, account, entity_id)


class ProductTemplateRepository(SqlCollectionRepository[ProductTemplate]):
    model = ProductTemplateRow
    schema = ProductTemplate
    entity_name = "Product template"

    def _order_by(self) -> tuple[Any, ...]:
        return (func.lower(ProductTemplateRow.name), ProductTemplateRow.id)


class OrderRepository(SqlCollectionRepository[OrderRecord]):
    model = OrderRow
    schema = OrderRecord
    children_field = "line_items"
    child_model = OrderProductRow
    entity_name = "Order"

    def _order_by(self) -> tuple[Any, ...]:
        return (OrderRow.created_at.desc(), OrderRow.id)


class RecipeRepository(SqlCollectionRepository[ArrangementRecipe]):
    model = RecipeRow
    schema = ArrangementRecipe
    children_field = "ingredients"
    child_model = RecipeIngredientRow
    entity_name = "Recipe"

    def _order_by(self) -> tuple[Any, ...]:
        return (func.lower(RecipeRow.name), RecipeRow.id)


class SqlSingletonRepository(_SqlRepository, SingletonRepository[SchemaT]):
    """One row per account, inserted on first save and updated afterwards."""

    model: ClassVar[type[Any]]
    schema: ClassVar[type[BaseModel]]

    def _get(self, db: Session, account_id: str) -> Any:
        return db.scalars(
            select(self.model)
            .where(self.model.account_id == account_id)
            .execution_options(populate_existing=True)
        ).first()

    def _load_sync(self, db: Session, account_id: str) -> SchemaT | None:
        row = self._get(db, account_id)
        return None if row is None else self.schema.model_validate(row)

    def _save_sync(self, db: Session, account_id: str, entity: SchemaT) -> SchemaT:
        row = self._get(db, account_id)
        if row is None:
            row = self.model(account_id=account_id)
            db.add(row)
        for name, value in entity.model_dump().items():
            setattr(row, name, value)
        safe_commit(db)
        return self.schema.model_validate(self._get(db, account_id))

    async def load(self, account_id: str | None) -> SchemaT | None:
        account = _require_account(account_id)
        return await self._run(f"load {self.model.__tablename__}", self._load_sync, account)

    async def save(self, account_id: str | None, entity: SchemaT) -> SchemaT:
        account = _require_account(account_id)
        return await self._run(f"upsert {self.model.__tablename__}", self._save_sync, account, entity)


class MarkupSettingsRepository(SqlSingletonRepository[MarkupSettings]):
    model = MarkupSettingsRow
    schema = MarkupSettings


class PosSettingsRepository(SqlSingletonRepository[POSSettings]):
    model = PosSettingsRow
    schema = POSSettings


def build_remote_store(session_factory: sessionmaker[Session]) -> StoreAdapter:
    """Remote store adapter sharing one session factory."""
    return StoreAdapter(
        mode=StoreMode.REMOTE,
        templates=ProductTemplateRepository(session_factory),
        markup=MarkupSettingsRepository(session_factory),
        orders=OrderRepository(session_factory),
        recipes=RecipeRepository(session_factory),
        pos=PosSettingsRepository(session_factory),
    )
