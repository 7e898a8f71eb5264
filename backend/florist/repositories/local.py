"""
Local cache adapter.

Used when the session has no identity. Each collection is one JSON document
under ``<prefix><collection>`` in a KeyValueStore. Ids (``local-<uuid>``)
and timestamps are generated here since there is no authoritative remote.

On first run (no document under a key) collections are seeded from the
bundled sample shop, unless seeding is disabled.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Generic, TypeVar

import redis
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from florist.repositories.base import CollectionRepository, SingletonRepository, StoreAdapter
from florist.repositories.kv import KeyValueStore
from florist.schemas import (
    ArrangementRecipe,
    MarkupSettings,
    OrderRecord,
    POSSettings,
    ProductTemplate,
)
from shared.config.constants import Collections, StoreMode
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, StoreError

logger = get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

SAMPLE_DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "sample_florist_data.json"

# Backend failures surfaced as StoreError
_BACKEND_ERRORS = (OSError, UnicodeDecodeError, redis.RedisError)


def new_local_id() -> str:
    return f"local-{uuid.uuid4()}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@lru_cache
def load_sample_data() -> dict[str, Any]:
    """Bundled sample shop, keyed by collection name."""
    with SAMPLE_DATA_PATH.open(encoding="utf-8") as fh:
        return json.load(fh)


class _LocalDocument(Generic[SchemaT]):
    """Read/write one JSON document holding a value of ``TypeAdapter`` type."""

    def __init__(self, kv: KeyValueStore, key: str, adapter: TypeAdapter):
        self._kv = kv
        self._key = key
        self._adapter = adapter

    @property
    def key(self) -> str:
        return self._key

    def read_raw(self) -> str | None:
        try:
            return self._kv.get(self._key)
        except _BACKEND_ERRORS as exc:
            raise StoreError(f"read {self._key}", cause=exc) from exc

    def parse(self, raw: str) -> Any:
        try:
            return self._adapter.validate_json(raw)
        except PydanticValidationError as exc:
            raise StoreError(f"parse {self._key}", cause=exc) from exc

    def write(self, value: Any) -> None:
        payload = self._adapter.dump_json(value).decode("utf-8")
        try:
            self._kv.set(self._key, payload)
        except _BACKEND_ERRORS as exc:
            raise StoreError(f"write {self._key}", cause=exc) from exc


class LocalCollectionRepository(CollectionRepository[SchemaT]):
    """
    Collection stored as a JSON list.

    Args:
        kv: Backing key-value store
        key: Document key (prefix + collection name)
        schema: Entity schema
        collection: Collection name in the sample dataset
        timestamp_field: Field set to "now" on create
        sort_key: Ordering applied on load
        seed: Seed from the sample dataset when the key is missing
    """

    def __init__(
        self,
        kv: KeyValueStore,
        key: str,
        schema: type[SchemaT],
        collection: str,
        timestamp_field: str,
        sort_key: Callable[[SchemaT], Any],
        reverse: bool = False,
        seed: bool = True,
        entity_name: str = "Entity",
    ):
        self._doc: _LocalDocument[SchemaT] = _LocalDocument(kv, key, TypeAdapter(list[schema]))
        self._schema = schema
        self._collection = collection
        self._timestamp_field = timestamp_field
        self._sort_key = sort_key
        self._reverse = reverse
        self._seed = seed
        self.entity_name = entity_name

    def _read(self) -> list[SchemaT]:
        raw = self._doc.read_raw()
        if raw is not None:
            return self._doc.parse(raw)
        if not self._seed:
            return []

        logger.info("Seeding local collection from sample data", collection=self._collection)
        seed = load_sample_data().get(self._collection, [])
        return TypeAdapter(list[self._schema]).validate_python(seed)

    def _sorted(self, entities: list[SchemaT]) -> list[SchemaT]:
        return sorted(entities, key=self._sort_key, reverse=self._reverse)

    def _index_of(self, entities: list[SchemaT], entity_id: str) -> int:
        for index, entity in enumerate(entities):
            if entity.id == entity_id:
                return index
        raise NotFoundError(self.entity_name, entity_id)

    async def load(self, account_id: str | None) -> list[SchemaT]:
        return self._sorted(self._read())

    async def create(self, account_id: str | None, data: dict[str, Any]) -> SchemaT:
        entities = self._read()
        entity = self._schema.model_validate(
            {**data, "id": new_local_id(), self._timestamp_field: _now()}
        )
        entities.insert(0, entity)
        self._doc.write(entities)
        return entity

    async def update(self, account_id: str | None, entity_id: str, fields: dict[str, Any]) -> SchemaT:
        entities = self._read()
        index = self._index_of(entities, entity_id)
        if not fields:
            return entities[index]

        current = entities[index]
        merged = {name: getattr(current, name) for name in type(current).model_fields}
        merged.update(fields)
        entity = self._schema.model_validate(merged)
        entities[index] = entity
        self._doc.write(entities)
        return entity

    async def delete(self, account_id: str | None, entity_id: str) -> None:
        entities = self._read()
        index = self._index_of(entities, entity_id)
        del entities[index]
        self._doc.write(entities)


class LocalSingletonRepository(SingletonRepository[SchemaT]):
    """Singleton stored as one JSON object; None until saved (or seeded)."""

    def __init__(
        self,
        kv: KeyValueStore,
        key: str,
        schema: type[SchemaT],
        collection: str,
        seed: bool = True,
    ):
        self._doc: _LocalDocument[SchemaT] = _LocalDocument(kv, key, TypeAdapter(schema))
        self._schema = schema
        self._collection = collection
        self._seed = seed

    async def load(self, account_id: str | None) -> SchemaT | None:
        raw = self._doc.read_raw()
        if raw is not None:
            return self._doc.parse(raw)
        if not self._seed:
            return None

        seed = load_sample_data().get(self._collection)
        if seed is None:
            return None
        logger.info("Seeding local settings from sample data", collection=self._collection)
        return self._schema.model_validate(seed)

    async def save(self, account_id: str | None, entity: SchemaT) -> SchemaT:
        self._doc.write(entity)
        return entity


def build_local_store(kv: KeyValueStore, key_prefix: str = "demo_", seed: bool = True) -> StoreAdapter:
    """Local cache adapter over ``kv`` with keys ``<key_prefix><collection>``."""

    def key(collection: str) -> str:
        return f"{key_prefix}{collection}"

    return StoreAdapter(
        mode=StoreMode.LOCAL,
        templates=LocalCollectionRepository(
            kv,
            key(Collections.PRODUCT_TEMPLATES),
            ProductTemplate,
            Collections.PRODUCT_TEMPLATES,
            timestamp_field="last_used",
            sort_key=lambda t: (t.name.casefold(), t.id),
            seed=seed,
            entity_name="Product template",
        ),
        markup=LocalSingletonRepository(
            kv, key(Collections.MARKUP_SETTINGS), MarkupSettings, Collections.MARKUP_SETTINGS, seed=seed
        ),
        orders=LocalCollectionRepository(
            kv,
            key(Collections.ORDERS),
            OrderRecord,
            Collections.ORDERS,
            timestamp_field="created_at",
            sort_key=lambda o: o.created_at,
            reverse=True,
            seed=seed,
            entity_name="Order",
        ),
        recipes=LocalCollectionRepository(
            kv,
            key(Collections.RECIPES),
            ArrangementRecipe,
            Collections.RECIPES,
            timestamp_field="last_updated",
            sort_key=lambda r: (r.name.casefold(), r.id),
            seed=seed,
            entity_name="Recipe",
        ),
        pos=LocalSingletonRepository(
            kv, key(Collections.POS_SETTINGS), POSSettings, Collections.POS_SETTINGS, seed=seed
        ),
    )
