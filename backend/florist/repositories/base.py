"""
Store adapter contract.

One repository per entity collection; every call is scoped to an account
(None for the local session). Implementations raise StoreError for backing
store failures and NotFoundError for unknown ids; the coordinator converts
both into operation results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from florist.schemas import (
    ArrangementRecipe,
    MarkupSettings,
    OrderRecord,
    POSSettings,
    ProductTemplate,
)
from shared.config.constants import StoreMode

EntityT = TypeVar("EntityT")


class CollectionRepository(ABC, Generic[EntityT]):
    """
    Abstract repository for a collection of entities with generated ids.

    Subclasses must implement load, create, update and delete.
    """

    entity_name: str = "Entity"

    @abstractmethod
    async def load(self, account_id: str | None) -> list[EntityT]:
        """All entities of the account, newest first where the entity has a timestamp."""
        ...

    @abstractmethod
    async def create(self, account_id: str | None, data: dict[str, Any]) -> EntityT:
        """
        Insert one entity.

        Args:
            account_id: Owning account (None in local mode)
            data: Validated field values; id and timestamps are generated

        Returns:
            The stored entity, as the store reports it
        """
        ...

    @abstractmethod
    async def update(self, account_id: str | None, entity_id: str, fields: dict[str, Any]) -> EntityT:
        """
        Merge ``fields`` into one entity. Fields not present are untouched.

        Raises:
            NotFoundError: If the id does not exist for the account
        """
        ...

    @abstractmethod
    async def delete(self, account_id: str | None, entity_id: str) -> None:
        """
        Remove one entity.

        Raises:
            NotFoundError: If the id does not exist for the account
        """
        ...


class SingletonRepository(ABC, Generic[EntityT]):
    """Abstract repository for a per-account singleton (upsert semantics)."""

    @abstractmethod
    async def load(self, account_id: str | None) -> EntityT | None:
        ...

    @abstractmethod
    async def save(self, account_id: str | None, entity: EntityT) -> EntityT:
        ...


@dataclass(frozen=True)
class StoreAdapter:
    """All repositories of one backing store, chosen once per session."""

    mode: StoreMode
    templates: CollectionRepository[ProductTemplate]
    markup: SingletonRepository[MarkupSettings]
    orders: CollectionRepository[OrderRecord]
    recipes: CollectionRepository[ArrangementRecipe]
    pos: SingletonRepository[POSSettings]
