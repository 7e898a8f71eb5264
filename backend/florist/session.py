"""
Session context and store selection.

The backing store is chosen once per session from its identity:
- identity present: remote store (SQLAlchemy)
- no identity: local cache (file or Redis key-value store)
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session, sessionmaker

from florist.repositories.base import StoreAdapter
from florist.repositories.kv import FileKeyValueStore, KeyValueStore, RedisKeyValueStore
from florist.repositories.local import build_local_store
from florist.repositories.remote import build_remote_store, init_remote_schema
from shared.config.constants import StoreMode
from shared.config.logging import get_logger, mask_account_id
from shared.config.settings import Settings, get_settings
from shared.infrastructure.db import create_session_factory, create_store_engine

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionContext:
    """
    Identity of the current session.

    ``account_id`` is None for a local (unauthenticated) session; an empty
    string is treated the same way.
    """

    account_id: str | None = None

    def __post_init__(self) -> None:
        if self.account_id is not None and not self.account_id.strip():
            object.__setattr__(self, "account_id", None)

    @property
    def is_authenticated(self) -> bool:
        return self.account_id is not None

    @property
    def mode(self) -> StoreMode:
        return StoreMode.REMOTE if self.is_authenticated else StoreMode.LOCAL


def create_kv_store(settings: Settings) -> KeyValueStore:
    """Local cache backend from settings."""
    if settings.local_cache_backend == "redis":
        return RedisKeyValueStore.from_url(settings.local_cache_redis_url)
    return FileKeyValueStore(settings.local_cache_dir)


def open_store(
    context: SessionContext,
    settings: Settings | None = None,
    session_factory: sessionmaker[Session] | None = None,
    kv_store: KeyValueStore | None = None,
) -> StoreAdapter:
    """
    Select the store adapter for a session.

    Args:
        context: Session identity
        settings: Settings (defaults to the cached application settings)
        session_factory: Remote store sessions; built from settings when omitted
        kv_store: Local cache backend; built from settings when omitted
    """
    settings = settings or get_settings()

    if context.mode is StoreMode.REMOTE:
        if session_factory is None:
            engine = create_store_engine(settings.database_url, settings.database_echo)
            init_remote_schema(engine)
            session_factory = create_session_factory(engine)
        logger.info("Opened remote store", account=mask_account_id(context.account_id))
        return build_remote_store(session_factory)

    kv_store = kv_store or create_kv_store(settings)
    logger.info("Opened local cache", backend=settings.local_cache_backend)
    return build_local_store(
        kv_store,
        key_prefix=settings.local_cache_key_prefix,
        seed=settings.seed_local_cache,
    )
