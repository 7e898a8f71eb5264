"""
Store adapters.

Usage:
    from florist.repositories import build_local_store, build_remote_store

    store = build_remote_store(session_factory)
    templates = await store.templates.load(account_id)
"""

from florist.repositories.base import CollectionRepository, SingletonRepository, StoreAdapter
from florist.repositories.kv import FileKeyValueStore, KeyValueStore, RedisKeyValueStore
from florist.repositories.local import build_local_store, load_sample_data
from florist.repositories.remote import build_remote_store, init_remote_schema

__all__ = [
    "CollectionRepository",
    "SingletonRepository",
    "StoreAdapter",
    "KeyValueStore",
    "FileKeyValueStore",
    "RedisKeyValueStore",
    "build_local_store",
    "load_sample_data",
    "build_remote_store",
    "init_remote_schema",
]
