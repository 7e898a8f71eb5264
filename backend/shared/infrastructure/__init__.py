"""
Infrastructure module: Database.

Provides:
- Engine and session factories for the remote store (db.py)
"""

from shared.infrastructure.db import (
    create_store_engine,
    create_session_factory,
    session_scope,
    safe_commit,
)

__all__ = [
    "create_store_engine",
    "create_session_factory",
    "session_scope",
    "safe_commit",
]
