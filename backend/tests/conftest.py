"""
Pytest configuration and fixtures for backend tests.
"""

import pytest

from florist.repositories.kv import FileKeyValueStore
from florist.repositories.local import build_local_store
from florist.repositories.remote import build_remote_store, init_remote_schema
from florist.session import SessionContext
from shared.infrastructure.db import create_session_factory, create_store_engine

from tests.factories import make_template

ACCOUNT_ID = "acct-0001-florist"
OTHER_ACCOUNT_ID = "acct-0002-florist"


@pytest.fixture
def kv_store(tmp_path):
    """File-backed key-value store in a per-test directory."""
    return FileKeyValueStore(tmp_path / "cache")


@pytest.fixture
def local_store(kv_store):
    """Local cache adapter that starts empty (no sample seeding)."""
    return build_local_store(kv_store, key_prefix="demo_", seed=False)


@pytest.fixture
def seeded_local_store(kv_store):
    """Local cache adapter that seeds from the bundled sample shop."""
    return build_local_store(kv_store, key_prefix="demo_", seed=True)


@pytest.fixture
def engine(tmp_path):
    """
    SQLite database file per test.

    A file (not :memory:) so repository calls running in worker threads
    share the same data.
    """
    engine = create_store_engine(f"sqlite:///{tmp_path / 'remote.db'}", echo=False)
    init_remote_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def remote_store(session_factory):
    return build_remote_store(session_factory)


@pytest.fixture
def local_session():
    return SessionContext(None)


@pytest.fixture
def remote_session():
    return SessionContext(ACCOUNT_ID)


@pytest.fixture
def sample_catalog():
    """Small catalog covering every category."""
    return [
        make_template("Red Rose", "2.50", "stem", inventory_count=48, low_stock_threshold=24),
        make_template("White Lily", "3.25", "stem", inventory_count=5, low_stock_threshold=10),
        make_template("Glass Vase", "8.00", "vase", inventory_count=0, low_stock_threshold=2),
        make_template("Satin Ribbon", "0.75", "accessory"),
        make_template("Kraft Wrap", "1.50", "other", inventory_count=30),
    ]
