"""
Pytest configuration and fixtures for all tests.

Every test gets its own SQLite in-memory database on a StaticPool, so all
sessions opened from ``session_factory`` see the same data.
"""

import pytest
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dare_backend.model import Base
from dare_backend.permissions.admin import AccessAdministration
from dare_backend.permissions.cache import PermissionCache, permission_cache
from dare_backend.permissions.resolver import AuthorizationResolver

RESOURCES = ["youth_profiles", "businesses", "reports", "dashboard"]
ACTIONS = ["view", "create", "edit", "delete"]


@pytest.fixture(scope="function")
def engine():
    """Create an in-memory SQLite engine with all tables."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def test_db(session_factory) -> Generator[Session, None, None]:
    """Create a test database session using SQLite in-memory."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def reset_global_cache():
    permission_cache.clear()
    yield
    permission_cache.clear()


@pytest.fixture
def cache() -> PermissionCache:
    return PermissionCache()


@pytest.fixture
def admin(test_db, cache) -> AccessAdministration:
    """Administration service over a small catalog with the admin role in place."""
    admin = AccessAdministration(test_db, cache)
    admin.catalog.generate_missing(RESOURCES, ACTIONS)
    admin.ensure_admin_role()
    return admin


@pytest.fixture
def resolver(test_db, cache, admin) -> AuthorizationResolver:
    return AuthorizationResolver(test_db, cache)
