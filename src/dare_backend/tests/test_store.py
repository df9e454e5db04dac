"""
Store-level tests: two sessions on a file database, so each holds its own
connection and sees only what the other has committed.
"""

import pytest
from unittest.mock import patch
from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from dare_backend.model import Base
from dare_backend.model.permission import OverrideRule
from dare_backend.model.role import Role, RoleAssignment, RoleGrant
from dare_backend.permissions.admin import AccessAdministration
from dare_backend.permissions.cache import CacheEntry, PermissionCache
from dare_backend.tests.conftest import ACTIONS, RESOURCES


@pytest.fixture
def file_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'access.db'}")
    Base.metadata.create_all(bind=engine)

    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def sessions(file_factory):
    first, second = file_factory(), file_factory()
    try:
        yield first, second
    finally:
        first.close()
        second.close()


@pytest.fixture
def editor_id(sessions):
    setup = AccessAdministration(sessions[0], PermissionCache())
    setup.catalog.generate_missing(RESOURCES, ACTIONS)
    return setup.create_role("editor").id


def stale_first_lookup(repository):
    """The first lookup misses, as if the other session committed right after it"""
    real_get = repository.get
    calls = []

    def lookup(*args):
        calls.append(args)
        return None if len(calls) == 1 else real_get(*args)

    return patch.object(repository, "get", side_effect=lookup)


def _count(factory, model, **criteria) -> int:
    session = factory()
    try:
        return session.query(model).filter_by(**criteria).count()
    finally:
        session.close()


class TestConcurrentEdits:

    def test_racing_grants_converge(self, sessions, editor_id, file_factory):
        first = AccessAdministration(sessions[0], PermissionCache())
        second = AccessAdministration(sessions[1], PermissionCache())

        with stale_first_lookup(second.grants):
            first.grant_permission(editor_id, "reports", "view")
            grant = second.grant_permission(editor_id, "reports", "view")

        assert (grant.resource, grant.action) == ("reports", "view")
        assert _count(file_factory, RoleGrant, role_id=editor_id) == 1

    def test_racing_assignments_converge(self, sessions, editor_id, file_factory):
        first = AccessAdministration(sessions[0], PermissionCache())
        second = AccessAdministration(sessions[1], PermissionCache())

        with stale_first_lookup(second.assignments):
            first.assign_role("alice", editor_id)
            assignment = second.assign_role("alice", editor_id)

        assert assignment.principal_id == "alice"
        assert _count(file_factory, RoleAssignment, principal_id="alice") == 1

    def test_racing_override_rules_converge(self, sessions, editor_id, file_factory):
        first = AccessAdministration(sessions[0], PermissionCache())
        second = AccessAdministration(sessions[1], PermissionCache())

        with stale_first_lookup(second.overrides):
            first.add_override_rule("mentor", "reports", "delete")
            rule = second.add_override_rule("mentor", "reports", "delete")

        assert rule.role_name_pattern == "mentor"
        assert _count(file_factory, OverrideRule) == 1

    def test_racing_grant_invalidates_once(self, sessions, editor_id):
        first_cache, second_cache = PermissionCache(), PermissionCache()
        first = AccessAdministration(sessions[0], first_cache)
        second = AccessAdministration(sessions[1], second_cache)
        second_cache.set(("alice", None), CacheEntry(frozenset(), role_ids=frozenset({editor_id})), second_cache.version)

        with stale_first_lookup(second.grants):
            first.grant_permission(editor_id, "reports", "view")
            second.grant_permission(editor_id, "reports", "view")

        # the losing writer changed nothing, so its cache entry stays
        assert second_cache.get(("alice", None)) is not None


class TestDeleteVisibility:

    def test_reader_sees_role_whole_or_gone(self, sessions, editor_id, file_factory):
        writer = AccessAdministration(sessions[0], PermissionCache())
        writer.grant_permission(editor_id, "reports", "view")
        writer.grant_permission(editor_id, "reports", "edit")
        writer.assign_role("alice", editor_id)
        writer.assign_role("bob", editor_id)

        def snapshot():
            return (
                _count(file_factory, Role, id=editor_id),
                _count(file_factory, RoleGrant, role_id=editor_id),
                _count(file_factory, RoleAssignment, role_id=editor_id),
            )

        whole, gone = (1, 2, 2), (0, 0, 0)
        assert snapshot() == whole

        observed = []
        real_flush = sessions[0].flush

        def flush_then_read(*args, **kwargs):
            real_flush(*args, **kwargs)
            observed.append(snapshot())

        with patch.object(sessions[0], "flush", side_effect=flush_then_read):
            assert writer.delete_role(editor_id) == (2, 2)

        assert observed
        assert all(state == whole for state in observed)
        assert snapshot() == gone


class TestGrantConstraints:

    def test_grant_must_reference_catalog_permission(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'constraints.db'}")

        @event.listens_for(engine, "connect")
        def enforce_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        Base.metadata.create_all(bind=engine)
        session = sessionmaker(bind=engine)()
        try:
            admin = AccessAdministration(session, PermissionCache())
            admin.catalog.register("reports", "view")
            role = admin.create_role("editor")

            session.add(RoleGrant(role_id=role.id, resource="reports", action="export"))
            with pytest.raises(IntegrityError):
                session.flush()
            session.rollback()

            admin.grant_permission(role.id, "reports", "view")
            assert session.query(RoleGrant).count() == 1
        finally:
            session.close()
            engine.dispose()
