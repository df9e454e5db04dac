"""
Tests for the permission catalog.
"""

import pytest

from dare_backend.permissions.errors import DuplicatePermission, PermissionInUse, UnknownPermission
from dare_backend.permissions.principal import Principal
from dare_backend.tests.conftest import ACTIONS, RESOURCES


class TestCatalogRegistration:

    def test_generated_catalog_holds_every_combination(self, admin):
        pairs = {(p.resource, p.action) for p in admin.catalog.list()}
        assert pairs == {(r, a) for r in RESOURCES for a in ACTIONS}

    def test_generate_missing_is_idempotent(self, admin):
        assert admin.catalog.generate_missing(RESOURCES, ACTIONS) == 0
        assert admin.catalog.generate_missing(["training"], ["view", "manage"]) == 2
        assert admin.catalog.exists("training", "manage")

    def test_register_rejects_duplicate(self, admin):
        with pytest.raises(DuplicatePermission):
            admin.catalog.register("reports", "view")

    def test_register_rejects_empty_parts(self, admin):
        with pytest.raises(ValueError):
            admin.catalog.register("  ", "view")

    def test_list_is_ordered(self, admin):
        pairs = [(p.resource, p.action) for p in admin.catalog.list()]
        assert pairs == sorted(pairs)

    def test_grouped_by_resource(self, admin):
        grouped = admin.catalog.grouped()
        assert set(grouped) == set(RESOURCES)
        assert sorted(grouped["reports"]) == sorted(ACTIONS)

    def test_require_unknown_pair(self, admin):
        with pytest.raises(UnknownPermission) as exc_info:
            admin.catalog.require("reports", "export")
        assert exc_info.value.detail == {"resource": "reports", "action": "export"}


class TestCatalogRemoval:

    def test_remove_unreferenced(self, admin):
        admin.catalog.remove("dashboard", "delete")
        assert not admin.catalog.exists("dashboard", "delete")

    def test_remove_unknown(self, admin):
        with pytest.raises(UnknownPermission):
            admin.catalog.remove("dashboard", "export")

    def test_remove_granted_pair_is_rejected(self, admin):
        role = admin.create_role("editor")
        admin.grant_permission(role.id, "reports", "edit")

        with pytest.raises(PermissionInUse) as exc_info:
            admin.catalog.remove("reports", "edit")

        assert exc_info.value.detail["grants"] == 1
        assert admin.catalog.exists("reports", "edit")

    def test_remove_pair_referenced_by_override(self, admin):
        admin.add_override_rule("mentor", "youth_profiles", "create")

        with pytest.raises(PermissionInUse):
            admin.catalog.remove("youth_profiles", "create")


class TestCatalogAndBypass:

    def test_new_permission_reaches_cached_admin(self, admin, resolver):
        principal = Principal(user_id="root", legacy_role="admin")
        before = resolver.resolve(principal)
        assert ("training", "view") not in before

        admin.catalog.register("training", "view")

        assert ("training", "view") in resolver.resolve(principal)

    def test_removed_permission_leaves_cached_admin(self, admin, resolver):
        principal = Principal(user_id="root", legacy_role="admin")
        assert ("dashboard", "delete") in resolver.resolve(principal)

        admin.catalog.remove("dashboard", "delete")

        assert ("dashboard", "delete") not in resolver.resolve(principal)
