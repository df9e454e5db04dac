"""
Tests for loading and applying the default access profile.
"""

import pytest

from dare_backend.model.permission import OverrideRule, Permission
from dare_backend.model.role import Role
from dare_backend.permissions.defaults import AccessProfile, RoleDefaults, apply_defaults, load_profile
from dare_backend.permissions.principal import Principal
from dare_backend.permissions.resolver import AuthorizationResolver


@pytest.fixture
def profile() -> AccessProfile:
    return load_profile()


class TestLoadProfile:

    def test_packaged_profile(self, profile):
        assert profile.actions == ["view", "create", "edit", "update", "delete", "manage"]
        assert "youth_profiles" in profile.all_resources()
        assert {role.name for role in profile.roles} == {"reviewer", "mentor", "manager", "user"}

    def test_role_pairs(self):
        defaults = RoleDefaults(name="viewer", grants={"view": ["reports", "dashboard"], "edit": ["reports"]})
        assert sorted(defaults.pairs()) == [("dashboard", "view"), ("reports", "edit"), ("reports", "view")]

    def test_custom_file(self, tmp_path):
        path = tmp_path / "access.yaml"
        path.write_text(
            "actions: [view]\n"
            "resources:\n"
            "  reporting: [reports]\n"
            "roles:\n"
            "  - name: viewer\n"
            "    grants:\n"
            "      view: [reports]\n"
        )

        profile = load_profile(str(path))

        assert profile.all_resources() == ["reports"]
        assert profile.roles[0].pairs() == [("reports", "view")]
        assert profile.overrides == []


class TestApplyDefaults:

    def test_apply_creates_catalog_roles_and_overrides(self, test_db, cache, profile):
        summary = apply_defaults(test_db, profile, cache)

        expected = len(profile.all_resources()) * len(profile.actions)
        assert summary.permissions_created == expected
        assert test_db.query(Permission).count() == expected
        assert summary.roles_created == 4
        assert summary.skipped == []
        assert test_db.query(Role).count() == 5
        assert test_db.query(OverrideRule).count() == len(profile.overrides)

    def test_apply_is_idempotent(self, test_db, cache, profile):
        apply_defaults(test_db, profile, cache)
        summary = apply_defaults(test_db, profile, cache)

        assert summary.permissions_created == 0
        assert summary.roles_created == 0
        assert summary.grants_applied == 0
        assert test_db.query(Role).count() == 5

    def test_admin_role_seeded_protected(self, test_db, cache, profile):
        apply_defaults(test_db, profile, cache)
        admin_role = test_db.query(Role).filter(Role.name_key == "admin").one()
        assert admin_role.is_system and not admin_role.is_editable

    def test_mentor_cannot_create_youth_profiles(self, test_db, cache, profile):
        apply_defaults(test_db, profile, cache)
        resolver = AuthorizationResolver(test_db, cache)
        mentor = Principal(user_id="m-1", legacy_role="mentor")

        assert resolver.check(mentor, "youth_profiles", "view") is True
        assert resolver.check(mentor, "youth_profiles", "create") is False
        assert resolver.check(mentor, "business_advice", "create") is True

    def test_manager_keeps_youth_profile_create(self, test_db, cache, profile):
        apply_defaults(test_db, profile, cache)
        resolver = AuthorizationResolver(test_db, cache)

        assert resolver.check(Principal(user_id="p-1", legacy_role="manager"), "youth_profiles", "create") is True

    def test_unknown_pairs_are_skipped(self, test_db, cache):
        profile = AccessProfile(
            actions=["view"],
            resources={"reporting": ["reports"]},
            roles=[RoleDefaults(name="viewer", grants={"view": ["reports"], "edit": ["reports"]})],
        )

        summary = apply_defaults(test_db, profile, cache)

        assert summary.grants_applied == 1
        assert summary.skipped == ["viewer:reports:edit"]
