"""
CLI tests using click's CliRunner against the in-memory test database.
"""

import pytest
from click.testing import CliRunner
from sqlalchemy import create_engine, inspect

from dare_backend.cli.cli import cli
from dare_backend.permissions.admin import AccessAdministration


@pytest.fixture
def run(session_factory):
    runner = CliRunner()

    def invoke(*args, input=None):
        return runner.invoke(cli, list(args), obj={"session_factory": session_factory}, input=input)

    return invoke


@pytest.fixture
def seeded(run):
    result = run("seed")
    assert result.exit_code == 0, result.output
    return result


class TestSeed:

    def test_seed_reports_summary(self, seeded):
        assert "4 role(s)" in seeded.output

    def test_seed_twice(self, run, seeded):
        result = run("seed")
        assert result.exit_code == 0
        assert "0 permission(s), 0 role(s)" in result.output


class TestRoleCommands:

    def test_create_grant_assign_check(self, run, seeded):
        assert run("roles", "create", "auditor", "-d", "Reads reports").exit_code == 0
        assert run("roles", "grant", "auditor", "reports:view", "diagnostics:view").exit_code == 0
        assert run("principals", "register", "alice").exit_code == 0
        assert run("roles", "assign", "alice", "auditor").exit_code == 0

        result = run("check", "alice", "reports", "view")
        assert result.exit_code == 0
        assert "allowed" in result.output.splitlines()

        result = run("permissions", "alice")
        assert result.output.split() == ["diagnostics:view", "reports:view"]

    def test_grant_unknown_permission(self, run, seeded):
        run("roles", "create", "auditor")
        result = run("roles", "grant", "auditor", "reports:export")
        assert result.exit_code == 1
        assert "UnknownPermission" in result.output

    def test_grant_malformed_pair(self, run, seeded):
        run("roles", "create", "auditor")
        result = run("roles", "grant", "auditor", "reports")
        assert result.exit_code == 2

    def test_delete_admin_role_refused(self, run, seeded):
        result = run("roles", "delete", "admin", "--yes")
        assert result.exit_code == 1
        assert "ProtectedRole" in result.output

    def test_delete_role_with_confirmation(self, run, seeded, session_factory):
        run("roles", "create", "auditor")
        result = run("roles", "delete", "auditor", input="y\n")
        assert result.exit_code == 0

        db = session_factory()
        try:
            assert AccessAdministration(db).roles.get_by_name("auditor") is None
        finally:
            db.close()

    def test_list_roles_marks_system_role(self, run, seeded):
        result = run("roles", "list")
        assert "admin (system, locked)" in result.output
        assert "mentor" in result.output


class TestAccessCommands:

    def test_mentor_denied(self, run, seeded):
        run("principals", "register", "mia", "--legacy-role", "mentor")
        result = run("check", "mia", "youth_profiles", "create")
        assert result.exit_code == 1
        assert "denied" in result.output.splitlines()

    def test_unknown_principal_is_denied(self, run, seeded):
        result = run("check", "ghost", "reports", "view")
        assert "denied" in result.output.splitlines()

    def test_unknown_principal_lists_nothing(self, run, seeded):
        result = run("permissions", "ghost")
        assert result.exit_code == 0
        assert ":view" not in result.output

    def test_set_legacy_role(self, run, seeded):
        run("principals", "register", "bob")
        assert run("check", "bob", "reports", "view").exit_code == 1

        assert run("principals", "set-role", "bob", "reviewer").exit_code == 0
        assert run("check", "bob", "reports", "view").exit_code == 0

    def test_overrides(self, run, seeded):
        run("principals", "register", "max", "-l", "manager")
        assert run("check", "max", "reports", "create").exit_code == 0

        assert run("overrides", "add", "manager", "reports", "create").exit_code == 0
        assert run("check", "max", "reports", "create").exit_code == 1
        assert "deny reports:create for 'manager'" in run("overrides", "list").output

        assert run("overrides", "remove", "manager", "reports", "create").exit_code == 0
        assert run("check", "max", "reports", "create").exit_code == 0

    def test_catalog(self, run, seeded):
        assert run("catalog", "add", "reports", "export").exit_code == 0
        assert "export" in run("catalog", "list").output

        result = run("catalog", "remove", "reports", "view")
        assert result.exit_code == 1
        assert "PermissionInUse" in result.output

        result = run("catalog", "generate", "-r", "exports", "-a", "view", "-a", "delete")
        assert "Generated 2 permission(s)" in result.output


class TestMigrations:

    def test_upgrade_and_downgrade(self, run, tmp_path):
        url = f"sqlite:///{tmp_path / 'access.db'}"

        result = run("db", "upgrade", "--url", url)
        assert result.exit_code == 0, result.output

        engine = create_engine(url)
        try:
            tables = set(inspect(engine).get_table_names())
            assert {"permission", "role", "role_grant", "role_assignment", "override_rule", "principal"} <= tables

            grant_fks = {fk["referred_table"]: fk["constrained_columns"] for fk in inspect(engine).get_foreign_keys("role_grant")}
            assert grant_fks["permission"] == ["resource", "action"]
            assert grant_fks["role"] == ["role_id"]

            assert run("db", "downgrade", "--url", url, "--revision", "base").exit_code == 0
            assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
        finally:
            engine.dispose()
