"""
Tests for the nodecms CLI against a SQLite document store.
"""

import pytest
from typer.testing import CliRunner

from nodecms.cli import app
from nodecms.core.config import settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def sqlite_store(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "STORE_BACKEND", "sql")
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")


class TestCli:
    """CLI commands"""

    def test_db_init_seeds_roles(self):
        result = runner.invoke(app, ["db", "init"])

        assert result.exit_code == 0
        assert "Store ready (sql), 3 roles" in result.output

    def test_create_and_grant_role(self):
        assert runner.invoke(app, ["roles", "create", "editor"]).exit_code == 0
        assert runner.invoke(app, ["roles", "grant", "editor", "basic", "create", "read_any"]).exit_code == 0

        result = runner.invoke(app, ["roles", "list"])

        assert result.exit_code == 0
        assert "editor\n" in result.output
        assert "admin (system)" in result.output
        assert "  basic: create, read_any" in result.output

    def test_duplicate_role_fails(self):
        runner.invoke(app, ["roles", "create", "editor"])

        result = runner.invoke(app, ["roles", "create", "editor"])

        assert result.exit_code == 1
        assert "Error [role:4]" in result.output

    def test_system_role_cannot_be_deleted(self):
        result = runner.invoke(app, ["roles", "delete", "admin"])

        assert result.exit_code == 1
        assert "Error [role:3]" in result.output

    def test_users(self):
        created = runner.invoke(app, ["users", "create", "alice", "--email", "alice@example.com"])
        assigned = runner.invoke(app, ["users", "assign", "alice", "admin"])
        missing = runner.invoke(app, ["users", "assign", "ghost", "admin"])

        assert created.exit_code == 0
        assert "User 'alice' created" in created.output
        assert assigned.exit_code == 0
        assert missing.exit_code == 1
        assert "Error [user:2]" in missing.output
