"""Tests for the Alembic migration environment."""

import io
from pathlib import Path

from alembic import command
from alembic.config import Config

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _config(buffer: io.StringIO) -> Config:
    config = Config(output_buffer=buffer)
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    return config


class TestOfflineMigrations:
    def test_upgrade_renders_schema_from_configured_url(self):
        buffer = io.StringIO()

        command.upgrade(_config(buffer), "head", sql=True)

        sql = buffer.getvalue()
        assert "CREATE TABLE accounts" in sql
        assert "CREATE TABLE templates" in sql
        assert "CREATE UNIQUE INDEX ix_accounts_email" in sql
