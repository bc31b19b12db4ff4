"""
Tests for configuration and database setup.

Tests cover:
- Environment selection and validation
- Database location and URL overrides
- The configuration singleton
- Engine creation, initialization and verification
"""

import logging
from pathlib import Path

import pytest
from sqlalchemy import inspect

from src.services import database
from src.utils import config as config_module
from src.utils.config import Config, get_config, get_database_url, reset_config


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Start every test without a config singleton or env overrides."""
    monkeypatch.delenv("CHOPCHOP_ENV", raising=False)
    monkeypatch.delenv("CHOPCHOP_DATABASE_URL", raising=False)
    reset_config()
    yield
    reset_config()


class TestConfig:
    """Test the Config class."""

    def test_unknown_environment_raises(self):
        with pytest.raises(ValueError):
            Config("staging")

    def test_development_uses_project_data_dir(self):
        """Development keeps the database inside the project."""
        config = Config("development")
        assert config.is_development
        assert config.database_path.parent.name == "data"
        assert config.database_path.name == "chopchop.db"

    def test_production_uses_documents_dir(self, monkeypatch, tmp_path):
        """Production keeps the database under the user's Documents."""
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        config = Config("production")
        assert config.is_production
        assert config.database_path == tmp_path / "Documents" / "ChopChop" / "chopchop.db"

    def test_ensure_directories(self, monkeypatch, tmp_path):
        """ensure_directories creates the database directory."""
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        config = Config("production")
        assert not config.database_exists()
        config.ensure_directories()
        assert (tmp_path / "Documents" / "ChopChop").is_dir()

    def test_database_url_default(self):
        """The default URL points SQLite at the database file."""
        config = Config("development")
        assert config.database_url.startswith("sqlite:///")
        assert config.database_url.endswith("chopchop.db")

    def test_database_url_override(self, monkeypatch):
        """CHOPCHOP_DATABASE_URL replaces the file URL."""
        monkeypatch.setenv("CHOPCHOP_DATABASE_URL", "sqlite:///:memory:")
        assert Config("production").database_url == "sqlite:///:memory:"


class TestConfigSingleton:
    """Test get_config and friends."""

    def test_default_environment_is_production(self):
        assert get_config().environment == "production"

    def test_environment_from_variable(self, monkeypatch):
        monkeypatch.setenv("CHOPCHOP_ENV", "development")
        assert get_config().environment == "development"

    def test_singleton(self):
        assert get_config() is get_config()

    def test_mismatched_environment_warns(self, caplog):
        """Asking for another environment keeps the first one."""
        first = get_config("development")
        with caplog.at_level(logging.WARNING, logger=config_module.__name__):
            second = get_config("production")

        assert second is first
        assert second.environment == "development"
        assert "singleton already exists" in caplog.text

    def test_get_database_url(self, monkeypatch):
        monkeypatch.setenv("CHOPCHOP_DATABASE_URL", "sqlite:///:memory:")
        assert get_database_url() == "sqlite:///:memory:"


class TestDatabaseSetup:
    """Test engine creation and table initialization."""

    @pytest.fixture
    def memory_database(self, monkeypatch):
        """Point the global engine at a fresh in-memory database."""
        monkeypatch.setenv("CHOPCHOP_DATABASE_URL", "sqlite:///:memory:")
        database.close_connections()
        yield
        database.close_connections()

    def test_initialize_creates_tables(self, memory_database):
        """initialize_app_database creates the store tables."""
        database.initialize_app_database()

        tables = inspect(database.get_engine()).get_table_names()
        assert set(database.EXPECTED_TABLES) <= set(tables)
        assert database.verify_database()

    def test_verify_fails_without_tables(self, memory_database):
        assert database.verify_database() is False

    def test_reset_requires_confirmation(self, memory_database):
        with pytest.raises(ValueError):
            database.reset_database()

    def test_reset_recreates_tables(self, memory_database):
        database.initialize_app_database()
        database.reset_database(confirm=True)
        assert database.verify_database()

    def test_session_scope_rolls_back_on_error(self, memory_database):
        """Changes made before an exception are not committed."""
        from src.models import Ingredient, QuantityType

        database.initialize_app_database()
        with pytest.raises(RuntimeError):
            with database.session_scope() as session:
                session.add(Ingredient(name="salt", slug="salt", quantity_type=QuantityType.MASS))
                session.flush()
                raise RuntimeError("boom")

        with database.session_scope() as session:
            assert session.query(Ingredient).count() == 0
