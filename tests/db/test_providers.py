"""
Database Provider Tests
=======================

Tests for the provider factory:
- Settings to DatabaseConfig mapping
- URL building per provider
- Engine options and SQLite foreign keys
- Unsupported providers
- Sessions following a provider reset
"""

import pytest
from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.pool import QueuePool, StaticPool

from reportflow.core.config import Settings
from reportflow.core.exceptions import UnsupportedProviderError
from reportflow.db import providers
from reportflow.db.providers import (
    DatabaseConfig,
    MySQLProvider,
    PostgresProvider,
    SQLiteProvider,
    create_database_provider,
    get_database_provider,
    load_database_config,
    reset_database_provider,
)
from reportflow.db import session as db_session_module
from reportflow.db.session import SessionLocal, check_database_connection, get_db


pytestmark = pytest.mark.unit


class TestLoadDatabaseConfig:
    """Tests for load_database_config."""

    def test_sqlite_file_url(self):
        # Arrange
        settings = Settings(DATABASE_PROVIDER="sqlite", DATABASE_URL="file:./data/app.db")

        # Act
        config = load_database_config(settings)

        # Assert
        assert config.provider == "sqlite"
        assert config.url is None
        assert config.file_path == "./data/app.db"

    def test_sqlite_default_file(self):
        config = load_database_config(Settings(DATABASE_PROVIDER="sqlite", DATABASE_URL=None))

        assert config.file_path == "sqlite.db"

    def test_server_parts(self):
        # Arrange
        settings = Settings(
            DATABASE_PROVIDER="mysql",
            DATABASE_URL=None,
            DATABASE_HOST="db.internal",
            DATABASE_PORT=3307,
            DATABASE_USERNAME="report",
            DATABASE_PASSWORD="secret",
            DATABASE_NAME="reportflow",
        )

        # Act
        config = load_database_config(settings)

        # Assert
        assert config.url is None
        assert (config.host, config.port, config.username, config.database) == (
            "db.internal", 3307, "report", "reportflow"
        )

    def test_postgresql_alias(self):
        assert Settings(DATABASE_PROVIDER="PostgreSQL").DATABASE_PROVIDER == "postgres"

    def test_unknown_provider_rejected_by_settings(self):
        with pytest.raises(ValidationError):
            Settings(DATABASE_PROVIDER="oracle")


class TestProviders:
    """Tests for the concrete providers."""

    def test_factory_returns_provider_class(self):
        assert isinstance(create_database_provider(DatabaseConfig(provider="sqlite")), SQLiteProvider)
        assert isinstance(create_database_provider(DatabaseConfig(provider="mysql")), MySQLProvider)
        assert isinstance(create_database_provider(DatabaseConfig(provider="postgres")), PostgresProvider)

    def test_factory_unknown_provider(self):
        with pytest.raises(UnsupportedProviderError) as exc_info:
            create_database_provider(DatabaseConfig(provider="mongodb"))

        assert exc_info.value.message == "Unsupported database provider type: mongodb"

    def test_mysql_url_from_parts(self):
        # Arrange
        provider = MySQLProvider(DatabaseConfig(
            provider="mysql", host="db", username="u", password="p", database="rf",
        ))

        # Act
        url = provider.build_url()

        # Assert
        assert url.drivername == "mysql+pymysql"
        assert url.port == 3306
        assert url.query["charset"] == "utf8mb4"

    def test_postgres_url_keeps_explicit_url(self):
        provider = PostgresProvider(DatabaseConfig(
            provider="postgres", url="postgresql://u:p@pg.example.com:6543/rf",
        ))

        url = provider.build_url()

        assert url.drivername == "postgresql+psycopg2"
        assert url.host == "pg.example.com"
        assert url.port == 6543

    def test_server_providers_use_pool(self):
        provider = PostgresProvider(DatabaseConfig(provider="postgres", ssl=True, pool_size=7))

        options = provider.engine_options()

        assert options["poolclass"] is QueuePool
        assert options["pool_size"] == 7
        assert options["pool_pre_ping"] is True
        assert options["connect_args"]["sslmode"] == "require"

    def test_sqlite_memory_uses_static_pool(self):
        provider = SQLiteProvider(DatabaseConfig(provider="sqlite", url="sqlite:///:memory:"))

        assert provider.is_memory is True
        assert provider.engine_options()["poolclass"] is StaticPool

    def test_sqlite_enables_foreign_keys(self):
        # Arrange
        provider = SQLiteProvider(DatabaseConfig(provider="sqlite", url="sqlite:///:memory:"))

        # Act
        with provider.engine.connect() as connection:
            enabled = connection.execute(text("PRAGMA foreign_keys")).scalar()
        provider.dispose()

        # Assert
        assert enabled == 1


class TestProviderSwitching:
    """Sessions and health checks use whichever provider is current."""

    def test_session_binds_to_new_provider_after_reset(self):
        # Arrange
        first = get_database_provider()

        # Act
        reset_database_provider()
        current = get_database_provider()
        session = SessionLocal()

        # Assert
        try:
            assert current is not first
            assert session.get_bind() is current.engine
            assert session.execute(text("SELECT 1")).scalar() == 1
        finally:
            session.close()

    def test_get_db_uses_current_provider(self):
        # Arrange
        reset_database_provider()
        dependency = get_db()

        # Act
        session = next(dependency)

        # Assert
        assert session.get_bind() is get_database_provider().engine
        dependency.close()

    def test_health_check_uses_current_provider(self, monkeypatch, tmp_path):
        # Arrange
        unreachable = SQLiteProvider(DatabaseConfig(
            provider="sqlite", url=f"sqlite:///{tmp_path / 'missing' / 'reportflow.db'}",
        ))
        monkeypatch.setattr(providers, "_provider", unreachable)

        # Act
        healthy = check_database_connection()

        # Assert
        assert healthy is False
        unreachable.dispose()


class RecordingLogger:
    def __init__(self):
        self.events = []

    def _record(self, event, **kwargs):
        self.events.append(event)

    debug = info = warning = error = _record


class TestConnectionLogging:
    """Each new DBAPI connection is logged once, by the provider."""

    def test_single_connect_event(self, monkeypatch):
        # Arrange
        recorder = RecordingLogger()
        monkeypatch.setattr(providers, "logger", recorder)
        monkeypatch.setattr(db_session_module, "logger", recorder)
        provider = SQLiteProvider(DatabaseConfig(provider="sqlite", url="sqlite:///:memory:"))
        monkeypatch.setattr(providers, "_provider", provider)

        # Act
        session = SessionLocal()
        session.execute(text("SELECT 1"))
        session.close()
        provider.dispose()

        # Assert
        assert recorder.events.count("New database connection established") == 1
        assert "Database connection opened" not in recorder.events
