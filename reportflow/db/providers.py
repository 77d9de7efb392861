"""
Database Provider Factory
=========================

Responsible for:
- Resolving the configured provider (sqlite / mysql / postgres)
- Building the SQLAlchemy URL from DATABASE_URL or discrete settings
- Supplying provider-specific engine options and connect hooks
- Holding the lazily created, process-wide provider instance

Usage:
    provider = get_database_provider()
    engine = provider.create_engine()
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, URL, make_url
from sqlalchemy.pool import QueuePool, StaticPool

from reportflow.core.config import Settings, get_settings
from reportflow.core.exceptions import UnsupportedProviderError
from reportflow.core.logging import get_logger

# Initialize logger
logger = get_logger(__name__)


# ==========================
# Configuration
# ==========================

@dataclass
class DatabaseConfig:
    """Connection settings for a single provider."""

    provider: str
    url: Optional[str] = None
    file_path: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None
    ssl: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    echo: bool = False


def load_database_config(settings: Optional[Settings] = None) -> DatabaseConfig:
    """
    Build a DatabaseConfig from application settings.

    SQLite accepts ``file:`` style URLs and falls back to ``sqlite.db``.
    MySQL and Postgres use DATABASE_URL when set, otherwise the
    DATABASE_HOST / PORT / USERNAME / PASSWORD / NAME settings.
    """
    settings = settings or get_settings()

    config = DatabaseConfig(
        provider=settings.DATABASE_PROVIDER,
        ssl=settings.DATABASE_SSL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        echo=settings.DEBUG,
    )

    if config.provider == "sqlite":
        url = settings.DATABASE_URL or ""
        if url.startswith("sqlite"):
            config.url = url
        else:
            config.file_path = url.replace("file:", "", 1) if url else "sqlite.db"
    elif settings.DATABASE_URL:
        config.url = settings.DATABASE_URL
    else:
        config.host = settings.DATABASE_HOST
        config.port = settings.DATABASE_PORT
        config.username = settings.DATABASE_USERNAME
        config.password = settings.DATABASE_PASSWORD
        config.database = settings.DATABASE_NAME

    return config


# ==========================
# Provider Interface
# ==========================

class DatabaseProvider(ABC):
    """
    Base class for relational database providers.

    A provider knows how to turn a DatabaseConfig into a ready-to-use
    SQLAlchemy engine for its backend.
    """

    name: str = ""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._engine: Optional[Engine] = None

    @abstractmethod
    def build_url(self) -> URL:
        """Return the SQLAlchemy URL for this provider."""

    @abstractmethod
    def engine_options(self) -> Dict[str, Any]:
        """Return keyword arguments for ``create_engine``."""

    def on_connect(self, dbapi_connection: Any) -> None:
        """Hook run on every new DBAPI connection."""

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = self.create_engine()
        return self._engine

    def create_engine(self) -> Engine:
        """
        Create the engine and install the provider's connect hook.

        Returns:
            SQLAlchemy Engine
        """
        url = self.build_url()
        engine = create_engine(url, future=True, echo=self.config.echo, **self.engine_options())

        @event.listens_for(engine, "connect")
        def receive_connect(dbapi_connection, connection_record):
            self.on_connect(dbapi_connection)
            logger.debug(
                "New database connection established",
                extra={"event": "db_connect", "provider": self.name}
            )

        logger.info(
            "Database engine created",
            extra={
                "provider": self.name,
                "url": url.render_as_string(hide_password=True),
            }
        )
        return engine

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def _server_url(self, drivername: str, default_port: int) -> URL:
        if self.config.url:
            url = make_url(self.config.url)
            if "+" not in url.drivername:
                url = url.set(drivername=drivername)
            return url
        return URL.create(
            drivername=drivername,
            username=self.config.username,
            password=self.config.password,
            host=self.config.host or "localhost",
            port=self.config.port or default_port,
            database=self.config.database,
        )

    def _pool_options(self) -> Dict[str, Any]:
        return {
            "poolclass": QueuePool,
            "pool_size": self.config.pool_size,
            "max_overflow": self.config.max_overflow,
            "pool_timeout": self.config.pool_timeout,
            "pool_recycle": self.config.pool_recycle,
            "pool_pre_ping": True,
        }


# ==========================
# Concrete Providers
# ==========================

class SQLiteProvider(DatabaseProvider):
    """SQLite provider. In-memory databases share one connection."""

    name = "sqlite"

    def build_url(self) -> URL:
        if self.config.url:
            return make_url(self.config.url)
        return URL.create("sqlite", database=self.config.file_path or "sqlite.db")

    @property
    def is_memory(self) -> bool:
        database = self.build_url().database
        return not database or database == ":memory:"

    def engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if self.is_memory:
            options["poolclass"] = StaticPool
        return options

    def on_connect(self, dbapi_connection: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class MySQLProvider(DatabaseProvider):
    """MySQL / MariaDB provider using PyMySQL."""

    name = "mysql"

    def build_url(self) -> URL:
        url = self._server_url("mysql+pymysql", 3306)
        return url.update_query_dict({"charset": "utf8mb4"})

    def engine_options(self) -> Dict[str, Any]:
        options = self._pool_options()
        connect_args: Dict[str, Any] = {"connect_timeout": 10}
        if self.config.ssl:
            connect_args["ssl"] = {"check_hostname": True}
        options["connect_args"] = connect_args
        return options


class PostgresProvider(DatabaseProvider):
    """PostgreSQL provider using psycopg2."""

    name = "postgres"

    def build_url(self) -> URL:
        return self._server_url("postgresql+psycopg2", 5432)

    def engine_options(self) -> Dict[str, Any]:
        options = self._pool_options()
        connect_args: Dict[str, Any] = {
            "connect_timeout": 10,
            "application_name": "reportflow",
        }
        if self.config.ssl:
            connect_args["sslmode"] = "require"
        options["connect_args"] = connect_args
        return options


PROVIDERS: Dict[str, Type[DatabaseProvider]] = {
    "sqlite": SQLiteProvider,
    "mysql": MySQLProvider,
    "postgres": PostgresProvider,
}


# ==========================
# Factory
# ==========================

def create_database_provider(config: DatabaseConfig) -> DatabaseProvider:
    """
    Create a provider for the given configuration.

    Raises:
        UnsupportedProviderError: If the provider name is unknown
    """
    provider_class = PROVIDERS.get(config.provider)
    if provider_class is None:
        raise UnsupportedProviderError(config.provider)
    return provider_class(config)


_provider: Optional[DatabaseProvider] = None
_provider_lock = threading.Lock()


def get_database_provider() -> DatabaseProvider:
    """
    Get the process-wide provider, creating it on first use.

    Returns:
        DatabaseProvider instance
    """
    global _provider
    if _provider is None:
        with _provider_lock:
            if _provider is None:
                _provider = create_database_provider(load_database_config())
                logger.info("Database provider initialized", extra={"provider": _provider.name})
    return _provider


def reset_database_provider() -> None:
    """Dispose the current provider so the next call rebuilds it."""
    global _provider
    with _provider_lock:
        if _provider is not None:
            _provider.dispose()
        _provider = None
