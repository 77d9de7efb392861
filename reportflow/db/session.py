"""
Database Session Management Module
==================================

Responsible for:
- Binding sessions to the current provider's engine
- Managing session lifecycle
- Providing dependency for FastAPI routes

Security Features:
- Connection validation (pool_pre_ping on server providers)
- Proper session cleanup
- Rollback on error
"""

from typing import Generator

from sqlalchemy import text
from sqlalchemy.orm import sessionmaker, Session

from reportflow.core.logging import get_logger
from reportflow.db.providers import get_database_provider

# Initialize logger
logger = get_logger(__name__)


# ==========================
# Session Factory
# ==========================

class ProviderSessionMaker(sessionmaker):
    """
    Session factory bound at call time.

    Each new session uses the engine of whichever provider is current,
    so ``reset_database_provider()`` takes effect for the next request.
    """

    def __call__(self, **local_kw) -> Session:
        local_kw.setdefault("bind", get_database_provider().engine)
        return super().__call__(**local_kw)


SessionLocal = ProviderSessionMaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


# ==========================
# Dependency for FastAPI
# ==========================

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a database session.

    Ensures:
    - Session is opened per request
    - Session is properly closed after request completes
    - Transactions are rolled back on error

    Yields:
        SQLAlchemy Session object

    Usage:
        @router.get("/roles")
        def list_roles(db: Session = Depends(get_db)):
            return db.query(Role).all()
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(
            "Database session error",
            extra={"error": str(e)}
        )
        db.rollback()
        raise
    finally:
        db.close()


# ==========================
# Database Health Check
# ==========================

def check_database_connection() -> bool:
    """
    Check if database connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    provider = get_database_provider()
    try:
        with provider.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(
            "Database health check failed",
            extra={"provider": provider.name, "error": str(e)}
        )
        return False


# ==========================
# Database Utilities
# ==========================

def get_db_session() -> Session:
    """
    Get a database session for non-FastAPI contexts.

    Use this for the CLI, scripts, etc.
    Remember to close the session when done.

    Returns:
        SQLAlchemy Session object
    """
    return SessionLocal()
