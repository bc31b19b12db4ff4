"""
Engine and session handling for the ChopChop ingredient store.

The engine and session factory are created lazily from the active Config
and shared by every service call. Services open short transactions through
session_scope(); tests swap get_session_factory() for an in-memory one.
"""

from typing import Optional
from contextlib import contextmanager
import logging
import sqlite3

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, close_all_sessions, sessionmaker
from sqlalchemy.pool import StaticPool

from ..utils.config import get_config
from ..models.base import Base

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_SessionFactory: Optional[sessionmaker] = None

EXPECTED_TABLES = ("ingredients", "ingredient_batches")


@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """Enforce foreign keys on SQLite so deleting an ingredient drops its batches."""
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_database_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Build an engine for the store database.

    Args:
        database_url: URL to connect to; defaults to the configured one
        echo: Log every SQL statement
    """
    url = database_url or get_config().database_url
    logger.info(f"Creating database engine: {url}")

    if ":memory:" in url or "mode=memory" in url:
        # One shared connection, otherwise each checkout sees an empty database
        return create_engine(
            url, echo=echo, connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
    if url.startswith("sqlite"):
        return create_engine(
            url, echo=echo, connect_args={"check_same_thread": False, "timeout": 30}
        )
    return create_engine(url, echo=echo)


def _create_tables(engine: Engine) -> None:
    from ..models import ingredient  # noqa: F401  (registers the store tables)

    Base.metadata.create_all(engine)


def get_engine() -> Engine:
    global _engine

    if _engine is None:
        _engine = create_database_engine()
    return _engine


def get_session_factory() -> sessionmaker:
    """Shared sessionmaker; objects stay readable after commit."""
    global _SessionFactory

    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionFactory


def get_session() -> Session:
    """A new session the caller must commit, roll back and close itself."""
    return get_session_factory()()


@contextmanager
def session_scope():
    """
    Run a block in one transaction.

    Commits when the block finishes, rolls back if it raises, and always
    closes the session.

    Example:
        with session_scope() as session:
            session.add(Ingredient(name="Flour", slug="flour", quantity_type=QuantityType.MASS))
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def verify_database() -> bool:
    """True when the database answers and holds every store table."""
    try:
        tables = set(inspect(get_engine()).get_table_names())
    except Exception as e:
        logger.error(f"Database verification failed: {e}")
        return False
    return tables.issuperset(EXPECTED_TABLES)


def reset_database(confirm: bool = False) -> None:
    """
    Drop and recreate every store table, deleting all stock.

    Raises:
        ValueError: Unless confirm is True
    """
    if not confirm:
        raise ValueError("Must pass confirm=True to reset database. This will delete all data!")

    logger.warning("Resetting database: all stock will be deleted")
    engine = get_engine()
    Base.metadata.drop_all(engine)
    _create_tables(engine)


def close_connections() -> None:
    """Close open sessions and dispose of the engine."""
    global _engine, _SessionFactory

    if _SessionFactory is not None:
        close_all_sessions()
        _SessionFactory = None
    if _engine is not None:
        _engine.dispose()
        _engine = None
    logger.debug("Database connections closed")


def initialize_app_database() -> None:
    """Make sure the database file and the store tables exist."""
    config = get_config()
    url = config.database_url

    if url.startswith("sqlite:///") and ":memory:" not in url:
        config.ensure_directories()
        state = "Using existing" if config.database_exists() else "Creating new"
        logger.info(f"{state} database at: {config.database_path}")

    _create_tables(get_engine())
    if not verify_database():
        logger.warning("Database verification failed: store tables are missing")
