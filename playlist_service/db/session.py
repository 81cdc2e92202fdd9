"""
Database session management for SQLAlchemy 2.0.

This module exposes:
- build_engine: engine factory applying per-dialect settings
- get_engine / get_sessionmaker: lazily built process-wide engine and session factory
- get_db: FastAPI dependency yielding a session per request

PostgreSQL (psycopg) is the production target; membership transactions rely
on SELECT ... FOR UPDATE there. SQLite has no row locks, so SQLite engines
open every transaction with BEGIN IMMEDIATE, which takes the database write
lock up front and serializes concurrent writers the same way.
"""

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from playlist_service.core.config import get_settings


def _configure_sqlite(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Hand transaction control to SQLAlchemy so the begin hook below decides how BEGIN is issued.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


# PUBLIC_INTERFACE
def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL with pool/dialect settings applied."""
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 30},
            future=True,
        )
        _configure_sqlite(engine)
        return engine

    # Pool settings tuned for typical web workloads; adjust as necessary.
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        future=True,
    )


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Return the process-wide engine, built from settings on first use."""
    settings = get_settings()
    return build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_sessionmaker() -> sessionmaker:
    """Return the session factory bound to the process-wide engine."""
    return sessionmaker(bind=get_engine(), autocommit=False, autoflush=False, future=True)


# PUBLIC_INTERFACE
def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency that provides a DB session and ensures cleanup."""
    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()
