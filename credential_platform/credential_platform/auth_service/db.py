"""
Store handle and session management for the credential service
"""
from typing import Generator
import logging

from fastapi import Depends, Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .errors import ServiceUnavailable

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, pool_size: int = 5, max_overflow: int = 10) -> Engine:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # in-memory databases only live as long as their single connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True
    )


class Store:
    """
    Handle on the relational store.

    Built once when the application is created and shared by every request
    through ``app.state.store``. Each request opens its own session from
    ``session_factory`` and releases it when the request ends.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings) -> "Store":
        return cls(build_engine(
            settings.database_url(),
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW
        ))

    def session(self) -> Session:
        return self.session_factory()

    def init_db(self) -> None:
        """Create all tables. Called on application startup."""
        # Import models to ensure they are registered with Base
        from . import models  # noqa: F401

        try:
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database initialized successfully")
        except SQLAlchemyError as e:
            logger.error("Failed to initialize database: %s", e)
            raise

    def check_connection(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error("Database connection check failed: %s", e)
            return False

    def dispose(self) -> None:
        self.engine.dispose()


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_db(store: Store = Depends(get_store)) -> Generator[Session, None, None]:
    """
    Dependency yielding a session with a live connection.

    The connection is acquired before the handler runs so that an
    unreachable store fails the request with ServiceUnavailable up front.
    """
    db = store.session()
    try:
        try:
            db.connection()
        except DBAPIError as exc:
            logger.error("Could not acquire a database connection: %s", exc)
            raise ServiceUnavailable() from exc
        yield db
    finally:
        db.close()
