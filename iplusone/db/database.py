from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache

from loguru import logger
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from iplusone.config import Settings, get_settings
from iplusone.db.models.base import Base
from iplusone.exceptions import StoreError


def create_db_engine(settings: Settings | None = None) -> Engine:
    """Create an engine for the configured store."""
    settings = settings or get_settings()

    connect_args = {}
    if settings.is_sqlite():
        connect_args["timeout"] = settings.database_timeout

    try:
        engine = create_engine(
            settings.database_url,
            echo=settings.database_echo,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
    except SQLAlchemyError as exc:
        raise StoreError(f"Cannot create engine for {settings.database_url}: {exc}") from exc

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory bound to ``engine``."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Get the engine for the cached settings."""
    return create_db_engine(get_settings())


def init_db(engine: Engine) -> None:
    """Initialize database tables."""
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as exc:
        raise StoreError(f"Schema creation failed: {exc}") from exc
    logger.info("Database tables initialized")


@contextmanager
def session_scope(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Commits on success. Any failure rolls the whole unit back; storage
    failures are re-raised as StoreError, everything else unchanged.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise StoreError(str(exc)) from exc
    except Exception:  # Intentionally broad - rollback on any error before re-raising
        session.rollback()
        raise
    finally:
        session.close()
