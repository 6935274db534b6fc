from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from config import get_settings
from vocab_srs.core.errors import StorageError
from vocab_srs.db.models.base import Base

settings = get_settings()


def build_engine(url: str, **kwargs) -> Engine:
    """
    Create an engine.

    For SQLite, pysqlite's implicit transaction handling is disabled so that
    SQLAlchemy emits BEGIN itself; otherwise SAVEPOINT and rollback do not
    behave transactionally. Foreign keys are switched on per connection.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    new_engine = create_engine(url, echo=settings.log_level == "DEBUG", pool_pre_ping=True, **kwargs)

    if new_engine.dialect.name == "sqlite":

        @event.listens_for(new_engine, "connect")
        def _on_sqlite_connect(dbapi_conn, _record) -> None:
            dbapi_conn.isolation_level = None
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(new_engine, "begin")
        def _on_sqlite_begin(conn) -> None:
            conn.exec_driver_sql("BEGIN")

    return new_engine


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_engine() -> Engine:
    """Get the database engine."""
    return engine


def init_db(bind: Engine | None = None) -> None:
    """Initialize database tables."""
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables initialized")


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:  # Intentionally broad - rollback on any error before re-raising
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def atomic(session: Session, operation: str) -> Generator[Session, None, None]:
    """
    Commit the work done in the block as one transaction.

    Any failure rolls the whole block back. Storage failures (including a
    lost optimistic-version race) are re-raised as StorageError so callers
    can tell a retryable fault from a domain error.
    """
    try:
        yield session
        session.commit()
    except StaleDataError as exc:
        session.rollback()
        logger.warning(f"{operation}: concurrent update detected, rolled back")
        raise StorageError(f"{operation} conflicted with a concurrent update") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception(f"{operation}: transaction failed, rolled back")
        raise StorageError(f"{operation} failed: {exc.__class__.__name__}") from exc
    except BaseException:  # Intentionally broad - cancellation must also roll back
        session.rollback()
        raise


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency for database sessions."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
