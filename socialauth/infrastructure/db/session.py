# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker

from socialauth.shared.config import DatabaseConfig, load_config
from socialauth.shared.logging import logger

_SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA foreign_keys=ON",
    "PRAGMA busy_timeout=30000",
)


class Base(DeclarativeBase):
    pass


def _build_engine(database: DatabaseConfig) -> Engine:
    url = make_url(database.url)
    if url.get_backend_name() != "sqlite":
        return create_engine(
            url,
            pool_pre_ping=True,
            pool_size=database.pool_size,
            max_overflow=database.max_overflow,
            pool_timeout=database.pool_timeout,
        )

    # Request threads share the pool; sqlite3 must allow cross-thread use.
    engine = create_engine(
        url,
        pool_pre_ping=True,
        connect_args={"check_same_thread": False, "timeout": int(database.pool_timeout)},
    )

    @event.listens_for(engine, "connect")
    def _apply_pragmas(dbapi_conn, _record) -> None:
        cursor = dbapi_conn.cursor()
        try:
            for pragma in _SQLITE_PRAGMAS:
                cursor.execute(pragma)
        finally:
            cursor.close()

    return engine


ENGINE: Engine = _build_engine(load_config().database)

SessionLocal = scoped_session(sessionmaker(bind=ENGINE, autoflush=False, expire_on_commit=False))


@contextmanager
def session_scope() -> Iterator[Session]:
    """One unit of work: commit on success, roll back and re-raise on error."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        SessionLocal.remove()


def init_db() -> None:
    from socialauth.infrastructure.db import models  # noqa: F401

    Base.metadata.create_all(bind=ENGINE)
    logger.info(f"db: schema ensured on {ENGINE.url.render_as_string(hide_password=True)}")
