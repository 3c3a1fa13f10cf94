"""Database session management for the record store."""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager

import sqlalchemy.engine
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

log = logging.getLogger(__name__)


def get_engine(database_url: str) -> sqlalchemy.engine.Engine:
    """Create SQLAlchemy engine for the record database.

    Args:
        database_url: SQLAlchemy database URL.

    Returns:
        SQLAlchemy engine.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        # - timeout: wait up to 30s for locks
        # - check_same_thread: False for connection pooling
        connect_args = {"timeout": 30, "check_same_thread": False}
    return create_engine(database_url, connect_args=connect_args)


@contextmanager
def get_session(database_url: str) -> Generator[Session, None, None]:
    """Open a session on the record database.

    Records are only read during sync. Nothing is committed: the
    session is rolled back and closed on exit, also after an error.

    Yields:
        SQLAlchemy Session.
    """
    engine = get_engine(database_url)
    session_factory = sessionmaker(bind=engine)
    session = session_factory()
    log.debug("Opened database session on %s", engine.url.render_as_string(hide_password=True))

    try:
        yield session
    finally:
        session.rollback()
        session.close()
        engine.dispose()
