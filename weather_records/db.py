"""
Database connection for SQLAlchemy.

The engine is owned by a StoreConnection object that the application
creates once and hands to every request. It connects lazily, on the
first request that needs the store, and only once per process.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .errors import StorageError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for ORM models."""
    pass


def engine_options(url: str) -> dict:
    """Driver-specific keyword arguments for create_engine."""
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}

    # SQLite needs check_same_thread=False because FastAPI runs sync routes in threads.
    options = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every checkout sees an empty database
        options["poolclass"] = StaticPool
    return options


class StoreConnection:
    """
    Lazily established, process-wide handle on the store.

    connect() is idempotent: the first caller builds the engine while
    holding the lock, concurrent callers wait on it and reuse the result.
    A failed attempt leaves nothing behind, so a later call retries.
    """

    def __init__(self, url: str):
        self.url = url
        self._lock = threading.Lock()
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @property
    def connected(self) -> bool:
        return self._sessionmaker is not None

    @property
    def engine(self) -> Engine:
        self.connect()
        return self._engine

    def connect(self) -> sessionmaker:
        factory = self._sessionmaker
        if factory is not None:
            return factory

        with self._lock:
            if self._sessionmaker is None:
                self._sessionmaker = self._open()
            return self._sessionmaker

    def _open(self) -> sessionmaker:
        # Registers the tables on Base.metadata
        from . import models  # noqa: F401

        engine = create_engine(self.url, **engine_options(self.url))
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as exc:
            engine.dispose()
            logger.error("Store connection failed: %s", exc)
            raise StorageError(f"Store unavailable: {exc}") from exc

        self._engine = engine
        logger.info("Connected to store at %s", engine.url.render_as_string(hide_password=True))
        return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

    def session(self) -> Session:
        return self.connect()()

    def dispose(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
            self._engine = None
            self._sessionmaker = None


def get_db(request: Request) -> Iterator[Session]:
    """
    FastAPI dependency that yields a DB session per request,
    then closes it cleanly afterwards.
    """
    connection: StoreConnection = request.app.state.store
    db = connection.session()
    try:
        yield db
    finally:
        db.close()
