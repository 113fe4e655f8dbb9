"""
db/session.py

Explicitly constructed datastore handle: one engine plus its session factory.

The handle is created by the process entry point (API lifespan, CLI, tests)
and passed to repositories and services. Its connection lifecycle belongs to
whoever created it; call ``dispose()`` on shutdown.
"""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import DatabaseSettings, get_database_settings


def create_db_engine(settings: DatabaseSettings) -> Engine:
    if not settings.url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    return create_engine(
        settings.url,
        echo=settings.echo,
        pool_pre_ping=True,
        pool_recycle=settings.pool_recycle,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )


class Database:
    """
    Owns one SQLAlchemy engine and hands out sessions bound to it.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory: sessionmaker[Session] = sessionmaker(
            bind=engine,
            class_=Session,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "Database":
        return cls(create_db_engine(settings))

    @classmethod
    def from_env(cls) -> "Database":
        return cls.from_settings(get_database_settings())

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    def session(self) -> Session:
        """Open a new session. Callers close it (``with db.session() as s``)."""
        return self._session_factory()

    def ping(self) -> None:
        with self.session() as session:
            session.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self._engine.dispose()


def iter_session(database: Database) -> Generator[Session, None, None]:
    session = database.session()
    try:
        yield session
    finally:
        session.close()
