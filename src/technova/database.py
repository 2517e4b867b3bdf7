"""Database setup for storing user records."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

logger = logging.getLogger(__name__)


def build_engine(url: str | URL, pool_size: int = 10, pool_timeout: int = 30) -> Engine:
    """Create an engine with a bounded connection pool.

    In-memory SQLite shares a single connection so every session sees the
    same data; other backends get a fixed-size pool where callers wait for a
    free connection instead of failing.
    """
    url = make_url(url)
    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=0,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
    )


class Database:
    """Storage client owning the engine and session factory."""

    def __init__(self, url: str | URL, pool_size: int = 10, pool_timeout: int = 30):
        self.engine = build_engine(url, pool_size=pool_size, pool_timeout=pool_timeout)
        self.SessionLocal = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    @classmethod
    def from_settings(cls, settings) -> "Database":
        return cls(
            settings.sqlalchemy_url,
            pool_size=settings.db_pool_size,
            pool_timeout=settings.db_pool_timeout,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Provide a session that is always closed afterwards."""
        session = self.SessionLocal()
        try:
            yield session
        finally:
            session.close()

    def init_db(self) -> None:
        """Create database tables if they do not exist."""
        from .models import user  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("database initialised on %s", self.engine.url.render_as_string())

    def ping(self) -> bool:
        """Whether the backend answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.warning("database ping failed", exc_info=True)
            return False
        return True

    def dispose(self) -> None:
        self.engine.dispose()
