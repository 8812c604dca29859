"""Database engine and session management."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from agent_core.db.base import Base


class Database:
    """Engine plus session factory, built once at startup and passed explicitly."""

    def __init__(self, url: str, **kwargs) -> None:
        self.url = url
        self.engine: Engine = create_engine(url, **kwargs)
        self._sessions: sessionmaker[Session] = sessionmaker(bind=self.engine)

    def create_all(self) -> None:
        """Create any missing tables."""
        # Register every table on Base.metadata
        import agent_core.db.tables  # noqa: F401

        Base.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session, closing it when done."""
        session = self._sessions()
        try:
            yield session
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
