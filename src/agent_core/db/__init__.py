"""Run store — engine, session, ORM base."""

from agent_core.db.base import Base
from agent_core.db.engine import Database

__all__ = ["Base", "Database"]
