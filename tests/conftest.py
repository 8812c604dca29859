"""Shared test fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

import agent_core.db.tables  # noqa: F401
from agent_core.db.base import Base
from agent_core.models import PortfolioSnapshot

from doubles import FakeStarknet


@pytest.fixture
def snapshot() -> PortfolioSnapshot:
    return PortfolioSnapshot(balance_sats=50_000_000, utxo_count=3, ordinal_count=2, rune_count=1)


@pytest.fixture
def starknet() -> FakeStarknet:
    return FakeStarknet()


@pytest.fixture
def db_session():
    """In-memory SQLite session with all tables created."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = Session(engine)
    yield session
    session.close()
    engine.dispose()
