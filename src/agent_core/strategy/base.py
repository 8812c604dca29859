"""Strategy abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

from agent_core.models import PortfolioSnapshot, ProposedAction

REBALANCE_THRESHOLD_SATS = 10_000
MAX_RISK = 80


class StrategyParams(BaseModel):
    """Parameters submitted alongside every decision proof.

    The ProofRegistry re-derives the expected action from the same values,
    so they must match what the strategy actually used.
    """

    model_config = ConfigDict(frozen=True)

    rebalance_threshold_sats: int = Field(default=REBALANCE_THRESHOLD_SATS, ge=0)
    max_risk: int = Field(default=MAX_RISK, ge=0)


class Strategy(ABC):
    """Base class for decision strategies.

    Subclasses set ``name`` and implement decide(). Implementations must be
    pure: no I/O, clock reads or randomness, integer arithmetic only.
    """

    name: str

    def __init__(self, params: StrategyParams | None = None) -> None:
        self.params = params or StrategyParams()

    @abstractmethod
    def decide(self, snapshot: PortfolioSnapshot) -> list[ProposedAction]:
        """Map a portfolio snapshot to zero or more proposed actions."""
        ...
