"""Pydantic domain models."""

from agent_core.models.action import ActionType, ProposedAction
from agent_core.models.portfolio import PortfolioSnapshot
from agent_core.models.vault import ActionRecord, AgentState, Constraints, DecisionProof

__all__ = [
    "ActionRecord",
    "ActionType",
    "AgentState",
    "Constraints",
    "DecisionProof",
    "PortfolioSnapshot",
    "ProposedAction",
]
