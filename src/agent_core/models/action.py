"""Proposed action model — emitted by strategies, annotated by the orchestrator."""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field


class ActionType(IntEnum):
    """Action kinds, tagged with the AgentVault's felt encoding."""

    REBALANCE = 1
    CATALOG = 2
    SWAP = 3


class ProposedAction(BaseModel):
    """An action a strategy wants the vault to approve.

    ``risk_score`` lives in the strategy's [0, 100] domain. It is unrelated
    to the vault's ``risk_threshold`` ([0, 255]) and is never rescaled.
    """

    model_config = ConfigDict(frozen=True)

    action_type: ActionType
    label: str
    amount: int = Field(ge=0, lt=2**128)
    risk_score: int = Field(ge=0, le=100)
    # Filled in once the decision proof is on-chain
    proof_id: int | None = None
    proof_hash: int | None = None

    def with_proof(self, proof_id: int, proof_hash: int) -> ProposedAction:
        """Return a copy carrying the resolved proof id and output hash."""
        return self.model_copy(update={"proof_id": proof_id, "proof_hash": proof_hash})
