"""Proof orchestrator — commits snapshots, submits decision proofs, drives approvals."""

from agent_core.orchestrator.commitment import commitment_hex, portfolio_commitment
from agent_core.orchestrator.pipeline import (
    ActionOutcome,
    ActionState,
    PipelineReport,
    ProofOrchestrator,
)

__all__ = [
    "ActionOutcome",
    "ActionState",
    "PipelineReport",
    "ProofOrchestrator",
    "commitment_hex",
    "portfolio_commitment",
]
