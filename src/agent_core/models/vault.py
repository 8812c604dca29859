"""On-chain state models for the AgentVault and ProofRegistry contracts.

These are produced only by the strict decoders in ``agent_core.chain.codec``;
field ranges mirror the Cairo types (u8 risk threshold, u64 counters, felt
hashes) so that a malformed read fails validation instead of slipping
through as a plausible value.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

FELT_MAX = 2**251 + 17 * 2**192 + 1  # Stark field prime, exclusive bound
U64_MAX = 2**64 - 1
U256_MAX = 2**256 - 1


class Constraints(BaseModel):
    """Owner-controlled limits checked by ``approve_action``."""

    model_config = ConfigDict(frozen=True)

    max_daily_spend: int = Field(ge=0, le=U256_MAX)
    allowed_action_types: int = Field(ge=0, lt=FELT_MAX)
    max_single_tx: int = Field(ge=0, le=U256_MAX)
    risk_threshold: int = Field(ge=0, le=255)
    is_active: bool


class AgentState(BaseModel):
    model_config = ConfigDict(frozen=True)

    agent_address: int = Field(ge=0, lt=FELT_MAX)
    daily_spent: int = Field(ge=0, le=U256_MAX)
    last_reset_timestamp: int = Field(ge=0, le=U64_MAX)
    total_actions: int = Field(ge=0, le=U64_MAX)
    constraints: Constraints


class ActionRecord(BaseModel):
    """One entry of the vault's append-only action log."""

    model_config = ConfigDict(frozen=True)

    action_id: int = Field(ge=0, le=U64_MAX)
    action_type: int = Field(ge=0, lt=FELT_MAX)
    amount: int = Field(ge=0, le=U256_MAX)
    risk_score: int = Field(ge=0, le=255)
    proof_hash: int = Field(ge=0, lt=FELT_MAX)
    timestamp: int = Field(ge=0, le=U64_MAX)
    approved: bool


class DecisionProof(BaseModel):
    """A proof record stored by the ProofRegistry (read-only here)."""

    model_config = ConfigDict(frozen=True)

    proof_id: int = Field(ge=0, le=U64_MAX)
    agent: int = Field(ge=0, lt=FELT_MAX)
    input_hash: int = Field(ge=0, lt=FELT_MAX)
    output_hash: int = Field(ge=0, lt=FELT_MAX)
    strategy_hash: int = Field(ge=0, lt=FELT_MAX)
    timestamp: int = Field(ge=0, le=U64_MAX)
    verified: bool
