"""Strict calldata encoding and result decoding for the two contracts.

Contract calls return a flat list of felts. Each decoder here accepts
exactly one layout and raises ``DecodeError`` on anything else: wrong
length, a boolean that is neither 0 nor 1, or a value outside the Cairo
type's range. Nothing is ever defaulted.

Layouts (felts, in order):

    get_agent_state  agent, daily_spent.low, daily_spent.high, last_reset,
                     total_actions, max_daily.low, max_daily.high,
                     allowed_action_types, max_single.low, max_single.high,
                     risk_threshold, is_active
    get_action       action_type, amount.low, amount.high, risk_score,
                     proof_hash, timestamp, approved
    verify_proof     agent, input_hash, output_hash, strategy_hash,
                     timestamp, verified
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import ValidationError

from agent_core.chain.errors import DecodeError
from agent_core.models import ActionRecord, AgentState, Constraints, DecisionProof

U128_MASK = (1 << 128) - 1

AGENT_STATE_LEN = 12
ACTION_RECORD_LEN = 7
DECISION_PROOF_LEN = 6


def split_u256(value: int) -> tuple[int, int]:
    """Split an unsigned 256-bit integer into (low, high) 128-bit limbs."""
    if value < 0 or value >> 256:
        raise ValueError(f"{value} does not fit in u256")
    return value & U128_MASK, value >> 128


def join_u256(low: int, high: int) -> int:
    if low > U128_MASK or high > U128_MASK or low < 0 or high < 0:
        raise ValueError(f"u256 limbs out of range: low={low} high={high}")
    return (high << 128) | low


def _expect_len(shape: str, raw: Sequence[int], n: int) -> None:
    if len(raw) != n:
        raise DecodeError(shape, f"expected {n} felts, got {len(raw)}")


def _u256(shape: str, low: int, high: int) -> int:
    try:
        return join_u256(low, high)
    except ValueError as exc:
        raise DecodeError(shape, str(exc)) from exc


def _bool(shape: str, name: str, value: int) -> bool:
    if value not in (0, 1):
        raise DecodeError(shape, f"{name} must be 0 or 1, got {value}")
    return value == 1


def decode_felt(shape: str, raw: Sequence[int]) -> int:
    """Single-felt result (counters, hashes)."""
    _expect_len(shape, raw, 1)
    return raw[0]


def decode_agent_state(raw: Sequence[int]) -> AgentState:
    shape = "get_agent_state"
    _expect_len(shape, raw, AGENT_STATE_LEN)
    try:
        constraints = Constraints(
            max_daily_spend=_u256(shape, raw[5], raw[6]),
            allowed_action_types=raw[7],
            max_single_tx=_u256(shape, raw[8], raw[9]),
            risk_threshold=raw[10],
            is_active=_bool(shape, "is_active", raw[11]),
        )
        return AgentState(
            agent_address=raw[0],
            daily_spent=_u256(shape, raw[1], raw[2]),
            last_reset_timestamp=raw[3],
            total_actions=raw[4],
            constraints=constraints,
        )
    except ValidationError as exc:
        raise DecodeError(shape, str(exc)) from exc


def decode_action_record(action_id: int, raw: Sequence[int]) -> ActionRecord:
    shape = "get_action"
    _expect_len(shape, raw, ACTION_RECORD_LEN)
    try:
        return ActionRecord(
            action_id=action_id,
            action_type=raw[0],
            amount=_u256(shape, raw[1], raw[2]),
            risk_score=raw[3],
            proof_hash=raw[4],
            timestamp=raw[5],
            approved=_bool(shape, "approved", raw[6]),
        )
    except ValidationError as exc:
        raise DecodeError(shape, str(exc)) from exc


def decode_decision_proof(proof_id: int, raw: Sequence[int]) -> DecisionProof:
    shape = "verify_proof"
    _expect_len(shape, raw, DECISION_PROOF_LEN)
    try:
        return DecisionProof(
            proof_id=proof_id,
            agent=raw[0],
            input_hash=raw[1],
            output_hash=raw[2],
            strategy_hash=raw[3],
            timestamp=raw[4],
            verified=_bool(shape, "verified", raw[5]),
        )
    except ValidationError as exc:
        raise DecodeError(shape, str(exc)) from exc
