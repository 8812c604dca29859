"""Vault summary — agent state, constraints, recent actions and proofs as JSON-ready data."""

from __future__ import annotations

from typing import Any

import structlog

from agent_core.chain.errors import DecodeError
from agent_core.chain.registry import ProofRegistryGateway
from agent_core.chain.vault import VaultGateway
from agent_core.models import ActionType

log = structlog.get_logger("summary")


def _action_type_name(value: int) -> str:
    try:
        return ActionType(value).name
    except ValueError:
        return f"UNKNOWN({value})"


async def vault_summary(
    vault: VaultGateway,
    registry: ProofRegistryGateway,
    recent: int = 5,
) -> dict[str, Any]:
    """Read the vault and registry and return the newest *recent* entries of each.

    Records that fail to decode are listed under ``unreadable`` rather than
    shown with guessed values.
    """
    state = await vault.read_agent_state()
    c = state.constraints

    actions: list[dict[str, Any]] = []
    unreadable_actions: list[int] = []
    for action_id in range(state.total_actions - 1, max(0, state.total_actions - recent) - 1, -1):
        try:
            record = await vault.read_action(action_id)
        except DecodeError as exc:
            log.warning("action_unreadable", action_id=action_id, error=str(exc))
            unreadable_actions.append(action_id)
            continue
        actions.append({
            "id": record.action_id,
            "action_type": _action_type_name(record.action_type),
            "amount": str(record.amount),
            "risk_score": record.risk_score,
            "proof_hash": hex(record.proof_hash),
            "timestamp": record.timestamp,
            "approved": record.approved,
        })

    total_proofs = await registry.get_total_proofs()
    proofs: list[dict[str, Any]] = []
    unreadable_proofs: list[int] = []
    for proof_id in range(total_proofs - 1, max(0, total_proofs - recent) - 1, -1):
        try:
            proof = await registry.get_proof(proof_id)
        except DecodeError as exc:
            log.warning("proof_unreadable", proof_id=proof_id, error=str(exc))
            unreadable_proofs.append(proof_id)
            continue
        proofs.append({
            "id": proof.proof_id,
            "agent": hex(proof.agent),
            "input_hash": hex(proof.input_hash),
            "output_hash": hex(proof.output_hash),
            "strategy_hash": hex(proof.strategy_hash),
            "timestamp": proof.timestamp,
            "verified": proof.verified,
        })

    return {
        "vault_address": hex(vault.address),
        "registry_address": hex(registry.address),
        "agent_address": hex(state.agent_address),
        "daily_spent": str(state.daily_spent),
        "last_reset_timestamp": state.last_reset_timestamp,
        "total_actions": state.total_actions,
        "constraints": {
            "max_daily_spend": str(c.max_daily_spend),
            "allowed_action_types": hex(c.allowed_action_types),
            "max_single_tx": str(c.max_single_tx),
            "risk_threshold": c.risk_threshold,
            "is_active": c.is_active,
        },
        "recent_actions": actions,
        "total_proofs": total_proofs,
        "recent_proofs": proofs,
        "unreadable": {"actions": unreadable_actions, "proofs": unreadable_proofs},
    }
