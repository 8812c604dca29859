"""AgentVault gateway — agent state, action log and portfolio commitment."""

from __future__ import annotations

from typing import Protocol

from agent_core.chain.codec import (
    decode_action_record,
    decode_agent_state,
    decode_felt,
    split_u256,
)
from agent_core.models import ActionRecord, AgentState


class ChainHandle(Protocol):
    async def call(self, address: int, entrypoint: str, calldata=()) -> list[int]: ...

    async def invoke(self, address: int, entrypoint: str, calldata=()) -> int: ...


class VaultGateway:
    """Typed wrapper over the AgentVault entrypoints."""

    def __init__(self, chain: ChainHandle, address: int) -> None:
        self.chain = chain
        self.address = address

    # --- Views ---

    async def read_agent_state(self) -> AgentState:
        return decode_agent_state(await self.chain.call(self.address, "get_agent_state"))

    async def read_action(self, action_id: int) -> ActionRecord:
        raw = await self.chain.call(self.address, "get_action", [action_id])
        return decode_action_record(action_id, raw)

    async def get_portfolio_commit(self) -> int:
        raw = await self.chain.call(self.address, "get_portfolio_commit")
        return decode_felt("get_portfolio_commit", raw)

    # --- Transactions (each waits for finality) ---

    async def set_portfolio_commit(self, commitment: int) -> int:
        return await self.chain.invoke(self.address, "set_portfolio_commit", [commitment])

    async def propose_action(
        self,
        action_type: int,
        amount: int,
        risk_score: int,
        proof_id: int,
        commitment: int,
    ) -> int:
        amount_low, amount_high = split_u256(amount)
        return await self.chain.invoke(
            self.address,
            "propose_action",
            [action_type, amount_low, amount_high, risk_score, proof_id, commitment],
        )

    async def approve_action(self, action_id: int) -> int:
        return await self.chain.invoke(self.address, "approve_action", [action_id])

    async def update_constraints(
        self,
        max_daily_spend: int,
        allowed_action_types: int,
        max_single_tx: int,
        risk_threshold: int,
        is_active: bool,
    ) -> int:
        """Owner-only. The agent pipeline never calls this."""
        if not 0 <= risk_threshold <= 255:
            raise ValueError(f"risk_threshold must be in [0, 255], got {risk_threshold}")
        daily_low, daily_high = split_u256(max_daily_spend)
        single_low, single_high = split_u256(max_single_tx)
        return await self.chain.invoke(
            self.address,
            "update_constraints",
            [
                daily_low,
                daily_high,
                allowed_action_types,
                single_low,
                single_high,
                risk_threshold,
                1 if is_active else 0,
            ],
        )
