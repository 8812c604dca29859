"""ProofRegistry gateway — decision proof submission and lookup."""

from __future__ import annotations

from agent_core.chain.codec import decode_decision_proof, decode_felt
from agent_core.chain.vault import ChainHandle
from agent_core.models import DecisionProof, PortfolioSnapshot, ProposedAction
from agent_core.strategy.base import StrategyParams


class ProofRegistryGateway:
    """Typed wrapper over the ProofRegistry entrypoints."""

    def __init__(self, chain: ChainHandle, address: int) -> None:
        self.chain = chain
        self.address = address

    async def submit_proof(
        self,
        snapshot: PortfolioSnapshot,
        params: StrategyParams,
        action: ProposedAction,
    ) -> int:
        """Submit (portfolio input, strategy params, action output).

        The registry re-derives the expected action from the first two
        structs and reverts if it differs from the third.
        """
        calldata = [
            # PortfolioInput
            snapshot.balance_sats,
            snapshot.utxo_count,
            snapshot.ordinal_count,
            snapshot.rune_count,
            # StrategyParams
            params.rebalance_threshold_sats,
            params.max_risk,
            # ActionOutput
            int(action.action_type),
            action.amount,
            action.risk_score,
        ]
        return await self.chain.invoke(self.address, "submit_proof", calldata)

    async def compute_output_hash(self, action_type: int, amount: int, risk_score: int) -> int:
        raw = await self.chain.call(
            self.address, "compute_output_hash", [action_type, amount, risk_score]
        )
        return decode_felt("compute_output_hash", raw)

    async def get_total_proofs(self) -> int:
        return decode_felt("get_total_proofs", await self.chain.call(self.address, "get_total_proofs"))

    async def get_proof(self, proof_id: int) -> DecisionProof:
        raw = await self.chain.call(self.address, "verify_proof", [proof_id])
        return decode_decision_proof(proof_id, raw)
