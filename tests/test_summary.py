"""Tests for the vault summary."""

import json

import pytest

from agent_core.chain import ProofRegistryGateway, VaultGateway
from agent_core.orchestrator import ProofOrchestrator
from agent_core.orchestrator.summary import vault_summary
from agent_core.strategy.strategies.priority import decide

from doubles import REGISTRY, VAULT


@pytest.fixture
def gateways(starknet):
    return VaultGateway(starknet, VAULT), ProofRegistryGateway(starknet, REGISTRY)


class TestVaultSummary:
    @pytest.mark.asyncio
    async def test_empty_vault(self, gateways):
        summary = await vault_summary(*gateways)
        assert summary["total_actions"] == 0
        assert summary["recent_actions"] == []
        assert summary["total_proofs"] == 0
        assert summary["constraints"]["risk_threshold"] == 100
        assert summary["constraints"]["allowed_action_types"] == "0xe"
        assert summary["vault_address"] == hex(VAULT)

    @pytest.mark.asyncio
    async def test_after_run(self, gateways, snapshot):
        vault, registry = gateways
        await ProofOrchestrator(vault, registry).run(snapshot, decide(snapshot))
        summary = await vault_summary(vault, registry)
        (action,) = summary["recent_actions"]
        assert action["action_type"] == "REBALANCE"
        assert action["amount"] == "5000"
        assert action["approved"] is True
        assert summary["daily_spent"] == "5000"
        assert len(summary["recent_proofs"]) == 1
        # JSON-ready
        json.dumps(summary)

    @pytest.mark.asyncio
    async def test_newest_first_and_limited(self, starknet, snapshot):
        starknet.constraints[2] = 100_000
        vault, registry = VaultGateway(starknet, VAULT), ProofRegistryGateway(starknet, REGISTRY)
        orch = ProofOrchestrator(vault, registry)
        for _ in range(4):
            await orch.run(snapshot, decide(snapshot))
        summary = await vault_summary(vault, registry, recent=2)
        assert [a["id"] for a in summary["recent_actions"]] == [3, 2]
        assert [p["id"] for p in summary["recent_proofs"]] == [3, 2]

    @pytest.mark.asyncio
    async def test_unreadable_record_skipped(self, gateways, starknet, snapshot):
        vault, registry = gateways
        await ProofOrchestrator(vault, registry).run(snapshot, decide(snapshot))
        starknet.actions[0][6] = 5
        summary = await vault_summary(vault, registry)
        assert summary["recent_actions"] == []
        assert summary["unreadable"]["actions"] == [0]

    @pytest.mark.asyncio
    async def test_unknown_action_type(self, gateways, starknet):
        starknet.actions.append([9, 0, 0, 1, 0, 0, 0])
        summary = await vault_summary(*gateways)
        assert summary["recent_actions"][0]["action_type"] == "UNKNOWN(9)"
