"""Starknet gateways for the AgentVault and ProofRegistry contracts."""

from agent_core.chain.context import ChainContext
from agent_core.chain.errors import (
    ChainError,
    ChainUnavailableError,
    ContractRejectedError,
    DecodeError,
)
from agent_core.chain.registry import ProofRegistryGateway
from agent_core.chain.vault import VaultGateway

__all__ = [
    "ChainContext",
    "ChainError",
    "ChainUnavailableError",
    "ContractRejectedError",
    "DecodeError",
    "ProofRegistryGateway",
    "VaultGateway",
]
