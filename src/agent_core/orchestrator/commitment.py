"""Portfolio commitment — a chained Pedersen hash pinning one snapshot.

    commit = h(h(h(h(seed, balance), utxos), ordinals), runes)

The fold order is fixed. Commitments already recorded on the vault were
produced in this order, so any other order yields values that never match.
"""

from __future__ import annotations

from starknet_py.hash.utils import pedersen_hash

from agent_core.models import PortfolioSnapshot

COMMITMENT_SEED = 0


def portfolio_commitment(snapshot: PortfolioSnapshot, seed: int = COMMITMENT_SEED) -> int:
    """Fold the snapshot fields into a single felt."""
    acc = seed
    for value in (
        snapshot.balance_sats,
        snapshot.utxo_count,
        snapshot.ordinal_count,
        snapshot.rune_count,
    ):
        acc = pedersen_hash(acc, value)
    return acc


def commitment_hex(commitment: int) -> str:
    return hex(commitment)
