"""Priority strategy — the decision rule the ProofRegistry re-derives on-chain."""

from __future__ import annotations

from agent_core.models import ActionType, PortfolioSnapshot, ProposedAction
from agent_core.strategy.base import Strategy, StrategyParams
from agent_core.strategy.registry import register

MAX_REBALANCE_SATS = 5_000
REBALANCE_DIVISOR = 10
MIN_REBALANCE_RISK = 30
REBALANCE_RISK_OFFSET = 20

CATALOG_RISK = 10
SWAP_AMOUNT_SATS = 1_000
SWAP_RISK = 40
DEFAULT_AMOUNT_SATS = 100
DEFAULT_RISK = 5


def _rebalance_risk(amount: int, balance_sats: int) -> int:
    if balance_sats == 0:
        return MIN_REBALANCE_RISK
    return max(amount * 100 // balance_sats + REBALANCE_RISK_OFFSET, MIN_REBALANCE_RISK)


def decide(
    snapshot: PortfolioSnapshot,
    params: StrategyParams | None = None,
) -> list[ProposedAction]:
    """Evaluate the priority rules; first match wins.

    1. balance above threshold -> REBALANCE a tenth of it, capped at 5000 sats
    2. any ordinals            -> CATALOG (amount 0, risk 10)
    3. any runes               -> SWAP (amount 1000, risk 40)
    4. otherwise               -> demo REBALANCE (amount 100, risk 5)

    Only floor division is used. The verifier recomputes the same function
    with felt arithmetic and rejects any mismatch in
    (action_type, amount, risk_score).
    """
    threshold = (params or StrategyParams()).rebalance_threshold_sats

    if snapshot.balance_sats > threshold:
        amount = min(snapshot.balance_sats // REBALANCE_DIVISOR, MAX_REBALANCE_SATS)
        risk = _rebalance_risk(amount, snapshot.balance_sats)
        return [
            ProposedAction(
                action_type=ActionType.REBALANCE,
                label=f"rebalance (amount: {amount} sats, risk: {risk})",
                amount=amount,
                risk_score=risk,
            )
        ]

    if snapshot.ordinal_count > 0:
        return [
            ProposedAction(
                action_type=ActionType.CATALOG,
                label=f"catalog {snapshot.ordinal_count} ordinals (risk: {CATALOG_RISK})",
                amount=0,
                risk_score=CATALOG_RISK,
            )
        ]

    if snapshot.rune_count > 0:
        return [
            ProposedAction(
                action_type=ActionType.SWAP,
                label=f"swap {snapshot.rune_count} rune(s) (risk: {SWAP_RISK})",
                amount=SWAP_AMOUNT_SATS,
                risk_score=SWAP_RISK,
            )
        ]

    return [
        ProposedAction(
            action_type=ActionType.REBALANCE,
            label=f"demo rebalance (amount: {DEFAULT_AMOUNT_SATS}, risk: {DEFAULT_RISK})",
            amount=DEFAULT_AMOUNT_SATS,
            risk_score=DEFAULT_RISK,
        )
    ]


@register
class PriorityStrategy(Strategy):
    """REBALANCE > CATALOG > SWAP > default, mirrored by the ProofRegistry."""

    name = "priority"

    def decide(self, snapshot: PortfolioSnapshot) -> list[ProposedAction]:
        return decide(snapshot, self.params)
