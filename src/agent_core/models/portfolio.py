"""Portfolio snapshot — the observation a strategy decision is based on."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

SATS_PER_BTC = 100_000_000
# Exclusive bound of the u64 balance field the registry accepts
BALANCE_SATS_LIMIT = 2**64


class PortfolioSnapshot(BaseModel):
    """Point-in-time view of a BTC address, captured once per pipeline run."""

    model_config = ConfigDict(frozen=True)

    balance_sats: int = Field(ge=0, lt=BALANCE_SATS_LIMIT)
    utxo_count: int = Field(ge=0)
    ordinal_count: int = Field(ge=0)
    rune_count: int = Field(ge=0)

    @property
    def balance_btc(self) -> float:
        """Display-only conversion; never feed this into strategy math."""
        return self.balance_sats / SATS_PER_BTC
