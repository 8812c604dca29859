"""Snapshot provider — fetches and normalizes a BTC address into a PortfolioSnapshot.

Provider failures are values, not exceptions: each field is fetched
independently and any HTTP error, network error or malformed body is
recorded as a ``ProviderError`` while the field takes its value from the
configured ``FallbackPolicy``. The pipeline therefore always gets a
snapshot, and ``SnapshotResult.errors`` shows exactly which fields are
real and which are substitutes.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from agent_core.config.schema import FallbackPolicy
from agent_core.models import PortfolioSnapshot
from agent_core.models.portfolio import BALANCE_SATS_LIMIT
from agent_core.portfolio.xverse import XverseClient

log = structlog.get_logger("snapshot_provider")

UTXO_PAGE_SIZE = 25
# Stop paging and fall back rather than walk an unbounded UTXO set
MAX_UTXO_PAGES = 40

SNAPSHOT_FIELDS = ("balance_sats", "utxo_count", "ordinal_count", "rune_count")


@dataclass(frozen=True)
class ProviderError:
    """Why a snapshot field could not be fetched."""

    field: str
    reason: str


@dataclass(frozen=True)
class SnapshotResult:
    snapshot: PortfolioSnapshot
    errors: dict[str, ProviderError] = field(default_factory=dict)

    @property
    def used_fallback(self) -> bool:
        return bool(self.errors)

    @property
    def fallback_fields(self) -> list[str]:
        return [name for name in SNAPSHOT_FIELDS if name in self.errors]


# ── Response parsing ─────────────────────────────────────────────


def parse_count(value: Any) -> int:
    """Accept a non-negative int or decimal string; reject everything else."""
    if isinstance(value, bool):
        raise ValueError(f"expected integer, got bool {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"negative count {value}")
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValueError(f"expected integer, got {value!r}")


def _check_balance(value: int) -> int:
    if value >= BALANCE_SATS_LIMIT:
        raise ValueError(f"balance {value} does not fit in u64")
    return value


def parse_balance(body: Any) -> int:
    """``{"totalBalance": n}`` or ``{"confirmed": n}`` from getBalance."""
    if not isinstance(body, dict):
        raise ValueError("balance response is not an object")
    for key in ("totalBalance", "confirmed"):
        if body.get(key) is not None:
            return _check_balance(parse_count(body[key]))
    raise ValueError("balance response has neither totalBalance nor confirmed")


def parse_chain_stats_balance(body: Any) -> int:
    """Funded minus spent outputs from an address summary's ``chain_stats``."""
    stats = body.get("chain_stats") if isinstance(body, dict) else None
    if not isinstance(stats, dict):
        raise ValueError("address response has no chain_stats")
    funded = parse_count(stats.get("funded_txo_sum"))
    spent = parse_count(stats.get("spent_txo_sum", 0))
    if spent > funded:
        raise ValueError(f"spent_txo_sum {spent} exceeds funded_txo_sum {funded}")
    return _check_balance(funded - spent)


def parse_page_total(body: Any) -> int:
    """Item count of a paged response: ``total`` or else ``len(results)``."""
    if isinstance(body, list):
        return len(body)
    if not isinstance(body, dict):
        raise ValueError("paged response is not an object")
    if body.get("total") is not None:
        return parse_count(body["total"])
    results = body.get("results")
    if isinstance(results, list):
        return len(results)
    raise ValueError("paged response has neither total nor results")


def parse_utxo_page(body: Any) -> tuple[int, int | None]:
    """(items on this page, reported total or None) of one UTXO page."""
    if isinstance(body, list):
        return len(body), None
    if not isinstance(body, dict):
        raise ValueError("utxo response is not an object")
    total = parse_count(body["total"]) if body.get("total") is not None else None
    results = body.get("results")
    if not isinstance(results, list):
        if total is None:
            raise ValueError("utxo response has neither total nor results")
        return 0, total
    return len(results), total


# ── Provider ─────────────────────────────────────────────────────


class SnapshotProvider:
    """Builds a PortfolioSnapshot for one address, applying the fallback policy."""

    def __init__(self, client: XverseClient, fallback: FallbackPolicy | None = None) -> None:
        self.client = client
        self.fallback = fallback or FallbackPolicy()

    async def _balance(self, address: str) -> int:
        try:
            return parse_balance(await self.client.get_balance(address))
        except (httpx.HTTPError, ValueError) as exc:
            log.info("balance_primary_failed", error=str(exc))
        return parse_chain_stats_balance(await self.client.get_address(address))

    async def _utxos(self, address: str) -> int:
        """Use the reported total when present, else page until a short page."""
        count = 0
        for page in range(MAX_UTXO_PAGES):
            body = await self.client.get_utxos(
                address, offset=page * UTXO_PAGE_SIZE, limit=UTXO_PAGE_SIZE
            )
            items, total = parse_utxo_page(body)
            if total is not None:
                return total
            count += items
            if items < UTXO_PAGE_SIZE:
                return count
        raise ValueError(f"more than {MAX_UTXO_PAGES * UTXO_PAGE_SIZE} UTXOs without a total")

    async def _ordinals(self, address: str) -> int:
        return parse_page_total(await self.client.get_ordinals(address))

    async def _runes(self, address: str) -> int:
        return parse_page_total(await self.client.get_runes(address))

    async def _guarded(
        self,
        name: str,
        fetch: Callable[[str], Awaitable[int]],
        address: str,
    ) -> tuple[int | None, ProviderError | None]:
        try:
            return await fetch(address), None
        except (httpx.HTTPError, ValueError) as exc:
            return None, ProviderError(field=name, reason=f"{type(exc).__name__}: {exc}")

    async def fetch(self, address: str) -> SnapshotResult:
        """Fetch all fields concurrently; every field resolves to a value or a fallback."""
        log.info("fetching_portfolio", address=address[:12])
        fetchers = {
            "balance_sats": self._balance,
            "utxo_count": self._utxos,
            "ordinal_count": self._ordinals,
            "rune_count": self._runes,
        }
        results = await asyncio.gather(
            *(self._guarded(name, fn, address) for name, fn in fetchers.items())
        )

        values: dict[str, int] = {}
        errors: dict[str, ProviderError] = {}
        for name, (value, error) in zip(fetchers, results):
            if error is not None:
                errors[name] = error
                values[name] = getattr(self.fallback, name)
                log.warning(
                    "portfolio_field_fallback",
                    field=name,
                    fallback=values[name],
                    reason=error.reason,
                )
            else:
                values[name] = value

        snapshot = PortfolioSnapshot(**values)
        log.info(
            "portfolio_snapshot",
            balance_btc=snapshot.balance_btc,
            utxos=snapshot.utxo_count,
            ordinals=snapshot.ordinal_count,
            runes=snapshot.rune_count,
            fallback_fields=[n for n in SNAPSHOT_FIELDS if n in errors],
        )
        return SnapshotResult(snapshot=snapshot, errors=errors)
