"""Tests for the Xverse client and the snapshot provider's fallback policy."""

import httpx
import pytest

from agent_core.config.schema import FallbackPolicy
from agent_core.portfolio import SnapshotProvider, XverseClient
from agent_core.portfolio.provider import (
    parse_balance,
    parse_chain_stats_balance,
    parse_count,
    parse_page_total,
    parse_utxo_page,
)

ADDRESS = "bc1qtestaddress"

HAPPY = {
    f"/v1/address/{ADDRESS}/getBalance": {"totalBalance": 123_456},
    f"/v1/address/{ADDRESS}": {"chain_stats": {"funded_txo_sum": 900, "spent_txo_sum": 100}},
    f"/v1/bitcoin/address/{ADDRESS}/utxo": {"results": [{"txid": "a"}, {"txid": "b"}]},
    f"/v1/address/{ADDRESS}/ordinals": {"total": 4, "results": [{}]},
    f"/v1/address/{ADDRESS}/runes": {"results": [{"rune": "X"}]},
}


def _provider(routes: dict, *, status: dict | None = None, seen: list | None = None) -> SnapshotProvider:
    status = status or {}

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        path = request.url.path
        if path in status:
            return httpx.Response(status[path])
        if path not in routes:
            return httpx.Response(404)
        body = routes[path]
        if isinstance(body, bytes):
            return httpx.Response(200, content=body)
        return httpx.Response(200, json=body)

    client = XverseClient(base_url="https://xverse.test", api_key="k3y", transport=httpx.MockTransport(handler))
    return SnapshotProvider(client, FallbackPolicy())


# ── Parsers ─────────────────────────────────────────────────────


class TestParsers:
    def test_count_accepts_digit_string(self):
        assert parse_count("42") == 42

    @pytest.mark.parametrize("bad", [None, -1, True, "1.5", 2.0, "abc"])
    def test_count_rejects(self, bad):
        with pytest.raises(ValueError):
            parse_count(bad)

    def test_balance_prefers_total(self):
        assert parse_balance({"totalBalance": 5, "confirmed": 3}) == 5

    def test_balance_confirmed(self):
        assert parse_balance({"confirmed": 3}) == 3

    def test_balance_missing(self):
        with pytest.raises(ValueError):
            parse_balance({"unconfirmed": 1})

    def test_chain_stats(self):
        assert parse_chain_stats_balance({"chain_stats": {"funded_txo_sum": 10, "spent_txo_sum": 4}}) == 6

    def test_chain_stats_overspent(self):
        with pytest.raises(ValueError):
            parse_chain_stats_balance({"chain_stats": {"funded_txo_sum": 1, "spent_txo_sum": 4}})

    def test_page_total_from_results(self):
        assert parse_page_total({"results": [1, 2, 3]}) == 3

    def test_page_total_bare_list(self):
        assert parse_page_total([1, 2]) == 2

    def test_page_total_garbage(self):
        with pytest.raises(ValueError):
            parse_page_total("nope")

    def test_utxo_page_prefers_total(self):
        assert parse_utxo_page({"total": 40, "results": [{}] * 25}) == (25, 40)

    def test_utxo_page_bare_list(self):
        assert parse_utxo_page([{}, {}]) == (2, None)

    def test_utxo_page_garbage(self):
        with pytest.raises(ValueError):
            parse_utxo_page({"count": 3})

    def test_balance_above_u64(self):
        with pytest.raises(ValueError, match="u64"):
            parse_balance({"totalBalance": 2**64})

    def test_chain_stats_above_u64(self):
        with pytest.raises(ValueError, match="u64"):
            parse_chain_stats_balance({"chain_stats": {"funded_txo_sum": 2**64, "spent_txo_sum": 0}})


# ── Provider ────────────────────────────────────────────────────


class TestSnapshotProvider:
    @pytest.mark.asyncio
    async def test_all_fields_live(self):
        result = await _provider(HAPPY).fetch(ADDRESS)
        snap = result.snapshot
        assert (snap.balance_sats, snap.utxo_count, snap.ordinal_count, snap.rune_count) == (123_456, 2, 4, 1)
        assert result.used_fallback is False
        assert result.fallback_fields == []

    @pytest.mark.asyncio
    async def test_api_key_header_sent(self):
        seen: list[httpx.Request] = []
        await _provider(HAPPY, seen=seen).fetch(ADDRESS)
        assert seen
        assert all(r.headers["x-api-key"] == "k3y" for r in seen)

    @pytest.mark.asyncio
    async def test_ordinals_request_params(self):
        seen: list[httpx.Request] = []
        await _provider(HAPPY, seen=seen).fetch(ADDRESS)
        (req,) = [r for r in seen if r.url.path.endswith("/ordinals")]
        assert req.url.params["offset"] == "0"
        assert req.url.params["limit"] == "1"

    @pytest.mark.asyncio
    async def test_balance_secondary_source(self):
        status = {f"/v1/address/{ADDRESS}/getBalance": 500}
        result = await _provider(HAPPY, status=status).fetch(ADDRESS)
        assert result.snapshot.balance_sats == 800
        assert "balance_sats" not in result.errors

    @pytest.mark.asyncio
    async def test_balance_both_sources_fail(self):
        status = {f"/v1/address/{ADDRESS}/getBalance": 500, f"/v1/address/{ADDRESS}": 503}
        result = await _provider(HAPPY, status=status).fetch(ADDRESS)
        assert result.snapshot.balance_sats == 50_000_000
        assert result.fallback_fields == ["balance_sats"]
        assert result.snapshot.ordinal_count == 4

    @pytest.mark.asyncio
    async def test_every_endpoint_down(self):
        result = await _provider({}).fetch(ADDRESS)
        snap = result.snapshot
        assert (snap.balance_sats, snap.utxo_count, snap.ordinal_count, snap.rune_count) == (50_000_000, 3, 2, 1)
        assert result.fallback_fields == ["balance_sats", "utxo_count", "ordinal_count", "rune_count"]
        assert "HTTPStatusError" in result.errors["rune_count"].reason

    @pytest.mark.asyncio
    async def test_malformed_body_uses_fallback(self):
        routes = dict(HAPPY)
        routes[f"/v1/address/{ADDRESS}/runes"] = b"<html>gateway</html>"
        routes[f"/v1/address/{ADDRESS}/ordinals"] = {"total": "many"}
        result = await _provider(routes).fetch(ADDRESS)
        assert result.snapshot.rune_count == 1
        assert result.snapshot.ordinal_count == 2
        assert result.fallback_fields == ["ordinal_count", "rune_count"]
        assert result.snapshot.balance_sats == 123_456

    @pytest.mark.asyncio
    async def test_network_error_uses_fallback(self):
        def handler(request):
            raise httpx.ConnectError("dns failure", request=request)

        client = XverseClient(base_url="https://xverse.test", transport=httpx.MockTransport(handler))
        result = await SnapshotProvider(client).fetch(ADDRESS)
        assert result.used_fallback is True
        assert result.snapshot.utxo_count == 3
        assert "ConnectError" in result.errors["utxo_count"].reason

    @pytest.mark.asyncio
    async def test_custom_fallback_policy(self):
        client = XverseClient(
            base_url="https://xverse.test",
            transport=httpx.MockTransport(lambda r: httpx.Response(500)),
        )
        policy = FallbackPolicy(balance_sats=1, utxo_count=0, ordinal_count=0, rune_count=0)
        result = await SnapshotProvider(client, policy).fetch(ADDRESS)
        assert result.snapshot.balance_sats == 1
        assert result.snapshot.rune_count == 0

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        client = XverseClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
        await client.get_runes(ADDRESS)
        await client.close()
        await client.close()


# ── Out-of-range balances and UTXO paging ───────────────────────


def _utxo_provider(pages: list, seen: list | None = None) -> SnapshotProvider:
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == f"/v1/bitcoin/address/{ADDRESS}/utxo":
            if seen is not None:
                seen.append(int(request.url.params["offset"]))
            index = int(request.url.params["offset"]) // 25
            return httpx.Response(200, json=pages[min(index, len(pages) - 1)])
        if path in HAPPY:
            return httpx.Response(200, json=HAPPY[path])
        return httpx.Response(404)

    client = XverseClient(base_url="https://xverse.test", transport=httpx.MockTransport(handler))
    return SnapshotProvider(client, FallbackPolicy())


class TestBalanceRange:
    @pytest.mark.asyncio
    async def test_u64_overflow_falls_back(self):
        routes = dict(HAPPY)
        routes[f"/v1/address/{ADDRESS}/getBalance"] = {"totalBalance": 2**64}
        routes[f"/v1/address/{ADDRESS}"] = {"chain_stats": {"funded_txo_sum": 2**70}}
        result = await _provider(routes).fetch(ADDRESS)
        assert result.snapshot.balance_sats == 50_000_000
        assert result.fallback_fields == ["balance_sats"]
        assert "u64" in result.errors["balance_sats"].reason

    @pytest.mark.asyncio
    async def test_overflow_uses_secondary_source(self):
        routes = dict(HAPPY)
        routes[f"/v1/address/{ADDRESS}/getBalance"] = {"confirmed": 2**64}
        result = await _provider(routes).fetch(ADDRESS)
        assert result.snapshot.balance_sats == 800
        assert result.used_fallback is False

    @pytest.mark.asyncio
    async def test_largest_u64_accepted(self):
        routes = dict(HAPPY)
        routes[f"/v1/address/{ADDRESS}/getBalance"] = {"totalBalance": 2**64 - 1}
        result = await _provider(routes).fetch(ADDRESS)
        assert result.snapshot.balance_sats == 2**64 - 1


class TestUtxoCount:
    @pytest.mark.asyncio
    async def test_reported_total_wins_over_page_length(self):
        seen: list[int] = []
        result = await _utxo_provider([{"total": 40, "results": [{}] * 25}], seen).fetch(ADDRESS)
        assert result.snapshot.utxo_count == 40
        assert seen == [0]

    @pytest.mark.asyncio
    async def test_pages_until_short_page(self):
        seen: list[int] = []
        pages = [{"results": [{}] * 25}, [{}] * 25, {"results": [{}] * 3}]
        result = await _utxo_provider(pages, seen).fetch(ADDRESS)
        assert result.snapshot.utxo_count == 53
        assert seen == [0, 25, 50]

    @pytest.mark.asyncio
    async def test_exact_page_multiple(self):
        pages = [{"results": [{}] * 25}, {"results": []}]
        result = await _utxo_provider(pages).fetch(ADDRESS)
        assert result.snapshot.utxo_count == 25

    @pytest.mark.asyncio
    async def test_unbounded_paging_falls_back(self):
        result = await _utxo_provider([{"results": [{}] * 25}]).fetch(ADDRESS)
        assert result.snapshot.utxo_count == 3
        assert result.fallback_fields == ["utxo_count"]


class TestXverseClient:
    def test_default_url(self):
        assert XverseClient().base_url == "https://api.secretkeylabs.io"

    def test_trailing_slash_stripped(self):
        assert XverseClient(base_url="https://custom.api/").base_url == "https://custom.api"
