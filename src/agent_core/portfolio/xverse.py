"""Xverse Bitcoin API client — REST.

Two API generations are in use behind the same base URL. The address
endpoints (``/v1/address/...``) return ``totalBalance``/``confirmed`` and
``{"total": n, "results": [...]}`` pages; the newer bitcoin endpoints
(``/v1/bitcoin/address/...``) return UTXO pages as ``{"results": [...]}`` or
a bare list. Every method returns the raw decoded JSON; interpretation is
left to the snapshot provider.
"""

from __future__ import annotations

from typing import Any

import httpx


class XverseClient:
    """Async client for the Xverse (secretkeylabs) REST API."""

    def __init__(
        self,
        base_url: str = "https://api.secretkeylabs.io",
        api_key: str = "",
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_s = timeout_s
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                timeout=self.timeout_s,
                headers={"x-api-key": self.api_key, "Accept": "application/json"},
                transport=self._transport,
            )
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        http = await self._get_http()
        resp = await http.get(f"{self.base_url}{path}", params=params)
        resp.raise_for_status()
        return resp.json()

    async def get_balance(self, address: str) -> Any:
        return await self._get(f"/v1/address/{address}/getBalance")

    async def get_address(self, address: str) -> Any:
        """Esplora-style address summary; carries ``chain_stats``."""
        return await self._get(f"/v1/address/{address}")

    async def get_ordinals(self, address: str, offset: int = 0, limit: int = 1) -> Any:
        return await self._get(
            f"/v1/address/{address}/ordinals",
            params={"offset": offset, "limit": limit},
        )

    async def get_runes(self, address: str) -> Any:
        return await self._get(f"/v1/address/{address}/runes")

    async def get_utxos(self, address: str, offset: int = 0, limit: int = 25) -> Any:
        return await self._get(
            f"/v1/bitcoin/address/{address}/utxo",
            params={"offset": offset, "limit": limit},
        )
