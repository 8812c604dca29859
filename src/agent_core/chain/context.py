"""Chain context — the RPC client, signing account and finality settings.

Built once at startup from ``ChainConfig`` and passed to both gateways.
Gateways only ever go through ``call`` (view functions) and ``invoke``
(transactions, blocking until finality), which keeps them testable against
an in-memory double with the same two coroutines.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from starknet_py.hash.selector import get_selector_from_name
from starknet_py.net.account.account import Account
from starknet_py.net.client_errors import ClientError
from starknet_py.net.client_models import Call
from starknet_py.net.full_node_client import FullNodeClient
from starknet_py.net.models import StarknetChainId
from starknet_py.net.signer.stark_curve_signer import KeyPair
from starknet_py.transaction_errors import TransactionFailedError, TransactionNotReceivedError

from agent_core.chain.errors import ChainUnavailableError, ContractRejectedError
from agent_core.config.schema import ChainConfig

log = structlog.get_logger("chain")

# JSON-RPC error codes: CONTRACT_ERROR, TRANSACTION_EXECUTION_ERROR
CONTRACT_ERROR_CODES = {"40", "41"}

CHAIN_IDS = {
    "SN_MAIN": StarknetChainId.MAINNET,
    "SN_SEPOLIA": StarknetChainId.SEPOLIA,
}


def parse_felt(value: str) -> int:
    """Parse a hex (0x-prefixed) or decimal felt from config."""
    return int(value, 0)


class ChainContext:
    """Explicit handle on one Starknet endpoint and one signing account."""

    def __init__(
        self,
        client: FullNodeClient,
        account: Account | None,
        *,
        check_interval_s: float = 2.0,
        retries: int = 500,
    ) -> None:
        self.client = client
        self.account = account
        self.check_interval_s = check_interval_s
        self.retries = retries

    @classmethod
    def from_config(cls, cfg: ChainConfig, *, as_owner: bool = False) -> ChainContext:
        """Build the context, signing with the agent key (or the owner key)."""
        client = FullNodeClient(node_url=cfg.rpc_url)
        address, key = cfg.account_address, cfg.private_key
        if as_owner:
            if not cfg.owner_address or not cfg.owner_private_key:
                raise ValueError("owner_address and owner_private_key are required")
            address, key = cfg.owner_address, cfg.owner_private_key

        account = None
        if key:
            chain = CHAIN_IDS.get(cfg.chain_id.upper())
            if chain is None:
                raise ValueError(f"Unknown chain id {cfg.chain_id!r} (known: {sorted(CHAIN_IDS)})")
            account = Account(
                address=parse_felt(address),
                client=client,
                key_pair=KeyPair.from_private_key(parse_felt(key)),
                chain=chain,
            )
        return cls(
            client,
            account,
            check_interval_s=cfg.tx_check_interval_s,
            retries=cfg.tx_retries,
        )

    async def connect(self) -> int:
        """Check the endpoint answers; returns the chain id."""
        try:
            chain_id = await self.client.get_chain_id()
        except Exception as exc:
            raise ChainUnavailableError(f"cannot reach Starknet RPC: {exc}") from exc
        log.info("chain_connected", chain_id=chain_id)
        return int(chain_id, 16) if isinstance(chain_id, str) else int(chain_id)

    async def call(self, address: int, entrypoint: str, calldata: Sequence[int] = ()) -> list[int]:
        """Call a view function at the latest block and return the raw felts."""
        call = Call(
            to_addr=address,
            selector=get_selector_from_name(entrypoint),
            calldata=list(calldata),
        )
        return list(await self.client.call_contract(call, block_number="latest"))

    async def invoke(self, address: int, entrypoint: str, calldata: Sequence[int] = ()) -> int:
        """Sign and send one call, then block until the transaction is final.

        Reverts, rejections and contract errors during fee estimation raise
        ``ContractRejectedError``. Timeouts and transport errors propagate
        unchanged.
        """
        if self.account is None:
            raise RuntimeError("no signing key configured; cannot send transactions")
        call = Call(
            to_addr=address,
            selector=get_selector_from_name(entrypoint),
            calldata=list(calldata),
        )
        try:
            sent = await self.account.execute_v3(calls=call, auto_estimate=True)
        except ClientError as exc:
            if str(exc.code) in CONTRACT_ERROR_CODES:
                raise ContractRejectedError(entrypoint, exc.message) from exc
            raise

        log.debug("tx_sent", entrypoint=entrypoint, tx_hash=hex(sent.transaction_hash))
        try:
            await self.client.wait_for_tx(
                sent.transaction_hash,
                check_interval=self.check_interval_s,
                retries=self.retries,
            )
        except TransactionNotReceivedError:
            raise
        except TransactionFailedError as exc:
            # Reverted, or rejected on the releases that still report rejection
            raise ContractRejectedError(entrypoint, exc.message) from exc
        return sent.transaction_hash
