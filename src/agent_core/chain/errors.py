"""Chain-layer exceptions."""

from __future__ import annotations


class ChainError(Exception):
    """Base class for errors raised by the Starknet gateways."""


class ChainUnavailableError(ChainError):
    """The RPC endpoint could not be reached."""


class ContractRejectedError(ChainError):
    """A transaction was reverted or rejected by the contract."""

    def __init__(self, entrypoint: str, reason: str) -> None:
        self.entrypoint = entrypoint
        self.reason = reason
        super().__init__(f"{entrypoint} rejected: {reason}")


class DecodeError(ChainError):
    """A contract returned data that does not match the expected shape."""

    def __init__(self, shape: str, reason: str) -> None:
        self.shape = shape
        self.reason = reason
        super().__init__(f"cannot decode {shape}: {reason}")
