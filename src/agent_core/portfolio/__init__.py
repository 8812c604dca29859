"""Bitcoin portfolio snapshot provider (Xverse data API)."""

from agent_core.portfolio.provider import ProviderError, SnapshotProvider, SnapshotResult
from agent_core.portfolio.xverse import XverseClient

__all__ = ["ProviderError", "SnapshotProvider", "SnapshotResult", "XverseClient"]
