"""Import all strategy modules to trigger @register decorators."""

from agent_core.strategy.strategies import priority  # noqa: F401
