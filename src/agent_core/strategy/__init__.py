"""Strategy framework."""

from agent_core.strategy.base import Strategy, StrategyParams
from agent_core.strategy.registry import (
    STRATEGY_REGISTRY,
    available_strategies,
    get_strategy,
    register,
)

__all__ = [
    "STRATEGY_REGISTRY",
    "Strategy",
    "StrategyParams",
    "available_strategies",
    "get_strategy",
    "register",
]
