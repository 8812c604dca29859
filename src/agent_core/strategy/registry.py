"""Strategy registry: name -> Strategy subclass, filled by the @register decorator."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agent_core.strategy.base import Strategy, StrategyParams

STRATEGY_REGISTRY: dict[str, type[Strategy]] = {}


def register(cls: type[Strategy]) -> type[Strategy]:
    """Class decorator adding *cls* under its ``name``."""
    name = getattr(cls, "name", None)
    if not name:
        raise ValueError(f"{cls.__name__} needs a non-empty 'name' attribute to be registered")
    if name in STRATEGY_REGISTRY:
        raise ValueError(f"Duplicate strategy name {name!r}: already taken by {STRATEGY_REGISTRY[name].__name__}")
    STRATEGY_REGISTRY[name] = cls
    return cls


def available_strategies() -> list[str]:
    _load_bundled()
    return sorted(STRATEGY_REGISTRY)


def get_strategy(name: str, params: StrategyParams | None = None) -> Strategy:
    """Instantiate a registered strategy by name, with the given parameters."""
    _load_bundled()
    try:
        cls = STRATEGY_REGISTRY[name]
    except KeyError:
        raise KeyError(f"Unknown strategy {name!r} (known: {sorted(STRATEGY_REGISTRY)})") from None
    return cls(params)


def _load_bundled() -> None:
    # Importing the package runs the @register decorators
    import agent_core.strategy.strategies  # noqa: F401
