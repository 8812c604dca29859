"""Configuration system."""

from agent_core.config.loader import load_config
from agent_core.config.schema import AppConfig

__all__ = ["AppConfig", "load_config"]
