"""Config loader — reads YAML, applies AGENT_* env var overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from agent_core.config.schema import AppConfig

# env var -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "AGENT_RPC_URL": ("chain", "rpc_url"),
    "AGENT_CHAIN_ID": ("chain", "chain_id"),
    "AGENT_VAULT_ADDRESS": ("chain", "vault_address"),
    "AGENT_REGISTRY_ADDRESS": ("chain", "registry_address"),
    "AGENT_ACCOUNT_ADDRESS": ("chain", "account_address"),
    "AGENT_PRIVATE_KEY": ("chain", "private_key"),
    "AGENT_OWNER_ADDRESS": ("chain", "owner_address"),
    "AGENT_OWNER_PRIVATE_KEY": ("chain", "owner_private_key"),
    "XVERSE_API_KEY": ("portfolio", "api_key"),
    "AGENT_BTC_ADDRESS": ("portfolio", "btc_address"),
    "AGENT_DATABASE_URL": ("database", "url"),
    "AGENT_LOG_LEVEL": ("logging", "level"),
    "AGENT_LOG_FORMAT": ("logging", "format"),
}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults. Any
    variable listed in ``ENV_OVERRIDES`` that is set and non-empty replaces
    the corresponding YAML value.
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data.setdefault(section, {})[key] = value

    return AppConfig.model_validate(data)
