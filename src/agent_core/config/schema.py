"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ChainConfig(BaseModel):
    rpc_url: str = "http://localhost:5050"
    chain_id: str = "SN_SEPOLIA"
    vault_address: str = "0x0"
    registry_address: str = "0x0"
    account_address: str = "0x0"
    private_key: str = Field(default="", repr=False)
    # Owner credentials are only needed for set-constraints
    owner_address: str | None = None
    owner_private_key: str | None = Field(default=None, repr=False)
    # Finality wait (passed to FullNodeClient.wait_for_tx)
    tx_check_interval_s: float = 2.0
    tx_retries: int = 500


class FallbackPolicy(BaseModel):
    """Values substituted for any portfolio field the data API fails to deliver."""

    balance_sats: int = Field(default=50_000_000, ge=0)
    utxo_count: int = Field(default=3, ge=0)
    ordinal_count: int = Field(default=2, ge=0)
    rune_count: int = Field(default=1, ge=0)


class PortfolioConfig(BaseModel):
    base_url: str = "https://api.secretkeylabs.io"
    api_key: str = Field(default="", repr=False)
    btc_address: str = "bc1qm34lsc65zpw79lxes69zkqmk6ee3ewf0j77s3"
    timeout_s: float = 15.0
    fallback: FallbackPolicy = Field(default_factory=FallbackPolicy)


class StrategyConfig(BaseModel):
    name: str = "priority"
    rebalance_threshold_sats: int = Field(default=10_000, ge=0)
    max_risk: int = Field(default=80, ge=0)


class DatabaseConfig(BaseModel):
    url: str | None = "sqlite:///agent_runs.db"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "json"


class AppConfig(BaseModel):
    chain: ChainConfig = Field(default_factory=ChainConfig)
    portfolio: PortfolioConfig = Field(default_factory=PortfolioConfig)
    strategy: StrategyConfig = Field(default_factory=StrategyConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
