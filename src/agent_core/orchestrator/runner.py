"""Pipeline runner — bootstrap, one pipeline run, and the operator CLI.

Exit codes: 0 once the pipeline has processed its actions (whatever their
approval outcome), 1 if the chain is unreachable or anything fails before
action processing starts.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import uuid

import structlog

from agent_core.chain.context import ChainContext, parse_felt
from agent_core.chain.errors import ChainUnavailableError, ContractRejectedError, DecodeError
from agent_core.chain.registry import ProofRegistryGateway
from agent_core.chain.vault import VaultGateway
from agent_core.config.loader import load_config
from agent_core.config.schema import AppConfig
from agent_core.db.engine import Database
from agent_core.logging.setup import bind_run_context, clear_run_context, setup_logging
from agent_core.orchestrator.audit import audit_runs
from agent_core.orchestrator.persistence import persist_run
from agent_core.orchestrator.pipeline import PipelineReport, ProofOrchestrator
from agent_core.orchestrator.summary import vault_summary
from agent_core.portfolio.provider import SnapshotProvider
from agent_core.portfolio.xverse import XverseClient
from agent_core.strategy import StrategyParams, get_strategy

log = structlog.get_logger("runner")

EXIT_OK = 0
EXIT_FATAL = 1


def _strategy_params(config: AppConfig) -> StrategyParams:
    return StrategyParams(
        rebalance_threshold_sats=config.strategy.rebalance_threshold_sats,
        max_risk=config.strategy.max_risk,
    )


def _gateways(config: AppConfig, chain) -> tuple[VaultGateway, ProofRegistryGateway]:
    return (
        VaultGateway(chain, parse_felt(config.chain.vault_address)),
        ProofRegistryGateway(chain, parse_felt(config.chain.registry_address)),
    )


def _build_provider(config: AppConfig) -> SnapshotProvider:
    client = XverseClient(
        base_url=config.portfolio.base_url,
        api_key=config.portfolio.api_key,
        timeout_s=config.portfolio.timeout_s,
    )
    return SnapshotProvider(client, config.portfolio.fallback)


def _record_run(
    database: Database,
    report: PipelineReport,
    run_key: str,
    config: AppConfig,
    fallback_fields: list[str],
) -> None:
    try:
        with database.session() as session:
            row_id = persist_run(
                session,
                report,
                run_key=run_key,
                btc_address=config.portfolio.btc_address,
                fallback_fields=fallback_fields,
            )
        log.info("run_recorded", run_row_id=row_id)
    except Exception:
        log.exception("run_record_failed")


async def run_pipeline(
    config: AppConfig,
    *,
    chain: ChainContext | None = None,
    provider: SnapshotProvider | None = None,
    database: Database | None = None,
) -> int:
    """Run the full pipeline once and return the process exit code."""
    run_key = uuid.uuid4().hex[:12]
    bind_run_context(run_key, config.portfolio.btc_address)
    owns_provider = provider is None
    if provider is None:
        provider = _build_provider(config)
    params = _strategy_params(config)

    try:
        log.info("pipeline_start", strategy=config.strategy.name)
        try:
            if chain is None:
                chain = ChainContext.from_config(config.chain)
            await chain.connect()
            vault, registry = _gateways(config, chain)
            state = await vault.read_agent_state()
            log.info(
                "vault_state",
                total_actions=state.total_actions,
                risk_threshold=state.constraints.risk_threshold,
                is_active=state.constraints.is_active,
            )
            strategy = get_strategy(config.strategy.name, params)
            result = await provider.fetch(config.portfolio.btc_address)
            actions = strategy.decide(result.snapshot)
        except ChainUnavailableError as exc:
            log.error("chain_unreachable", error=str(exc))
            return EXIT_FATAL
        except Exception:
            log.exception("pipeline_fatal")
            return EXIT_FATAL

        log.info("strategy_decided", count=len(actions), actions=[a.label for a in actions])
        orchestrator = ProofOrchestrator(vault, registry, params)
        report = await orchestrator.run(result.snapshot, actions)

        if database is not None:
            _record_run(database, report, run_key, config, result.fallback_fields)
        return EXIT_OK
    finally:
        if owns_provider:
            await provider.client.close()
        clear_run_context()


async def summarize(
    config: AppConfig,
    recent: int = 5,
    *,
    chain: ChainContext | None = None,
) -> int:
    """Print the vault summary as JSON and return the process exit code."""
    try:
        if chain is None:
            chain = ChainContext.from_config(config.chain)
        await chain.connect()
        vault, registry = _gateways(config, chain)
        summary = await vault_summary(vault, registry, recent=recent)
    except ChainUnavailableError as exc:
        log.error("chain_unreachable", error=str(exc))
        return EXIT_FATAL
    except DecodeError as exc:
        log.error("vault_unreadable", error=str(exc))
        return EXIT_FATAL
    except Exception:
        log.exception("summary_failed")
        return EXIT_FATAL
    print(json.dumps(summary, indent=2))
    return EXIT_OK


def _audit(database: Database, limit: int | None) -> int:
    with database.session() as session:
        findings = audit_runs(session, limit=limit)
    mismatches = [f for f in findings if not f.ok]
    for f in mismatches:
        log.error(
            "commitment_mismatch",
            run_id=f.run_id,
            run_key=f.run_key,
            stored=f.stored,
            recomputed=f.recomputed,
        )
    log.info("audit_complete", runs=len(findings), mismatches=len(mismatches))
    return EXIT_FATAL if mismatches else EXIT_OK


async def _set_constraints(config: AppConfig, args: argparse.Namespace) -> int:
    try:
        chain = ChainContext.from_config(config.chain, as_owner=True)
    except ValueError as exc:
        log.error("owner_credentials_missing", error=str(exc))
        return EXIT_FATAL
    try:
        await chain.connect()
    except ChainUnavailableError as exc:
        log.error("chain_unreachable", error=str(exc))
        return EXIT_FATAL
    vault, _ = _gateways(config, chain)
    try:
        tx_hash = await vault.update_constraints(
            max_daily_spend=args.max_daily_spend,
            allowed_action_types=args.allowed_action_types,
            max_single_tx=args.max_single_tx,
            risk_threshold=args.risk_threshold,
            is_active=not args.inactive,
        )
    except ValueError as exc:
        log.error("constraints_invalid", error=str(exc))
        return EXIT_FATAL
    except ContractRejectedError as exc:
        log.error("constraints_rejected", reason=exc.reason)
        return EXIT_FATAL
    log.info("constraints_updated", tx_hash=hex(tx_hash))
    return EXIT_OK


def _open_database(config: AppConfig) -> Database | None:
    if not config.database.url:
        return None
    database = Database(config.database.url)
    database.create_all()
    return database


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-pipeline",
        description="ZK-constrained Bitcoin agent: decision-proof pipeline",
    )
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("run", help="Fetch portfolio, prove, propose and approve (default)")

    p_summary = sub.add_parser("summary", help="Print vault and registry state as JSON")
    p_summary.add_argument("--recent", type=int, default=5, help="Number of recent entries")

    p_audit = sub.add_parser("audit", help="Recompute stored portfolio commitments")
    p_audit.add_argument("--limit", type=int, default=None, help="Only the newest N runs")

    p_cons = sub.add_parser("set-constraints", help="Owner only: update vault constraints")
    p_cons.add_argument("--max-daily-spend", type=int, required=True)
    p_cons.add_argument("--allowed-action-types", type=lambda v: int(v, 0), required=True,
                        help="Bitmap, decimal or 0x-hex")
    p_cons.add_argument("--max-single-tx", type=int, required=True)
    p_cons.add_argument("--risk-threshold", type=int, required=True, help="0-255")
    p_cons.add_argument("--inactive", action="store_true", help="Deactivate the vault")
    return parser


def main(config_path: str | None = None, argv: list[str] | None = None) -> int:
    """Entry point — load config, set up logging, dispatch the command."""
    args = build_parser().parse_args(argv)
    config = load_config(args.config or config_path)
    setup_logging(level=config.logging.level, log_format=config.logging.format)

    command = args.command or "run"
    if command == "summary":
        return asyncio.run(summarize(config, args.recent))
    if command == "set-constraints":
        return asyncio.run(_set_constraints(config, args))

    database = _open_database(config)
    try:
        if command == "audit":
            if database is None:
                log.error("audit_requires_database")
                return EXIT_FATAL
            return _audit(database, args.limit)
        return asyncio.run(run_pipeline(config, database=database))
    finally:
        if database is not None:
            database.dispose()


def cli() -> None:
    sys.exit(main())
