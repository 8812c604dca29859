"""Run persistence — write a PipelineReport and its outcomes to the run store."""

from __future__ import annotations

from sqlalchemy.orm import Session

from agent_core.db.tables.runs import ActionOutcomeRow, PipelineRunRow
from agent_core.orchestrator.commitment import commitment_hex
from agent_core.orchestrator.pipeline import PipelineReport


def persist_run(
    session: Session,
    report: PipelineReport,
    *,
    run_key: str,
    btc_address: str,
    fallback_fields: list[str] | None = None,
) -> int:
    """Insert the run and one row per action outcome; return the run row id."""
    snap = report.snapshot
    row = PipelineRunRow(
        run_key=run_key,
        started_at=report.started_at,
        finished_at=report.finished_at or report.started_at,
        btc_address=btc_address,
        balance_sats=str(snap.balance_sats),
        utxo_count=snap.utxo_count,
        ordinal_count=snap.ordinal_count,
        rune_count=snap.rune_count,
        fallback_fields=list(fallback_fields or []),
        commitment=commitment_hex(report.commitment),
        commit_set=report.commit_set,
        approved_count=report.approved_count,
        total_proposed=report.total_proposed,
    )
    for position, outcome in enumerate(report.outcomes):
        action = outcome.action
        row.outcomes.append(ActionOutcomeRow(
            position=position,
            action_type=int(action.action_type),
            label=action.label,
            amount=str(action.amount),
            risk_score=action.risk_score,
            state=outcome.state.value,
            failed_step=outcome.failed_step,
            error=outcome.error,
            proof_id=outcome.proof_id,
            proof_hash=hex(outcome.proof_hash) if outcome.proof_hash is not None else None,
            action_id=outcome.action_id,
        ))
    session.add(row)
    session.commit()
    session.refresh(row)
    return row.id
