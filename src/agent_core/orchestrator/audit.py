"""Commitment replay — recompute stored commitments from stored snapshots."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from agent_core.db.tables.runs import PipelineRunRow
from agent_core.models import PortfolioSnapshot
from agent_core.orchestrator.commitment import portfolio_commitment


@dataclass(frozen=True)
class AuditFinding:
    run_id: int
    run_key: str
    stored: str
    recomputed: str

    @property
    def ok(self) -> bool:
        return int(self.stored, 16) == int(self.recomputed, 16)


def snapshot_from_row(row: PipelineRunRow) -> PortfolioSnapshot:
    return PortfolioSnapshot(
        balance_sats=int(row.balance_sats),
        utxo_count=row.utxo_count,
        ordinal_count=row.ordinal_count,
        rune_count=row.rune_count,
    )


def audit_runs(session: Session, limit: int | None = None) -> list[AuditFinding]:
    """Replay every stored run (newest first) and report stored vs recomputed."""
    query = session.query(PipelineRunRow).order_by(PipelineRunRow.id.desc())
    if limit is not None:
        query = query.limit(limit)
    findings = []
    for row in query.all():
        recomputed = portfolio_commitment(snapshot_from_row(row))
        findings.append(AuditFinding(
            run_id=row.id,
            run_key=row.run_key,
            stored=row.commitment,
            recomputed=hex(recomputed),
        ))
    return findings
