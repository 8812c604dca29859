"""SQLAlchemy ORM models for pipeline runs and their action outcomes.

Felt-sized values (commitments, proof hashes) and u128 amounts exceed
BIGINT, so they are stored as text: hex for hashes, decimal for amounts.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import DateTime

from agent_core.db.base import Base


class PipelineRunRow(Base):
    __tablename__ = "pipeline_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_key: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    finished_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    btc_address: Mapped[str] = mapped_column(Text, nullable=False)
    # Snapshot
    balance_sats: Mapped[str] = mapped_column(Text, nullable=False)
    utxo_count: Mapped[int] = mapped_column(Integer, nullable=False)
    ordinal_count: Mapped[int] = mapped_column(Integer, nullable=False)
    rune_count: Mapped[int] = mapped_column(Integer, nullable=False)
    fallback_fields: Mapped[list | None] = mapped_column(JSON, nullable=True)
    # Commitment
    commitment: Mapped[str] = mapped_column(Text, nullable=False)
    commit_set: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Totals
    approved_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_proposed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    outcomes: Mapped[list[ActionOutcomeRow]] = relationship(
        back_populates="run", cascade="all, delete-orphan", order_by="ActionOutcomeRow.position"
    )


class ActionOutcomeRow(Base):
    __tablename__ = "action_outcomes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(ForeignKey("pipeline_runs.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    action_type: Mapped[int] = mapped_column(Integer, nullable=False)
    label: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[str] = mapped_column(Text, nullable=False)
    risk_score: Mapped[int] = mapped_column(Integer, nullable=False)
    state: Mapped[str] = mapped_column(Text, nullable=False)
    failed_step: Mapped[str | None] = mapped_column(Text, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    proof_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    proof_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    run: Mapped[PipelineRunRow] = relationship(back_populates="outcomes")
