"""Proof orchestrator — drives each proposed action through the on-chain protocol.

Per run:   set_portfolio_commit (non-fatal)
Per action, strictly one after another:

    INIT -> PROOF_SUBMITTED -> PROOF_RESOLVED -> PROPOSED -> APPROVED | REJECTED

Any step may end the action in FAILED instead.

Proof and action ids are resolved by reading the registry/vault counters
right after the write (``counter - 1``). That only holds while this process
is the sole writer to both contracts; actions are processed one at a time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

import structlog

from agent_core.chain.errors import ContractRejectedError, DecodeError
from agent_core.chain.registry import ProofRegistryGateway
from agent_core.chain.vault import VaultGateway
from agent_core.models import PortfolioSnapshot, ProposedAction
from agent_core.orchestrator.commitment import commitment_hex, portfolio_commitment
from agent_core.strategy.base import StrategyParams

log = structlog.get_logger("orchestrator")


class ActionState(str, Enum):
    INIT = "init"
    PROOF_SUBMITTED = "proof_submitted"
    PROOF_RESOLVED = "proof_resolved"
    PROPOSED = "proposed"
    APPROVED = "approved"
    REJECTED = "rejected"
    FAILED = "failed"


TERMINAL_STATES = frozenset({ActionState.APPROVED, ActionState.REJECTED, ActionState.FAILED})


@dataclass
class ActionOutcome:
    """Where one proposed action ended up, and what was resolved on the way."""

    action: ProposedAction
    state: ActionState = ActionState.INIT
    failed_step: str | None = None
    error: str | None = None
    proof_id: int | None = None
    proof_hash: int | None = None
    action_id: int | None = None

    @property
    def terminal(self) -> bool:
        return self.state in TERMINAL_STATES


@dataclass
class PipelineReport:
    snapshot: PortfolioSnapshot
    commitment: int
    commit_set: bool
    outcomes: list[ActionOutcome] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None

    @property
    def approved_count(self) -> int:
        return sum(1 for o in self.outcomes if o.state is ActionState.APPROVED)

    @property
    def total_proposed(self) -> int:
        return len(self.outcomes)


def resolve_latest_id(counter_name: str, counter: int) -> int:
    """Id of the entry just appended to a sequence whose length is *counter*."""
    if counter < 1:
        raise DecodeError(counter_name, f"counter is {counter} right after a successful write")
    return counter - 1


class ProofOrchestrator:
    """Commits the snapshot, then proves, proposes and approves each action."""

    def __init__(
        self,
        vault: VaultGateway,
        registry: ProofRegistryGateway,
        params: StrategyParams | None = None,
    ) -> None:
        self.vault = vault
        self.registry = registry
        self.params = params or StrategyParams()

    async def set_commitment(self, commitment: int) -> bool:
        """Write the commitment to the vault. Failure is logged, never raised."""
        log.info("setting_portfolio_commit", commitment=commitment_hex(commitment))
        try:
            tx_hash = await self.vault.set_portfolio_commit(commitment)
        except Exception:
            log.exception("portfolio_commit_failed")
            return False
        log.info("portfolio_commit_set", tx_hash=hex(tx_hash))
        return True

    async def process(
        self,
        action: ProposedAction,
        snapshot: PortfolioSnapshot,
        commitment: int,
    ) -> ActionOutcome:
        """Run one action to a terminal state. Never raises for step failures."""
        outcome = ActionOutcome(action=action)
        alog = log.bind(action=action.label)
        step = "submit_proof"
        try:
            alog.info("submitting_proof", action_type=int(action.action_type))
            tx_hash = await self.registry.submit_proof(snapshot, self.params, action)
            outcome.state = ActionState.PROOF_SUBMITTED
            alog.info("proof_submitted", tx_hash=hex(tx_hash))

            step = "resolve_proof"
            proof_hash = await self.registry.compute_output_hash(
                int(action.action_type), action.amount, action.risk_score
            )
            proof_id = resolve_latest_id("get_total_proofs", await self.registry.get_total_proofs())
            outcome.action = action.with_proof(proof_id, proof_hash)
            outcome.proof_id, outcome.proof_hash = proof_id, proof_hash
            outcome.state = ActionState.PROOF_RESOLVED
            alog.info("proof_resolved", proof_id=proof_id, proof_hash=hex(proof_hash))

            step = "propose_action"
            tx_hash = await self.vault.propose_action(
                int(action.action_type),
                action.amount,
                action.risk_score,
                proof_id,
                commitment,
            )
            state = await self.vault.read_agent_state()
            action_id = resolve_latest_id("get_agent_state", state.total_actions)
            outcome.action_id = action_id
            outcome.state = ActionState.PROPOSED
            alog.info("action_proposed", action_id=action_id, tx_hash=hex(tx_hash))

            step = "approve_action"
            try:
                await self.vault.approve_action(action_id)
            except ContractRejectedError as exc:
                # Constraint violation: an outcome, not a pipeline error
                outcome.state = ActionState.REJECTED
                outcome.error = exc.reason
                alog.warning("action_rejected", action_id=action_id, reason=exc.reason)
                return outcome

            step = "verify_approval"
            record = await self.vault.read_action(action_id)
            if record.approved:
                outcome.state = ActionState.APPROVED
                alog.info("action_approved", action_id=action_id)
            else:
                outcome.state = ActionState.REJECTED
                alog.warning("action_not_approved", action_id=action_id)

        except ContractRejectedError as exc:
            self._fail(outcome, step, exc)
            alog.warning("action_failed", step=step, reason=exc.reason)
        except DecodeError as exc:
            self._fail(outcome, step, exc)
            alog.error("action_failed", step=step, error=str(exc))
        except Exception as exc:
            self._fail(outcome, step, exc)
            alog.exception("action_failed", step=step)

        return outcome

    @staticmethod
    def _fail(outcome: ActionOutcome, step: str, exc: Exception) -> None:
        outcome.state = ActionState.FAILED
        outcome.failed_step = step
        outcome.error = f"{type(exc).__name__}: {exc}"

    async def run(
        self,
        snapshot: PortfolioSnapshot,
        actions: list[ProposedAction],
    ) -> PipelineReport:
        """Commit the snapshot once, then process every action in order."""
        commitment = portfolio_commitment(snapshot)
        report = PipelineReport(snapshot=snapshot, commitment=commitment, commit_set=False)
        report.commit_set = await self.set_commitment(commitment)

        for action in actions:
            report.outcomes.append(await self.process(action, snapshot, commitment))

        report.finished_at = datetime.now(timezone.utc)
        log.info(
            "pipeline_complete",
            approved=report.approved_count,
            total=report.total_proposed,
            summary=f"{report.approved_count}/{report.total_proposed} actions approved",
        )
        return report
