"""Import all table modules so Base.metadata knows about them."""

from agent_core.db.tables.runs import ActionOutcomeRow, PipelineRunRow

__all__ = ["ActionOutcomeRow", "PipelineRunRow"]
