"""Structured logging."""

from agent_core.logging.setup import bind_run_context, clear_run_context, get_logger, setup_logging

__all__ = ["bind_run_context", "clear_run_context", "get_logger", "setup_logging"]
