"""Structured logging for the agent pipeline, built on structlog's stdlib bridge."""

from __future__ import annotations

import logging
import sys

import structlog

LOG_FORMATS = ("json", "console")

# Third-party loggers that are chatty at INFO (one line per HTTP request / RPC poll)
NOISY_LOGGERS = ("httpx", "httpcore", "aiohttp.access", "asyncio")

RUN_CONTEXT_KEYS = ("run_id", "btc_address")


def _pre_chain() -> list[structlog.types.Processor]:
    # Applied to structlog events and to plain stdlib records from libraries alike
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    raise ValueError(f"Unknown log format {log_format!r} (expected one of {LOG_FORMATS})")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Every pipeline step emits one event, so the format decides whether a
    run reads as JSON lines for a collector or as a console trace.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: "json" for production, "console" for development.
    """
    renderer = _renderer(log_format)
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None, **initial_context) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, optionally pre-bound with context."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


def bind_run_context(run_id: str, btc_address: str) -> None:
    """Attach run identifiers to every log line emitted during a pipeline run."""
    structlog.contextvars.bind_contextvars(run_id=run_id, btc_address=btc_address)


def clear_run_context() -> None:
    structlog.contextvars.unbind_contextvars(*RUN_CONTEXT_KEYS)
