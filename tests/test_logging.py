"""Tests for structured logging setup."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from agent_core.logging import bind_run_context, clear_run_context, get_logger, setup_logging


class TestSetupLogging:
    def test_json_format(self, capsys):
        setup_logging(level="INFO", log_format="json")
        logger = get_logger("test_json")
        logger.info("proof submitted", proof_id=7)

        line = json.loads(capsys.readouterr().err.strip())
        assert line["event"] == "proof submitted"
        assert line["proof_id"] == 7
        assert line["level"] == "info"
        assert "timestamp" in line

    def test_console_format(self, capsys):
        setup_logging(level="INFO", log_format="console")
        get_logger("test_console").info("hello console", action="rebalance")

        err = capsys.readouterr().err
        assert "hello console" in err
        assert "rebalance" in err

    def test_log_level_filtering(self, capsys):
        setup_logging(level="WARNING", log_format="json")
        logger = get_logger("test_level")
        logger.info("should be hidden")
        logger.warning("should appear")

        err = capsys.readouterr().err
        assert "should be hidden" not in err
        assert "should appear" in err

    def test_get_logger_with_context(self, capsys):
        setup_logging(level="INFO", log_format="json")
        get_logger("test_ctx", step="approve_action").info("context test")

        line = json.loads(capsys.readouterr().err.strip())
        assert line["step"] == "approve_action"


class TestRunContext:
    def test_run_ids_on_every_line(self, capsys):
        setup_logging(level="INFO", log_format="json")
        structlog.contextvars.clear_contextvars()
        bind_run_context("run42", "bc1qexample")

        logger = get_logger("test_run")
        logger.info("first")
        logger.info("second")

        lines = [json.loads(x) for x in capsys.readouterr().err.strip().splitlines()]
        assert [x["run_id"] for x in lines] == ["run42", "run42"]
        assert lines[0]["btc_address"] == "bc1qexample"
        clear_run_context()

    def test_clear_run_context(self, capsys):
        setup_logging(level="INFO", log_format="json")
        bind_run_context("run42", "bc1qexample")
        clear_run_context()
        get_logger("test_clear").info("after")

        line = json.loads(capsys.readouterr().err.strip())
        assert "run_id" not in line
        assert "btc_address" not in line


class TestFormats:
    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError, match="log format"):
            setup_logging(log_format="xml")

    def test_stdlib_records_rendered_as_json(self, capsys):
        setup_logging(level="INFO", log_format="json")
        logging.getLogger("starknet_py.test").warning("rpc slow")

        line = json.loads(capsys.readouterr().err.strip())
        assert line["event"] == "rpc slow"
        assert line["level"] == "warning"
        assert line["logger"] == "starknet_py.test"

    def test_noisy_loggers_quieted(self):
        setup_logging(level="DEBUG", log_format="json")
        assert logging.getLogger("httpx").level == logging.WARNING
