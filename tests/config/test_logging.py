"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from iterctl.config.logging import configure_logging


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("iterctl").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_default_is_info(self) -> None:
        configure_logging()
        assert logging.getLogger("iterctl").level == logging.INFO

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        structlog.get_logger("iterctl.test").warning("json test", answer=42)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "iterctl.test"
        assert "timestamp" in parsed

    def test_stdlib_records_carry_bound_project(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        with structlog.contextvars.bound_contextvars(project="Web"):
            logging.getLogger("iterctl.services.sync").info("Syncing iterations for %s", "Web")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Syncing iterations for Web"
        assert parsed["project"] == "Web"
        assert parsed["level"] == "info"

    def test_urllib3_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("urllib3.connectionpool").debug("Starting new HTTPS connection")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        configure_logging(log_json=False)
        configure_logging(log_json=True)
        ours = [h for h in logging.getLogger().handlers if h.get_name() == "iterctl"]
        assert len(ours) == 1

    def test_secrets_are_redacted(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        structlog.get_logger("iterctl.test").warning("auth", personal_access_token="hunter2")
        err = capfd.readouterr().err
        assert "hunter2" not in err
        assert json.loads(err.strip())["personal_access_token"] == "***"
