from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from ipacheck.config.settings import LOG_FORMAT_JSON, LOG_FORMAT_TEXT, LoggingSettings
from ipacheck.infrastructure.logging import (
    attach_run_context,
    configure_logging,
    get_logger,
    log_check_event,
    log_event,
)


def _settings(fmt: str, level: int = logging.INFO, file_path: str | None = None) -> LoggingSettings:
    return LoggingSettings(
        level=level,
        format=fmt,
        file_path=file_path,
        max_bytes=1024,
        backup_count=1,
    )


def test_text_logging_renders_structured_fields(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_TEXT))
    capfd.readouterr()

    logger = get_logger("ipacheck.test.text")
    logger.info("structured event", component="startup", status="ok")

    output = capfd.readouterr().err.strip()
    assert "structured event" in output
    assert "component=startup" in output
    assert "status=ok" in output


def test_json_logging_emits_valid_payload(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_JSON))
    capfd.readouterr()

    logger = get_logger("ipacheck.test.json")
    logger.info("json event", action="configure")

    payload = json.loads(capfd.readouterr().err)
    assert payload["event"] == "json event"
    assert payload["action"] == "configure"
    assert payload["logger"] == "ipacheck.test.json"


def test_attach_run_context_binds_fields(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_JSON))
    capfd.readouterr()

    bound = attach_run_context(
        get_logger("ipacheck.test.context"), run_id="run-123", mode="nagios", unused=None
    )
    bound.info("context event")

    payload = json.loads(capfd.readouterr().err)
    assert payload["run_id"] == "run-123"
    assert payload["mode"] == "nagios"
    assert "unused" not in payload


def test_attach_run_context_generates_identifier(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_JSON))
    capfd.readouterr()

    attach_run_context(get_logger("ipacheck.test.run")).info("generated")

    payload = json.loads(capfd.readouterr().err)
    assert len(payload["run_id"]) == 12


def test_log_event_and_check_event(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_JSON, level=logging.DEBUG))
    capfd.readouterr()

    logger = get_logger("ipacheck.test.events")
    log_event(logger, "audit.start", servers=["ipa01.example.com"], skipped=None)
    log_check_event(logger, "query_failed", check="users", server="ipa02.example.com")

    first, second = (json.loads(line) for line in capfd.readouterr().err.splitlines())
    assert first["event_name"] == "audit.start"
    assert first["servers"] == ["ipa01.example.com"]
    assert "skipped" not in first
    assert second["event_name"] == "check.query_failed"
    assert second["check"] == "users"
    assert second["level"] == "debug"


def test_level_filters_debug_events(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_TEXT, level=logging.WARNING))
    capfd.readouterr()

    log_check_event(get_logger("ipacheck.test.quiet"), "query_done", check="users")

    assert capfd.readouterr().err == ""


def test_file_handler_receives_events(tmp_path: Path) -> None:
    log_file = tmp_path / "ipacheck.log"
    configure_logging(_settings(LOG_FORMAT_JSON, file_path=str(log_file)))

    get_logger("ipacheck.test.file").warning("to file", server="ipa01")
    for handler in logging.getLogger().handlers:
        handler.flush()

    payload = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert payload["event"] == "to file"
    assert payload["server"] == "ipa01"


def test_secret_fields_are_redacted(capfd: pytest.CaptureFixture[str]) -> None:
    configure_logging(_settings(LOG_FORMAT_JSON))
    capfd.readouterr()

    get_logger("ipacheck.test.secret").info("bind", password="hunter2", binddn="cn=admin")

    payload = json.loads(capfd.readouterr().err)
    assert payload["password"] == "***"
    assert payload["binddn"] == "cn=admin"
