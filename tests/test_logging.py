import json
import logging

import pytest
import structlog

from pkgshelf.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)


def test_production_renders_json(capsys, monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    setup_logging("INFO")
    structlog.stdlib.get_logger("test").info("Updated catalog", category="games")

    line = capsys.readouterr().out.strip().splitlines()[-1]
    parsed = json.loads(line)
    assert parsed["event"] == "Updated catalog"
    assert parsed["category"] == "games"
    assert parsed["level"] == "info"
    assert "timestamp" in parsed


def test_development_is_human_readable(capsys, monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "development")
    setup_logging("INFO")
    structlog.stdlib.get_logger("test").info("Scan finished", recorded=2)

    out = capsys.readouterr().out
    assert "Scan finished" in out
    assert not out.strip().startswith("{")


def test_level_filters(capsys, monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    setup_logging("WARNING")
    log = structlog.stdlib.get_logger("test")
    log.info("quiet")
    log.warning("loud")
    out = capsys.readouterr().out
    assert "quiet" not in out
    assert "loud" in out
