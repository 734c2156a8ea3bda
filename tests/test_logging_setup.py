from __future__ import annotations

import logging
from pathlib import Path

import pytest

from source_export.config import Config
from source_export.logging_setup import TRACE_LEVEL, configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_package_logger():
    pkg = logging.getLogger("source_export")
    handlers, level = list(pkg.handlers), pkg.level
    yield
    for h in list(pkg.handlers):
        pkg.removeHandler(h)
        h.close()
    for h in handlers:
        pkg.addHandler(h)
    pkg.setLevel(level)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    monkeypatch.delenv("SOURCE_EXPORT_LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    return monkeypatch


def test_default_level_is_info(clean_env: pytest.MonkeyPatch) -> None:
    assert configure_logging() == logging.INFO
    assert logging.getLogger("source_export").level == logging.INFO


def test_argument_beats_environment(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SOURCE_EXPORT_LOG_LEVEL", "ERROR")
    assert configure_logging("debug") == logging.DEBUG


def test_environment_precedence(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("LOG_LEVEL", "WARNING")
    assert configure_logging() == logging.WARNING
    clean_env.setenv("SOURCE_EXPORT_LOG_LEVEL", "ERROR")
    assert configure_logging() == logging.ERROR


def test_trace_and_unknown_levels(clean_env: pytest.MonkeyPatch) -> None:
    assert configure_logging("trace") == TRACE_LEVEL
    assert logging.getLevelName(TRACE_LEVEL) == "TRACE"
    # неизвестное имя уровня -> INFO
    assert configure_logging("chatty") == logging.INFO


def test_level_from_config(clean_env: pytest.MonkeyPatch) -> None:
    cfg = Config()
    cfg.log_level = "WARNING"
    assert configure_logging(cfg.log_level) == logging.WARNING


def test_repeated_configuration_does_not_duplicate_handlers(clean_env: pytest.MonkeyPatch) -> None:
    configure_logging()
    configure_logging()
    assert len(logging.getLogger("source_export").handlers) == 1


def test_optional_log_file(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "export.log"
    configure_logging("DEBUG", log_file=log_file)
    assert len(logging.getLogger("source_export").handlers) == 2

    get_logger("source_export.tests").debug("hello from test")
    for h in logging.getLogger("source_export").handlers:
        h.flush()
    assert "hello from test" in log_file.read_text(encoding="utf-8")
