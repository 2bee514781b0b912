# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tasktrack.logging_setup import NOISY_LIBRARIES, _ConsoleNoiseFilter, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    lib_levels = {name: logging.getLogger(name).level for name in NOISY_LIBRARIES}
    yield
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    for name, lib_level in lib_levels.items():
        logging.getLogger(name).setLevel(lib_level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter() -> None:
    f = _ConsoleNoiseFilter(quiet_prefixes=["tasktrack.tasks.notification_poller"])

    assert f.filter(_record("tasktrack.tasks.lifecycle", logging.DEBUG))
    assert not f.filter(_record("tasktrack.tasks.notification_poller", logging.INFO))
    assert f.filter(_record("tasktrack.tasks.notification_poller", logging.WARNING))
    assert not f.filter(_record("httpx", logging.WARNING))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert f.filter(_record("openai", logging.ERROR))


def test_setup_logging_writes_file_and_quiets_libraries(tmp_path: Path, restore_logging) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.CRITICAL)

    logging.getLogger("tasktrack.test").info("hello file")
    logging.getLogger("httpx").info("request noise")
    for h in logging.getLogger().handlers:
        h.flush()

    assert log_file == tmp_path / "logs" / "tasktrack.log"
    text = log_file.read_text(encoding="utf-8")
    assert "INFO tasktrack.test: hello file" in text
    assert "request noise" not in text
    assert all(logging.getLogger(name).level == logging.WARNING for name in NOISY_LIBRARIES)
