# src/tasktrack/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# HTTP stack used by the suggestion client; request-level chatter at INFO/DEBUG.
NOISY_LIBRARIES = ("httpx", "httpcore", "openai")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable while the user types commands.

    tasktrack records pass, except the background poller which only shows
    WARNING+. Captured Python warnings and third-party records need ERROR+.
    """

    def __init__(self, app_prefix: str = "tasktrack.", quiet_prefixes: Iterable[str] = ()) -> None:
        super().__init__()
        self._app_prefix = app_prefix
        self._quiet_prefixes = tuple(quiet_prefixes)

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(self._app_prefix):
            if name.startswith(self._quiet_prefixes):
                return record.levelno >= logging.WARNING
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/tasktrack",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    noisy_libraries: Iterable[str] = NOISY_LIBRARIES,
) -> Path:
    """
    Configure root logging once, before the first record:
    - console (stderr): filtered for interactive use
    - file `<log_dir>/tasktrack.log`: everything at file_level

    noisy_libraries are capped at WARNING everywhere, file included.
    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "tasktrack.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter(quiet_prefixes=["tasktrack.tasks.notification_poller"]))
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    for name in noisy_libraries:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    return log_file
