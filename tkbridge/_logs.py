"""Log files and stderr output for the tkbridge demo program.

Each run writes a new log file into ``dirs.user_log_dir``. Files are named
after the time the program started, e.g. ``2026-10-19T12-34-56.txt``, with
``_1``, ``_2`` and so on appended when several runs start within the same
second. Files older than the ``max_log_age_days`` setting are deleted on
startup.
"""
from __future__ import annotations

import itertools
import logging
import os
import sys
import tkinter
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator, TextIO

import tkbridge
from tkbridge import dirs, settings

log = logging.getLogger(__name__)
TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"


def _candidate_names(timestamp: str) -> Iterator[str]:
    yield f"{timestamp}.txt"
    for number in itertools.count(1):
        yield f"{timestamp}_{number}.txt"


def _parse_start_time(path: Path) -> datetime | None:
    try:
        return datetime.strptime(path.stem.split("_")[0], TIMESTAMP_FORMAT)
    except ValueError:
        return None


def _remove_old_logs() -> None:
    max_age = timedelta(days=settings.get().max_log_age_days)
    now = datetime.now()

    for path in Path(dirs.user_log_dir).glob("*.txt"):
        started = _parse_start_time(path)
        if started is None:
            log.info(f"not a tkbridge log file, leaving it alone: {path}")
        elif now - started > max_age:
            log.info(f"{path} is more than {max_age.days} days old, removing")
            path.unlink()


def _open_log_file() -> TextIO:
    log_dir = Path(dirs.user_log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    for name in _candidate_names(datetime.now().strftime(TIMESTAMP_FORMAT)):
        try:
            return (log_dir / name).open("x", encoding="utf-8")
        except FileExistsError:
            pass
    raise RuntimeError("ran out of log file names")  # unreachable, the names never run out


class _StderrFilter(logging.Filter):
    """Pass warnings and errors, and everything from the given loggers and their children."""

    def __init__(self, verbose_loggers: list[str]) -> None:
        super().__init__()
        self._verbose = [logging.Filter(name) for name in verbose_loggers]

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= logging.WARNING:
            return True
        return any(f.filter(record) for f in self._verbose)


def setup(all_loggers_verbose: bool = False, verbose_loggers: list[str] | None = None) -> None:
    """Send log messages to a new log file and to stderr.

    The log file gets everything. Stderr gets warnings and errors, plus
    messages of *verbose_loggers* (e.g. ``["tkbridge.events"]``), or
    everything if *all_loggers_verbose* is true.
    """
    log_file = _open_log_file()
    print(f"log file: {log_file.name}")

    file_handler = logging.StreamHandler(log_file)
    file_handler.setFormatter(
        logging.Formatter("[%(asctime)s] %(name)s %(levelname)s: %(message)s")
    )
    handlers: list[logging.Handler] = [file_handler]

    # sys.stderr is None under pythonw
    if sys.stderr is not None:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter("%(name)s %(levelname)s: %(message)s"))
        if not all_loggers_verbose:
            stderr_handler.addFilter(_StderrFilter(verbose_loggers or []))
        handlers.append(stderr_handler)

    # root logger passes everything, handlers decide what to show
    logging.basicConfig(level=logging.DEBUG, handlers=handlers)

    log.debug(f"tkbridge {tkbridge.__version__} from {Path(tkbridge.__file__).parent}")
    log.debug(f"Python {sys.version.split()[0]} ({sys.executable}), platform {sys.platform!r}")
    log.debug(f"PID {os.getpid()}, Tk {tkinter.TkVersion}")

    try:
        _remove_old_logs()
    except OSError:
        log.exception(f"cannot remove old log files from {dirs.user_log_dir}")
