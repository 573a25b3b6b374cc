import logging
import os
from datetime import datetime
from pathlib import Path

import pytest

from tkbridge import _logs


def test_remove_old_logs(monkeypatch, caplog, mocker):
    long_time_ago = datetime(year=1987, month=6, day=5, hour=4, minute=3, second=2)

    with monkeypatch.context() as monkey:
        mock = mocker.Mock()
        mock.now.return_value = long_time_ago
        monkey.setattr("tkbridge._logs.datetime", mock)

        _logs._open_log_file().close()
        _logs._open_log_file().close()
        _logs._open_log_file().close()

    caplog.set_level(logging.INFO)
    _logs._remove_old_logs()

    text = caplog.text
    assert f"logs{os.sep}1987-06-05T04-03-02.txt is more than 7 days old, removing" in text
    assert f"logs{os.sep}1987-06-05T04-03-02_1.txt is more than 7 days old, removing" in text
    assert f"logs{os.sep}1987-06-05T04-03-02_2.txt is more than 7 days old, removing" in text


def test_new_logs_are_kept(caplog):
    _logs._open_log_file().close()
    caplog.set_level(logging.INFO)
    _logs._remove_old_logs()
    assert "removing" not in caplog.text


def test_log_path_printed(mocker):
    mock = mocker.patch("tkbridge._logs.print")
    mock.side_effect = ZeroDivisionError  # to make it stop when it prints
    with pytest.raises(ZeroDivisionError):
        _logs.setup()

    mock.assert_called_once()
    [printed] = mock.call_args[0]
    assert printed.startswith("log file: ")
    assert os.path.isfile(printed[len("log file: ") :])


def test_verbose_logger_filter():
    log_filter = _logs._StderrFilter(["tkbridge.events"])

    def record(name, level):
        return logging.LogRecord(name, level, __file__, 1, "message", None, None)

    assert log_filter.filter(record("tkbridge.events", logging.DEBUG))
    assert not log_filter.filter(record("tkbridge.images", logging.DEBUG))
    assert log_filter.filter(record("tkbridge.images", logging.WARNING))


def test_unrelated_files_are_left_alone(caplog):
    log_dir = Path(_logs.dirs.user_log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    (log_dir / "notes.txt").write_text("hello")

    caplog.set_level(logging.INFO)
    _logs._remove_old_logs()
    assert (log_dir / "notes.txt").exists()
    assert "not a tkbridge log file" in caplog.text
    (log_dir / "notes.txt").unlink()


def test_same_second_gets_numbered_names(monkeypatch, mocker):
    mock = mocker.Mock()
    mock.now.return_value = datetime(year=2026, month=10, day=19, hour=12, minute=0, second=0)
    monkeypatch.setattr("tkbridge._logs.datetime", mock)

    names = []
    for _ in range(3):
        with _logs._open_log_file() as file:
            names.append(Path(file.name).name)
    assert names == [
        "2026-10-19T12-00-00.txt",
        "2026-10-19T12-00-00_1.txt",
        "2026-10-19T12-00-00_2.txt",
    ]
    for name in names:
        (Path(_logs.dirs.user_log_dir) / name).unlink()
