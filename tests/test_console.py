# tests/test_console.py

from __future__ import annotations

import logging
from pathlib import Path

from smart_taskboard.connectors.console_connector import run_console_loop
from smart_taskboard.logging_setup import _ConsoleNoiseFilter, setup_logging


def test_console_loop_runs_commands_until_exit(state, monkeypatch, capsys) -> None:
    lines = iter(["", "/add A | first task", "hello", "/exit", "/tasks"])
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(lines))

    run_console_loop(state)

    out = capsys.readouterr().out
    assert "Analyzing task..." in out
    assert "Task #1: A" in out
    assert "Commands start with '/'" in out
    assert state.task_store.count_tasks() == 1


def test_console_loop_stops_on_eof(state, monkeypatch) -> None:
    def _eof(_prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", _eof)

    run_console_loop(state)


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)
        logging.getLogger("smart_taskboard.test").debug("debug line for the file")
        for h in root.handlers:
            h.flush()

        assert "debug line for the file" in (tmp_path / "logs" / "taskboard.log").read_text("utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_levels_per_logger() -> None:
    f = _ConsoleNoiseFilter()

    assert f.filter(_record("smart_taskboard.tasks.task_store", logging.DEBUG))
    assert not f.filter(_record("smart_taskboard.llm.client", logging.DEBUG))
    assert f.filter(_record("smart_taskboard.llm.client", logging.INFO))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert not f.filter(_record("httpx", logging.WARNING))
    assert f.filter(_record("openai", logging.ERROR))
