# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from smart_taskboard.core.state import AppState
from smart_taskboard.llm.augmentor import TaskAugmentor
from smart_taskboard.tasks.task_store import TaskStore

from .fakes import FakeTextGenerator

ANALYSIS_REPLY = (
    '{"category": "frontend", "priority": "low", "estimatedHours": 6,'
    ' "reasoning": "UI work with a form.", "tags": ["x", "y"]}'
)


class StepClock:
    """Clock that advances one second per call, so updatedAt strictly increases."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    A SimpleNamespace keeps unit tests isolated from the real environment.
    """
    return SimpleNamespace(
        app_name="Test Board",
        log_level="DEBUG",
        data_dir=tmp_path,
        tasks_path=tmp_path / "tasks.json",
        llm_api_key=None,
        llm_base_url="http://localhost:1/v1",
        llm_models=["fake-model"],
        llm_offline=False,
        llm_connect_timeout_seconds=1.0,
        llm_read_timeout_seconds=1.0,
    )


@pytest.fixture()
def generator() -> FakeTextGenerator:
    return FakeTextGenerator(ANALYSIS_REPLY)


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_path, now=StepClock())


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, generator: FakeTextGenerator) -> AppState:
    """AppState over a real JSON store in tmp_path and a scripted generator."""
    return AppState(
        settings=settings,
        task_store=store,
        augmentor=TaskAugmentor(generator),
    )
