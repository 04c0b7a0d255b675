# tests/test_offline.py

from __future__ import annotations

from smart_taskboard.llm.augmentor import TaskAugmentor, build_analysis_prompt, decode_analysis
from smart_taskboard.llm.offline import OfflineTextGenerator
from smart_taskboard.tasks.task_models import Task, TaskPriority, TaskStatus


def _task(title: str, priority: str, status: str) -> Task:
    return Task(
        id="1",
        title=title,
        description="d",
        status=TaskStatus(status),
        priority=TaskPriority(priority),
        category="",
        tags=[],
        created_at="",
        updated_at="",
    )


def test_offline_analysis_is_valid_and_keyword_based() -> None:
    gen = OfflineTextGenerator()

    reply = gen.generate(build_analysis_prompt("Fix login page crash", "The React form is broken on Safari"))
    analysis = decode_analysis(reply)

    assert analysis.category == "frontend"
    assert analysis.priority == TaskPriority.HIGH
    assert 1 <= analysis.estimated_hours <= 40
    assert 2 <= len(analysis.tags) <= 4
    assert "auth" in analysis.tags


def test_offline_analysis_defaults_to_backend() -> None:
    analysis = TaskAugmentor(OfflineTextGenerator()).analyze("Rate limiter", "Limit requests per key")

    assert analysis.category == "backend"
    assert analysis.priority == TaskPriority.MEDIUM
    assert analysis.reasoning.startswith("Offline estimate")


def test_offline_insights_count_tasks() -> None:
    tasks = [
        _task("a", "high", "todo"),
        _task("b", "low", "doing"),
        _task("c", "high", "done"),
    ]

    insights = TaskAugmentor(OfflineTextGenerator()).summarize_insights(tasks)

    assert insights[0] == "3 tasks tracked: 1 to do, 1 in progress, 1 done."
    assert insights[1].startswith("2 high priority tasks")
    assert len(insights) == 3


def test_offline_unknown_prompt() -> None:
    assert OfflineTextGenerator().generate("hello") == "{}"
