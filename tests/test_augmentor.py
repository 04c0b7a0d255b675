# tests/test_augmentor.py

from __future__ import annotations

import pytest

from smart_taskboard.llm.augmentor import (
    EMPTY_INSIGHTS_MESSAGE,
    AnalysisDecodeError,
    TaskAugmentor,
    decode_analysis,
    fallback_analysis,
    sanitize_reply,
)
from smart_taskboard.tasks.task_models import Task, TaskPriority, TaskStatus

from .conftest import ANALYSIS_REPLY
from .fakes import FakeTextGenerator

FALLBACK = {
    "category": "backend",
    "priority": "medium",
    "estimatedHours": 4,
    "reasoning": "AI analysis unavailable, using default values",
    "tags": ["task"],
}


def _task(task_id: str, priority: str = "medium", status: str = "todo") -> Task:
    return Task(
        id=task_id,
        title=f"Task {task_id}",
        description="d",
        status=TaskStatus(status),
        priority=TaskPriority(priority),
        category="",
        tags=[],
        created_at="2024-05-01T12:00:00.000Z",
        updated_at="2024-05-01T12:00:00.000Z",
    )


def test_analyze_parses_plain_json() -> None:
    gen = FakeTextGenerator(ANALYSIS_REPLY)

    analysis = TaskAugmentor(gen).analyze("Login form", "Build the login form")

    assert analysis.to_dict() == {
        "category": "frontend",
        "priority": "low",
        "estimatedHours": 6,
        "reasoning": "UI work with a form.",
        "tags": ["x", "y"],
    }
    assert len(gen.prompts) == 1
    assert 'Title: "Login form"' in gen.prompts[0]
    assert "documentation" in gen.prompts[0]


@pytest.mark.parametrize(
    "wrapped",
    [
        f"```json\n{ANALYSIS_REPLY}\n```",
        f"```\n{ANALYSIS_REPLY}\n```",
        f"  ```JSON {ANALYSIS_REPLY}```  \n",
        f"Here is the analysis:\n```json\n{ANALYSIS_REPLY}\n```\nHope it helps!",
    ],
)
def test_analyze_fenced_reply_matches_unwrapped(wrapped: str) -> None:
    plain = TaskAugmentor(FakeTextGenerator(ANALYSIS_REPLY)).analyze("t", "d")
    fenced = TaskAugmentor(FakeTextGenerator(wrapped)).analyze("t", "d")

    assert fenced == plain


@pytest.mark.parametrize(
    "reply",
    [
        "I cannot help with that.",
        "",
        '{"category": "frontend", "estimatedHours": 3}',
        '{"category": "frontend", "priority": "low"}',
        '{"priority": "low", "estimatedHours": 3}',
        '{"category": "frontend", "priority": "urgent", "estimatedHours": 3}',
        '{"category": "frontend", "priority": "low", "estimatedHours": "soon"}',
        '{"category": "frontend", "priority": "low", "estimatedHours": 0}',
        '["frontend", "low", 3]',
    ],
)
def test_analyze_bad_reply_returns_exact_fallback(reply: str) -> None:
    analysis = TaskAugmentor(FakeTextGenerator(reply)).analyze("t", "d")

    assert analysis.to_dict() == FALLBACK


@pytest.mark.parametrize(
    "error",
    [RuntimeError("All LLM models failed."), TimeoutError("slow"), ConnectionError("down")],
)
def test_analyze_generator_failure_returns_fallback(error: Exception) -> None:
    analysis = TaskAugmentor(FakeTextGenerator(error=error)).analyze("t", "d")

    assert analysis == fallback_analysis()


def test_fallback_is_a_fresh_copy() -> None:
    first = fallback_analysis()
    first.tags.append("mutated")
    assert fallback_analysis().tags == ["task"]


def test_decode_analysis_normalizes_values() -> None:
    analysis = decode_analysis(
        '{"category": " DevOps ", "priority": "HIGH", "estimatedHours": 120,'
        ' "tags": ["a", "", "b", "c", "d", "e"]}'
    )

    assert analysis.category == "devops"
    assert analysis.priority == TaskPriority.HIGH
    assert analysis.estimated_hours == 40
    assert analysis.reasoning == ""
    assert analysis.tags == ["a", "b", "c", "d"]


def test_decode_analysis_accepts_numeric_string_hours() -> None:
    analysis = decode_analysis('{"category": "testing", "priority": "low", "estimatedHours": "2.5"}')
    assert analysis.estimated_hours == 2.5
    assert analysis.tags == []


def test_decode_analysis_raises_specific_error() -> None:
    with pytest.raises(AnalysisDecodeError):
        decode_analysis("nope")


def test_sanitize_reply_strips_fences() -> None:
    assert sanitize_reply("```json\n[1, 2]\n```") == "[1, 2]"
    assert sanitize_reply("  plain  ") == "plain"


def test_insights_empty_list_makes_no_call() -> None:
    gen = FakeTextGenerator('["should not be used"]')

    assert TaskAugmentor(gen).summarize_insights([]) == [EMPTY_INSIGHTS_MESSAGE]
    assert gen.prompts == []


def test_insights_parses_fenced_array() -> None:
    gen = FakeTextGenerator('```json\n["Too much in progress", "Close task 2 first"]\n```')
    tasks = [_task("1", "high", "doing"), _task("2", "low", "done")]

    insights = TaskAugmentor(gen).summarize_insights(tasks)

    assert insights == ["Too much in progress", "Close task 2 first"]
    assert "Task 1 (high priority, doing)" in gen.prompts[0]
    assert "Task 2 (low priority, done)" in gen.prompts[0]


@pytest.mark.parametrize("reply", ['{"insights": ["a"]}', "not json", '"just a string"'])
def test_insights_bad_reply_uses_local_summary(reply: str) -> None:
    tasks = [_task("1", "high"), _task("2", "high"), _task("3", "low")]

    insights = TaskAugmentor(FakeTextGenerator(reply)).summarize_insights(tasks)

    assert insights == [
        "You have 3 tasks total",
        "2 high priority tasks need attention",
        "Create more tasks to get better AI insights!",
    ]


def test_insights_generator_failure_uses_local_summary() -> None:
    tasks = [_task("1", "medium")]

    insights = TaskAugmentor(FakeTextGenerator(error=RuntimeError("boom"))).summarize_insights(tasks)

    assert insights[0] == "You have 1 tasks total"
    assert insights[1] == "0 high priority tasks need attention"
    assert len(insights) == 3
