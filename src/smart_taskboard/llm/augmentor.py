# src/smart_taskboard/llm/augmentor.py

"""
AI augmentation of tasks.

Wraps an unreliable text generator with:
- prompt construction (JSON-only answers with a fixed schema),
- reply sanitization (code fences, surrounding prose),
- a fallible decode step (AnalysisDecodeError),
- deterministic fallbacks, so no generator failure ever reaches the caller.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from typing import Any

import openai

from ..core.ports import TextGenerator
from ..tasks.task_models import AIAnalysis, Task, TaskPriority

logger = logging.getLogger(__name__)

CATEGORIES = ("frontend", "backend", "database", "devops", "design", "testing", "documentation")
MIN_HOURS = 1
MAX_HOURS = 40
MAX_TAGS = 4

EMPTY_INSIGHTS_MESSAGE = "No tasks yet! Create your first task to get AI insights."
ENCOURAGEMENT_MESSAGE = "Create more tasks to get better AI insights!"

ANALYSIS_PROMPT = """
Analyze this software development task and respond with ONLY valid JSON (no markdown, no code blocks, no extra text).

Title: "{title}"
Description: "{description}"

Return exactly this JSON structure:
{{
  "category": "frontend",
  "priority": "medium",
  "estimatedHours": 5,
  "reasoning": "brief explanation",
  "tags": ["tag1", "tag2"]
}}

Rules:
- category: must be one of: {categories}
- priority: must be one of: low, medium, high
- estimatedHours: number between {min_hours}-{max_hours}
- reasoning: brief explanation (1-2 sentences)
- tags: 2-4 relevant technical keywords

Return ONLY the JSON object.
""".strip()

INSIGHTS_PROMPT = """
Analyze these software project tasks and provide insights as a JSON array of strings.

Tasks:
{summary}

Return ONLY a JSON array like this (no markdown, no code blocks):
["insight about workload", "insight about priorities", "recommendation for team"]

Focus on:
- Overall workload and priorities
- Task distribution and balance
- Potential bottlenecks or risks
- Specific recommendations

Return ONLY the JSON array.
""".strip()

_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*")


class AnalysisDecodeError(ValueError):
    """The model reply could not be turned into the expected structure."""


def fallback_analysis() -> AIAnalysis:
    return AIAnalysis(
        category="backend",
        priority=TaskPriority.MEDIUM,
        estimated_hours=4,
        reasoning="AI analysis unavailable, using default values",
        tags=["task"],
    )


def fallback_insights(tasks: Sequence[Task]) -> list[str]:
    high = sum(1 for t in tasks if t.priority == TaskPriority.HIGH)
    return [
        f"You have {len(tasks)} tasks total",
        f"{high} high priority tasks need attention",
        ENCOURAGEMENT_MESSAGE,
    ]


def sanitize_reply(text: str) -> str:
    """Drop code-fence markers (bare or language-tagged) and surrounding whitespace."""
    return _FENCE_RE.sub("", text or "").strip()


def _narrow(text: str, opener: str, closer: str) -> str:
    # Models sometimes add a sentence before/after the JSON; keep the outermost span.
    first = text.find(opener)
    last = text.rfind(closer)
    if first != -1 and last > first:
        return text[first : last + 1]
    return text


def _loads(text: str, opener: str, closer: str) -> Any:
    cleaned = sanitize_reply(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        narrowed = _narrow(cleaned, opener, closer)
        if narrowed == cleaned:
            raise AnalysisDecodeError(f"reply is not valid JSON: {e.msg}") from e
    try:
        return json.loads(narrowed)
    except json.JSONDecodeError as e:
        raise AnalysisDecodeError(f"reply is not valid JSON: {e.msg}") from e


def decode_analysis(text: str) -> AIAnalysis:
    """Parse and validate a raw analysis reply. Raises AnalysisDecodeError."""
    data = _loads(text, "{", "}")
    if not isinstance(data, dict):
        raise AnalysisDecodeError("reply is not a JSON object")

    missing = [k for k in ("category", "priority", "estimatedHours") if not data.get(k)]
    if missing:
        raise AnalysisDecodeError(f"reply is missing required fields: {', '.join(missing)}")

    try:
        priority = TaskPriority(str(data["priority"]).strip().lower())
    except ValueError:
        raise AnalysisDecodeError(f"unknown priority: {data['priority']!r}") from None

    raw_hours = data["estimatedHours"]
    if isinstance(raw_hours, bool):
        raise AnalysisDecodeError("estimatedHours is not a number")
    try:
        hours = float(raw_hours)
    except (TypeError, ValueError):
        raise AnalysisDecodeError(f"estimatedHours is not a number: {raw_hours!r}") from None
    hours = min(float(MAX_HOURS), max(float(MIN_HOURS), hours))

    raw_tags = data.get("tags")
    tags = [str(t).strip() for t in raw_tags if str(t).strip()] if isinstance(raw_tags, list) else []

    return AIAnalysis(
        category=str(data["category"]).strip().lower(),
        priority=priority,
        estimated_hours=int(hours) if hours.is_integer() else hours,
        reasoning=str(data.get("reasoning") or "").strip(),
        tags=tags[:MAX_TAGS],
    )


def decode_insights(text: str) -> list[str]:
    """Parse a raw insights reply into a list of strings. Raises AnalysisDecodeError."""
    data = _loads(text, "[", "]")
    if not isinstance(data, list):
        raise AnalysisDecodeError("reply is not a JSON array")
    return [str(item) for item in data]


def build_analysis_prompt(title: str, description: str) -> str:
    return ANALYSIS_PROMPT.format(
        title=title,
        description=description,
        categories=", ".join(CATEGORIES),
        min_hours=MIN_HOURS,
        max_hours=MAX_HOURS,
    )


def summarize_task_line(task: Task) -> str:
    return f"{task.title} ({task.priority.value} priority, {task.status.value})"


def build_insights_prompt(tasks: Sequence[Task]) -> str:
    return INSIGHTS_PROMPT.format(summary="\n".join(summarize_task_line(t) for t in tasks))


class TaskAugmentor:
    """Turns task text into structured metadata and task lists into insights."""

    def __init__(self, generator: TextGenerator) -> None:
        self._generator = generator

    def _call(self, prompt: str, purpose: str) -> str | None:
        try:
            return self._generator.generate(prompt)
        except openai.RateLimitError as e:
            logger.warning("%s: rate limited: %s", purpose, e)
        except Exception:
            logger.exception("%s: text generation failed.", purpose)
        return None

    def analyze(self, title: str, description: str) -> AIAnalysis:
        """Never raises; returns fallback_analysis() when the model cannot be trusted."""
        raw = self._call(build_analysis_prompt(title, description), "Task analysis")
        if raw is None:
            return fallback_analysis()

        logger.debug("Raw analysis reply: %r", raw)
        try:
            analysis = decode_analysis(raw)
        except AnalysisDecodeError as e:
            logger.warning("Task analysis reply rejected (%s); using default values", e)
            return fallback_analysis()

        logger.info(
            "Task analyzed category=%s priority=%s hours=%s",
            analysis.category,
            analysis.priority.value,
            analysis.estimated_hours,
        )
        return analysis

    def summarize_insights(self, tasks: Sequence[Task]) -> list[str]:
        """Never raises; the empty list short-circuits without calling the model."""
        if not tasks:
            return [EMPTY_INSIGHTS_MESSAGE]

        raw = self._call(build_insights_prompt(tasks), "Insights")
        if raw is None:
            return fallback_insights(tasks)

        logger.debug("Raw insights reply: %r", raw)
        try:
            return decode_insights(raw)
        except AnalysisDecodeError as e:
            logger.warning("Insights reply rejected (%s); using local summary", e)
            return fallback_insights(tasks)
