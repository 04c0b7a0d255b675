# src/smart_taskboard/tasks/task_api.py

"""
Task operations used by connectors.

Transport-agnostic: inputs are plain dicts with the persisted (camelCase) keys,
outputs are Task objects, lists of strings, or None for "not found".
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.state import AppState
from .task_models import AIAnalysis, Task, TaskDraft, clean_update_fields

logger = logging.getLogger(__name__)


def merge_task_fields(draft: TaskDraft, analysis: AIAnalysis) -> dict[str, Any]:
    """
    Combine caller fields with the AI suggestion.

    Caller wins when its value is present and non-empty; the full analysis is always kept
    under "aiAnalysis", even for fields the caller overrode.
    """
    hours = draft.estimated_hours if draft.estimated_hours else analysis.estimated_hours
    return {
        "title": draft.title,
        "description": draft.description,
        "status": draft.status.value,
        "priority": (draft.priority or analysis.priority).value,
        "category": draft.category or analysis.category,
        "estimatedHours": hours,
        "tags": list(draft.tags) if draft.tags else list(analysis.tags),
        "aiAnalysis": analysis.to_dict(),
    }


def list_tasks(state: AppState) -> list[Task]:
    return state.task_store.load_all()


def get_task(state: AppState, task_id: str) -> Task | None:
    return state.task_store.get_by_id(str(task_id))


def create_task(state: AppState, payload: dict[str, Any]) -> Task:
    """
    Validate caller fields, ask the augmentor for an analysis, merge and persist.

    Raises ValueError on missing title/description or invalid values and
    StoreUnavailableError when the task file is unusable. AI failures never raise here.
    """
    draft = TaskDraft.from_payload(payload)

    analysis = state.augmentor.analyze(draft.title, draft.description)
    task = state.task_store.append(merge_task_fields(draft, analysis))

    logger.info(
        "Task created id=%s priority=%s category=%s",
        task.id,
        task.priority.value,
        task.category,
    )
    return task


def update_task(state: AppState, task_id: str, payload: dict[str, Any]) -> Task | None:
    """Partial update. Returns None when no task has this id."""
    fields = clean_update_fields(payload)
    task = state.task_store.update_by_id(str(task_id), fields)
    if task is None:
        logger.info("Task update: id=%s not found", task_id)
    return task


def list_insights(state: AppState) -> list[str]:
    return state.augmentor.summarize_insights(state.task_store.load_all())
