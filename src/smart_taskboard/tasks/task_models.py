# src/smart_taskboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """Board column of a task."""

    TODO = "todo"
    DOING = "doing"
    DONE = "done"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskStatus:
        try:
            return cls(str(raw))
        except ValueError:
            return cls.TODO


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskPriority:
        try:
            return cls(str(raw))
        except ValueError:
            return cls.MEDIUM


# Keys a caller may overwrite through an update. Identity and audit fields are not in here.
MUTABLE_FIELDS = frozenset(
    {"title", "description", "status", "priority", "category", "estimatedHours", "tags"}
)


def utc_now_iso(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    dt = now if now is not None else datetime.now(UTC)
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(slots=True)
class AIAnalysis:
    category: str
    priority: TaskPriority
    estimated_hours: float
    reasoning: str
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "priority": self.priority.value,
            "estimatedHours": self.estimated_hours,
            "reasoning": self.reasoning,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AIAnalysis:
        return cls(
            category=str(data.get("category") or ""),
            priority=TaskPriority.from_raw(data.get("priority")),
            estimated_hours=_as_hours(data.get("estimatedHours")) or 0,
            reasoning=str(data.get("reasoning") or ""),
            tags=[str(t) for t in data.get("tags") or []],
        )


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    category: str
    tags: list[str]
    created_at: str
    updated_at: str
    estimated_hours: float | None = None
    ai_analysis: AIAnalysis | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "category": self.category,
            "tags": list(self.tags),
        }
        if self.estimated_hours is not None:
            out["estimatedHours"] = self.estimated_hours
        if self.ai_analysis is not None:
            out["aiAnalysis"] = self.ai_analysis.to_dict()
        out["createdAt"] = self.created_at
        out["updatedAt"] = self.updated_at
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        raw_analysis = data.get("aiAnalysis")
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            status=TaskStatus.from_raw(data.get("status")),
            priority=TaskPriority.from_raw(data.get("priority")),
            category=str(data.get("category") or ""),
            tags=[str(t) for t in data.get("tags") or []],
            created_at=str(data.get("createdAt") or ""),
            updated_at=str(data.get("updatedAt") or ""),
            estimated_hours=_as_hours(data.get("estimatedHours")),
            ai_analysis=AIAnalysis.from_dict(raw_analysis) if isinstance(raw_analysis, dict) else None,
        )


@dataclass(slots=True)
class TaskDraft:
    """
    Caller-supplied fields for a new task.

    Optional fields are tri-state:
    - None          -> absent, the AI suggestion is used
    - "" / []       -> present but empty, also falls back to the AI suggestion
    - anything else -> caller value wins
    """

    title: str
    description: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority | None = None
    category: str | None = None
    estimated_hours: float | None = None
    tags: list[str] | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> TaskDraft:
        title = payload.get("title")
        description = payload.get("description")
        if not isinstance(title, str) or not title.strip():
            raise ValueError("title is required")
        if not isinstance(description, str) or not description.strip():
            raise ValueError("description is required")

        status = _parse_enum(TaskStatus, payload.get("status"), "status") or TaskStatus.TODO
        priority = _parse_enum(TaskPriority, payload.get("priority"), "priority")

        category = payload.get("category")
        if category is not None and not isinstance(category, str):
            raise ValueError("category must be a string")

        hours = _parse_hours(payload.get("estimatedHours"))
        tags = _parse_tags(payload.get("tags"))

        return cls(
            title=title.strip(),
            description=description.strip(),
            status=status,
            priority=priority,
            category=category.strip() if category is not None else None,
            estimated_hours=hours,
            tags=tags,
        )


def clean_update_fields(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Validate a partial update and return the wire-keyed fields to overwrite.

    Identity/audit keys (id, createdAt, updatedAt, aiAnalysis) and unknown keys are dropped.
    """
    out: dict[str, Any] = {}
    for key, value in payload.items():
        if key not in MUTABLE_FIELDS:
            continue
        if key in ("title", "description"):
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{key} must be a non-empty string")
            out[key] = value.strip()
        elif key == "status":
            out[key] = _require_enum(TaskStatus, value, key).value
        elif key == "priority":
            out[key] = _require_enum(TaskPriority, value, key).value
        elif key == "category":
            if not isinstance(value, str):
                raise ValueError("category must be a string")
            out[key] = value.strip()
        elif key == "estimatedHours":
            out[key] = _parse_hours(value)
        elif key == "tags":
            out[key] = _parse_tags(value) or []
    return out


def _require_enum(enum_cls: Any, raw: Any, name: str) -> Any:
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"{name} must be one of: {allowed}") from None


def _parse_enum(enum_cls: Any, raw: Any, name: str) -> Any:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    return _require_enum(enum_cls, raw, name)


def _as_hours(raw: Any) -> float | None:
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value <= 0:
        return None
    return int(value) if value.is_integer() else value


def _parse_hours(raw: Any) -> float | None:
    # 0 and "" mean "not provided".
    if raw is None or raw == 0 or raw == "":
        return None
    hours = _as_hours(raw)
    if hours is None:
        raise ValueError("estimatedHours must be a positive number")
    return hours


def _parse_tags(raw: Any) -> list[str] | None:
    if raw is None:
        return None
    if not isinstance(raw, list) or not all(isinstance(t, str) for t in raw):
        raise ValueError("tags must be a list of strings")
    return [t.strip() for t in raw if t.strip()]
