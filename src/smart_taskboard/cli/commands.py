# src/smart_taskboard/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any, cast

from ..core.state import AppState
from ..tasks.task_api import create_task, get_task, list_insights, list_tasks, update_task
from ..tasks.task_models import Task, TaskStatus
from ..tasks.task_store import StoreUnavailableError

CommandEmitter = Callable[[str], None]
CommandHandler3 = Callable[[AppState, list[str], str], str]
CommandHandler4 = Callable[[AppState, list[str], str, CommandEmitter | None], str]
CommandHandler = CommandHandler3 | CommandHandler4

logger = logging.getLogger(__name__)

COLUMN_TITLES = {
    TaskStatus.TODO: "To Do",
    TaskStatus.DOING: "In Progress",
    TaskStatus.DONE: "Done",
}

# /add and /set accept these short option names.
_OPTION_KEYS = {
    "priority": "priority",
    "category": "category",
    "status": "status",
    "hours": "estimatedHours",
    "estimatedhours": "estimatedHours",
    "tags": "tags",
    "title": "title",
    "description": "description",
}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Invalid input and store failures are turned into a reply; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        head, _, rest = line[1:].partition(" ")
        name = head.strip().lower()
        if not name:
            return "Empty command. Use /help to list available commands."

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        args = rest.split()
        raw = rest.strip()

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 4

        try:
            if nparams >= 4:
                h4 = cast(CommandHandler4, handler)
                return h4(state, args, raw, emit)
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, raw)
        except ValueError as e:
            return f"Invalid input: {e}"
        except StoreUnavailableError as e:
            logger.error("Store unavailable while handling /%s: %s", name, e)
            return f"Task storage is unavailable: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def parse_options(tokens: list[str]) -> dict[str, Any]:
    """
    Turn ["priority=high", "tags=a,b", "hours=3"] into persisted-key fields.

    Values are passed through as strings/lists; validation happens in the task models.
    """
    out: dict[str, Any] = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if not sep:
            raise ValueError(f"expected key=value, got {token!r}")
        field_name = _OPTION_KEYS.get(key.strip().lower())
        if field_name is None:
            raise ValueError(f"unknown option {key!r}")
        value = value.strip()
        if field_name == "tags":
            out[field_name] = [t.strip() for t in value.split(",") if t.strip()]
        elif field_name == "estimatedHours":
            try:
                out[field_name] = float(value) if value else None
            except ValueError:
                raise ValueError("hours must be a number") from None
        else:
            out[field_name] = value
    return out


def _format_hours(hours: float | None) -> str:
    if hours is None:
        return "-"
    return f"{hours:g}h"


def format_task_line(task: Task) -> str:
    tags = f" [{', '.join(task.tags)}]" if task.tags else ""
    category = f" {task.category}" if task.category else ""
    return (
        f"#{task.id} [{task.status.value}] {task.title} "
        f"({task.priority.value}{category}, {_format_hours(task.estimated_hours)}){tags}"
    )


def format_task_detail(task: Task) -> str:
    lines = [
        f"Task #{task.id}: {task.title}",
        f"  {task.description}",
        f"  Status: {task.status.value}",
        f"  Priority: {task.priority.value}",
        f"  Category: {task.category or '-'}",
        f"  Estimate: {_format_hours(task.estimated_hours)}",
        f"  Tags: {', '.join(task.tags) if task.tags else '-'}",
        f"  Created: {task.created_at}",
        f"  Updated: {task.updated_at}",
    ]
    a = task.ai_analysis
    if a is not None:
        lines.append(
            f"  AI suggested: {a.category}, {a.priority.value} priority, "
            f"{_format_hours(a.estimated_hours)}, tags: {', '.join(a.tags) or '-'}"
        )
        if a.reasoning:
            lines.append(f"  AI reasoning: {a.reasoning}")
    return "\n".join(lines)


def cmd_help(state: AppState, args: list[str], raw: str) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str], raw: str) -> str:
    if state.offline:
        ai_mode = "offline (rule-based)"
    else:
        models = ", ".join(list(getattr(state.settings, "llm_models", []) or []))
        ai_mode = f"online (models: {models})"
    return (
        "Status:\n"
        f"  Task file: {getattr(state.settings, 'tasks_path', '?')}\n"
        f"  Tasks: {state.task_store.count_tasks()}\n"
        f"  AI: {ai_mode}"
    )


def cmd_tasks(state: AppState, args: list[str], raw: str) -> str:
    """
    /tasks         -> all tasks
    /tasks doing   -> only tasks with this status
    """
    tasks = list_tasks(state)
    if args:
        try:
            wanted = TaskStatus(args[0].lower())
        except ValueError:
            raise ValueError("status must be one of: todo, doing, done") from None
        tasks = [t for t in tasks if t.status == wanted]
    if not tasks:
        return "No tasks."
    return "\n".join(format_task_line(t) for t in tasks)


def cmd_board(state: AppState, args: list[str], raw: str) -> str:
    tasks = list_tasks(state)
    lines: list[str] = []
    for status, title in COLUMN_TITLES.items():
        column = [t for t in tasks if t.status == status]
        lines.append(f"== {title} ({len(column)}) ==")
        for t in column:
            lines.append(f"  #{t.id} {t.title} ({t.priority.value})")
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str], raw: str, emit: CommandEmitter | None = None) -> str:
    """
    /add <title> | <description> [| key=value ...]
    """
    parts = [p.strip() for p in raw.split("|")]
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return "Usage: /add <title> | <description> [| priority=high category=frontend hours=3 tags=a,b]"

    payload: dict[str, Any] = {"title": parts[0], "description": parts[1]}
    if len(parts) > 2:
        payload.update(parse_options(" ".join(parts[2:]).split()))

    if emit:
        emit("Analyzing task...")
    task = create_task(state, payload)
    return "Created:\n" + format_task_detail(task)


def cmd_move(state: AppState, args: list[str], raw: str) -> str:
    """
    /move <id> <todo|doing|done>
    """
    if len(args) != 2:
        return "Usage: /move <id> <todo|doing|done>"
    task = update_task(state, args[0], {"status": args[1]})
    if task is None:
        return f"Task not found: {args[0]}"
    return f"Moved #{task.id} to {COLUMN_TITLES[task.status]}."


def cmd_set(state: AppState, args: list[str], raw: str) -> str:
    """
    /set <id> key=value ...
    """
    if len(args) < 2:
        return "Usage: /set <id> priority=high category=backend hours=2 tags=a,b status=doing"
    task = update_task(state, args[0], parse_options(args[1:]))
    if task is None:
        return f"Task not found: {args[0]}"
    return "Updated:\n" + format_task_line(task)


def cmd_show(state: AppState, args: list[str], raw: str) -> str:
    if len(args) != 1:
        return "Usage: /show <id>"
    task = get_task(state, args[0])
    if task is None:
        return f"Task not found: {args[0]}"
    return format_task_detail(task)


def cmd_insights(state: AppState, args: list[str], raw: str, emit: CommandEmitter | None = None) -> str:
    if emit:
        emit("Generating insights...")
    insights = list_insights(state)
    return "Insights:\n" + "\n".join(f"  - {line}" for line in insights)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task file, task count and AI mode.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [todo|doing|done].", aliases=["ls"])
registry.register("board", cmd_board, help_text="Show tasks grouped by status column.")
registry.register(
    "add",
    cmd_add,
    help_text="Create a task: /add <title> | <description> [| priority=high tags=a,b hours=3].",
)
registry.register("move", cmd_move, help_text="Change status: /move <id> <todo|doing|done>.")
registry.register("set", cmd_set, help_text="Update fields: /set <id> key=value ...")
registry.register("show", cmd_show, help_text="Show one task with its AI analysis: /show <id>.")
registry.register("insights", cmd_insights, help_text="AI insights about the current tasks.")
