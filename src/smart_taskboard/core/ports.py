# src/smart_taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the AI transport and storage swappable and makes testing easier.
"""

from typing import Any, Protocol


class TextGenerator(Protocol):
    """
    One-shot text generation (the AI transport).

    No structure is guaranteed in the returned text. Implementations may raise on
    network/auth/timeout problems; callers must treat any exception as a failed call.
    """

    def generate(self, prompt: str) -> str: ...


class TaskRepo(Protocol):
    def load_all(self) -> list[Any]: ...
    def count_tasks(self) -> int: ...
    def get_by_id(self, task_id: str) -> Any | None: ...
    def append(self, fields: dict[str, Any]) -> Any: ...
    def update_by_id(self, task_id: str, fields: dict[str, Any]) -> Any | None: ...
