# src/smart_taskboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..llm.augmentor import TaskAugmentor
from .ports import TaskRepo


@dataclass
class AppState:
    # Settings are kept on the state so commands can show paths/models without re-reading env.
    settings: Any

    task_store: TaskRepo
    augmentor: TaskAugmentor

    # True when the augmentor runs on the offline generator.
    offline: bool = False
