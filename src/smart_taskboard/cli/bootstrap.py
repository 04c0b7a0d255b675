# src/smart_taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (task store, text generator, augmentor).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import TextGenerator
from ..core.state import AppState
from ..llm.augmentor import TaskAugmentor
from ..llm.client import OpenAICompatibleTextGenerator, friendly_llm_error_message
from ..llm.offline import OfflineTextGenerator
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)


def _build_generator(settings) -> tuple[TextGenerator, bool]:
    if getattr(settings, "llm_offline", False):
        logger.info("AI offline mode forced by settings.")
        return OfflineTextGenerator(), True
    try:
        return OpenAICompatibleTextGenerator(settings), False
    except RuntimeError as e:
        # Fallback for demos / local runs without an API key.
        logger.warning("%s Using offline analysis.", friendly_llm_error_message(e))
        return OfflineTextGenerator(), True


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    generator, offline = _build_generator(settings)

    return AppState(
        settings=settings,
        task_store=TaskStore(settings.tasks_path),
        augmentor=TaskAugmentor(generator),
        offline=offline,
    )
