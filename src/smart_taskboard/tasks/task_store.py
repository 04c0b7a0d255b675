# src/smart_taskboard/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .task_models import Task, utc_now_iso

logger = logging.getLogger(__name__)

Collection = dict[str, Any]


class StoreUnavailableError(RuntimeError):
    """The task file could not be read, parsed or written."""


def _empty_collection() -> Collection:
    return {"tasks": [], "lastId": 0}


class TaskStore:
    """
    JSON file task store.

    The whole collection {"tasks": [...], "lastId": N} is the unit of persistence:
    every mutation reads the file, changes it in memory and rewrites it in full.

    Concurrency:
    - no locking; two mutations racing on the same file may lose one write
      (last write to complete wins)
    - a single write is atomic (temp file + os.replace), so readers never see a torn file
    """

    def __init__(
        self,
        path: str | Path = "tasks.json",
        *,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = Path(path)
        self._now = now or (lambda: datetime.now(UTC))
        logger.info("TaskStore ready path=%s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    # ---- low-level helpers ----

    def _initialize(self) -> Collection:
        data = _empty_collection()
        self._write_collection(data)
        logger.info("Initialized task file %s", self._path)
        return data

    def _read_collection(self) -> Collection:
        try:
            raw = self._path.read_text("utf-8")
        except FileNotFoundError:
            logger.info("Task file not found, creating %s", self._path)
            return self._initialize()
        except OSError as e:
            logger.exception("Failed to read task file %s", self._path)
            raise StoreUnavailableError(f"Cannot read task file {self._path}") from e
        except UnicodeDecodeError as e:
            logger.exception("Task file %s is not valid UTF-8", self._path)
            raise StoreUnavailableError(f"Task file {self._path} is corrupt") from e

        if not raw.strip():
            logger.info("Task file is empty, initializing %s", self._path)
            return self._initialize()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.exception("Task file %s is not valid JSON", self._path)
            raise StoreUnavailableError(f"Task file {self._path} is corrupt") from e

        if (
            not isinstance(data, dict)
            or not isinstance(data.get("tasks"), list)
            or not isinstance(data.get("lastId"), int)
            or isinstance(data.get("lastId"), bool)
        ):
            logger.error("Task file %s has an unexpected layout", self._path)
            raise StoreUnavailableError(f"Task file {self._path} has an unexpected layout")

        return data

    def _write_collection(self, data: Collection) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            logger.exception("Failed to write task file %s", self._path)
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise StoreUnavailableError(f"Cannot write task file {self._path}") from e

    @staticmethod
    def _next_id(data: Collection) -> int:
        highest = int(data["lastId"])
        for record in data["tasks"]:
            if not isinstance(record, dict):
                continue
            with contextlib.suppress(TypeError, ValueError):
                highest = max(highest, int(record.get("id")))
        return highest + 1

    # ---- public API ----

    def load_all(self) -> list[Task]:
        data = self._read_collection()
        return [Task.from_dict(r) for r in data["tasks"] if isinstance(r, dict)]

    def count_tasks(self) -> int:
        return sum(1 for r in self._read_collection()["tasks"] if isinstance(r, dict))

    def get_by_id(self, task_id: str) -> Task | None:
        for record in self._read_collection()["tasks"]:
            if isinstance(record, dict) and str(record.get("id")) == str(task_id):
                return Task.from_dict(record)
        return None

    def append(self, fields: dict[str, Any]) -> Task:
        """
        Assign the next id, stamp createdAt == updatedAt and persist the whole collection.

        `fields` uses the persisted (camelCase) keys; any id/timestamps in it are ignored.
        """
        data = self._read_collection()

        new_id = self._next_id(data)
        stamp = utc_now_iso(self._now())

        record = {k: v for k, v in fields.items() if k not in ("id", "createdAt", "updatedAt")}
        record = {"id": str(new_id), **record, "createdAt": stamp, "updatedAt": stamp}

        data["tasks"].append(record)
        data["lastId"] = new_id
        self._write_collection(data)

        logger.debug("Task appended id=%s title=%r", new_id, record.get("title"))
        return Task.from_dict(record)

    def update_by_id(self, task_id: str, fields: dict[str, Any]) -> Task | None:
        """
        Shallow-overwrite `fields` onto the matching record and refresh updatedAt.

        Returns None (and writes nothing) when no record has this id.
        """
        data = self._read_collection()

        for index, record in enumerate(data["tasks"]):
            if isinstance(record, dict) and str(record.get("id")) == str(task_id):
                break
        else:
            logger.debug("Task update skipped, id=%s not found", task_id)
            return None

        # A None value clears an optional field (e.g. estimatedHours) instead of storing null.
        updated = {**record, **fields, "id": record["id"], "updatedAt": utc_now_iso(self._now())}
        updated = {k: v for k, v in updated.items() if v is not None}
        data["tasks"][index] = updated
        self._write_collection(data)

        logger.debug("Task updated id=%s fields=%s", task_id, sorted(fields))
        return Task.from_dict(updated)
