"""
Concurrent bulk "mark as done".

``BulkStatusUpdater.mark_done`` fans out one unit of work per task id to a
thread pool and joins them all before returning.  Each unit loads the task,
checks ownership, sets the status to ``done`` and persists it.  Every
failure is turned into an outcome for that id only; siblings keep running
and the call as a whole succeeds with partial results.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any

from .errors import InvalidInput, StoreError
from .models import TaskStatus
from .stores import TaskStore
from .tasks import MAX_TASK_ID

logger = logging.getLogger(__name__)

MARKED_DONE = "Task marked as done successfully"
TASK_NOT_FOUND = "Task not found"
RETRIEVE_FAILED = "Failed to retrieve task"
UPDATE_FAILED = "Failed to update task"


@dataclass(frozen=True)
class BulkUpdateOutcome:
    """Result for one requested id: either ``message`` or ``error`` is set."""

    id: int
    message: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id}
        if self.message is not None:
            result["message"] = self.message
        if self.error is not None:
            result["error"] = self.error
        return result


def parse_task_ids(data: Any) -> list[int]:
    """
    Validate a bulk request body: a JSON array of unsigned integers.

    Duplicates are kept; each one gets its own outcome.

    Raises:
        InvalidInput: If the body is not a list of non-negative integers.
    """
    if not isinstance(data, list):
        raise InvalidInput("Invalid task ID(s)")
    for value in data:
        # bool is an int subclass and must not be read as 0/1
        if (
            not isinstance(value, int)
            or isinstance(value, bool)
            or not 0 <= value <= MAX_TASK_ID
        ):
            raise InvalidInput("Invalid task ID(s)")
    return list(data)


class BulkStatusUpdater:
    """
    Marks many tasks done in parallel and reports a per-id outcome.

    Args:
        store: Task store shared by all worker threads.  It must be safe
            for concurrent use.
        max_workers: Upper bound on threads for one call.
    """

    def __init__(self, store: TaskStore, max_workers: int = 32) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.store = store
        self.max_workers = max_workers

    def mark_done(self, task_ids: list[int], user_id: int) -> list[BulkUpdateOutcome]:
        """
        Mark every owned task in *task_ids* as done.

        Returns one outcome per input id, in completion order.  No global
        transaction is used: some ids may succeed while others fail.
        """
        if not task_ids:
            return []

        outcomes: list[BulkUpdateOutcome] = []
        workers = min(len(task_ids), self.max_workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bulk-done") as pool:
            futures = {
                pool.submit(self._mark_one, task_id, user_id): task_id
                for task_id in task_ids
            }
            for future in as_completed(futures):
                outcomes.append(future.result())

        logger.info(
            "Bulk mark-done for user_id=%s: %d requested, %d updated",
            user_id,
            len(task_ids),
            sum(1 for outcome in outcomes if outcome.error is None),
        )
        return outcomes

    def _mark_one(self, task_id: int, user_id: int) -> BulkUpdateOutcome:
        # Runs on a worker thread and never raises.  StoreError has already
        # been logged by the store.
        try:
            task = self.store.get_by_id(task_id)
        except StoreError:
            logger.debug("Bulk update could not load task_id=%s", task_id)
            return BulkUpdateOutcome(id=task_id, error=RETRIEVE_FAILED)
        except Exception:
            logger.exception("Failed to load task_id=%s during bulk update", task_id)
            return BulkUpdateOutcome(id=task_id, error=RETRIEVE_FAILED)

        if task is None or task.user_id != user_id:
            return BulkUpdateOutcome(id=task_id, error=TASK_NOT_FOUND)

        task.status = TaskStatus.DONE.value
        try:
            updated = self.store.update(task)
        except StoreError:
            logger.debug("Bulk update could not persist task_id=%s", task_id)
            return BulkUpdateOutcome(id=task_id, error=UPDATE_FAILED)
        except Exception:
            logger.exception("Failed to update task_id=%s during bulk update", task_id)
            return BulkUpdateOutcome(id=task_id, error=UPDATE_FAILED)

        if updated is None:
            return BulkUpdateOutcome(id=task_id, error=TASK_NOT_FOUND)
        return BulkUpdateOutcome(id=task_id, message=MARKED_DONE)
