"""
Single-task operations with ownership enforcement.

``TaskService.load_owned`` is the ownership guard used before every read
or mutation: a task owned by someone else is reported exactly like a task
that does not exist, so task ids never leak across users.
"""

from __future__ import annotations

import logging
from typing import Any

from .errors import InvalidInput, NotFound
from .models import Task, TaskStatus
from .stores import TaskStore

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
# Largest id a signed 64-bit INTEGER column can hold
MAX_TASK_ID = 2**63 - 1
TASK_NOT_FOUND = "Task not found"
INVALID_STATUS = f"Invalid status. Must be one of: {TaskStatus.values()}"


def parse_task_id(raw: str) -> int:
    """
    Parse a task id taken from the URL path.

    Only unsigned decimal integers are accepted; ``"-1"``, ``"1.5"`` or
    ``"abc"`` raise ``InvalidInput`` before any store access.
    """
    if (
        not raw.isdecimal()
        or not raw.isascii()
        or len(raw) > len(str(MAX_TASK_ID))
        or int(raw) > MAX_TASK_ID
    ):
        raise InvalidInput("Invalid task ID")
    return int(raw)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _require_json_object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object")
    return data


def validate_task_data(data: dict[str, Any], *, creating: bool) -> None:
    """
    Validate a create or update payload.

    On create the title must be non-blank and the status must be one of
    ``TaskStatus``.  On update only fields that are present and non-blank
    are checked, matching the merge semantics of ``TaskService.update``.

    Raises:
        InvalidInput: Describing the first problem found.
    """
    title = data.get("title")
    if creating and _is_blank(title):
        raise InvalidInput("Invalid title. It must not be empty")
    if title is not None:
        if not isinstance(title, str):
            raise InvalidInput("Title must be a string")
        if len(title) > TITLE_MAX_LENGTH:
            raise InvalidInput(
                f"Title exceeds the {TITLE_MAX_LENGTH}-character column limit"
            )

    description = data.get("description")
    if description is not None and not isinstance(description, str):
        raise InvalidInput("Description must be a string")

    status = data.get("status")
    if creating or not _is_blank(status):
        if status not in TaskStatus.values():
            raise InvalidInput(INVALID_STATUS)


class TaskService:
    """Create, read, list, update and delete tasks for their owner."""

    def __init__(self, store: TaskStore) -> None:
        self.store = store

    def load_owned(self, task_id: int, user_id: int) -> Task:
        """
        Fetch a task and confirm *user_id* owns it.

        Raises:
            NotFound: If the task does not exist or belongs to another
                user.  The two cases are indistinguishable to the caller.
        """
        task = self.store.get_by_id(task_id)
        if task is None or task.user_id != user_id:
            raise NotFound(TASK_NOT_FOUND)
        return task

    def create(self, user_id: int, data: Any) -> Task:
        data = _require_json_object(data)
        validate_task_data(data, creating=True)

        task = Task(
            user_id=user_id,
            title=data["title"],
            description=data.get("description") or "",
            status=data["status"],
        )
        task = self.store.insert(task)
        logger.info("Created task_id=%s for user_id=%s", task.id, user_id)
        return task

    def get(self, task_id: int, user_id: int) -> Task:
        return self.load_owned(task_id, user_id)

    def list_for_owner(self, user_id: int, status: str | None = None) -> list[Task]:
        """Return the owner's tasks ordered by id, optionally filtered by status."""
        if status and status not in TaskStatus.values():
            raise InvalidInput(INVALID_STATUS)
        return self.store.list_by_owner(user_id, status=status)

    def update(self, task_id: int, user_id: int, data: Any) -> Task:
        """
        Merge the supplied fields into an owned task.

        Fields that are omitted, null or blank leave the stored value
        unchanged, so a body of ``{"status": "done"}`` only touches the
        status.

        Raises:
            NotFound: Task missing, not owned, or deleted concurrently.
            InvalidInput: A supplied field is malformed.
        """
        task = self.load_owned(task_id, user_id)
        data = _require_json_object(data)
        validate_task_data(data, creating=False)

        for field in ("title", "description", "status"):
            value = data.get(field)
            if not _is_blank(value):
                setattr(task, field, value)

        updated = self.store.update(task)
        if updated is None:
            raise NotFound(TASK_NOT_FOUND)
        return updated

    def delete(self, task_id: int, user_id: int) -> None:
        """
        Delete an owned task.

        A row that disappears between the ownership check and the delete is
        reported as ``NotFound``.
        """
        self.load_owned(task_id, user_id)
        if not self.store.delete(task_id, user_id):
            raise NotFound(TASK_NOT_FOUND)
        logger.info("Deleted task_id=%s for user_id=%s", task_id, user_id)
