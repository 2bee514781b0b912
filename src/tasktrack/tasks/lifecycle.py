# src/tasktrack/tasks/lifecycle.py

from __future__ import annotations

"""
Task lifecycle engine.

Owns the three mutating task operations: create, transition and
request_update. Each one validates everything first and only then writes
(task, update record, notification) under a single store transaction, so a
failure never leaves a half-applied change behind.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from enum import StrEnum

from ..core.errors import NotFoundError, ValidationError
from .notifications import NotificationEvent, emit, fan_out
from .task_models import Priority, Status, Task, TaskUpdate
from .task_store import EntityStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_deadline(raw: str | datetime) -> datetime:
    """
    Accept a datetime or an ISO-8601 string ("2024-08-15", "2024-08-15T17:00:00Z").

    Naive values are taken as UTC.
    """
    if isinstance(raw, datetime):
        value = raw
    else:
        try:
            value = datetime.fromisoformat(str(raw).strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(f"Invalid deadline {raw!r}; use YYYY-MM-DD or an ISO-8601 timestamp") from e
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class TransitionPolicy(StrEnum):
    PERMISSIVE = "permissive"  # any status -> any status, including no-ops
    STRICT = "strict"  # Completed / Cancelled are terminal

    def allows(self, old: Status, new: Status) -> bool:
        if self is TransitionPolicy.PERMISSIVE:
            return True
        if self is TransitionPolicy.STRICT:
            return not old.is_closed or old == new
        raise ValueError(f"unhandled transition policy: {self!r}")


class TaskLifecycle:
    def __init__(
        self,
        store: EntityStore,
        *,
        policy: TransitionPolicy = TransitionPolicy.PERMISSIVE,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._policy = policy
        self._clock = clock

    @property
    def policy(self) -> TransitionPolicy:
        return self._policy

    def _require_user(self, user_id: int, role: str) -> None:
        if self._store.get_user(user_id) is None:
            raise NotFoundError(f"{role} user {user_id} not found")

    def _require_task(self, task_id: int) -> Task:
        task = self._store.get_task(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    def create(
        self,
        *,
        title: str,
        description: str,
        priority: Priority,
        assigned_to: int,
        required_till: datetime | str,
        created_by: int,
    ) -> Task:
        """
        Create an Open task.

        If the creator assigns it to someone else, that person is notified.
        A naive deadline is taken as UTC.
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Task title is required")
        priority = Priority.parse(priority)
        required_till = parse_deadline(required_till)

        with self._store.transaction():
            self._require_user(created_by, "Creator")
            self._require_user(assigned_to, "Assignee")

            now = self._clock()
            task = Task(
                id=self._store.next_task_id(),
                title=title,
                description=(description or "").strip(),
                priority=priority,
                status=Status.OPEN,
                created_by=created_by,
                assigned_to=assigned_to,
                required_till=required_till,
                created_at=now,
                updated_at=now,
            )
            self._store.add_task(task)
            emit(self._store, fan_out(NotificationEvent.TASK_ASSIGNED, task, created_by), now=now)

        logger.info(
            "Task created id=%s by=%s assigned_to=%s priority=%s",
            task.id,
            created_by,
            assigned_to,
            priority.value,
        )
        return task

    def transition(self, *, task_id: int, new_status: Status, note: str, updated_by: int) -> TaskUpdate:
        """
        Move a task to new_status and record why.

        Appends exactly one TaskUpdate and notifies the other party of the task
        (assignee when the creator acts, creator otherwise), never the actor.
        """
        new_status = Status.parse(new_status)
        note = (note or "").strip()

        with self._store.transaction():
            task = self._require_task(task_id)
            if not note:
                raise ValidationError("An update note is required")
            self._require_user(updated_by, "Updating")
            if not self._policy.allows(task.status, new_status):
                raise ValidationError(
                    f"Task {task_id} is {task.status.value}; it cannot move to {new_status.value}"
                )

            now = self._clock()
            old_status = task.status
            task = self._store.replace_task(replace(task, status=new_status, updated_at=now))
            update = self._store.add_task_update(
                TaskUpdate(
                    id=self._store.next_update_id(),
                    task_id=task.id,
                    updated_by=updated_by,
                    old_status=old_status,
                    new_status=new_status,
                    note=note,
                    created_at=now,
                )
            )
            emit(
                self._store,
                fan_out(NotificationEvent.STATUS_CHANGED, task, updated_by, new_status=new_status),
                now=now,
            )

        logger.info(
            "Task %s: %s -> %s by=%s (update id=%s)",
            task_id,
            old_status.value,
            new_status.value,
            updated_by,
            update.id,
        )
        return update

    def request_update(self, *, task_id: int, requester_id: int) -> None:
        """Nudge the assignee. Records no TaskUpdate; only a notification."""
        with self._store.transaction():
            task = self._require_task(task_id)
            if requester_id == task.assigned_to:
                raise ValidationError("You can't request an update from yourself.")
            self._require_user(requester_id, "Requesting")

            now = self._clock()
            emit(self._store, fan_out(NotificationEvent.UPDATE_REQUESTED, task, requester_id), now=now)

        logger.info("Update requested task=%s by=%s", task_id, requester_id)
