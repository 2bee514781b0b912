# src/tasktrack/tasks/notifications.py

from __future__ import annotations

"""
Notification fan-out.

Every task event produces at most one notification:
- TASK_ASSIGNED    -> the assignee (unless they created the task themselves)
- STATUS_CHANGED   -> the "other side": assignee if the creator moved it,
                      creator otherwise (unless that is the actor)
- UPDATE_REQUESTED -> the assignee

fan_out() is pure; emit() appends the result to the store. Callers hold the
store transaction across both so the notification lands together with the
mutation that caused it.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from .task_models import Notification, Status, Task, User
from .task_store import EntityStore

logger = logging.getLogger(__name__)


class NotificationEvent(StrEnum):
    TASK_ASSIGNED = "task_assigned"
    STATUS_CHANGED = "status_changed"
    UPDATE_REQUESTED = "update_requested"


@dataclass(frozen=True, slots=True)
class NotificationDraft:
    user_id: int
    actor_id: int
    task_id: int | None
    message: str


def build_message(event: NotificationEvent, task: Task, new_status: Status | None = None) -> str:
    if event is NotificationEvent.TASK_ASSIGNED:
        return f'assigned you a new task: "{task.title}".'
    if event is NotificationEvent.STATUS_CHANGED:
        status = new_status if new_status is not None else task.status
        return f'updated the status of "{task.title}" to {status.value}.'
    if event is NotificationEvent.UPDATE_REQUESTED:
        return f'requested an update on task: "{task.title}".'
    raise ValueError(f"unhandled notification event: {event!r}")


def recipient_for(event: NotificationEvent, task: Task, actor_id: int) -> int:
    if event is NotificationEvent.TASK_ASSIGNED:
        return task.assigned_to
    if event is NotificationEvent.STATUS_CHANGED:
        return task.assigned_to if actor_id == task.created_by else task.created_by
    if event is NotificationEvent.UPDATE_REQUESTED:
        return task.assigned_to
    raise ValueError(f"unhandled notification event: {event!r}")


def fan_out(
    event: NotificationEvent,
    task: Task,
    actor_id: int,
    *,
    new_status: Status | None = None,
) -> NotificationDraft | None:
    """Compute the single notification for an event, or None if it would target the actor."""
    target = recipient_for(event, task, actor_id)
    if target == actor_id:
        return None
    return NotificationDraft(
        user_id=target,
        actor_id=actor_id,
        task_id=task.id,
        message=build_message(event, task, new_status),
    )


def emit(store: EntityStore, draft: NotificationDraft | None, *, now: datetime) -> Notification | None:
    if draft is None:
        return None
    with store.transaction():
        notification = Notification(
            id=store.next_notification_id(),
            user_id=draft.user_id,
            actor_id=draft.actor_id,
            task_id=draft.task_id,
            message=draft.message,
            created_at=now,
            is_read=False,
        )
        store.add_notification(notification)
    logger.info(
        "Notification id=%s -> user=%s actor=%s task=%s",
        notification.id,
        notification.user_id,
        notification.actor_id,
        notification.task_id,
    )
    return notification


def render_notification(notification: Notification, users: Mapping[int, User]) -> str:
    """Human-readable line: actor name + message."""
    actor = users.get(notification.actor_id)
    name = actor.name if actor is not None else "Someone"
    return f"{name} {notification.message}"
