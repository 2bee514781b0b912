# src/tasktrack/tasks/queries.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from ..core.errors import NotFoundError
from .task_models import (
    DashboardSummary,
    Notification,
    NotificationPage,
    Priority,
    Status,
    Task,
    TaskDetail,
    TasksForUser,
)
from .task_store import EntityStore

logger = logging.getLogger(__name__)


def filter_tasks(
    tasks: Iterable[Task],
    *,
    search: str | None = None,
    status: Status | None = None,
    priority: Priority | None = None,
) -> list[Task]:
    """Dashboard filters: case-insensitive title search plus exact status/priority."""
    needle = (search or "").strip().lower()
    out: list[Task] = []
    for t in tasks:
        if needle and needle not in t.title.lower():
            continue
        if status is not None and t.status != status:
            continue
        if priority is not None and t.priority != priority:
            continue
        out.append(t)
    return out


class TaskQueries:
    """
    Read side of the store.

    Nothing here mutates except mark_read, which only flips is_read flags.
    Safe to call at any frequency (the console polls notifications).
    """

    def __init__(self, store: EntityStore, *, default_page_size: int = 10) -> None:
        self._store = store
        self._default_page_size = default_page_size

    def tasks_for_user(self, user_id: int) -> TasksForUser:
        with self._store.transaction():
            return TasksForUser(
                my_tasks=self._store.tasks_created_by(user_id),
                assigned_to_me=self._store.tasks_assigned_to(user_id),
            )

    def task_detail(self, task_id: int) -> TaskDetail:
        with self._store.transaction():
            task = self._store.get_task(task_id)
            if task is None:
                raise NotFoundError(f"Task {task_id} not found")
            updates = self._store.updates_for_task(task_id)
        updates.sort(key=lambda u: (u.created_at, u.id), reverse=True)
        return TaskDetail(task=task, updates=updates)

    def notifications_for_user(self, user_id: int, limit: int | None = None) -> NotificationPage:
        """
        Newest-first page of a user's notifications (read and unread alike).

        unread_count covers everything the user has, not just the page.
        """
        if limit is None:
            limit = self._default_page_size
        limit = max(0, int(limit))

        items = self._store.notifications_for(user_id)
        unread = sum(1 for n in items if not n.is_read)
        items.sort(key=lambda n: (n.created_at, n.id), reverse=True)
        logger.debug("Notifications user=%s unread=%s total=%s", user_id, unread, len(items))
        return NotificationPage(unread_count=unread, notifications=items[:limit])

    def unread_notifications(self, user_id: int) -> list[Notification]:
        """Every unread notification of the user, oldest first. Not paged."""
        items = [n for n in self._store.notifications_for(user_id) if not n.is_read]
        items.sort(key=lambda n: (n.created_at, n.id))
        return items

    def mark_read(self, user_id: int, notification_ids: Iterable[int]) -> int:
        """
        Mark the user's notifications as read.

        Ids that are unknown or belong to someone else are ignored. Returns how
        many notifications flipped from unread to read (0 on a repeat call).
        """
        wanted = set(notification_ids)
        if not wanted:
            return 0

        marked = 0
        with self._store.transaction():
            for n in self._store.notifications_for(user_id):
                if n.id in wanted and self._store.mark_notification_read(n.id):
                    marked += 1

        if marked:
            logger.info("Marked %s notification(s) read for user=%s", marked, user_id)
        return marked

    def dashboard_summary(self, user_id: int, *, now: datetime) -> DashboardSummary:
        tasks = self.tasks_for_user(user_id)
        assigned = tasks.assigned_to_me
        return DashboardSummary(
            created=len(tasks.my_tasks),
            assigned=len(assigned),
            open_assigned=sum(1 for t in assigned if not t.status.is_closed),
            overdue_assigned=sum(1 for t in assigned if t.is_overdue(now)),
        )
