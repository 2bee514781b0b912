# src/tasktrack/tasks/task_store.py

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import replace

from .task_models import Notification, Task, TaskUpdate, User

logger = logging.getLogger(__name__)


class EntityStore:
    """
    In-memory entity store for users, tasks, task updates and notifications.

    Layout:
    - one dict per collection (id -> record), insertion ordered
    - auxiliary indexes maintained on every write:
      tasks by creator / assignee, updates by task, notifications by recipient,
      users by lower-cased email

    Records are frozen dataclasses; a "mutation" swaps in a replaced copy, so
    anything handed to a caller is a stable snapshot.

    Thread-safety:
    - every method runs under one re-entrant lock
    - multi-step operations hold it across the whole sequence via transaction()
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()

        self._users: dict[int, User] = {}
        self._tasks: dict[int, Task] = {}
        self._updates: dict[int, TaskUpdate] = {}
        self._notifications: dict[int, Notification] = {}

        self._users_by_email: dict[str, int] = {}
        self._tasks_by_creator: dict[int, list[int]] = defaultdict(list)
        self._tasks_by_assignee: dict[int, list[int]] = defaultdict(list)
        self._updates_by_task: dict[int, list[int]] = defaultdict(list)
        self._notifications_by_user: dict[int, list[int]] = defaultdict(list)

    @contextmanager
    def transaction(self) -> Iterator[EntityStore]:
        """Hold the store lock for a validate-then-mutate sequence."""
        with self._lock:
            yield self

    # ---- low-level helpers ----

    @staticmethod
    def _next_id(existing: Iterable[int]) -> int:
        return max(existing, default=0) + 1

    def next_user_id(self) -> int:
        with self._lock:
            return self._next_id(self._users)

    def next_task_id(self) -> int:
        with self._lock:
            return self._next_id(self._tasks)

    def next_update_id(self) -> int:
        with self._lock:
            return self._next_id(self._updates)

    def next_notification_id(self) -> int:
        with self._lock:
            return self._next_id(self._notifications)

    # ---- users ----

    def add_user(self, user: User) -> User:
        with self._lock:
            if user.id in self._users:
                raise KeyError(f"user id {user.id} already stored")
            self._users[user.id] = user
            self._users_by_email[user.email.lower()] = user.id
            logger.debug("User stored id=%s email=%s role=%s", user.id, user.email, user.role.value)
            return user

    def get_user(self, user_id: int) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def find_user_by_email(self, email: str) -> User | None:
        with self._lock:
            user_id = self._users_by_email.get((email or "").strip().lower())
            return self._users.get(user_id) if user_id is not None else None

    def list_users(self) -> list[User]:
        with self._lock:
            return list(self._users.values())

    # ---- tasks ----

    def add_task(self, task: Task) -> Task:
        with self._lock:
            if task.id in self._tasks:
                raise KeyError(f"task id {task.id} already stored")
            self._tasks[task.id] = task
            self._tasks_by_creator[task.created_by].append(task.id)
            self._tasks_by_assignee[task.assigned_to].append(task.id)
            return task

    def replace_task(self, task: Task) -> Task:
        """
        Swap in a new version of an existing task.

        Creator and assignee are fixed after creation, so indexes stay valid.
        """
        with self._lock:
            current = self._tasks.get(task.id)
            if current is None:
                raise KeyError(f"task id {task.id} not stored")
            if (current.created_by, current.assigned_to) != (task.created_by, task.assigned_to):
                raise ValueError("task participants cannot change")
            self._tasks[task.id] = task
            return task

    def get_task(self, task_id: int) -> Task | None:
        with self._lock:
            return self._tasks.get(task_id)

    def all_tasks(self) -> list[Task]:
        with self._lock:
            return list(self._tasks.values())

    def tasks_created_by(self, user_id: int) -> list[Task]:
        with self._lock:
            return [self._tasks[i] for i in self._tasks_by_creator.get(user_id, ())]

    def tasks_assigned_to(self, user_id: int) -> list[Task]:
        with self._lock:
            return [self._tasks[i] for i in self._tasks_by_assignee.get(user_id, ())]

    # ---- task updates ----

    def add_task_update(self, update: TaskUpdate) -> TaskUpdate:
        with self._lock:
            if update.id in self._updates:
                raise KeyError(f"task update id {update.id} already stored")
            self._updates[update.id] = update
            self._updates_by_task[update.task_id].append(update.id)
            return update

    def updates_for_task(self, task_id: int) -> list[TaskUpdate]:
        with self._lock:
            return [self._updates[i] for i in self._updates_by_task.get(task_id, ())]

    # ---- notifications ----

    def add_notification(self, notification: Notification) -> Notification:
        with self._lock:
            if notification.id in self._notifications:
                raise KeyError(f"notification id {notification.id} already stored")
            self._notifications[notification.id] = notification
            self._notifications_by_user[notification.user_id].append(notification.id)
            return notification

    def get_notification(self, notification_id: int) -> Notification | None:
        with self._lock:
            return self._notifications.get(notification_id)

    def notifications_for(self, user_id: int) -> list[Notification]:
        with self._lock:
            return [self._notifications[i] for i in self._notifications_by_user.get(user_id, ())]

    def mark_notification_read(self, notification_id: int) -> bool:
        """Flip is_read. Returns True only if the notification was unread before."""
        with self._lock:
            current = self._notifications.get(notification_id)
            if current is None or current.is_read:
                return False
            self._notifications[notification_id] = replace(current, is_read=True)
            return True

    # ---- counts ----

    def counts(self) -> dict[str, int]:
        with self._lock:
            return {
                "users": len(self._users),
                "tasks": len(self._tasks),
                "updates": len(self._updates),
                "notifications": len(self._notifications),
            }
