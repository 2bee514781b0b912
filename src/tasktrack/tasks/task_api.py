# src/tasktrack/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from ..core.errors import ValidationError
from ..core.ports import TextSuggestions
from ..users.directory import SessionRegistry, UserDirectory
from .lifecycle import TaskLifecycle, parse_deadline, utc_now
from .queries import TaskQueries, filter_tasks
from .task_models import (
    DashboardSummary,
    NotificationPage,
    Priority,
    Role,
    Status,
    Task,
    TaskDetail,
    TasksForUser,
    TaskUpdate,
    User,
)

logger = logging.getLogger(__name__)


class TaskTrackerAPI:
    """
    Request/response surface for front ends.

    Every call carries an explicit session token which is resolved to the
    acting user; there is no implicit "current user". Enum arguments may be
    given as strings and are parsed here.
    """

    def __init__(
        self,
        *,
        users: UserDirectory,
        sessions: SessionRegistry,
        lifecycle: TaskLifecycle,
        queries: TaskQueries,
        suggestions: TextSuggestions,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._lifecycle = lifecycle
        self._queries = queries
        self._suggestions = suggestions
        self._clock = clock

    # ---- auth ----

    def login(self, email: str, password: str) -> tuple[str, User]:
        user = self._users.authenticate(email, password)
        token = self._sessions.open(user)
        logger.info("Login user=%s", user.id)
        return token, user

    def logout(self, token: str) -> None:
        self._sessions.close(token)

    def me(self, token: str) -> User:
        return self._users.get(self._sessions.resolve(token))

    # ---- users ----

    def list_users(self, token: str) -> list[User]:
        self._sessions.resolve(token)
        return self._users.list_users()

    def register_user(self, token: str, *, name: str, email: str, role: Role | str, password: str) -> User:
        actor = self.me(token)
        if actor.role != Role.ADMIN:
            raise ValidationError("Only admins can register users")
        return self._users.register(name=name, email=email, role=role, password=password)

    # ---- tasks ----

    def create_task(
        self,
        token: str,
        *,
        title: str,
        description: str,
        priority: Priority | str,
        assigned_to: int,
        required_till: str | datetime,
    ) -> Task:
        return self._lifecycle.create(
            title=title,
            description=description,
            priority=Priority.parse(priority),
            assigned_to=int(assigned_to),
            required_till=parse_deadline(required_till),
            created_by=self._sessions.resolve(token),
        )

    def transition_task(self, token: str, task_id: int, new_status: Status | str, note: str) -> TaskUpdate:
        return self._lifecycle.transition(
            task_id=int(task_id),
            new_status=Status.parse(new_status),
            note=note,
            updated_by=self._sessions.resolve(token),
        )

    def request_update(self, token: str, task_id: int) -> None:
        self._lifecycle.request_update(task_id=int(task_id), requester_id=self._sessions.resolve(token))

    def tasks_for_user(
        self,
        token: str,
        *,
        search: str | None = None,
        status: Status | str | None = None,
        priority: Priority | str | None = None,
    ) -> TasksForUser:
        tasks = self._queries.tasks_for_user(self._sessions.resolve(token))
        if not (search or status or priority):
            return tasks
        wanted_status = Status.parse(status) if status else None
        wanted_priority = Priority.parse(priority) if priority else None
        return TasksForUser(
            my_tasks=filter_tasks(tasks.my_tasks, search=search, status=wanted_status, priority=wanted_priority),
            assigned_to_me=filter_tasks(
                tasks.assigned_to_me, search=search, status=wanted_status, priority=wanted_priority
            ),
        )

    def task_detail(self, token: str, task_id: int) -> TaskDetail:
        self._sessions.resolve(token)
        return self._queries.task_detail(int(task_id))

    def dashboard(self, token: str) -> DashboardSummary:
        return self._queries.dashboard_summary(self._sessions.resolve(token), now=self._clock())

    # ---- notifications ----

    def notifications(self, token: str, limit: int | None = None) -> NotificationPage:
        return self._queries.notifications_for_user(self._sessions.resolve(token), limit)

    def mark_read(self, token: str, notification_ids: Iterable[int]) -> int:
        return self._queries.mark_read(self._sessions.resolve(token), [int(i) for i in notification_ids])

    def mark_all_read(self, token: str) -> int:
        """Mark the unread notifications of the current page, like opening the bell."""
        user_id = self._sessions.resolve(token)
        page = self._queries.notifications_for_user(user_id)
        return self._queries.mark_read(user_id, [n.id for n in page.notifications if not n.is_read])

    # ---- suggestions (best-effort, never raise) ----

    def suggest_priority(self, title: str, description: str) -> Priority | None:
        return self._suggestions.suggest_priority(title, description)

    def generate_description(self, title: str) -> str | None:
        return self._suggestions.generate_description(title)

    def suggest_update_note(self, token: str, task_id: int, new_status: Status | str) -> str | None:
        task = self.task_detail(token, task_id).task
        return self._suggestions.suggest_update_note(task.title, task.status, Status.parse(new_status))
