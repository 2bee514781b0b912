# src/tasktrack/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.errors import ValidationError


def _norm(raw: str) -> str:
    return "".join(ch for ch in raw.lower() if ch.isalnum())


class _ParsableEnum(StrEnum):
    @classmethod
    def parse(cls, raw: Any) -> Any:
        """
        Accept a member, its value or its name in any case/separator style
        ("In Progress", "in_progress", "inprogress", "IN_PROGRESS").
        """
        if isinstance(raw, cls):
            return raw
        key = _norm(str(raw or ""))
        if key:
            for member in cls:
                if key in (_norm(member.value), _norm(member.name)):
                    return member
        allowed = ", ".join(m.value for m in cls)
        raise ValidationError(f"Unknown {cls.__name__.lower()} {raw!r}; expected one of: {allowed}")


class Role(_ParsableEnum):
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class Priority(_ParsableEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class Status(_ParsableEnum):
    """
    Task lifecycle status.

    Completed and Cancelled are "closed": they do not count as overdue, and
    under the strict transition policy a task cannot leave them.
    """

    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    BLOCKED = "Blocked"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @property
    def is_closed(self) -> bool:
        return self in (Status.COMPLETED, Status.CANCELLED)


def _iso(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts is not None else None


@dataclass(frozen=True, slots=True)
class User:
    id: int
    name: str
    email: str
    role: Role
    avatar_url: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "avatarUrl": self.avatar_url,
        }


@dataclass(frozen=True, slots=True)
class Task:
    id: int
    title: str
    description: str
    priority: Priority
    status: Status
    created_by: int
    assigned_to: int
    required_till: datetime
    created_at: datetime
    updated_at: datetime

    def is_overdue(self, now: datetime) -> bool:
        return self.required_till < now and not self.status.is_closed

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "status": self.status.value,
            "created_by": self.created_by,
            "assigned_to": self.assigned_to,
            "required_till": _iso(self.required_till),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True, slots=True)
class TaskUpdate:
    id: int
    task_id: int
    updated_by: int
    old_status: Status | None
    new_status: Status
    note: str
    created_at: datetime

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "updated_by": self.updated_by,
            "old_status": self.old_status.value if self.old_status is not None else None,
            "new_status": self.new_status.value,
            "note": self.note,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True, slots=True)
class Notification:
    id: int
    user_id: int
    actor_id: int
    task_id: int | None
    message: str
    created_at: datetime
    is_read: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "actor_id": self.actor_id,
            "task_id": self.task_id,
            "message": self.message,
            "is_read": self.is_read,
            "created_at": _iso(self.created_at),
        }


# ---- query results ----


@dataclass(frozen=True, slots=True)
class TasksForUser:
    my_tasks: list[Task]
    assigned_to_me: list[Task]

    def as_dict(self) -> dict[str, Any]:
        return {
            "myTasks": [t.as_dict() for t in self.my_tasks],
            "assignedToMe": [t.as_dict() for t in self.assigned_to_me],
        }


@dataclass(frozen=True, slots=True)
class TaskDetail:
    task: Task
    updates: list[TaskUpdate]

    def as_dict(self) -> dict[str, Any]:
        return {
            "task": self.task.as_dict(),
            "updates": [u.as_dict() for u in self.updates],
        }


@dataclass(frozen=True, slots=True)
class NotificationPage:
    unread_count: int
    notifications: list[Notification]

    def as_dict(self) -> dict[str, Any]:
        return {
            "unreadCount": self.unread_count,
            "notifications": [n.as_dict() for n in self.notifications],
        }


@dataclass(frozen=True, slots=True)
class DashboardSummary:
    created: int
    assigned: int
    open_assigned: int
    overdue_assigned: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "created": self.created,
            "assigned": self.assigned,
            "openAssigned": self.open_assigned,
            "overdueAssigned": self.overdue_assigned,
        }
