# src/tasktrack/core/seed.py

"""
Demo dataset loaded at startup (TASKTRACK_SEED_DEMO_DATA=true).

Records are written straight into the store, bypassing the lifecycle engine,
so the historical statuses, updates and notifications appear exactly as listed.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ..tasks.task_models import Notification, Priority, Role, Status, Task, TaskUpdate
from ..tasks.task_store import EntityStore
from ..users.directory import UserDirectory

logger = logging.getLogger(__name__)

DEMO_USERS = [
    # name, email, role, password, avatar seed
    ("Admin User", "admin@example.com", Role.ADMIN, "admin123", "admin"),
    ("Manager Mike", "manager@example.com", Role.MANAGER, "manager123", "manager"),
    ("Employee Emma", "user@example.com", Role.USER, "user123", "user"),
]


def _ts(raw: str) -> datetime:
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


def _demo_tasks() -> list[Task]:
    return [
        Task(
            id=1,
            title="Quarterly Report Analysis",
            description="Analyze Q3 sales data and prepare a comprehensive report for the board meeting.",
            priority=Priority.HIGH,
            status=Status.IN_PROGRESS,
            created_by=1,
            assigned_to=2,
            required_till=_ts("2024-08-15T17:00:00Z"),
            created_at=_ts("2024-07-20T10:00:00Z"),
            updated_at=_ts("2024-07-22T14:30:00Z"),
        ),
        Task(
            id=2,
            title="New Feature Brainstorming Session",
            description=(
                "Organize a meeting with the development and product teams to brainstorm "
                "ideas for the next major feature release."
            ),
            priority=Priority.MEDIUM,
            status=Status.OPEN,
            created_by=2,
            assigned_to=3,
            required_till=_ts("2024-08-05T11:00:00Z"),
            created_at=_ts("2024-07-21T09:00:00Z"),
            updated_at=_ts("2024-07-21T09:00:00Z"),
        ),
        Task(
            id=3,
            title="Fix Login Page Bug",
            description=(
                "Users are reporting intermittent issues when trying to log in via social "
                "providers. Investigate and deploy a hotfix."
            ),
            priority=Priority.CRITICAL,
            status=Status.BLOCKED,
            created_by=2,
            assigned_to=3,
            required_till=_ts("2024-07-28T23:59:00Z"),
            created_at=_ts("2024-07-22T11:00:00Z"),
            updated_at=_ts("2024-07-23T10:00:00Z"),
        ),
        Task(
            id=4,
            title="Onboarding Documentation Update",
            description="Review and update the onboarding documentation for new hires in the engineering department.",
            priority=Priority.LOW,
            status=Status.COMPLETED,
            created_by=1,
            assigned_to=1,
            required_till=_ts("2024-09-01T17:00:00Z"),
            created_at=_ts("2024-07-15T15:00:00Z"),
            updated_at=_ts("2024-07-20T18:00:00Z"),
        ),
    ]


def _demo_updates() -> list[TaskUpdate]:
    return [
        TaskUpdate(
            id=1,
            task_id=1,
            updated_by=2,
            old_status=Status.OPEN,
            new_status=Status.IN_PROGRESS,
            note="Started data collection and initial analysis.",
            created_at=_ts("2024-07-22T14:30:00Z"),
        ),
        TaskUpdate(
            id=2,
            task_id=3,
            updated_by=3,
            old_status=Status.IN_PROGRESS,
            new_status=Status.BLOCKED,
            note="Blocked due to lack of access to third-party API keys. Waiting for credentials.",
            created_at=_ts("2024-07-23T10:00:00Z"),
        ),
    ]


def _demo_notifications() -> list[Notification]:
    return [
        Notification(
            id=1,
            user_id=3,
            actor_id=2,
            task_id=2,
            message='assigned you a new task: "New Feature Brainstorming Session".',
            is_read=True,
            created_at=_ts("2024-07-21T09:01:00Z"),
        ),
        Notification(
            id=2,
            user_id=2,
            actor_id=1,
            task_id=None,
            message='requested an update on task: "Quarterly Report Analysis".',
            is_read=False,
            created_at=_ts("2024-07-24T10:00:00Z"),
        ),
    ]


def seed_demo_data(store: EntityStore, users: UserDirectory) -> None:
    """Populate an empty store. Refuses to run on a store that already has users."""
    if store.list_users():
        raise RuntimeError("demo data can only be seeded into an empty store")

    with store.transaction():
        for name, email, role, password, avatar_seed in DEMO_USERS:
            users.register(
                name=name,
                email=email,
                role=role,
                password=password,
                avatar_url=f"https://picsum.photos/seed/{avatar_seed}/100",
            )
        for task in _demo_tasks():
            store.add_task(task)
        for update in _demo_updates():
            store.add_task_update(update)
        for notification in _demo_notifications():
            store.add_notification(notification)

    logger.info("Demo data seeded: %s", store.counts())
