# tests/test_task_store.py

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from tasktrack.tasks.task_models import Priority, Role, Status, Task, User
from tasktrack.tasks.task_store import EntityStore

NOW = datetime(2024, 7, 25, tzinfo=timezone.utc)


def _user(uid: int, email: str) -> User:
    return User(id=uid, name=f"u{uid}", email=email, role=Role.USER, avatar_url="")


def _task(tid: int, created_by: int, assigned_to: int) -> Task:
    return Task(
        id=tid,
        title=f"t{tid}",
        description="",
        priority=Priority.MEDIUM,
        status=Status.OPEN,
        created_by=created_by,
        assigned_to=assigned_to,
        required_till=NOW,
        created_at=NOW,
        updated_at=NOW,
    )


def test_ids_start_at_one_and_follow_max() -> None:
    store = EntityStore()
    assert store.next_task_id() == 1
    store.add_user(_user(1, "a@x"))
    store.add_user(_user(2, "b@x"))
    store.add_task(_task(7, 1, 2))
    assert store.next_task_id() == 8
    assert store.next_user_id() == 3


def test_indexes_by_creator_and_assignee() -> None:
    store = EntityStore()
    store.add_task(_task(1, created_by=1, assigned_to=2))
    store.add_task(_task(2, created_by=2, assigned_to=2))

    assert [t.id for t in store.tasks_created_by(2)] == [2]
    assert [t.id for t in store.tasks_assigned_to(2)] == [1, 2]
    assert store.tasks_created_by(3) == []


def test_email_lookup_is_case_insensitive() -> None:
    store = EntityStore()
    store.add_user(_user(1, "Ada@Example.com"))
    assert store.find_user_by_email("ada@example.COM").id == 1
    assert store.find_user_by_email("nobody@example.com") is None


def test_replace_task_keeps_snapshots_stable() -> None:
    store = EntityStore()
    original = store.add_task(_task(1, 1, 2))
    store.replace_task(replace(original, status=Status.BLOCKED))

    assert original.status == Status.OPEN
    assert store.get_task(1).status == Status.BLOCKED
    assert store.tasks_assigned_to(2)[0].status == Status.BLOCKED


def test_replace_task_rejects_participant_change() -> None:
    store = EntityStore()
    original = store.add_task(_task(1, 1, 2))
    with pytest.raises(ValueError):
        store.replace_task(replace(original, assigned_to=3))


def test_duplicate_ids_are_rejected() -> None:
    store = EntityStore()
    store.add_task(_task(1, 1, 2))
    with pytest.raises(KeyError):
        store.add_task(_task(1, 1, 2))


def test_transaction_blocks_other_threads() -> None:
    store = EntityStore()
    seen: list[int] = []

    with store.transaction():
        t = threading.Thread(target=lambda: seen.append(store.counts()["tasks"]))
        t.start()
        store.add_task(_task(1, 1, 2))
        store.add_task(_task(2, 1, 2))
        t.join(timeout=0.1)
        assert t.is_alive()

    t.join(timeout=5.0)
    # The reader saw the state after the whole transaction, never in between.
    assert seen == [2]
