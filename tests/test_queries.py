# tests/test_queries.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tasktrack.core.errors import NotFoundError
from tasktrack.tasks.queries import TaskQueries, filter_tasks
from tasktrack.tasks.task_models import Priority, Status
from tasktrack.tasks.task_store import EntityStore

from .fakes import ADMIN, EMPLOYEE, MANAGER

DEADLINE = datetime(2024, 8, 1, tzinfo=timezone.utc)


def _create(lifecycle, title: str, created_by: int, assigned_to: int, priority=Priority.MEDIUM, deadline=DEADLINE):
    return lifecycle.create(
        title=title,
        description="",
        priority=priority,
        assigned_to=assigned_to,
        required_till=deadline,
        created_by=created_by,
    )


def test_tasks_for_user_splits_created_and_assigned(lifecycle, queries: TaskQueries) -> None:
    t1 = _create(lifecycle, "one", ADMIN, MANAGER)
    t2 = _create(lifecycle, "two", MANAGER, EMPLOYEE)
    t3 = _create(lifecycle, "self", MANAGER, MANAGER)

    res = queries.tasks_for_user(MANAGER)

    assert [t.id for t in res.my_tasks] == [t2.id, t3.id]
    assert [t.id for t in res.assigned_to_me] == [t1.id, t3.id]


def test_tasks_for_unknown_user_is_empty(queries: TaskQueries) -> None:
    res = queries.tasks_for_user(404)
    assert res.my_tasks == []
    assert res.assigned_to_me == []


def test_task_detail_lists_updates_newest_first(lifecycle, queries: TaskQueries) -> None:
    task = _create(lifecycle, "t", ADMIN, MANAGER)
    u1 = lifecycle.transition(task_id=task.id, new_status=Status.IN_PROGRESS, note="start", updated_by=MANAGER)
    u2 = lifecycle.transition(task_id=task.id, new_status=Status.BLOCKED, note="stuck", updated_by=MANAGER)

    detail = queries.task_detail(task.id)

    assert detail.task.status == Status.BLOCKED
    assert [u.id for u in detail.updates] == [u2.id, u1.id]


def test_task_detail_unknown(queries: TaskQueries) -> None:
    with pytest.raises(NotFoundError):
        queries.task_detail(1)


def test_notifications_page_is_limited_and_counts_all_unread(lifecycle, queries: TaskQueries) -> None:
    for i in range(15):
        _create(lifecycle, f"task {i}", ADMIN, MANAGER)

    page = queries.notifications_for_user(MANAGER, limit=10)

    assert len(page.notifications) == 10
    assert page.unread_count == 15
    # newest first
    assert page.notifications[0].message == 'assigned you a new task: "task 14".'
    ids = [n.id for n in page.notifications]
    assert ids == sorted(ids, reverse=True)


def test_notifications_default_page_size(lifecycle, store: EntityStore) -> None:
    q = TaskQueries(store, default_page_size=3)
    for i in range(5):
        _create(lifecycle, f"task {i}", ADMIN, MANAGER)
    assert len(q.notifications_for_user(MANAGER).notifications) == 3


def test_notifications_include_read_items_but_unread_count_excludes_them(lifecycle, queries: TaskQueries) -> None:
    for i in range(3):
        _create(lifecycle, f"task {i}", ADMIN, MANAGER)
    first = queries.notifications_for_user(MANAGER).notifications[-1]
    queries.mark_read(MANAGER, [first.id])

    page = queries.notifications_for_user(MANAGER)
    assert len(page.notifications) == 3
    assert page.unread_count == 2


def test_notifications_negative_limit_returns_nothing(lifecycle, queries: TaskQueries) -> None:
    _create(lifecycle, "t", ADMIN, MANAGER)
    page = queries.notifications_for_user(MANAGER, limit=-5)
    assert page.notifications == []
    assert page.unread_count == 1


def test_mark_read_is_idempotent_and_scoped_to_owner(lifecycle, queries: TaskQueries, store: EntityStore) -> None:
    _create(lifecycle, "for mo", ADMIN, MANAGER)
    _create(lifecycle, "for eve", ADMIN, EMPLOYEE)
    mo_note = store.notifications_for(MANAGER)[0]
    eve_note = store.notifications_for(EMPLOYEE)[0]

    # Eve's id and an unknown id are ignored silently.
    assert queries.mark_read(MANAGER, [mo_note.id, eve_note.id, 999]) == 1
    state_once = [n.is_read for n in store.notifications_for(MANAGER)]

    assert queries.mark_read(MANAGER, [mo_note.id, eve_note.id, 999]) == 0
    assert [n.is_read for n in store.notifications_for(MANAGER)] == state_once
    assert store.get_notification(eve_note.id).is_read is False


def test_unread_notifications_are_unpaged_and_oldest_first(lifecycle, queries: TaskQueries) -> None:
    for i in range(12):
        _create(lifecycle, f"T{i}", created_by=ADMIN, assigned_to=MANAGER)
    queries.mark_read(MANAGER, [3])

    unread = queries.unread_notifications(MANAGER)

    assert [n.id for n in unread] == [1, 2] + list(range(4, 13))
    assert queries.unread_notifications(ADMIN) == []


def test_mark_read_with_no_ids(queries: TaskQueries) -> None:
    assert queries.mark_read(MANAGER, []) == 0


def test_reads_have_no_side_effects(lifecycle, queries: TaskQueries, store: EntityStore) -> None:
    _create(lifecycle, "t", ADMIN, MANAGER)
    before = store.counts()
    for _ in range(20):
        queries.notifications_for_user(MANAGER)
        queries.tasks_for_user(MANAGER)
    assert store.counts() == before
    assert queries.notifications_for_user(MANAGER).unread_count == 1


def test_filter_tasks(lifecycle, queries: TaskQueries) -> None:
    _create(lifecycle, "Fix login bug", ADMIN, MANAGER, priority=Priority.CRITICAL)
    t2 = _create(lifecycle, "Write report", ADMIN, MANAGER, priority=Priority.LOW)
    lifecycle.transition(task_id=t2.id, new_status=Status.BLOCKED, note="waiting", updated_by=MANAGER)
    tasks = queries.tasks_for_user(MANAGER).assigned_to_me

    assert [t.title for t in filter_tasks(tasks, search="LOGIN")] == ["Fix login bug"]
    assert [t.title for t in filter_tasks(tasks, status=Status.BLOCKED)] == ["Write report"]
    assert filter_tasks(tasks, priority=Priority.HIGH) == []
    assert len(filter_tasks(tasks)) == 2


def test_dashboard_summary_counts_overdue_open_tasks(lifecycle, queries: TaskQueries) -> None:
    now = datetime(2024, 9, 1, tzinfo=timezone.utc)
    _create(lifecycle, "late", ADMIN, MANAGER, deadline=now - timedelta(days=1))
    done = _create(lifecycle, "late but done", ADMIN, MANAGER, deadline=now - timedelta(days=1))
    _create(lifecycle, "future", ADMIN, MANAGER, deadline=now + timedelta(days=1))
    _create(lifecycle, "mine", MANAGER, EMPLOYEE)
    lifecycle.transition(task_id=done.id, new_status=Status.COMPLETED, note="done", updated_by=MANAGER)

    s = queries.dashboard_summary(MANAGER, now=now)

    assert s.created == 1
    assert s.assigned == 3
    assert s.open_assigned == 2
    assert s.overdue_assigned == 1
