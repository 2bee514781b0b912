# tests/conftest.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from tasktrack.cli.bootstrap import create_initial_state
from tasktrack.core.state import AppState
from tasktrack.tasks.lifecycle import TaskLifecycle
from tasktrack.tasks.queries import TaskQueries
from tasktrack.tasks.task_models import Role
from tasktrack.tasks.task_store import EntityStore
from tasktrack.users.directory import UserDirectory

from .fakes import FakeLLMClient, ManualClock


@pytest.fixture()
def settings() -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and AppState.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="tasktrack-test",
        seed_demo_data=False,
        strict_transitions=False,
        notification_page_size=10,
        notification_poll_seconds=0.01,
        suggestions_enabled=False,
    )


@pytest.fixture()
def store() -> EntityStore:
    return EntityStore()


@pytest.fixture()
def directory(store: EntityStore) -> UserDirectory:
    users = UserDirectory(store)
    users.register(name="Ada Admin", email="ada@example.com", role=Role.ADMIN, password="a1")
    users.register(name="Mo Manager", email="mo@example.com", role=Role.MANAGER, password="m1")
    users.register(name="Eve Employee", email="eve@example.com", role=Role.USER, password="e1")
    return users


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def lifecycle(store: EntityStore, directory: UserDirectory, clock: ManualClock) -> TaskLifecycle:
    return TaskLifecycle(store, clock=clock)


@pytest.fixture()
def queries(store: EntityStore) -> TaskQueries:
    return TaskQueries(store, default_page_size=10)


@pytest.fixture()
def llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture()
def state(settings: SimpleNamespace, llm: FakeLLMClient) -> AppState:
    """
    AppState wired through the real composition root with a fake LLM and the
    three users above.
    """
    app = create_initial_state(settings=settings, llm=llm)
    app.users.register(name="Ada Admin", email="ada@example.com", role=Role.ADMIN, password="a1")
    app.users.register(name="Mo Manager", email="mo@example.com", role=Role.MANAGER, password="m1")
    app.users.register(name="Eve Employee", email="eve@example.com", role=Role.USER, password="e1")
    return app
