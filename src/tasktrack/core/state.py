# src/tasktrack/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .ports import TextSuggestions
from ..tasks.lifecycle import TaskLifecycle
from ..tasks.queries import TaskQueries
from ..tasks.task_api import TaskTrackerAPI
from ..tasks.task_store import EntityStore
from ..users.directory import SessionRegistry, UserDirectory


@dataclass
class AppState:
    """Everything a front end needs, wired once by cli.bootstrap."""

    # Settings object (real Settings or a test double with the same attributes).
    settings: object

    store: EntityStore
    users: UserDirectory
    sessions: SessionRegistry
    lifecycle: TaskLifecycle
    queries: TaskQueries
    suggestions: TextSuggestions
    api: TaskTrackerAPI
