# src/tasktrack/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- builds the entity store and the services around it,
- picks the text-suggestion backend (OpenRouter, or none),
- optionally seeds the demo dataset.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import LLMClient
from ..core.seed import seed_demo_data
from ..core.state import AppState
from ..llm.client import OpenRouterLLMClient, friendly_llm_error_message
from ..llm.suggestions import TextSuggestionService
from ..tasks.lifecycle import TaskLifecycle, TransitionPolicy
from ..tasks.queries import TaskQueries
from ..tasks.task_api import TaskTrackerAPI
from ..tasks.task_store import EntityStore
from ..users.directory import SessionRegistry, UserDirectory

logger = logging.getLogger(__name__)


def _build_llm(settings) -> LLMClient | None:
    if not getattr(settings, "suggestions_enabled", False):
        logger.info("Text suggestions disabled by configuration.")
        return None
    try:
        return OpenRouterLLMClient(settings)
    except RuntimeError as e:
        # Suggestions are optional; the tracker works without them.
        logger.info("Text suggestions unavailable: %s", friendly_llm_error_message(e))
        return None


def create_initial_state(*, settings=None, llm: LLMClient | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the LLM client) injectable makes the app easy to test.
    If settings is None, falls back to get_settings(); if llm is None, one is
    built from settings when possible.
    """
    if settings is None:
        settings = get_settings()
    if llm is None:
        llm = _build_llm(settings)

    policy = TransitionPolicy.STRICT if getattr(settings, "strict_transitions", False) else TransitionPolicy.PERMISSIVE

    store = EntityStore()
    users = UserDirectory(store)
    sessions = SessionRegistry()
    lifecycle = TaskLifecycle(store, policy=policy)
    queries = TaskQueries(store, default_page_size=int(getattr(settings, "notification_page_size", 10)))
    suggestions = TextSuggestionService(llm)
    api = TaskTrackerAPI(
        users=users,
        sessions=sessions,
        lifecycle=lifecycle,
        queries=queries,
        suggestions=suggestions,
    )

    if getattr(settings, "seed_demo_data", False):
        seed_demo_data(store, users)

    logger.info("State ready policy=%s suggestions=%s", policy.value, suggestions.available)
    return AppState(
        settings=settings,
        store=store,
        users=users,
        sessions=sessions,
        lifecycle=lifecycle,
        queries=queries,
        suggestions=suggestions,
        api=api,
    )
