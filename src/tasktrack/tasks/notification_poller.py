# src/tasktrack/tasks/notification_poller.py

from __future__ import annotations

"""
Notification poller.

A small polling loop that:
- reads every unread notification of the user (not just the newest page),
- pushes the ones it has not delivered yet through an injected messenger port,
- remembers delivered ids so each one is pushed once.

It only reads: marking notifications read stays an explicit user action.
Rendering (actor names, formatting) belongs to the connector via `render`.
"""

import asyncio
import logging
from collections.abc import Callable

from ..core.ports import OutboundMessenger
from .queries import TaskQueries
from .task_models import Notification

logger = logging.getLogger(__name__)


async def poll_once(
    queries: TaskQueries,
    user_id: int,
    messenger: OutboundMessenger,
    *,
    delivered: set[int],
    render: Callable[[Notification], str] = lambda n: n.message,
) -> int:
    """
    One poll cycle. Returns the number of notifications sent.

    `delivered` is trimmed to ids that are still unread; once a notification
    is read it can never be pushed again, so its id is no longer needed.
    """
    unread = queries.unread_notifications(user_id)
    delivered.intersection_update(n.id for n in unread)

    sent = 0
    for n in unread:
        if n.id in delivered:
            continue
        await messenger.send_text(text=render(n), to_user_id=user_id)
        delivered.add(n.id)
        sent += 1

    if sent:
        logger.info("Poller: delivered %s notification(s) to user=%s (unread=%s)", sent, user_id, len(unread))
    return sent


async def run_notification_poller(
    queries: TaskQueries,
    user_id: int,
    messenger: OutboundMessenger,
    *,
    interval_seconds: float = 12.0,
    render: Callable[[Notification], str] = lambda n: n.message,
) -> None:
    """
    Poll every interval_seconds until cancelled.

    A failing poll or send is logged and the loop keeps going; an undelivered
    notification is retried on the next cycle.
    """
    sleep_s = max(0.01, float(interval_seconds))
    delivered: set[int] = set()

    while True:
        try:
            await poll_once(queries, user_id, messenger, delivered=delivered, render=render)
        except Exception:
            logger.exception("Notification poll failed user=%s", user_id)

        await asyncio.sleep(sleep_s)
