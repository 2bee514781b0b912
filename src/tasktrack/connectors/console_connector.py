# src/tasktrack/connectors/console_connector.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass
from datetime import datetime

from ..cli.commands import ConsoleSession
from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.notification_poller import run_notification_poller
from ..tasks.notifications import render_notification
from ..tasks.task_models import Notification

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleMessenger:
    """OutboundMessenger that prints pushed notifications into the terminal."""

    async def send_text(self, *, text: str, to_user_id: int | None = None) -> None:
        _print_ts(f"[NOTIFY] {text}")


@dataclass
class PollerRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    task: asyncio.Task[None]

    def stop(self) -> None:
        with contextlib.suppress(RuntimeError):
            # Loop may already be closed if the poller died on its own.
            self.loop.call_soon_threadsafe(self.task.cancel)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_poller_in_background(state: AppState, user_id: int) -> PollerRunner | None:
    """
    Run the notification poller in a background thread.

    The console REPL blocks on input(), so the poller gets its own event loop.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}
    interval = float(getattr(state.settings, "notification_poll_seconds", 12.0))

    def render(n: Notification) -> str:
        link = f" [task #{n.task_id}]" if n.task_id is not None else ""
        return render_notification(n, state.users.by_id()) + link

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        task = loop.create_task(
            run_notification_poller(
                state.queries,
                user_id,
                ConsoleMessenger(),
                interval_seconds=interval,
                render=render,
            )
        )
        holder["loop"] = loop
        holder["task"] = task
        ready.set()

        try:
            loop.run_until_complete(task)
        except asyncio.CancelledError:
            logger.debug("Notification poller cancelled user=%s", user_id)
        finally:
            loop.close()

    t = threading.Thread(target=runner, name=f"notification-poller-{user_id}", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    task = holder.get("task")
    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(task, asyncio.Task):
        logger.error("Notification poller thread did not initialize properly.")
        return None

    logger.info("Notification poller started user=%s interval=%.1fs", user_id, interval)
    return PollerRunner(thread=t, loop=loop, task=task)


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /login <email> <password> to start, /help for commands, /exit to quit.\n")

    session = ConsoleSession()
    poller: PollerRunner | None = None
    polled_user: int | None = None

    def emit(text: str) -> None:
        _print_ts(text)

    def stop_poller() -> None:
        nonlocal poller, polled_user
        if poller is not None:
            poller.stop()
            poller.join(timeout=5.0)
        poller = None
        polled_user = None

    try:
        while True:
            try:
                user_input = input(">>> ").strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            try:
                response = command_registry.handle(state, user_input, session, emit=emit)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is None:
                response = "Commands start with '/'. Use /help to list them."
            _print_ts(response)

            # Keep the poller following whoever is logged in.
            if session.user_id != polled_user:
                stop_poller()
                if session.user_id is not None:
                    poller = start_poller_in_background(state, session.user_id)
                    polled_user = session.user_id if poller is not None else None
    finally:
        stop_poller()
        logger.info("Console connector finished.")
