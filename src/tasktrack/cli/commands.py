# src/tasktrack/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import cast

from ..core.errors import TaskTrackError, ValidationError
from ..core.state import AppState
from ..tasks.notifications import render_notification
from ..tasks.task_models import Priority, Status, Task, User

logger = logging.getLogger(__name__)


@dataclass
class ConsoleSession:
    """Per-connector identity: the token returned by /login (None when logged out)."""

    token: str | None = None
    user_id: int | None = None

    def require_token(self) -> str:
        if not self.token:
            raise ValidationError("Not logged in. Use /login <email> <password>.")
        return self.token


CommandEmitter = Callable[[str], None]
CommandHandler3 = Callable[[AppState, list[str], ConsoleSession], str]
CommandHandler4 = Callable[[AppState, list[str], ConsoleSession, CommandEmitter | None], str]
CommandHandler = CommandHandler3 | CommandHandler4


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        session: ConsoleSession,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Domain errors are turned into an inline message; state is unchanged
        because the core validates before it writes.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 4

        try:
            if nparams >= 4:
                h4 = cast(CommandHandler4, handler)
                return h4(state, args, session, emit)
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, session)
        except TaskTrackError as e:
            logger.debug("Command /%s rejected: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting ----


def _fmt_ts(ts: datetime) -> str:
    return ts.astimezone().strftime("%Y-%m-%d %H:%M")


def _user_name(users: dict[int, User], user_id: int) -> str:
    u = users.get(user_id)
    return u.name if u is not None else f"user#{user_id}"


def _fmt_task(task: Task, users: dict[int, User], now: datetime) -> str:
    overdue = " OVERDUE" if task.is_overdue(now) else ""
    return (
        f"#{task.id} [{task.status.value}] ({task.priority.value}) {task.title} "
        f"-> {_user_name(users, task.assigned_to)}, due {_fmt_ts(task.required_till)}{overdue}"
    )


def _split_pipe(args: list[str]) -> tuple[str, str]:
    """Split "a b | c d" into ("a b", "c d")."""
    joined = " ".join(args)
    head, _, tail = joined.partition("|")
    return head.strip(), tail.strip()


def _parse_int(raw: str, what: str) -> int:
    try:
        return int(raw.lstrip("#"))
    except ValueError as e:
        raise ValidationError(f"{what} must be a number, got {raw!r}") from e


def _now() -> datetime:
    return datetime.now().astimezone()


# ---- commands ----


def cmd_help(state: AppState, args: list[str], session: ConsoleSession) -> str:
    return registry.build_help()


def cmd_login(state: AppState, args: list[str], session: ConsoleSession) -> str:
    if len(args) != 2:
        return "Usage: /login <email> <password>"
    token, user = state.api.login(args[0], args[1])
    if session.token:
        state.api.logout(session.token)
    session.token = token
    session.user_id = user.id
    return f"Logged in as {user.name} ({user.role.value})."


def cmd_logout(state: AppState, args: list[str], session: ConsoleSession) -> str:
    if not session.token:
        return "Not logged in."
    state.api.logout(session.token)
    session.token = None
    session.user_id = None
    return "Logged out."


def cmd_whoami(state: AppState, args: list[str], session: ConsoleSession) -> str:
    user = state.api.me(session.require_token())
    return f"{user.name} <{user.email}> id={user.id} role={user.role.value}"


def cmd_users(state: AppState, args: list[str], session: ConsoleSession) -> str:
    users = state.api.list_users(session.require_token())
    lines = ["Users:"]
    for u in users:
        lines.append(f"  {u.id}. {u.name} <{u.email}> ({u.role.value})")
    return "\n".join(lines)


def cmd_register(state: AppState, args: list[str], session: ConsoleSession) -> str:
    """
    /register <name> | <email> <role> <password>
    """
    name, rest = _split_pipe(args)
    fields = rest.split()
    if not name or len(fields) != 3:
        return "Usage: /register <name> | <email> <admin|manager|user> <password>"
    email, role, password = fields
    user = state.api.register_user(session.require_token(), name=name, email=email, role=role, password=password)
    return f"Registered {user.name} (id={user.id}, {user.role.value})."


def cmd_tasks(state: AppState, args: list[str], session: ConsoleSession) -> str:
    """
    /tasks [status=<s>] [priority=<p>] [search words...]
    """
    status = None
    priority = None
    words: list[str] = []
    for a in args:
        key, sep, value = a.partition("=")
        if sep and key.lower() == "status":
            status = value
        elif sep and key.lower() == "priority":
            priority = value
        else:
            words.append(a)

    token = session.require_token()
    tasks = state.api.tasks_for_user(token, search=" ".join(words) or None, status=status, priority=priority)
    users = state.users.by_id()
    now = _now()

    lines = [f"My tasks ({len(tasks.my_tasks)}):"]
    lines += [f"  {_fmt_task(t, users, now)}" for t in tasks.my_tasks] or ["  (none)"]
    lines.append(f"Assigned to me ({len(tasks.assigned_to_me)}):")
    lines += [f"  {_fmt_task(t, users, now)}" for t in tasks.assigned_to_me] or ["  (none)"]
    return "\n".join(lines)


def cmd_task(state: AppState, args: list[str], session: ConsoleSession) -> str:
    if len(args) != 1:
        return "Usage: /task <id>"
    detail = state.api.task_detail(session.require_token(), _parse_int(args[0], "Task id"))
    users = state.users.by_id()
    t = detail.task

    lines = [
        _fmt_task(t, users, _now()),
        f"  Created by {_user_name(users, t.created_by)} on {_fmt_ts(t.created_at)}; "
        f"last updated {_fmt_ts(t.updated_at)}",
    ]
    if t.description:
        lines.append(f"  {t.description}")
    lines.append(f"History ({len(detail.updates)}):")
    for u in detail.updates:
        old = u.old_status.value if u.old_status is not None else "-"
        lines.append(
            f"  {_fmt_ts(u.created_at)} {_user_name(users, u.updated_by)}: {old} -> {u.new_status.value}: {u.note}"
        )
    return "\n".join(lines)


def cmd_new(state: AppState, args: list[str], session: ConsoleSession, emit: CommandEmitter | None = None) -> str:
    """
    /new <assignee_id> <priority|auto> <deadline> <title> [| description]

    An empty description is drafted by the suggestion service when available;
    priority "auto" asks for a suggestion and falls back to Medium.
    """
    if len(args) < 4:
        return "Usage: /new <assignee_id> <priority|auto> <YYYY-MM-DD> <title> [| description]"
    token = session.require_token()
    assignee = _parse_int(args[0], "Assignee id")
    priority_raw = args[1]
    deadline = args[2]
    title, description = _split_pipe(args[3:])

    if not description and state.suggestions.available:
        if emit:
            emit("[AI] Drafting a description...")
        description = state.api.generate_description(title) or ""

    if priority_raw.lower() == "auto":
        if emit:
            emit("[AI] Suggesting a priority...")
        priority = state.api.suggest_priority(title, description) or Priority.MEDIUM
    else:
        priority = Priority.parse(priority_raw)

    task = state.api.create_task(
        token,
        title=title,
        description=description,
        priority=priority,
        assigned_to=assignee,
        required_till=deadline,
    )
    return f"Created task #{task.id} ({task.priority.value}) assigned to {_user_name(state.users.by_id(), assignee)}."


def cmd_status(
    state: AppState, args: list[str], session: ConsoleSession, emit: CommandEmitter | None = None
) -> str:
    """
    /status <task_id> <status> <note...>

    Use underscores for multi-word statuses (in_progress). A note of "auto"
    asks the suggestion service to draft one.
    """
    if len(args) < 3:
        return "Usage: /status <task_id> <open|in_progress|blocked|completed|cancelled> <note...>"
    token = session.require_token()
    task_id = _parse_int(args[0], "Task id")
    new_status = Status.parse(args[1])
    note = " ".join(args[2:])

    if note.lower() == "auto":
        if emit:
            emit("[AI] Drafting an update note...")
        suggested = state.api.suggest_update_note(token, task_id, new_status)
        if not suggested:
            return "No suggestion available; please write the note yourself."
        note = suggested

    update = state.api.transition_task(token, task_id, new_status, note)
    old = update.old_status.value if update.old_status is not None else "-"
    return f"Task #{task_id}: {old} -> {update.new_status.value}. Note: {update.note}"


def cmd_request(state: AppState, args: list[str], session: ConsoleSession) -> str:
    if len(args) != 1:
        return "Usage: /request <task_id>"
    task_id = _parse_int(args[0], "Task id")
    state.api.request_update(session.require_token(), task_id)
    return f"Update requested for task #{task_id}."


def cmd_notifs(state: AppState, args: list[str], session: ConsoleSession) -> str:
    """
    /notifs [limit]
    """
    limit = _parse_int(args[0], "Limit") if args else None
    page = state.api.notifications(session.require_token(), limit)
    users = state.users.by_id()

    lines = [f"Notifications ({page.unread_count} unread):"]
    if not page.notifications:
        lines.append("  (none)")
    for n in page.notifications:
        mark = " " if n.is_read else "*"
        link = f" [task #{n.task_id}]" if n.task_id is not None else ""
        lines.append(f" {mark}{n.id}. {_fmt_ts(n.created_at)} {render_notification(n, users)}{link}")
    return "\n".join(lines)


def cmd_read(state: AppState, args: list[str], session: ConsoleSession) -> str:
    """
    /read            -> mark the unread notifications on the first page
    /read <id> ...   -> mark specific notifications
    """
    token = session.require_token()
    if not args or args[0].lower() == "all":
        marked = state.api.mark_all_read(token)
    else:
        marked = state.api.mark_read(token, [_parse_int(a, "Notification id") for a in args])
    return f"Marked {marked} notification(s) as read."


def cmd_dash(state: AppState, args: list[str], session: ConsoleSession) -> str:
    s = state.api.dashboard(session.require_token())
    return (
        "Dashboard:\n"
        f"  Created by me: {s.created}\n"
        f"  Assigned to me: {s.assigned} ({s.open_assigned} open)\n"
        f"  Overdue: {s.overdue_assigned}"
    )


def cmd_suggest(
    state: AppState, args: list[str], session: ConsoleSession, emit: CommandEmitter | None = None
) -> str:
    """
    /suggest priority <title> | <description>
    /suggest desc <title>
    /suggest note <task_id> <status>
    """
    usage = (
        "Usage:\n"
        "  /suggest priority <title> | <description>\n"
        "  /suggest desc <title>\n"
        "  /suggest note <task_id> <status>"
    )
    if not args:
        return usage
    if not state.suggestions.available:
        return "Suggestions are disabled (no API key configured)."

    sub = args[0].lower()
    rest = args[1:]

    if sub == "priority" and rest:
        title, description = _split_pipe(rest)
        p = state.api.suggest_priority(title, description)
        return f"Suggested priority: {p.value}" if p else "No suggestion available."

    if sub in ("desc", "description") and rest:
        text = state.api.generate_description(" ".join(rest))
        return text or "No suggestion available."

    if sub == "note" and len(rest) == 2:
        text = state.api.suggest_update_note(session.require_token(), _parse_int(rest[0], "Task id"), rest[1])
        return text or "No suggestion available."

    return usage


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("login", cmd_login, help_text="Log in: /login <email> <password>.")
registry.register("logout", cmd_logout, help_text="Log out.")
registry.register("whoami", cmd_whoami, help_text="Show the logged-in user.", aliases=["me"])
registry.register("users", cmd_users, help_text="List users (ids are used by /new).")
registry.register("register", cmd_register, help_text="Admin: /register <name> | <email> <role> <password>.")
registry.register("tasks", cmd_tasks, help_text="List my tasks: /tasks [status=..] [priority=..] [search].")
registry.register("task", cmd_task, help_text="Task detail and history: /task <id>.")
registry.register("new", cmd_new, help_text="Create: /new <assignee_id> <priority|auto> <YYYY-MM-DD> <title> [| desc].")
registry.register("status", cmd_status, help_text="Change status: /status <id> <status> <note|auto>.")
registry.register("request", cmd_request, help_text="Ask the assignee for an update: /request <id>.")
registry.register("notifs", cmd_notifs, help_text="Show notifications: /notifs [limit].", aliases=["n"])
registry.register("read", cmd_read, help_text="Mark read: /read [all | <id> ...].")
registry.register("dash", cmd_dash, help_text="Dashboard counters.")
registry.register("suggest", cmd_suggest, help_text="AI help: /suggest priority|desc|note ...")
