# tests/test_commands.py

from __future__ import annotations

from tasktrack.cli.commands import CommandRegistry, ConsoleSession
from tasktrack.cli.commands import registry as commands
from tasktrack.core.state import AppState
from tasktrack.tasks.task_models import Priority, Status


def test_command_registry_routes_3_and_4_params(state: AppState) -> None:
    reg = CommandRegistry()
    called = {"h3": 0, "h4": 0}

    def h3(state, args, session):
        called["h3"] += 1
        return "h3"

    def h4(state, args, session, emit):
        called["h4"] += 1
        if emit is not None:
            emit("note")
        return "h4"

    reg.register("a", h3, "a")
    reg.register("b", h4, "b")

    session = ConsoleSession()
    assert reg.handle(state, "/a x", session) == "h3"
    assert reg.handle(state, "/b y", session, emit=lambda _: None) == "h4"
    assert called == {"h3": 1, "h4": 1}


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello", ConsoleSession()) is None
    assert "Unknown command" in (reg.handle(state, "/nope", ConsoleSession()) or "")


def test_domain_errors_are_reported_inline(state: AppState) -> None:
    session = ConsoleSession()
    assert commands.handle(state, "/tasks", session) == "Error: Not logged in. Use /login <email> <password>."
    assert commands.handle(state, "/login mo@example.com nope", session) == "Error: Invalid credentials"
    assert session.token is None


def _login(state: AppState, email: str, password: str) -> ConsoleSession:
    session = ConsoleSession()
    reply = commands.handle(state, f"/login {email} {password}", session)
    assert reply is not None and reply.startswith("Logged in as")
    return session


def test_full_task_flow_through_commands(state: AppState) -> None:
    mo = _login(state, "mo@example.com", "m1")
    eve = _login(state, "eve@example.com", "e1")

    reply = commands.handle(state, "/new 3 high 2030-01-31 Fix login page | Social login fails", mo)
    assert reply == "Created task #1 (High) assigned to Eve Employee."

    listing = commands.handle(state, "/tasks", eve) or ""
    assert "#1 [Open] (High) Fix login page" in listing

    notifs = commands.handle(state, "/notifs", eve) or ""
    assert "1 unread" in notifs
    assert 'Mo Manager assigned you a new task: "Fix login page".' in notifs

    reply = commands.handle(state, "/status 1 blocked waiting on keys", eve)
    assert reply == "Task #1: Open -> Blocked. Note: waiting on keys"

    detail = commands.handle(state, "/task 1", mo) or ""
    assert "Open -> Blocked: waiting on keys" in detail
    assert "Social login fails" in detail

    assert commands.handle(state, "/request 1", eve) == "Error: You can't request an update from yourself."
    assert commands.handle(state, "/request 1", mo) == "Update requested for task #1."

    assert commands.handle(state, "/read", eve) == "Marked 2 notification(s) as read."
    assert "0 unread" in (commands.handle(state, "/notifs", eve) or "")


def test_status_blank_note_is_rejected(state: AppState) -> None:
    mo = _login(state, "mo@example.com", "m1")
    commands.handle(state, "/new 3 low 2030-01-31 Something", mo)
    assert (commands.handle(state, "/status 1 completed", mo) or "").startswith("Usage:")
    assert state.queries.task_detail(1).task.status == Status.OPEN


def test_new_with_auto_priority_and_generated_description(state: AppState, llm) -> None:
    mo = _login(state, "mo@example.com", "m1")
    llm.next_text = "Critical"
    emitted: list[str] = []

    commands.handle(state, "/new 3 auto 2030-01-31 Outage", mo, emit=emitted.append)

    task = state.queries.task_detail(1).task
    assert task.priority is Priority.CRITICAL
    # The same fake reply became the description.
    assert task.description == "Critical"
    assert any("[AI]" in e for e in emitted)


def test_status_auto_note_uses_suggestion(state: AppState, llm) -> None:
    mo = _login(state, "mo@example.com", "m1")
    commands.handle(state, "/new 3 low 2030-01-31 Docs | Update docs", mo)
    llm.next_text = "Docs are published."

    reply = commands.handle(state, "/status 1 completed auto", mo)

    assert reply == "Task #1: Open -> Completed. Note: Docs are published."


def test_register_requires_admin(state: AppState) -> None:
    mo = _login(state, "mo@example.com", "m1")
    ada = _login(state, "ada@example.com", "a1")

    assert commands.handle(state, "/register Jo Doe | jo@example.com user pw", mo) == (
        "Error: Only admins can register users"
    )
    assert commands.handle(state, "/register Jo Doe | jo@example.com user pw", ada) == (
        "Registered Jo Doe (id=4, user)."
    )
    assert "Jo Doe" in (commands.handle(state, "/users", ada) or "")


def test_dash_and_whoami(state: AppState) -> None:
    eve = _login(state, "eve@example.com", "e1")
    assert (commands.handle(state, "/whoami", eve) or "").startswith("Eve Employee <eve@example.com>")
    assert "Assigned to me: 0 (0 open)" in (commands.handle(state, "/dash", eve) or "")
    assert commands.handle(state, "/logout", eve) == "Logged out."
    assert eve.token is None
