# src/tasktrack/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the LLM provider and the outbound channel swappable and makes
testing easier.
"""

from collections.abc import Awaitable, Iterable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import Priority, Status

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


class LLMClient(Protocol):
    """Streaming chat completion client (OpenAI/OpenRouter-compatible)."""

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]: ...


class TextSuggestions(Protocol):
    """
    Best-effort writing help for the front end.

    Every method returns None when no suggestion is available; none of them
    ever raises.
    """

    @property
    def available(self) -> bool: ...

    def suggest_priority(self, title: str, description: str) -> Priority | None: ...
    def generate_description(self, title: str) -> str | None: ...
    def suggest_update_note(self, title: str, old_status: Status, new_status: Status) -> str | None: ...


class OutboundMessenger(Protocol):
    """
    Front-end port: how background services (the notification poller) push
    text to a user. The connector decides how to render it.
    """

    def send_text(self, *, text: str, to_user_id: int | None = None) -> Awaitable[None]: ...
