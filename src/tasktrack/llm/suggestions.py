# src/tasktrack/llm/suggestions.py

from __future__ import annotations

import logging

from ..core.ports import LLMClient
from ..tasks.task_models import Priority, Status

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a writing assistant inside a task tracker used in a professional office. "
    "Answer with the requested text only: no preamble, no markdown, no quotes."
)


def _priority_prompt(title: str, description: str) -> str:
    choices = ", ".join(p.value for p in Priority)
    return (
        f"Based on the following task title and description, suggest a priority level "
        f"from this list: {choices}. Respond with only one word from the list.\n"
        f'Title: "{title}"\n'
        f'Description: "{description}"'
    )


def _description_prompt(title: str) -> str:
    return (
        f'Based on the task title "{title}", write a detailed task description for a '
        f"professional office environment. The description should be clear, concise, and actionable."
    )


def _update_note_prompt(title: str, old_status: Status, new_status: Status) -> str:
    return (
        f'A task with the title "{title}" is changing status from "{old_status.value}" '
        f'to "{new_status.value}".\n'
        f"Write a brief, professional update note (1-2 sentences) explaining the reason "
        f"for this change or the next steps."
    )


class TextSuggestionService:
    """
    Optional text generation for task forms.

    Failures of any kind (no client, missing key, network, malformed output)
    are logged and reported as None. Nothing here ever raises into the core.
    """

    def __init__(self, llm: LLMClient | None) -> None:
        self._llm = llm

    @property
    def available(self) -> bool:
        return self._llm is not None

    def _complete(self, prompt: str, *, purpose: str) -> str | None:
        if self._llm is None:
            return None
        try:
            text = "".join(self._llm.stream_chat([{"role": "user", "content": prompt}], SYSTEM_PROMPT))
        except Exception as e:
            logger.info("Suggestion %s unavailable: %s", purpose, e)
            logger.debug("Suggestion %s failure details", purpose, exc_info=True)
            return None
        text = text.strip()
        return text or None

    def suggest_priority(self, title: str, description: str) -> Priority | None:
        raw = self._complete(_priority_prompt(title, description), purpose="priority")
        if raw is None:
            return None
        # Models sometimes add punctuation or a trailing period.
        word = raw.split()[0].strip(".,:;!\"'`*")
        for p in Priority:
            if word.lower() == p.value.lower():
                return p
        logger.info("Suggested priority not recognized: %r", raw[:40])
        return None

    def generate_description(self, title: str) -> str | None:
        return self._complete(_description_prompt(title), purpose="description")

    def suggest_update_note(self, title: str, old_status: Status, new_status: Status) -> str | None:
        return self._complete(_update_note_prompt(title, old_status, new_status), purpose="update note")
