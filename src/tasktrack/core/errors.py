# src/tasktrack/core/errors.py

"""
Domain errors raised by the core.

Both are raised synchronously to the caller; the core never retries and never
swallows them. Callers (console commands, API wrappers) show the message and
leave state untouched, since every mutation validates before it writes.
"""

from __future__ import annotations


class TaskTrackError(Exception):
    """Base class for all core errors."""


class NotFoundError(TaskTrackError):
    """A referenced task, user or session does not exist."""


class ValidationError(TaskTrackError):
    """Input was rejected (blank note, self-request, duplicate email, bad credential, ...)."""
