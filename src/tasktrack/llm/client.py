# src/tasktrack/llm/client.py

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

import httpx
import openai
from openai import OpenAI

from ..config import Settings
from ..core.ports import ChatMessage

logger = logging.getLogger(__name__)

# model -> retry_at (monotonic); shared across clients in one process
_BAD_MODELS: dict[str, float] = {}

_NOT_FOUND_COOLDOWN_SECONDS = 3600.0


def _is_auth_error(exc: Exception) -> bool:
    return isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError))


def _is_rate_limit_error(exc: Exception) -> bool:
    return isinstance(exc, openai.RateLimitError)


def _is_connection_error(exc: Exception) -> bool:
    # APITimeoutError subclasses APIConnectionError.
    return isinstance(exc, (openai.APIConnectionError, httpx.TimeoutException))


def _is_not_found_error(exc: Exception) -> bool:
    return isinstance(exc, openai.NotFoundError)


def friendly_llm_error_message(err: Exception) -> str:
    msg = str(err).strip() or "LLM error."
    if "LLM API key is not set" in msg:
        return "Suggestions are not configured (missing API key). Set TASKTRACK_OPENROUTER_API_KEY in .env."
    if "LLM model list is empty" in msg:
        return "Suggestions are not configured (no models). Set TASKTRACK_LLM_MODELS in .env."
    if "LLM base URL is not set" in msg:
        return "Suggestions are not configured (missing base URL). Set TASKTRACK_OPENROUTER_BASE_URL in .env."
    return msg


def _close_stream(stream: Any) -> None:
    close = getattr(stream, "close", None)
    if callable(close):
        close()


class OpenRouterLLMClient:
    """
    Streaming chat completions against an OpenAI-compatible endpoint (OpenRouter).

    Behavior:
    - Tries models in the configured order (TASKTRACK_LLM_MODELS).
    - 404 (model not available) -> model is benched for an hour, try next.
    - Rate limit / network issues -> try next.
    - Auth issues -> fail fast (no retries across models).
    - SDK retries are disabled so the fallback stays quick.

    The constructor raises RuntimeError when the client cannot be configured;
    bootstrap then runs without text suggestions.
    """

    def __init__(self, settings: Settings) -> None:
        api_key = (settings.openrouter_api_key or "").strip()
        base_url = (settings.openrouter_base_url or "").strip()
        if not api_key:
            raise RuntimeError("LLM API key is not set. Set TASKTRACK_OPENROUTER_API_KEY in your .env.")
        if not base_url:
            raise RuntimeError("LLM base URL is not set. Set TASKTRACK_OPENROUTER_BASE_URL in your .env.")

        self._models = [m.strip() for m in settings.llm_models if m and m.strip()]
        if not self._models:
            raise RuntimeError("LLM model list is empty. Set TASKTRACK_LLM_MODELS in your .env.")

        self._headers = dict(settings.extra_headers)
        connect_s = float(settings.llm_connect_timeout_seconds)
        read_s = float(settings.llm_read_timeout_seconds)
        self._timeout = httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)
        self._client = OpenAI(base_url=base_url, api_key=api_key, timeout=self._timeout, max_retries=0)

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        last_error: Exception | None = None
        now = time.monotonic()

        for model in self._models:
            retry_at = _BAD_MODELS.get(model)
            if retry_at is not None and retry_at > now:
                continue

            logger.info("LLM: trying model=%s", model)
            t0 = time.monotonic()
            stream = None
            used_any = False

            try:
                stream = self._client.chat.completions.create(
                    model=model,
                    stream=True,
                    extra_headers=self._headers or None,
                    messages=[{"role": "system", "content": system_prompt}, *messages],
                )

                for chunk in stream:
                    if not chunk.choices:
                        continue
                    content = chunk.choices[0].delta.content
                    if content:
                        if not used_any:
                            logger.info("LLM: first token from model=%s (%.2fs)", model, time.monotonic() - t0)
                        used_any = True
                        yield content

                if used_any:
                    logger.debug("LLM: completed with model=%s", model)
                    return

                last_error = RuntimeError(f"Model returned no content: {model}")

            except Exception as e:
                last_error = e

                if _is_auth_error(e):
                    raise RuntimeError(
                        "LLM authentication failed. Check your API key (TASKTRACK_OPENROUTER_API_KEY)."
                    ) from e

                if _is_not_found_error(e):
                    _BAD_MODELS[model] = time.monotonic() + _NOT_FOUND_COOLDOWN_SECONDS
                    logger.info("LLM: model not available (404): %s", model)
                elif _is_rate_limit_error(e):
                    logger.info("LLM: rate-limited on model=%s, trying next", model)
                elif _is_connection_error(e):
                    logger.info("LLM: network/timeout error on model=%s, trying next", model)
                else:
                    logger.info("LLM: error on model=%s (%s), trying next", model, e.__class__.__name__)

            finally:
                if stream is not None:
                    _close_stream(stream)

        if last_error is not None:
            if _is_rate_limit_error(last_error):
                raise RuntimeError("LLM is rate-limited. Try again later.") from last_error
            if _is_connection_error(last_error):
                raise RuntimeError("LLM network/timeout error. Try again later or change models.") from last_error
            raise RuntimeError("All LLM models failed.") from last_error

        raise RuntimeError("All LLM models failed.")
