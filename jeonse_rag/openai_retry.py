"""
jeonse_rag/openai_retry.py
===========================
OpenAI retry helper — Jeonse RAG

Wraps ``client.chat.completions.create`` with exponential back-off for
transient failures: rate limiting (429), upstream 5xx errors, timeouts and
dropped connections. Any other error is re-raised on the first attempt.

Used by the chat service for both blocking and streaming completions;
for ``stream=True`` only stream creation is retried, never a partially
consumed stream.
"""

import logging
import time
from typing import Any

import openai

logger = logging.getLogger("jeonse_rag.openai_retry")

MAX_RETRIES: int = 3          # total attempts = MAX_RETRIES + 1
BASE_DELAY: float = 1.0       # seconds
MAX_DELAY: float = 20.0
BACKOFF_FACTOR: float = 2.0

_RETRYABLE_STATUS_CODES: set[int] = {429, 500, 502, 503, 504}


def is_retryable(exc: Exception) -> bool:
    """True for transient OpenAI errors worth another attempt."""
    if isinstance(exc, (openai.RateLimitError, openai.APITimeoutError, openai.APIConnectionError)):
        return True
    if isinstance(exc, openai.APIStatusError):
        return exc.status_code in _RETRYABLE_STATUS_CODES
    return False


def chat_completions_with_retry(client: Any, **kwargs: Any) -> Any:
    """
    Call ``client.chat.completions.create(**kwargs)`` with retry.

    Raises:
        The last exception once retries are exhausted, or the first
        non-retryable exception immediately.
    """
    delay = BASE_DELAY

    for attempt in range(MAX_RETRIES + 1):
        try:
            return client.chat.completions.create(**kwargs)
        except Exception as exc:
            if not is_retryable(exc) or attempt == MAX_RETRIES:
                logger.warning(
                    "OpenAI call failed after %d attempt(s): %s", attempt + 1, exc,
                )
                raise

            logger.warning(
                "OpenAI call failed (attempt %d/%d): %s; retrying in %.1fs",
                attempt + 1,
                MAX_RETRIES + 1,
                exc,
                delay,
            )
            time.sleep(delay)
            delay = min(delay * BACKOFF_FACTOR, MAX_DELAY)

    raise RuntimeError("unreachable")  # pragma: no cover
