"""
jeonse_rag/llm/chat.py
=======================
Chat Service — Jeonse RAG

Responsibility:
    - Build the message list for one chat turn: system prompt + retrieved
      context, recent history, then the user's message
    - Call OpenAI (blocking or streaming) through the shared retry helper
    - Map provider failures to ChatServiceError with a user-facing message

The retrieved context is ALWAYS appended to the system prompt, including
the no-evidence notice, so the model knows when it must not cite.

This module does NOT:
    - Rank or assemble evidence (that is rag_service.py)
    - Store conversation history; callers pass it in
"""

import logging
import os
from typing import Any, Iterator

import openai
from openai import OpenAI

from jeonse_rag import config
from jeonse_rag.openai_retry import chat_completions_with_retry
from jeonse_rag.rag_service import build_context

logger = logging.getLogger("jeonse_rag.llm.chat")


# ---------------------------------------------------------------------------
# Generation settings: low temperature to minimize invented citations
# ---------------------------------------------------------------------------

TEMPERATURE: float = 0.1
TOP_P: float = 0.85
MAX_TOKENS: int = 2048

_VALID_HISTORY_ROLES: set[str] = {"user", "assistant"}

SYSTEM_PROMPT: str = (
    "당신은 전세사기 피해자를 돕는 법률 정보 상담 도우미입니다.\n\n"
    "규칙:\n"
    "- 아래 [관련 법령 및 판례] 블록에 제공된 조문과 판례만 근거로 인용하세요.\n"
    "- 블록에 없는 조문 번호, 판례 번호, 금액은 절대 만들어 내지 마세요.\n"
    "- 확실하지 않은 내용은 모른다고 답하고 전문가 상담을 권하세요.\n"
    "- 답변은 법률 자문이 아닌 일반 정보 제공임을 밝히세요.\n"
    "- 긴급한 경우 대한법률구조공단(132) 또는 전세사기피해지원센터(1533-2020)를 안내하세요.\n"
)


class ChatServiceError(Exception):
    """Raised when the language model call fails; carries a user-facing message."""

    def __init__(self, message: str, status_code: int = 502):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


# ---------------------------------------------------------------------------
# Prompt building
# ---------------------------------------------------------------------------


def _clean_history(history: list[dict[str, Any]] | None) -> list[dict[str, str]]:
    """Keep well-formed user/assistant turns, most recent CHAT_HISTORY_LIMIT."""
    cleaned: list[dict[str, str]] = []
    for turn in history or []:
        if not isinstance(turn, dict):
            continue
        role = turn.get("role")
        content = turn.get("content")
        if role in _VALID_HISTORY_ROLES and isinstance(content, str) and content.strip():
            cleaned.append({"role": role, "content": content})
    if config.CHAT_HISTORY_LIMIT <= 0:
        return []
    return cleaned[-config.CHAT_HISTORY_LIMIT:]


def build_messages(
    history: list[dict[str, Any]] | None,
    user_message: str,
) -> list[dict[str, str]]:
    """
    Build the OpenAI message list for one turn.

    The system message is SYSTEM_PROMPT followed by the context block that
    build_context() returns for ``user_message``.
    """
    context = build_context(user_message)
    return [
        {"role": "system", "content": SYSTEM_PROMPT + context},
        *_clean_history(history),
        {"role": "user", "content": user_message},
    ]


# ---------------------------------------------------------------------------
# Provider call helpers
# ---------------------------------------------------------------------------


def _get_client() -> OpenAI:
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise ChatServiceError("AI 서비스가 설정되지 않았습니다. 관리자에게 문의해주세요.", 503)
    return OpenAI(api_key=api_key)


def _to_service_error(exc: Exception) -> ChatServiceError:
    """Translate an OpenAI failure into a user-facing ChatServiceError."""
    if isinstance(exc, ChatServiceError):
        return exc
    if isinstance(exc, openai.RateLimitError):
        return ChatServiceError("AI 요청 한도를 초과했습니다. 잠시 후 다시 시도해주세요.", 429)
    if isinstance(exc, openai.BadRequestError):
        return ChatServiceError("요청이 올바르지 않습니다. 다시 시도해주세요.", 400)
    if isinstance(exc, openai.APIStatusError) and exc.status_code >= 500:
        return ChatServiceError(
            "AI 서비스에 일시적인 오류가 발생했습니다. 잠시 후 다시 시도해주세요.", 502
        )
    return ChatServiceError("AI 응답 생성 중 오류가 발생했습니다. 잠시 후 다시 시도해주세요.", 502)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate_chat_response(
    history: list[dict[str, Any]] | None,
    user_message: str,
) -> str:
    """
    Generate one assistant reply grounded in the retrieved context.

    Raises:
        ChatServiceError: If the model is not configured, fails, or returns
            an empty reply.
    """
    messages = build_messages(history, user_message)

    try:
        client = _get_client()
        response = chat_completions_with_retry(
            client,
            model=config.OPENAI_MODEL,
            temperature=TEMPERATURE,
            top_p=TOP_P,
            max_tokens=MAX_TOKENS,
            messages=messages,
        )
    except Exception as exc:
        logger.error("Chat completion failed: %s", exc)
        raise _to_service_error(exc) from exc

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise ChatServiceError("AI 응답이 비어 있습니다. 다시 시도해주세요.", 502)

    logger.info("Chat reply generated: %d chars.", len(content))
    return content.strip()


def stream_chat_response(
    history: list[dict[str, Any]] | None,
    user_message: str,
) -> Iterator[str]:
    """
    Yield reply text chunks as the model streams them.

    Raises:
        ChatServiceError: If the stream cannot be created or breaks.
    """
    messages = build_messages(history, user_message)

    try:
        client = _get_client()
        stream = chat_completions_with_retry(
            client,
            model=config.OPENAI_MODEL,
            temperature=TEMPERATURE,
            top_p=TOP_P,
            max_tokens=MAX_TOKENS,
            messages=messages,
            stream=True,
        )
        total = 0
        for chunk in stream:
            if not chunk.choices:
                continue
            text = chunk.choices[0].delta.content
            if text:
                total += len(text)
                yield text
    except Exception as exc:
        logger.error("Chat stream failed: %s", exc)
        raise _to_service_error(exc) from exc

    logger.info("Chat stream complete: %d chars.", total)
