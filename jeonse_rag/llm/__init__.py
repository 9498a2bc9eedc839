# jeonse_rag/llm/__init__.py
# ===========================
# Language Model Layer — Jeonse RAG
#
# Responsibility:
#   - Prompt construction (system prompt + retrieved context + history)
#   - OpenAI chat completion, blocking and streaming, with retry
#
# The model itself is an opaque text-completion service.

from jeonse_rag.llm.chat import (  # noqa: F401
    ChatServiceError,
    build_messages,
    generate_chat_response,
    stream_chat_response,
)
