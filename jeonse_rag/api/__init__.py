# jeonse_rag/api/__init__.py
# ===========================
# API Layer — Jeonse RAG
#
# Responsibility:
#   - FastAPI adapter over corpus lookup, retrieval context and chat
#
# Public API:
#   - app — the FastAPI application (jeonse_rag.api.routes)
