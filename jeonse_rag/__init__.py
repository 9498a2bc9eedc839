# jeonse_rag/__init__.py
# =======================
# Jeonse-fraud legal RAG — retrieval & context assembly engine
#
# Layers (leaves first):
#   - corpus     — Statute / Article / CaseSummary records, lazy corpus store
#   - retrieval  — relevance scorer, law ranker, case ranker, query classifier
#   - context    — guarded context assembly
#   - rag_service — build_context() facade called by the prompt builder
#   - llm        — prompt builder + chat completion service
#   - api        — FastAPI adapter
#
# Public API:
#   - build_context() — assembled evidence block for one user query

from jeonse_rag.rag_service import build_context, retrieve  # noqa: F401
