# jeonse_rag/retrieval/__init__.py
# =================================
# Retrieval Layer — Jeonse RAG
#
# Responsibility:
#   - Tokenize the user query
#   - Score text fragments by substring token hits
#   - Rank statutes (and their articles) and case summaries
#   - Classify queries into consultation topics (informational only)
#
# Public API:
#   - Query.parse()      — tokenize raw query text
#   - rank_statutes()    — top statutes for a query
#   - rank_articles()    — top articles within one statute
#   - rank_cases()       — top case summaries for a query

from jeonse_rag.retrieval.query import Query, RankedResult, tokenize  # noqa: F401
from jeonse_rag.retrieval.scorer import score_article, score_text  # noqa: F401
from jeonse_rag.retrieval.law_ranker import (  # noqa: F401
    StatuteSelection,
    rank_articles,
    rank_statutes,
    select_laws,
)
from jeonse_rag.retrieval.case_ranker import rank_cases  # noqa: F401
from jeonse_rag.retrieval.query_classifier import classify_query, extract_keywords  # noqa: F401
