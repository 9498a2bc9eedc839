"""
jeonse_rag/retrieval/case_ranker.py
====================================
Case Ranker — Jeonse RAG

Score per usable case:
    2 x (query tokens found in type + title + summary)
    + 3 when the query contains the case type

Cases with neither a summary nor a case number are never ranked.
"""

import logging

from jeonse_rag.corpus.models import CaseSummary
from jeonse_rag.retrieval.query import Query, RankedResult
from jeonse_rag.retrieval.scorer import score_text

logger = logging.getLogger("jeonse_rag.retrieval.case_ranker")

TOKEN_MATCH_WEIGHT: int = 2
TYPE_MATCH_WEIGHT: int = 3
MAX_CASES: int = 3


def score_case(case: CaseSummary, query: Query) -> int:
    score = TOKEN_MATCH_WEIGHT * score_text(case.score_text, query.tokens)
    # An absent type never matches.
    if case.type and case.type.lower() in query.lowered:
        score += TYPE_MATCH_WEIGHT
    return score


def rank_cases(
    cases: tuple[CaseSummary, ...] | list[CaseSummary],
    query: Query,
    limit: int = MAX_CASES,
) -> list[RankedResult[CaseSummary]]:
    """
    Rank usable cases by score, dropping zero scores.

    Returns:
        At most ``limit`` results, highest first; ties keep corpus order.
    """
    usable = [c for c in cases if c.is_usable]
    scored = [RankedResult(item=c, score=score_case(c, query)) for c in usable]
    ranked = sorted((r for r in scored if r.score > 0), key=lambda r: r.score, reverse=True)[:limit]

    logger.info(
        "Case ranking: %d usable of %d, kept %s",
        len(usable),
        len(cases),
        [(r.item.id, r.score) for r in ranked],
    )
    return ranked
