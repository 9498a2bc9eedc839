"""
jeonse_rag/retrieval/law_ranker.py
===================================
Law Ranker — Jeonse RAG

Responsibility:
    - Rank whole statutes against a query (top 3)
    - Within one selected statute, rank its articles (top 8), falling back
      to the first articles when none matches textually

Statute scoring sums three independent signals:
    - Name match:     +10 when the query contains the name or short name
    - Keyword match:  +3 per curated keyword that contains, or is contained
                      in, any query token
    - Article match:  +1 per article scoring above zero

Ordering is stable: equal scores keep corpus order, so output is
deterministic for an unchanged corpus.

Known trade-off: the bidirectional keyword test over-matches on very
short tokens (a two-character token hits every longer keyword containing
it). Kept as is.

This module does NOT:
    - Format text for the language model (that is context/assembler.py)
    - Touch case summaries
"""

import logging
from dataclasses import dataclass

from jeonse_rag.corpus.models import Article, Statute
from jeonse_rag.retrieval.query import Query, RankedResult
from jeonse_rag.retrieval.scorer import score_article

logger = logging.getLogger("jeonse_rag.retrieval.law_ranker")


# ---------------------------------------------------------------------------
# Signal weights and result limits
# ---------------------------------------------------------------------------

NAME_MATCH_WEIGHT: int = 10
KEYWORD_MATCH_WEIGHT: int = 3
ARTICLE_MATCH_WEIGHT: int = 1

MAX_STATUTES: int = 3
MAX_ARTICLES: int = 8
FALLBACK_ARTICLES: int = 5


# ---------------------------------------------------------------------------
# Signal scorers
# ---------------------------------------------------------------------------


def _score_name(statute: Statute, query: Query) -> int:
    names = [statute.name, statute.short_name]
    if any(name and name.lower() in query.lowered for name in names):
        return NAME_MATCH_WEIGHT
    return 0


def _keyword_matches(keyword: str, tokens: tuple[str, ...]) -> bool:
    kw = keyword.strip().lower()
    if not kw:
        return False
    return any(kw in token or token in kw for token in tokens)


def _score_keywords(statute: Statute, query: Query) -> int:
    hits = sum(1 for kw in statute.keywords if _keyword_matches(kw, query.tokens))
    return hits * KEYWORD_MATCH_WEIGHT


def _score_articles(statute: Statute, query: Query) -> int:
    hits = sum(1 for a in statute.articles if score_article(a, query.tokens) > 0)
    return hits * ARTICLE_MATCH_WEIGHT


def score_statute(statute: Statute, query: Query) -> int:
    """Total statute score: name + keyword + article signals."""
    return (
        _score_name(statute, query)
        + _score_keywords(statute, query)
        + _score_articles(statute, query)
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def rank_statutes(
    statutes: tuple[Statute, ...] | list[Statute],
    query: Query,
    limit: int = MAX_STATUTES,
) -> list[RankedResult[Statute]]:
    """
    Rank statutes by total score, dropping zero scores.

    Returns:
        At most ``limit`` results, highest score first; ties keep corpus
        order.
    """
    scored = [RankedResult(item=s, score=score_statute(s, query)) for s in statutes]
    matched = [r for r in scored if r.score > 0]
    ranked = sorted(matched, key=lambda r: r.score, reverse=True)[:limit]

    logger.info(
        "Law ranking: %d/%d statutes matched, kept %s",
        len(matched),
        len(scored),
        [(r.item.id, r.score) for r in ranked],
    )
    return ranked


def rank_articles(
    statute: Statute,
    query: Query,
    limit: int = MAX_ARTICLES,
    fallback: int = FALLBACK_ARTICLES,
) -> list[RankedResult[Article]]:
    """
    Select the articles of one statute to show for this query.

    Articles scoring above zero are returned highest first (ties keep
    statutory order). When none scores, the first ``fallback`` articles
    are returned in declared order with score 0, so a statute matched by
    name or keyword alone still carries grounding text.
    """
    scored = [RankedResult(item=a, score=score_article(a, query.tokens)) for a in statute.articles]
    matched = [r for r in scored if r.score > 0]

    if matched:
        return sorted(matched, key=lambda r: r.score, reverse=True)[:limit]

    logger.debug(
        "No article of %s matched; using first %d articles.", statute.id, fallback
    )
    return scored[:fallback]


@dataclass(frozen=True)
class StatuteSelection:
    """A ranked statute together with the articles chosen for it."""

    statute: Statute
    score: int
    articles: tuple[RankedResult[Article], ...]


def select_laws(
    statutes: tuple[Statute, ...] | list[Statute],
    query: Query,
) -> list[StatuteSelection]:
    """Rank statutes, then pick articles for each selected statute."""
    return [
        StatuteSelection(
            statute=ranked.item,
            score=ranked.score,
            articles=tuple(rank_articles(ranked.item, query)),
        )
        for ranked in rank_statutes(statutes, query)
    ]
