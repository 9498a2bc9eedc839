"""
jeonse_rag/retrieval/scorer.py
===============================
Relevance Scorer — Jeonse RAG

Responsibility:
    - Score a lowercased text block against query tokens
    - Score = number of distinct query tokens found as substrings

Recall is favoured over precision: the corpus holds tens of documents and
the rankers keep only the top few, so loose substring hits are cheap.

This module does NOT:
    - Stem, normalize or expand tokens
    - Weight tokens
    - Know about statutes or cases beyond their score_text
"""

from jeonse_rag.corpus.models import Article


def score_text(text: str, tokens: tuple[str, ...]) -> int:
    """
    Count tokens that occur anywhere in ``text``.

    Each token contributes at most 1 regardless of how often it occurs.

    Args:
        text: Lowercased text to search.
        tokens: Lowercased query tokens.

    Returns:
        Non-negative integer score.
    """
    return sum(1 for token in tokens if token in text)


def score_article(article: Article, tokens: tuple[str, ...]) -> int:
    """Score an article's title, content and description together."""
    return score_text(article.score_text, tokens)
