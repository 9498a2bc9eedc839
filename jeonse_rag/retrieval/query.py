"""
jeonse_rag/retrieval/query.py
==============================
Query tokenization — Jeonse RAG

A Query is created once per retrieval call and discarded afterwards.
Tokenization is deliberately minimal: lowercase, split on whitespace,
keep tokens of at least two characters. No stemming, no morphological
analysis.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

MIN_TOKEN_LENGTH: int = 2

T = TypeVar("T")


@dataclass(frozen=True)
class Query:
    """Raw query text plus its derived tokens."""

    text: str
    lowered: str
    tokens: tuple[str, ...]

    @classmethod
    def parse(cls, text: str | None) -> "Query":
        raw = text or ""
        lowered = raw.lower()
        return cls(text=raw, lowered=lowered, tokens=tokenize(lowered))


@dataclass(frozen=True)
class RankedResult(Generic[T]):
    """An entity paired with its score for the current call."""

    item: T
    score: int


def tokenize(text: str) -> tuple[str, ...]:
    """
    Lowercase, whitespace-split and drop short tokens.

    Repeated tokens are kept once, in first-occurrence order, so a word
    typed twice does not count twice.
    """
    seen: dict[str, None] = {}
    for token in text.lower().split():
        if len(token) >= MIN_TOKEN_LENGTH:
            seen.setdefault(token, None)
    return tuple(seen)
