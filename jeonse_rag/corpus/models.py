"""
jeonse_rag/corpus/models.py
============================
Corpus Records — Jeonse RAG

Responsibility:
    - Define immutable records for statutes, articles, amount tables,
      case summaries and FAQ entries
    - Build validated records from raw JSON objects (camelCase keys)
    - Make every optional field explicit (None / empty tuple) so that
      downstream code never relies on duck-typed dict access

Raw JSON shapes (as produced by the offline ingestion tooling):
    law:     {"id", "name", "shortName"?, "keywords"?, "summary"?,
              "description"?, "articles"?, "commonQuestions"?}
    article: {"number", "title"?, "content"?, "description"?,
              "amounts"?, "amountsAsOf"?}
    case:    {"id", "title", "type", "caseNumber"?, "court"?,
              "summary"?, "lessons"?}

This module does NOT:
    - Read files (that is store.py)
    - Score or rank anything
    - Rewrite or compute amounts; amount tables are stored verbatim
"""

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger("jeonse_rag.corpus.models")


# Content at or below this length is too short to be shown as statute text.
MIN_USABLE_CONTENT_LENGTH: int = 20


class MalformedEntityError(ValueError):
    """Raised when a raw corpus entry is missing a required field."""

    def __init__(self, entity: str, message: str):
        self.entity = entity
        self.message = message
        super().__init__(f"Malformed {entity}: {message}")


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _optional_str(raw: dict[str, Any], key: str) -> str | None:
    """Return a stripped string value, or None when absent or blank."""
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def _required_str(raw: dict[str, Any], key: str, entity: str) -> str:
    value = _optional_str(raw, key)
    if value is None:
        raise MalformedEntityError(entity, f"missing required field {key!r}")
    return value


def _str_list(raw: dict[str, Any], key: str) -> tuple[str, ...]:
    value = raw.get(key)
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if item is not None)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegionAmount:
    """One row of a small-sum tenant priority repayment table."""

    region: str                   # Raw key from the source table
    deposit_cap: str | None       # 보증금상한, verbatim
    priority_amount: str | None   # 최우선변제액, verbatim


@dataclass(frozen=True)
class Article:
    """One numbered clause of a statute."""

    number: str | None
    title: str | None = None
    content: str = ""
    description: str | None = None
    amounts: tuple[RegionAmount, ...] = ()
    amounts_as_of: str | None = None

    @property
    def has_usable_content(self) -> bool:
        return len(self.content.strip()) > MIN_USABLE_CONTENT_LENGTH

    @property
    def score_text(self) -> str:
        """Title, content and description joined, lowercased."""
        parts = [self.title, self.content, self.description]
        return " ".join(p for p in parts if p).lower()

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Article":
        if not isinstance(raw, dict):
            raise MalformedEntityError(
                "article", f"expected object, got {type(raw).__name__}"
            )
        content = raw.get("content")
        return cls(
            number=_optional_str(raw, "number"),
            title=_optional_str(raw, "title"),
            content=content if isinstance(content, str) else "",
            description=_optional_str(raw, "description"),
            amounts=_parse_amounts(raw.get("amounts")),
            amounts_as_of=_optional_str(raw, "amountsAsOf"),
        )


@dataclass(frozen=True)
class FaqEntry:
    question: str
    answer: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"question": self.question, "answer": self.answer}


@dataclass(frozen=True)
class Statute:
    """A named law instrument with its articles in statutory order."""

    id: str
    name: str
    short_name: str | None = None
    keywords: tuple[str, ...] = ()
    articles: tuple[Article, ...] = ()
    summary: str | None = None
    common_questions: tuple[FaqEntry, ...] = ()

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Statute":
        """
        Build a Statute from a raw law object.

        Articles that are not JSON objects are skipped with a warning;
        the statute itself is still usable.

        Raises:
            MalformedEntityError: If ``id`` or ``name`` is missing.
        """
        if not isinstance(raw, dict):
            raise MalformedEntityError(
                "statute", f"expected object, got {type(raw).__name__}"
            )
        law_id = _required_str(raw, "id", "statute")
        name = _required_str(raw, "name", "statute")

        articles: list[Article] = []
        raw_articles = raw.get("articles")
        for i, raw_article in enumerate(raw_articles if isinstance(raw_articles, list) else []):
            try:
                articles.append(Article.from_dict(raw_article))
            except MalformedEntityError as exc:
                logger.warning("Statute %s: skipping article %d (%s)", law_id, i, exc)

        faqs: list[FaqEntry] = []
        raw_faqs = raw.get("commonQuestions")
        for item in raw_faqs if isinstance(raw_faqs, list) else []:
            if isinstance(item, dict) and _optional_str(item, "question"):
                faqs.append(FaqEntry(
                    question=_optional_str(item, "question"),
                    answer=_optional_str(item, "answer"),
                ))

        return cls(
            id=law_id,
            name=name,
            short_name=_optional_str(raw, "shortName"),
            keywords=_str_list(raw, "keywords"),
            articles=tuple(articles),
            summary=_optional_str(raw, "summary") or _optional_str(raw, "description"),
            common_questions=tuple(faqs),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the camelCase corpus shape."""
        return {
            "id": self.id,
            "name": self.name,
            "shortName": self.short_name,
            "summary": self.summary,
            "keywords": list(self.keywords),
            "articles": [
                {
                    "number": a.number,
                    "title": a.title,
                    "content": a.content,
                    "description": a.description,
                    "amounts": {
                        row.region: {"보증금상한": row.deposit_cap, "최우선변제액": row.priority_amount}
                        for row in a.amounts
                    } or None,
                    "amountsAsOf": a.amounts_as_of,
                }
                for a in self.articles
            ],
            "commonQuestions": [q.to_dict() for q in self.common_questions],
        }


@dataclass(frozen=True)
class CaseSummary:
    """A court decision or practical case summary."""

    id: str
    title: str | None = None
    type: str | None = None
    case_number: str | None = None
    court: str | None = None
    summary: str = ""
    lessons: tuple[str, ...] = ()

    @property
    def is_usable(self) -> bool:
        """A case with neither summary nor case number carries no evidence."""
        return bool(self.summary) or self.case_number is not None

    @property
    def score_text(self) -> str:
        parts = [self.type, self.title, self.summary]
        return " ".join(p for p in parts if p).lower()

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "CaseSummary":
        """
        Raises:
            MalformedEntityError: If ``id`` is missing.
        """
        if not isinstance(raw, dict):
            raise MalformedEntityError(
                "case", f"expected object, got {type(raw).__name__}"
            )
        summary = raw.get("summary")
        return cls(
            id=_required_str(raw, "id", "case"),
            title=_optional_str(raw, "title"),
            type=_optional_str(raw, "type"),
            case_number=_optional_str(raw, "caseNumber"),
            court=_optional_str(raw, "court"),
            summary=summary if isinstance(summary, str) and summary.strip() else "",
            lessons=tuple(lesson for lesson in _str_list(raw, "lessons") if lesson.strip()),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "caseNumber": self.case_number,
            "court": self.court,
            "summary": self.summary,
            "lessons": list(self.lessons),
        }


def _parse_amounts(raw: Any) -> tuple[RegionAmount, ...]:
    """Parse a region → {보증금상한, 최우선변제액} table, keeping source order."""
    if not isinstance(raw, dict):
        return ()
    rows: list[RegionAmount] = []
    for region, entry in raw.items():
        if not isinstance(entry, dict):
            continue
        rows.append(RegionAmount(
            region=str(region),
            deposit_cap=_optional_str(entry, "보증금상한"),
            priority_amount=_optional_str(entry, "최우선변제액"),
        ))
    return tuple(rows)
