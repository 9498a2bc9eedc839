"""
jeonse_rag/legal_lookup.py
===========================
Corpus Lookup — Jeonse RAG

Read-only views over the corpus for the legal-information screens:
law list, law detail, plain keyword search, case list, FAQs and a fixed
directory of support agencies.

Search here is a simple whole-query filter for browsing. It is NOT the
retrieval ranking used for grounding the language model (see
retrieval/law_ranker.py).
"""

import logging
from typing import Any

from jeonse_rag.corpus.models import Article, Statute
from jeonse_rag.corpus.store import CorpusStore, get_default_store

logger = logging.getLogger("jeonse_rag.legal_lookup")

MAX_MATCHED_ARTICLES: int = 3


# ---------------------------------------------------------------------------
# Support agencies (fixed directory)
# ---------------------------------------------------------------------------

SUPPORT_AGENCIES: list[dict[str, Any]] = [
    {
        "name": "대한법률구조공단",
        "phone": "132",
        "website": "www.klac.or.kr",
        "description": "무료 법률 상담 및 소송 지원",
        "services": ["무료 법률 상담", "소송 지원", "법률 서류 작성 지원"],
        "category": "법률",
    },
    {
        "name": "전세사기피해지원센터",
        "phone": "1533-2020",
        "website": "jeonse.molit.go.kr",
        "description": "전세사기 피해자 원스톱 지원 서비스",
        "services": ["피해자 인정 신청", "주거 지원", "법률 연계"],
        "category": "종합지원",
    },
    {
        "name": "주택도시보증공사(HUG)",
        "phone": "1566-9009",
        "website": "www.khug.or.kr",
        "description": "전세보증보험 및 반환보증 관련",
        "services": ["전세보증금 반환보증", "전세금안심대출", "보증사고 처리"],
        "category": "보증보험",
    },
    {
        "name": "한국주택금융공사(HF)",
        "phone": "1688-8114",
        "website": "www.hf.go.kr",
        "description": "전세지킴보증 및 금융 지원",
        "services": ["전세지킴보증", "보금자리론"],
        "category": "금융",
    },
    {
        "name": "LH 한국토지주택공사",
        "phone": "1600-1004",
        "website": "www.lh.or.kr",
        "description": "공공임대주택 및 이주 지원",
        "services": ["공공임대주택 우선 입주", "전세임대주택", "매입임대주택"],
        "category": "주거",
    },
    {
        "name": "국번없이 경찰",
        "phone": "112",
        "description": "긴급 신고 및 형사 고소 접수",
        "services": ["전세사기 형사 고소", "긴급 출동"],
        "category": "형사",
    },
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _article_mentions(article: Article, needle: str) -> bool:
    return needle in (article.title or "").lower() or needle in article.content.lower()


def _statute_matches(statute: Statute, needle: str) -> bool:
    for keyword in statute.keywords:
        kw = keyword.strip().lower()
        if kw and (needle in kw or kw in needle):
            return True
    if needle in statute.name.lower():
        return True
    return any(_article_mentions(a, needle) for a in statute.articles)


def _law_overview(statute: Statute) -> dict[str, Any]:
    return {
        "id": statute.id,
        "name": statute.name,
        "shortName": statute.short_name,
        "summary": statute.summary,
        "keywords": list(statute.keywords),
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def list_laws(store: CorpusStore | None = None) -> list[dict[str, Any]]:
    """Overview of every statute (no article text)."""
    return [_law_overview(s) for s in (store or get_default_store()).statutes()]


def get_law(law_id: str, store: CorpusStore | None = None) -> dict[str, Any] | None:
    """Full statute including articles, or None when unknown."""
    statute = (store or get_default_store()).get_statute(law_id)
    return statute.to_dict() if statute else None


def search_laws(q: str, store: CorpusStore | None = None) -> list[dict[str, Any]]:
    """
    Filter statutes whose keywords, name or article text mention ``q``.

    Returns:
        One entry per matching statute with up to three matched article
        headers.

    Raises:
        ValueError: If ``q`` is blank.
    """
    needle = (q or "").strip().lower()
    if not needle:
        raise ValueError("Search query must not be empty")

    results: list[dict[str, Any]] = []
    for statute in (store or get_default_store()).statutes():
        if not _statute_matches(statute, needle):
            continue
        matched = [a for a in statute.articles if _article_mentions(a, needle)]
        results.append({
            "id": statute.id,
            "name": statute.name,
            "shortName": statute.short_name,
            "matchedArticles": [
                {"number": a.number, "title": a.title}
                for a in matched[:MAX_MATCHED_ARTICLES]
            ],
        })

    logger.info("Law search %r: %d statutes matched.", q, len(results))
    return results


def list_cases(store: CorpusStore | None = None) -> list[dict[str, Any]]:
    return [c.to_dict() for c in (store or get_default_store()).cases()]


def list_faqs(store: CorpusStore | None = None) -> list[dict[str, Any]]:
    """All statutes' common questions, in corpus order."""
    return [
        faq.to_dict()
        for statute in (store or get_default_store()).statutes()
        for faq in statute.common_questions
    ]
