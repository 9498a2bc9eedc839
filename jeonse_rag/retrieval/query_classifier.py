"""
jeonse_rag/retrieval/query_classifier.py
=========================================
Query Classifier — Jeonse RAG

Responsibility:
    - Extract canonical legal keywords from a free-text question
      (spacing and synonym variants collapse to one keyword)
    - Label the question with one or more consultation topics

Both functions are rule-based and deterministic. Their output is used for
logging and returned to API callers; it does NOT influence ranking.
"""

import logging
import re

logger = logging.getLogger("jeonse_rag.retrieval.query_classifier")

DEFAULT_TOPIC: str = "일반상담"


# ---------------------------------------------------------------------------
# Keyword patterns: (pattern, canonical keyword)
# ---------------------------------------------------------------------------

_KEYWORD_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"확정일자|확정 일자"), "확정일자"),
    (re.compile(r"전입신고|전입 신고"), "전입신고"),
    (re.compile(r"보증금|전세금"), "보증금"),
    (re.compile(r"대항력"), "대항력"),
    (re.compile(r"우선변제권|우선 변제"), "우선변제권"),
    (re.compile(r"최우선변제|소액임차인"), "최우선변제권"),
    (re.compile(r"임차권등기|임차권 등기"), "임차권등기"),
    (re.compile(r"경매|공매"), "경매"),
    (re.compile(r"HUG|허그|전세보증보험|주택도시보증"), "HUG"),
    (re.compile(r"특별법|전세사기특별법"), "전세사기특별법"),
    (re.compile(r"우선매수권"), "우선매수권"),
    (re.compile(r"근저당|근 저당"), "근저당"),
    (re.compile(r"계약갱신|갱신"), "계약갱신"),
    (re.compile(r"묵시적 갱신|자동갱신"), "묵시적갱신"),
]


# ---------------------------------------------------------------------------
# Topic patterns: (pattern, topic label)
# ---------------------------------------------------------------------------

_TOPIC_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"경매|공매|배당|낙찰"), "경매/공매"),
    (re.compile(r"전입신고|확정일자|대항력"), "대항력"),
    (re.compile(r"보증금 반환|보증금 돌려|돈을 돌려"), "보증금반환"),
    (re.compile(r"임차권등기"), "임차권등기"),
    (re.compile(r"고소|고발|형사"), "형사절차"),
    (re.compile(r"HUG|보증보험|반환보증"), "보증보험"),
    (re.compile(r"특별법|피해자 인정|지원"), "특별법지원"),
    (re.compile(r"계약갱신|갱신거절|묵시적"), "계약갱신"),
]


def extract_keywords(query: str | None) -> list[str]:
    """Return canonical keywords mentioned in the query, in pattern order."""
    text = query or ""
    return [keyword for pattern, keyword in _KEYWORD_PATTERNS if pattern.search(text)]


def classify_query(query: str | None) -> list[str]:
    """
    Label the query with consultation topics.

    Returns:
        Matching topic labels in pattern order, or ``["일반상담"]`` when
        nothing matches.
    """
    text = query or ""
    topics = [topic for pattern, topic in _TOPIC_PATTERNS if pattern.search(text)]
    return topics or [DEFAULT_TOPIC]
