"""
jeonse_rag/context/assembler.py
================================
Context Assembler — Jeonse RAG

Responsibility:
    - Turn ranked statutes / articles / cases into ONE text block that is
      appended to the language model's system prompt
    - Report whether any evidence was found
    - Never imply more legal authority than the data supports

Guardrail contract:
    - No evidence → the fixed NO_EVIDENCE_NOTICE, exactly, and nothing else
    - Evidence → opened by a "cite only what follows" instruction and closed
      by a "cite nothing else, recommend expert verification" reminder
    - Article text shown only when usable (> 20 chars once stripped), else the
      description, else an explicit marker
    - Amount tables copied verbatim, never recomputed or summarized
    - A statute with no article or amount table to show gets an explicit
      marker line, never a bare header
    - A missing case number is printed as an explicit marker, never omitted

Size control is limited to the truncation lengths and the rankers' top-K
counts; there is no token budget.

This module does NOT:
    - Rank or score anything
    - Call the language model
    - Raise; every missing field degrades to a fallback string
"""

import logging
from dataclasses import dataclass

from jeonse_rag.corpus.models import Article, CaseSummary, RegionAmount, Statute
from jeonse_rag.retrieval.law_ranker import StatuteSelection
from jeonse_rag.retrieval.query import RankedResult

logger = logging.getLogger("jeonse_rag.context.assembler")


# ---------------------------------------------------------------------------
# Fixed guardrail strings
# ---------------------------------------------------------------------------

NO_EVIDENCE_NOTICE: str = (
    "\n\n---\n## [관련 법령 및 판례]\n"
    "※ 이 질문과 직접 관련된 법령 데이터가 검색되지 않았습니다. "
    "일반 법률 지식으로만 답변하고, 구체적 조문 번호는 인용하지 마세요.\n"
    "---\n"
)

CONTEXT_HEADER: str = "\n\n---\n## [관련 법령 및 판례]\n"

CITE_ONLY_INSTRUCTION: str = (
    "※ 아래에 제공된 조문과 판례만을 근거로 답변하세요. "
    "아래에 없는 조문 번호나 판례는 절대 인용하지 마세요.\n\n"
)

CLOSING_REMINDER: str = (
    "※ 위 데이터에 없는 법령·판례·수치는 인용하지 말고, 전문가 확인을 안내하세요.\n"
    "---\n"
)

CASES_HEADER: str = "### 관련 판례\n\n"


# ---------------------------------------------------------------------------
# Explicit fallbacks for missing fields
# ---------------------------------------------------------------------------

MISSING_ARTICLE_NUMBER: str = "(조문번호 미제공)"
MISSING_ARTICLE_TEXT: str = "(조문 내용 미제공: 원문 확인 필요)"
MISSING_STATUTE_ARTICLES: str = "(조문 데이터 미제공: 원문 확인 필요)"
MISSING_CASE_TITLE: str = "(사건명 미제공)"
MISSING_CASE_NUMBER: str = " [판례번호 미제공]"
MISSING_CASE_SUMMARY: str = "(판결 요지 미제공)"
MISSING_AMOUNT: str = "(미제공)"


# ---------------------------------------------------------------------------
# Truncation limits
# ---------------------------------------------------------------------------

ARTICLE_CONTENT_LIMIT: int = 600
CASE_SUMMARY_LIMIT: int = 300
MAX_LESSONS: int = 2


# ---------------------------------------------------------------------------
# Amount-table region labels. Known regions print first, in this order
# ---------------------------------------------------------------------------

_REGION_LABELS: dict[str, str] = {
    "서울": "서울특별시",
    "수도권과밀억제권역_세종_용인_화성_김포": "수도권 과밀억제권역·세종·용인·화성·김포",
    "광역시_안산_광주_파주_이천_평택": "광역시·안산·광주·파주·이천·평택",
    "그_외_지역": "그 외 지역",
}


@dataclass(frozen=True)
class AssembledContext:
    """The context block plus machine-readable retrieval facts."""

    text: str
    evidence_found: bool
    statute_ids: tuple[str, ...] = ()
    case_ids: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Section renderers
# ---------------------------------------------------------------------------


def _render_statute_header(statute: Statute) -> str:
    short = f" (약칭: {statute.short_name})" if statute.short_name else ""
    return f"### {statute.name}{short}\n\n"


def _render_article(article: Article) -> str:
    number = article.number or MISSING_ARTICLE_NUMBER
    title = f"({article.title})" if article.title else ""
    lines = f"**{number}{title}**\n"

    if article.has_usable_content:
        lines += f"{article.content.strip()[:ARTICLE_CONTENT_LIMIT]}\n"
    elif article.description:
        lines += f"{article.description}\n"
    else:
        lines += f"{MISSING_ARTICLE_TEXT}\n"
    return lines + "\n"


def _ordered_regions(rows: tuple[RegionAmount, ...]) -> list[RegionAmount]:
    by_key = {row.region: row for row in rows}
    known = [by_key[key] for key in _REGION_LABELS if key in by_key]
    others = [row for row in rows if row.region not in _REGION_LABELS]
    return known + others


def _render_amounts(article: Article) -> str:
    """Render an amount table verbatim; values are never derived."""
    number = article.number or MISSING_ARTICLE_NUMBER
    basis = f"{article.amounts_as_of} 현재, {number}" if article.amounts_as_of else number
    lines = f"**소액임차인 최우선변제 기준 ({basis}):**\n"

    for row in _ordered_regions(article.amounts):
        label = _REGION_LABELS.get(row.region, row.region)
        cap = row.deposit_cap or MISSING_AMOUNT
        amount = row.priority_amount or MISSING_AMOUNT
        lines += f"- {label}: 보증금 {cap} 이하인 경우 최대 {amount} 우선변제\n"
    return lines + "\n"


def _render_statute(selection: StatuteSelection) -> str:
    statute = selection.statute
    block = _render_statute_header(statute)

    body = "".join(_render_article(ranked.item) for ranked in selection.articles)
    body += "".join(_render_amounts(a) for a in statute.articles if a.amounts)

    # A statute matched by name or keyword alone may carry no articles.
    if not body:
        body = f"{MISSING_STATUTE_ARTICLES}\n\n"
    return block + body


def _render_case(case: CaseSummary) -> str:
    title = case.title or MISSING_CASE_TITLE
    number = f" [{case.case_number}]" if case.case_number else MISSING_CASE_NUMBER
    lines = f"**{title}**{number}\n"

    summary = case.summary[:CASE_SUMMARY_LIMIT] if case.summary else MISSING_CASE_SUMMARY
    lines += f"판결 요지: {summary}\n"

    if case.lessons:
        lines += f"실무 포인트: {' / '.join(case.lessons[:MAX_LESSONS])}\n"
    return lines + "\n"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def assemble_context(
    laws: list[StatuteSelection],
    cases: list[RankedResult[CaseSummary]],
) -> AssembledContext:
    """
    Build the evidence block handed to the language model.

    Args:
        laws: Ranked statutes with their selected articles, best first.
        cases: Ranked case summaries, best first.

    Returns:
        AssembledContext. ``text`` is never empty; when both inputs are
        empty it equals NO_EVIDENCE_NOTICE and ``evidence_found`` is False.
    """
    if not laws and not cases:
        logger.info("No evidence found; emitting no-evidence notice.")
        return AssembledContext(text=NO_EVIDENCE_NOTICE, evidence_found=False)

    parts: list[str] = [CONTEXT_HEADER, CITE_ONLY_INSTRUCTION]
    parts.extend(_render_statute(selection) for selection in laws)

    if cases:
        parts.append(CASES_HEADER)
        parts.extend(_render_case(ranked.item) for ranked in cases)

    parts.append(CLOSING_REMINDER)
    text = "".join(parts)

    result = AssembledContext(
        text=text,
        evidence_found=True,
        statute_ids=tuple(s.statute.id for s in laws),
        case_ids=tuple(r.item.id for r in cases),
    )
    logger.info(
        "Context assembled: %d statutes, %d articles, %d cases, %d chars.",
        len(laws),
        sum(len(s.articles) for s in laws),
        len(cases),
        len(text),
    )
    return result
