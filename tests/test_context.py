"""
tests/test_context.py
======================
Context Assembly Tests — assembler guardrails and the build_context facade

Test categories:
    1. No-evidence notice (exact text, no citations)
    2. Statute and article rendering (short content, truncation, markers)
    3. Amount tables (verbatim values, region ordering)
    4. Case rendering (case-number marker, summary length, lessons)
    5. Opening / closing guardrails and retrieval facts
    6. build_context facade (empty corpus, missing files, failures)
    7. Bundled corpus scenarios

All tests are offline; no language model is called.
"""

import json
import os
import re
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from jeonse_rag.context.assembler import (
    ARTICLE_CONTENT_LIMIT,
    CASE_SUMMARY_LIMIT,
    CASES_HEADER,
    CITE_ONLY_INSTRUCTION,
    CLOSING_REMINDER,
    CONTEXT_HEADER,
    MISSING_AMOUNT,
    MISSING_ARTICLE_TEXT,
    MISSING_STATUTE_ARTICLES,
    NO_EVIDENCE_NOTICE,
    assemble_context,
)
from jeonse_rag.corpus.models import Article, CaseSummary, RegionAmount, Statute
from jeonse_rag.corpus.store import Corpus, CorpusStore
from jeonse_rag.rag_service import build_context, retrieve
from jeonse_rag.retrieval.law_ranker import StatuteSelection
from jeonse_rag.retrieval.query import RankedResult

_ARTICLE_NUMBER_RE = re.compile(r"제\d+조(?:의\d+)?")


# ===================================================================
# Helpers
# ===================================================================

def _selection(statute: Statute, articles: tuple[Article, ...] | None = None) -> StatuteSelection:
    chosen = statute.articles if articles is None else articles
    return StatuteSelection(
        statute=statute,
        score=10,
        articles=tuple(RankedResult(item=a, score=1) for a in chosen),
    )


def _ranked_cases(*cases: CaseSummary) -> list[RankedResult[CaseSummary]]:
    return [RankedResult(item=c, score=2) for c in cases]


def _lease_act(*articles: Article, short_name: str | None = "주임법") -> Statute:
    return Statute(
        id="lease-act",
        name="주택임대차보호법",
        short_name=short_name,
        keywords=("보증금",),
        articles=articles,
    )


_ARTICLE_3_2 = Article(
    number="제3조의2",
    title="보증금의 회수",
    content="대항요건과 임대차계약증서상의 확정일자를 갖춘 임차인은 경매 시 후순위권리자보다 우선하여 보증금을 변제받을 권리가 있다.",
    description="전입신고와 확정일자를 모두 갖추면 먼저 보증금을 받을 수 있습니다.",
)

_AMOUNTS_ARTICLE = Article(
    number="제8조",
    title="보증금 중 일정액의 보호",
    content="임차인은 보증금 중 일정액을 다른 담보물권자보다 우선하여 변제받을 권리가 있다.",
    amounts_as_of="2024년",
    amounts=(
        RegionAmount(region="그_외_지역", deposit_cap="7,500만원", priority_amount="2,500만원"),
        RegionAmount(region="제주특별자치도", deposit_cap="9,000만원", priority_amount=None),
        RegionAmount(region="서울", deposit_cap="1억 6,500만원", priority_amount="5,500만원"),
    ),
)


# ===================================================================
# 1. No-evidence notice
# ===================================================================

class TestNoEvidence(unittest.TestCase):

    def test_exact_notice(self):
        result = assemble_context([], [])
        self.assertEqual(result.text, NO_EVIDENCE_NOTICE)
        self.assertFalse(result.evidence_found)
        self.assertEqual(result.statute_ids, ())
        self.assertEqual(result.case_ids, ())

    def test_notice_text(self):
        self.assertEqual(
            NO_EVIDENCE_NOTICE,
            "\n\n---\n## [관련 법령 및 판례]\n"
            "※ 이 질문과 직접 관련된 법령 데이터가 검색되지 않았습니다. "
            "일반 법률 지식으로만 답변하고, 구체적 조문 번호는 인용하지 마세요.\n"
            "---\n",
        )

    def test_notice_contains_no_citation(self):
        self.assertIsNone(_ARTICLE_NUMBER_RE.search(NO_EVIDENCE_NOTICE))
        self.assertNotIn("판결", NO_EVIDENCE_NOTICE)


# ===================================================================
# 2. Statute and article rendering
# ===================================================================

class TestArticleRendering(unittest.TestCase):

    def test_header_with_short_name(self):
        text = assemble_context([_selection(_lease_act(_ARTICLE_3_2))], []).text
        self.assertIn("### 주택임대차보호법 (약칭: 주임법)\n\n", text)

    def test_header_without_short_name(self):
        text = assemble_context([_selection(_lease_act(_ARTICLE_3_2, short_name=None))], []).text
        self.assertIn("### 주택임대차보호법\n\n", text)
        self.assertNotIn("약칭", text)

    def test_usable_content_rendered(self):
        text = assemble_context([_selection(_lease_act(_ARTICLE_3_2))], []).text
        self.assertIn(f"**제3조의2(보증금의 회수)**\n{_ARTICLE_3_2.content}\n\n", text)
        self.assertNotIn(_ARTICLE_3_2.description, text)

    def test_placeholder_content_falls_back_to_description(self):
        article = Article(
            number="제25조",
            title="공공주택사업자의 우선매수",
            content="내용",
            description="피해자가 우선매수권을 공공주택사업자에게 양도할 수 있습니다.",
        )
        text = assemble_context([_selection(_lease_act(article))], []).text
        self.assertIn(
            "**제25조(공공주택사업자의 우선매수)**\n피해자가 우선매수권을 공공주택사업자에게 양도할 수 있습니다.\n",
            text,
        )
        self.assertNotIn("**\n내용\n", text)

    def test_twenty_char_boundary(self):
        at_limit = Article(number="제1조", content="가" * 20, description="설명문")
        over_limit = Article(number="제2조", content="나" * 21, description="설명문")
        text = assemble_context([_selection(_lease_act(at_limit, over_limit))], []).text
        self.assertIn("**제1조**\n설명문\n", text)
        self.assertIn("**제2조**\n" + "나" * 21 + "\n", text)

    def test_missing_text_marker(self):
        article = Article(number="제9조", title="빈 조문", content="")
        text = assemble_context([_selection(_lease_act(article))], []).text
        self.assertIn(f"**제9조(빈 조문)**\n{MISSING_ARTICLE_TEXT}\n", text)

    def test_padded_content_is_stripped_before_length_check(self):
        """Whitespace padding does not make short content usable."""
        article = Article(number="제1조", content=" " * 30 + "보증금", description="보증금 설명")
        text = assemble_context([_selection(_lease_act(article))], []).text
        self.assertIn("**제1조**\n보증금 설명\n", text)
        self.assertNotIn("    보증금", text)

    def test_usable_content_rendered_stripped(self):
        article = Article(number="제2조", content="\n   " + "나" * 25 + "   \n")
        text = assemble_context([_selection(_lease_act(article))], []).text
        self.assertIn("**제2조**\n" + "나" * 25 + "\n\n", text)

    def test_statute_without_articles_gets_marker(self):
        statute = Statute(id="s", name="가상법", keywords=("보증금",))
        text = assemble_context([_selection(statute)], []).text
        self.assertIn(f"### 가상법\n\n{MISSING_STATUTE_ARTICLES}\n\n", text)
        self.assertNotIn("### 가상법\n\n" + CLOSING_REMINDER, text)

    def test_statute_with_amounts_only_needs_no_marker(self):
        statute = _lease_act(_AMOUNTS_ARTICLE)
        text = assemble_context([_selection(statute, ())], []).text
        self.assertIn("5,500만원", text)
        self.assertNotIn(MISSING_STATUTE_ARTICLES, text)

    def test_content_truncated(self):
        article = Article(number="제4조", content="가" * 700)
        text = assemble_context([_selection(_lease_act(article))], []).text
        self.assertIn("가" * ARTICLE_CONTENT_LIMIT + "\n", text)
        self.assertNotIn("가" * (ARTICLE_CONTENT_LIMIT + 1), text)

    def test_only_selected_articles_rendered(self):
        other = Article(number="제4조", title="임대차기간 등", content="기간을 정하지 아니한 임대차는 그 기간을 2년으로 본다.")
        statute = _lease_act(_ARTICLE_3_2, other)
        text = assemble_context([_selection(statute, (_ARTICLE_3_2,))], []).text
        self.assertIn("제3조의2", text)
        self.assertNotIn("제4조", text)

    def test_no_invented_article_numbers(self):
        statute = _lease_act(_ARTICLE_3_2, _AMOUNTS_ARTICLE)
        text = assemble_context([_selection(statute)], []).text
        allowed = {"제3조의2", "제8조"}
        self.assertTrue(set(_ARTICLE_NUMBER_RE.findall(text)) <= allowed)


# ===================================================================
# 3. Amount tables
# ===================================================================

class TestAmountTable(unittest.TestCase):

    def setUp(self):
        statute = _lease_act(_ARTICLE_3_2, _AMOUNTS_ARTICLE)
        self.text = assemble_context([_selection(statute)], []).text

    def test_header(self):
        self.assertIn("**소액임차인 최우선변제 기준 (2024년 현재, 제8조):**\n", self.text)

    def test_values_verbatim(self):
        self.assertIn(
            "- 서울특별시: 보증금 1억 6,500만원 이하인 경우 최대 5,500만원 우선변제\n", self.text
        )
        self.assertIn(
            "- 그 외 지역: 보증금 7,500만원 이하인 경우 최대 2,500만원 우선변제\n", self.text
        )

    def test_known_regions_first_then_unknown(self):
        seoul = self.text.index("- 서울특별시:")
        rest = self.text.index("- 그 외 지역:")
        jeju = self.text.index("- 제주특별자치도:")
        self.assertLess(seoul, rest)
        self.assertLess(rest, jeju)

    def test_missing_amount_marker(self):
        self.assertIn(
            f"- 제주특별자치도: 보증금 9,000만원 이하인 경우 최대 {MISSING_AMOUNT} 우선변제\n",
            self.text,
        )

    def test_header_without_reference_date(self):
        article = Article(
            number="제8조",
            content="임차인은 보증금 중 일정액을 우선하여 변제받을 권리가 있다.",
            amounts=(RegionAmount(region="서울", deposit_cap="1억원", priority_amount="3,000만원"),),
        )
        text = assemble_context([_selection(_lease_act(article))], []).text
        self.assertIn("**소액임차인 최우선변제 기준 (제8조):**\n", text)

    def test_table_shown_even_when_article_not_selected(self):
        statute = _lease_act(_ARTICLE_3_2, _AMOUNTS_ARTICLE)
        text = assemble_context([_selection(statute, (_ARTICLE_3_2,))], []).text
        self.assertIn("5,500만원", text)


# ===================================================================
# 4. Case rendering
# ===================================================================

class TestCaseRendering(unittest.TestCase):

    def test_case_with_number(self):
        case = CaseSummary(
            id="c1",
            title="대법원 2013다27831 판결",
            type="우선변제",
            case_number="2013다27831",
            summary="확정일자를 갖춘 임차인은 배당요구를 하여야 우선변제를 받을 수 있다.",
        )
        text = assemble_context([], _ranked_cases(case)).text
        self.assertIn(CASES_HEADER, text)
        self.assertIn("**대법원 2013다27831 판결** [2013다27831]\n", text)
        self.assertIn("판결 요지: 확정일자를 갖춘 임차인은", text)

    def test_missing_case_number_marker(self):
        case = CaseSummary(id="c2", title="임차권등기 전 이사 사례", summary="등기 완료 전에 이사하여 대항력을 잃었다.")
        text = assemble_context([], _ranked_cases(case)).text
        self.assertIn("**임차권등기 전 이사 사례** [판례번호 미제공]\n", text)

    def test_summary_truncated(self):
        case = CaseSummary(id="c3", title="긴 요지", case_number="2020다1", summary="다" * 400)
        text = assemble_context([], _ranked_cases(case)).text
        self.assertIn("판결 요지: " + "다" * CASE_SUMMARY_LIMIT + "\n", text)
        self.assertNotIn("다" * (CASE_SUMMARY_LIMIT + 1), text)

    def test_at_most_two_lessons(self):
        case = CaseSummary(
            id="c4",
            title="교훈 사례",
            case_number="2021다2",
            summary="요지",
            lessons=("첫째 교훈", "둘째 교훈", "셋째 교훈"),
        )
        text = assemble_context([], _ranked_cases(case)).text
        self.assertIn("실무 포인트: 첫째 교훈 / 둘째 교훈\n", text)
        self.assertNotIn("셋째 교훈", text)

    def test_no_lessons_line_when_empty(self):
        case = CaseSummary(id="c5", title="무교훈", case_number="2022다3", summary="요지")
        text = assemble_context([], _ranked_cases(case)).text
        self.assertNotIn("실무 포인트", text)


# ===================================================================
# 5. Guardrails and retrieval facts
# ===================================================================

class TestGuardrails(unittest.TestCase):

    def setUp(self):
        case = CaseSummary(id="c1", title="사례", case_number="2013다27831", summary="요지")
        self.result = assemble_context(
            [_selection(_lease_act(_ARTICLE_3_2))], _ranked_cases(case)
        )

    def test_opening_instruction(self):
        self.assertTrue(self.result.text.startswith(CONTEXT_HEADER + CITE_ONLY_INSTRUCTION))

    def test_closing_reminder(self):
        self.assertTrue(self.result.text.endswith(CLOSING_REMINDER))

    def test_statutes_before_cases(self):
        self.assertLess(
            self.result.text.index("### 주택임대차보호법"),
            self.result.text.index(CASES_HEADER),
        )

    def test_retrieval_facts(self):
        self.assertTrue(self.result.evidence_found)
        self.assertEqual(self.result.statute_ids, ("lease-act",))
        self.assertEqual(self.result.case_ids, ("c1",))

    def test_cases_only(self):
        case = CaseSummary(id="c9", title="사례", summary="요지")
        result = assemble_context([], _ranked_cases(case))
        self.assertTrue(result.evidence_found)
        self.assertTrue(result.text.endswith(CLOSING_REMINDER))
        self.assertEqual(result.statute_ids, ())

    def test_laws_only_has_no_cases_header(self):
        result = assemble_context([_selection(_lease_act(_ARTICLE_3_2))], [])
        self.assertNotIn(CASES_HEADER, result.text)


# ===================================================================
# 6. build_context facade
# ===================================================================

class TestBuildContext(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_empty_corpus_returns_notice(self):
        store = CorpusStore.from_corpus(Corpus())
        self.assertEqual(build_context("확정일자", store), NO_EVIDENCE_NOTICE)

    def test_missing_files_return_notice(self):
        store = CorpusStore(
            laws_path=Path(self.tmpdir) / "missing-laws.json",
            cases_path=Path(self.tmpdir) / "missing-cases.json",
        )
        self.assertEqual(build_context("확정일자 보증금", store), NO_EVIDENCE_NOTICE)
        self.assertEqual(len(store.load_errors()), 2)

    def test_keyword_only_statute_never_yields_bare_header(self):
        store = CorpusStore.from_corpus(Corpus(statutes=(
            Statute(id="s", name="가상법", keywords=("보증금",)),
        )))
        result = retrieve("보증금", store)
        self.assertTrue(result.evidence_found)
        self.assertIn(f"### 가상법\n\n{MISSING_STATUTE_ARTICLES}\n", result.text)
        self.assertTrue(result.text.endswith(CLOSING_REMINDER))

    def test_unrelated_query_returns_notice(self):
        laws_path = Path(self.tmpdir) / "laws.json"
        cases_path = Path(self.tmpdir) / "cases.json"
        laws_path.write_text(json.dumps({"laws": [{
            "id": "lease-act",
            "name": "주택임대차보호법",
            "keywords": ["보증금"],
            "articles": [{"number": "제3조", "content": "주택의 인도와 주민등록을 마친 때에는 효력이 생긴다."}],
        }]}, ensure_ascii=False), encoding="utf-8")
        cases_path.write_text(json.dumps({"cases": []}), encoding="utf-8")

        store = CorpusStore(laws_path=laws_path, cases_path=cases_path)
        self.assertEqual(build_context("날씨 어때요", store), NO_EVIDENCE_NOTICE)
        self.assertNotEqual(build_context("보증금", store), NO_EVIDENCE_NOTICE)

    def test_none_query(self):
        store = CorpusStore()
        self.assertEqual(build_context(None, store), NO_EVIDENCE_NOTICE)
        self.assertEqual(build_context("", store), NO_EVIDENCE_NOTICE)

    def test_idempotent(self):
        store = CorpusStore()
        first = build_context("확정일자 보증금", store)
        self.assertEqual(first, build_context("확정일자 보증금", store))

    def test_internal_failure_degrades_to_notice(self):
        store = CorpusStore()
        with patch("jeonse_rag.rag_service.select_laws", side_effect=RuntimeError("boom")):
            result = retrieve("확정일자", store)
        self.assertEqual(result.text, NO_EVIDENCE_NOTICE)
        self.assertFalse(result.evidence_found)

    def test_uses_default_store(self):
        store = CorpusStore.from_corpus(Corpus())
        with patch("jeonse_rag.corpus.store._default_store", store):
            self.assertEqual(build_context("확정일자"), NO_EVIDENCE_NOTICE)


# ===================================================================
# 7. Bundled corpus scenarios
# ===================================================================

class TestBundledScenarios(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.store = CorpusStore()

    def test_fixed_date_question(self):
        result = retrieve("확정일자 받으면 보증금 보호되나요", self.store)
        self.assertTrue(result.evidence_found)
        self.assertEqual(result.statute_ids[0], "housing-lease-protection-act")
        self.assertIn("### 주택임대차보호법 (약칭: 주임법)", result.text)
        self.assertIn("**제3조의2(보증금의 회수)**", result.text)
        self.assertIn(
            "- 서울특별시: 보증금 1억 6,500만원 이하인 경우 최대 5,500만원 우선변제\n",
            result.text,
        )

    def test_lease_registration_case_gets_number_marker(self):
        text = build_context("임차권등기 했는데 이사해도 되나요", self.store)
        self.assertIn("**임차권등기 전 이사로 대항력 상실 사례** [판례번호 미제공]\n", text)

    def test_unusable_case_never_cited(self):
        for query in ("기타 요지 미수집 사례", "확정일자 보증금 경매 기타"):
            self.assertNotIn("요지 미수집 사례", build_context(query, self.store))

    def test_placeholder_article_shows_description(self):
        text = build_context("우선매수권 LH", self.store)
        self.assertIn(
            "**제25조(공공주택사업자의 우선매수)**\n피해자가 우선매수권을 LH",
            text,
        )

    def test_unrelated_question(self):
        self.assertEqual(build_context("오늘 점심 메뉴 추천해줘", self.store), NO_EVIDENCE_NOTICE)


if __name__ == "__main__":
    unittest.main()
