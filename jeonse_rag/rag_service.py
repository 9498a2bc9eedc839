"""
jeonse_rag/rag_service.py
==========================
Retrieval Facade — Jeonse RAG

The only entry point the prompt builder calls:

    build_context(query_text) -> str

Steps:
    1. Tokenize the query
    2. Rank statutes (and their articles) and case summaries
    3. Assemble the guarded context block

Stateless per call; the only state read is the corpus store's cached
collections. Nothing raises past this boundary: an unexpected failure is
logged and degrades to the no-evidence notice, which tells the model to
answer generally and cite nothing.
"""

import logging

from jeonse_rag.context.assembler import NO_EVIDENCE_NOTICE, AssembledContext, assemble_context
from jeonse_rag.corpus.store import CorpusStore, get_default_store
from jeonse_rag.retrieval.case_ranker import rank_cases
from jeonse_rag.retrieval.law_ranker import select_laws
from jeonse_rag.retrieval.query import Query
from jeonse_rag.retrieval.query_classifier import classify_query

logger = logging.getLogger("jeonse_rag.rag_service")


def retrieve(query_text: str | None, store: CorpusStore | None = None) -> AssembledContext:
    """
    Run the full retrieval pipeline for one query.

    Args:
        query_text: Free-text user question. ``None`` is treated as empty.
        store: Corpus handle; the process default when omitted.

    Returns:
        AssembledContext with the context text and the evidence flag.
    """
    try:
        corpus_store = store or get_default_store()
        query = Query.parse(query_text)

        logger.info(
            "Retrieval started: %d tokens, topics=%s",
            len(query.tokens),
            classify_query(query.text),
        )

        laws = select_laws(corpus_store.statutes(), query)
        cases = rank_cases(corpus_store.cases(), query)
        return assemble_context(laws, cases)

    except Exception as exc:
        logger.error("Retrieval failed, returning no-evidence notice: %s", exc, exc_info=True)
        return AssembledContext(text=NO_EVIDENCE_NOTICE, evidence_found=False)


def build_context(query_text: str | None, store: CorpusStore | None = None) -> str:
    """Return the assembled context block for ``query_text``. Never empty."""
    return retrieve(query_text, store).text
