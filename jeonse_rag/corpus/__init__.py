# jeonse_rag/corpus/__init__.py
# ==============================
# Corpus Layer — Jeonse RAG
#
# Responsibility:
#   - Typed, immutable statute / article / case records
#   - Load-once corpus store with graceful degradation to an empty corpus
#
# Public API:
#   - CorpusStore          — lazily-initialized corpus handle
#   - get_default_store()  — process-wide store over the configured files

from jeonse_rag.corpus.models import (  # noqa: F401
    Article,
    CaseSummary,
    FaqEntry,
    MalformedEntityError,
    RegionAmount,
    Statute,
)
from jeonse_rag.corpus.store import (  # noqa: F401
    Corpus,
    CorpusStore,
    CorpusUnavailableError,
    get_default_store,
    load_corpus,
)
