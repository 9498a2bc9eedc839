"""
jeonse_rag/corpus/store.py
===========================
Corpus Store — Jeonse RAG

Responsibility:
    - Load the statute and case collections once per process
    - Serve them as immutable tuples to every retrieval call
    - Serialize concurrent first access so the corpus is loaded at most once
    - Degrade to empty collections when a source is missing or malformed,
      recording the failure instead of raising

The store is a handle: callers receive a CorpusStore (or the process
default from get_default_store()) and read statutes() / cases() from it.

This module does NOT:
    - Score, rank or format anything
    - Write to the corpus (there is no writer after load)
    - Retry failed loads
"""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from jeonse_rag import config
from jeonse_rag.corpus.models import CaseSummary, MalformedEntityError, Statute

logger = logging.getLogger("jeonse_rag.corpus.store")


class CorpusUnavailableError(Exception):
    """Raised internally when a corpus source cannot be read or parsed."""

    def __init__(self, source: str, message: str):
        self.source = source
        self.message = message
        super().__init__(f"Corpus source {source} unavailable: {message}")


@dataclass(frozen=True)
class Corpus:
    """Immutable snapshot of everything retrieval may cite."""

    statutes: tuple[Statute, ...] = ()
    cases: tuple[CaseSummary, ...] = ()
    load_errors: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# File loading
# ---------------------------------------------------------------------------


def _read_collection(path: Path, key: str) -> list[Any]:
    """
    Read ``{key: [...]}`` from a JSON file.

    Raises:
        CorpusUnavailableError: If the file is missing, unreadable, not
            valid JSON, or lacks a list under ``key``.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            payload = json.load(fh)
    except FileNotFoundError:
        raise CorpusUnavailableError(str(path), "file not found")
    except (OSError, UnicodeDecodeError) as exc:
        raise CorpusUnavailableError(str(path), f"read failed: {exc}")
    except json.JSONDecodeError as exc:
        raise CorpusUnavailableError(str(path), f"invalid JSON: {exc}")

    if not isinstance(payload, dict) or not isinstance(payload.get(key), list):
        raise CorpusUnavailableError(
            str(path), f"expected an object with a {key!r} list"
        )
    return payload[key]


def _build_entities(raw_items: list[Any], factory: Callable[[Any], Any], label: str) -> list[Any]:
    """Build records, skipping (and logging) malformed entries."""
    entities = []
    for i, raw in enumerate(raw_items):
        try:
            entities.append(factory(raw))
        except MalformedEntityError as exc:
            logger.warning("Skipping %s entry %d: %s", label, i, exc)
    return entities


def load_corpus(laws_path: Path, cases_path: Path) -> Corpus:
    """
    Load both collections from JSON files.

    Never raises for source problems: a failing collection is left empty
    and the failure message is recorded in ``Corpus.load_errors``.
    """
    errors: list[str] = []

    statutes: list[Statute] = []
    try:
        statutes = _build_entities(
            _read_collection(laws_path, "laws"), Statute.from_dict, "law"
        )
    except CorpusUnavailableError as exc:
        logger.error("Statute corpus load failed: %s", exc)
        errors.append(str(exc))

    cases: list[CaseSummary] = []
    try:
        cases = _build_entities(
            _read_collection(cases_path, "cases"), CaseSummary.from_dict, "case"
        )
    except CorpusUnavailableError as exc:
        logger.error("Case corpus load failed: %s", exc)
        errors.append(str(exc))

    logger.info(
        "Corpus loaded: %d statutes (%d articles), %d cases.",
        len(statutes),
        sum(len(s.articles) for s in statutes),
        len(cases),
    )
    return Corpus(statutes=tuple(statutes), cases=tuple(cases), load_errors=tuple(errors))


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class CorpusStore:
    """
    Lazily-initialized, load-once corpus container.

    Parameters
    ----------
    laws_path, cases_path : Path
        JSON sources. Default to the configured locations.
    loader : callable, optional
        Replaces file loading entirely (must return a Corpus).
    """

    def __init__(
        self,
        laws_path: Path | None = None,
        cases_path: Path | None = None,
        loader: Callable[[], Corpus] | None = None,
    ) -> None:
        self._laws_path = Path(laws_path) if laws_path else config.LAWS_PATH
        self._cases_path = Path(cases_path) if cases_path else config.CASES_PATH
        self._loader = loader
        self._lock = threading.Lock()
        self._corpus: Corpus | None = None

    @classmethod
    def from_corpus(cls, corpus: Corpus) -> "CorpusStore":
        """Wrap an already-built corpus (no file access)."""
        store = cls(loader=lambda: corpus)
        store.load()
        return store

    @property
    def is_loaded(self) -> bool:
        return self._corpus is not None

    def load(self) -> Corpus:
        """Return the corpus, loading it on first call (single flight)."""
        corpus = self._corpus
        if corpus is not None:
            return corpus

        with self._lock:
            if self._corpus is None:
                self._corpus = self._load_once()
            return self._corpus

    def _load_once(self) -> Corpus:
        if self._loader is None:
            return load_corpus(self._laws_path, self._cases_path)
        try:
            return self._loader()
        except Exception as exc:
            logger.error("Corpus loader failed: %s", exc, exc_info=True)
            return Corpus(load_errors=(f"Corpus loader failed: {exc}",))

    def statutes(self) -> tuple[Statute, ...]:
        return self.load().statutes

    def cases(self) -> tuple[CaseSummary, ...]:
        return self.load().cases

    def load_errors(self) -> tuple[str, ...]:
        return self.load().load_errors

    def get_statute(self, law_id: str) -> Statute | None:
        for statute in self.statutes():
            if statute.id == law_id:
                return statute
        return None


# ---------------------------------------------------------------------------
# Process default (singleton, loaded once per process)
# ---------------------------------------------------------------------------

_default_store: CorpusStore | None = None
_default_store_lock = threading.Lock()


def get_default_store() -> CorpusStore:
    """Return the process-wide store over the configured corpus files."""
    global _default_store
    if _default_store is None:
        with _default_store_lock:
            if _default_store is None:
                _default_store = CorpusStore()
    return _default_store
