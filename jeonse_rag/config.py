"""
jeonse_rag/config.py
=====================
Runtime configuration — Jeonse RAG

All values come from environment variables. ``main.py`` loads ``.env``
with python-dotenv before this module is imported, so a local ``.env``
file and the real process environment behave the same way.

Retrieval weights, top-K counts and truncation lengths are NOT configured
here; they live as constants in the modules that use them.
"""

import os
from pathlib import Path

_PACKAGE_DIR = Path(__file__).resolve().parent
_DEFAULT_DATA_DIR = _PACKAGE_DIR / "data"


# ---------------------------------------------------------------------------
# Corpus sources
# ---------------------------------------------------------------------------

LAWS_PATH: Path = Path(
    os.getenv("JEONSE_RAG_LAWS_PATH", str(_DEFAULT_DATA_DIR / "laws" / "jeonse-fraud-laws.json"))
)
CASES_PATH: Path = Path(
    os.getenv("JEONSE_RAG_CASES_PATH", str(_DEFAULT_DATA_DIR / "cases" / "sample-cases.json"))
)


# ---------------------------------------------------------------------------
# Language model
# ---------------------------------------------------------------------------

OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")


# ---------------------------------------------------------------------------
# Chat request limits
# ---------------------------------------------------------------------------

CHAT_MAX_MESSAGE_LENGTH: int = int(os.getenv("CHAT_MAX_MESSAGE_LENGTH", "2000"))
CHAT_HISTORY_LIMIT: int = int(os.getenv("CHAT_HISTORY_LIMIT", "20"))
