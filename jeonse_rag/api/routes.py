"""
jeonse_rag/api/routes.py
=========================
HTTP API — Jeonse RAG

Responsibility:
    - Expose read-only corpus views under /api/legal
    - Expose the assembled retrieval context under /api/rag/context
    - Expose chat (blocking and SSE streaming) under /api/chat
    - Translate domain errors into HTTP status codes

Every successful response is ``{"success": true, "data": {...}}``.

This layer does NOT:
    - Rank, score or format evidence
    - Persist sessions or messages; clients send their own history
    - Authenticate or rate-limit requests
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Iterator

from fastapi import FastAPI, HTTPException, Query as QueryParam
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from jeonse_rag import config, legal_lookup
from jeonse_rag.corpus.store import get_default_store
from jeonse_rag.llm.chat import ChatServiceError, generate_chat_response, stream_chat_response
from jeonse_rag.rag_service import retrieve
from jeonse_rag.retrieval.query_classifier import classify_query, extract_keywords

logger = logging.getLogger("jeonse_rag.api")


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class ChatTurn(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    message: str | None = None
    history: list[ChatTurn] = Field(default_factory=list)


class ContextRequest(BaseModel):
    query: str | None = None


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Eager load so the first chat request does not pay for it.
    store = get_default_store()
    corpus = await asyncio.to_thread(store.load)
    if corpus.load_errors:
        logger.warning("Started with degraded corpus: %s", list(corpus.load_errors))
    yield


app = FastAPI(
    title="Jeonse RAG",
    description="Jeonse-fraud legal consultation: grounded retrieval and chat.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _ok(data: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=200, content={"success": True, "data": data})


def _validate_message(message: str | None) -> str:
    """Return the stripped message or raise a 400."""
    if message is None or not message.strip():
        raise HTTPException(
            status_code=400,
            detail={"success": False, "error": "메시지를 입력해주세요.", "code": "INVALID_MESSAGE"},
        )
    if len(message) > config.CHAT_MAX_MESSAGE_LENGTH:
        raise HTTPException(
            status_code=400,
            detail={
                "success": False,
                "error": f"메시지가 너무 깁니다. {config.CHAT_MAX_MESSAGE_LENGTH}자 이내로 입력해주세요.",
                "code": "MESSAGE_TOO_LONG",
            },
        )
    return message.strip()


# ---------------------------------------------------------------------------
# Legal information
# ---------------------------------------------------------------------------


@app.get("/api/legal/laws")
def get_laws():
    return _ok({"laws": legal_lookup.list_laws()})


@app.get("/api/legal/search")
def search_laws(q: str | None = QueryParam(default=None)):
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="검색어(q)가 필요합니다.")
    return _ok({"laws": legal_lookup.search_laws(q), "query": q})


@app.get("/api/legal/laws/{law_id}")
def get_law(law_id: str):
    law = legal_lookup.get_law(law_id)
    if law is None:
        raise HTTPException(status_code=404, detail="법령을 찾을 수 없습니다.")
    return _ok({"law": law})


@app.get("/api/legal/cases")
def get_cases():
    return _ok({"cases": legal_lookup.list_cases()})


@app.get("/api/legal/faq")
def get_faqs():
    return _ok({"faqs": legal_lookup.list_faqs()})


@app.get("/api/legal/support-agencies")
def get_support_agencies():
    return _ok({"agencies": legal_lookup.SUPPORT_AGENCIES})


# ---------------------------------------------------------------------------
# Retrieval context
# ---------------------------------------------------------------------------


@app.post("/api/rag/context")
def get_context(body: ContextRequest):
    result = retrieve(body.query)
    return _ok({
        "context": result.text,
        "evidenceFound": result.evidence_found,
        "statuteIds": list(result.statute_ids),
        "caseIds": list(result.case_ids),
        "topics": classify_query(body.query),
        "keywords": extract_keywords(body.query),
    })


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


@app.post("/api/chat")
async def chat(body: ChatRequest):
    message = _validate_message(body.message)
    history = [turn.model_dump() for turn in body.history]

    try:
        reply = await asyncio.to_thread(generate_chat_response, history, message)
    except ChatServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)

    return _ok({"message": reply})


def _sse(event: dict[str, Any]) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


@app.post("/api/chat/stream")
def chat_stream(body: ChatRequest):
    message = _validate_message(body.message)
    history = [turn.model_dump() for turn in body.history]

    def events() -> Iterator[str]:
        parts: list[str] = []
        try:
            for text in stream_chat_response(history, message):
                parts.append(text)
                yield _sse({"type": "chunk", "text": text})
        except ChatServiceError as exc:
            yield _sse({"type": "error", "error": exc.message})
            return
        yield _sse({"type": "done", "message": "".join(parts)})

    return StreamingResponse(
        events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
