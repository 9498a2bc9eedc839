"""
main.py
========
Entry point for the Jeonse RAG consultation service.

Startup order:
    1. ``.env`` is loaded so config.py sees corpus paths, model name and
       chat limits
    2. Root logging is configured; OpenAI / httpx transport loggers are
       held at WARNING so retrieval and chat logs stay readable
    3. The FastAPI app is imported; its lifespan hook loads the statute and
       case corpus once, before the first request, and logs a warning when
       it starts degraded (missing or malformed corpus files)

Run with:
    uvicorn main:app --reload

Environment (see jeonse_rag/config.py):
    OPENAI_API_KEY           required for /api/chat, read per request
    OPENAI_MODEL             default gpt-4o-mini
    JEONSE_RAG_LAWS_PATH     default: bundled jeonse_rag/data/laws
    JEONSE_RAG_CASES_PATH    default: bundled jeonse_rag/data/cases
"""

import logging

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

for _transport_logger in ("openai", "httpx", "httpcore"):
    logging.getLogger(_transport_logger).setLevel(logging.WARNING)

from jeonse_rag.api.routes import app  # noqa: F401, E402

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
