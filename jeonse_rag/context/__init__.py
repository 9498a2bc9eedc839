# jeonse_rag/context/__init__.py
# ===============================
# Context Assembly Layer — Jeonse RAG
#
# Responsibility:
#   - Package ranked evidence into one guarded text block
#   - Surface the "no matching evidence" outcome as a fixed notice
#
# Public API:
#   - assemble_context() — ranked laws + cases → AssembledContext

from jeonse_rag.context.assembler import (  # noqa: F401
    NO_EVIDENCE_NOTICE,
    AssembledContext,
    assemble_context,
)
