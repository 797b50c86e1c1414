# Context retrieval with graceful degradation:
#   1) top-K similarity search
#   2) on a vector-dimension mismatch, an unranked fetch of a few documents
#   3) anything else -> no context
# Never raises; failures are logged and yield an empty result.

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

from portfolio_bot.concurrency import run_blocking
from portfolio_bot.errors import ErrorKind, ProviderError
from portfolio_bot.logger import get_logger
from .types import RetrievalDocument

logger = get_logger(__name__)

CONTEXT_SEPARATOR = "\n\n"


def document_text(doc: Dict[str, Any]) -> str:
    """Prefer a non-empty string ``text``, then ``content``, else the whole
    document as JSON."""
    for key in ("text", "content"):
        value = doc.get(key)
        if isinstance(value, str) and value:
            return value
    return json.dumps(doc, default=str)


def join_context(documents: Sequence[RetrievalDocument]) -> str:
    return CONTEXT_SEPARATOR.join(d.text for d in documents)


class ContextRetriever:
    def __init__(
        self,
        store,
        top_k: int = 5,
        fallback_limit: int = 3,
        timeout: Optional[float] = 30.0,
    ):
        self.store = store
        self.top_k = top_k
        self.fallback_limit = fallback_limit
        self.timeout = timeout

    async def _fallback_fetch(self) -> List[Dict[str, Any]]:
        logger.info("Falling back to non-vector fetch (limit=%d)", self.fallback_limit)
        try:
            return await run_blocking(self.store.fetch, self.fallback_limit, timeout=self.timeout)
        except Exception as e:
            logger.warning("Fallback fetch also failed: %s", e)
            return []

    async def retrieve(self, vector: Sequence[float]) -> List[RetrievalDocument]:
        try:
            raw = await run_blocking(self.store.similarity_search, vector, self.top_k, timeout=self.timeout)
        except ProviderError as e:
            logger.warning("Vector search failed: %s", e)
            raw = await self._fallback_fetch() if e.kind is ErrorKind.DIMENSION_MISMATCH else []
        except Exception as e:
            logger.warning("Vector search failed unexpectedly: %r", e)
            raw = []

        docs = [RetrievalDocument(text=document_text(d)) for d in raw]
        logger.debug("Retrieved %d documents", len(docs))
        return docs

    async def retrieve_context(self, vector: Sequence[float]) -> str:
        return join_context(await self.retrieve(vector))
