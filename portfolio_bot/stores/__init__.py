# Vector-store adapters. Both expose the same surface:
#   similarity_search(vector, k) -> List[Document]
#   fetch(k)                     -> List[Document]
#   ensure_collection(dimension, metric) -> bool (True if created)
#   insert_many(documents)       -> int (inserted count)
# where a Document is a plain dict with an optional "text"/"content" field.

from __future__ import annotations

from typing import Any, Dict, List, Protocol, Sequence

from portfolio_bot.settings import Settings

Document = Dict[str, Any]


class VectorStore(Protocol):
    def similarity_search(self, vector: Sequence[float], k: int) -> List[Document]: ...

    def fetch(self, k: int) -> List[Document]: ...

    def ensure_collection(self, dimension: int, metric: str = "dot_product") -> bool: ...

    def insert_many(self, documents: Sequence[Document]) -> int: ...


def build_vector_store(cfg: Settings) -> VectorStore:
    if cfg.VECTOR_STORE == "faiss":
        from .faiss_store import FaissVectorStore
        return FaissVectorStore(cfg.FAISS_DIR)

    from .astra import AstraVectorStore
    return AstraVectorStore(
        api_endpoint=cfg.ASTRA_DB_API_ENDPOINT,
        token=cfg.ASTRA_DB_APPLICATION_TOKEN,
        namespace=cfg.ASTRA_DB_NAMESPACE,
        collection=cfg.ASTRA_DB_COLLECTION,
        timeout=cfg.PROVIDER_TIMEOUT_SECONDS,
    )


__all__ = ["Document", "VectorStore", "build_vector_store"]
