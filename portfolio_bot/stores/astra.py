# Hosted vector collection through the Astra DB Data API (JSON over HTTP).
#
#   POST {endpoint}/api/json/v1/{namespace}               -> collection admin
#   POST {endpoint}/api/json/v1/{namespace}/{collection}  -> find / insert
#
# Command failures come back as HTTP 200 with an "errors" list; they are
# turned into ProviderError here so nothing upstream reads error wording.

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import requests

from portfolio_bot.errors import ErrorKind, ProviderError
from portfolio_bot.logger import get_logger

logger = get_logger(__name__)

PROVIDER = "astra"
INSERT_BATCH_SIZE = 20
_DIMENSION_MARKERS = ("dimension", "vector size", "vector_size", "length of vector")


def classify_command_errors(errors: List[Dict[str, Any]]) -> ProviderError:
    """Map a Data API "errors" list to a tagged ProviderError."""
    first = errors[0] if errors else {}
    code = str(first.get("errorCode", "")).upper()
    message = str(first.get("message", "unknown Data API error"))
    lowered = f"{code} {message}".lower()
    if any(m in lowered for m in _DIMENSION_MARKERS) or "VECTOR" in code:
        kind = ErrorKind.DIMENSION_MISMATCH
    elif code.startswith(("RATE_LIMIT", "TOO_MANY_REQUESTS")) or "quota" in lowered:
        kind = ErrorKind.QUOTA
    else:
        kind = ErrorKind.BAD_RESPONSE
    return ProviderError(kind, f"{code or 'ERROR'}: {message}", PROVIDER)


class AstraVectorStore:
    def __init__(
        self,
        api_endpoint: str,
        token: str,
        namespace: str,
        collection: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.keyspace_url = f"{api_endpoint.rstrip('/')}/api/json/v1/{namespace}"
        self.collection_url = f"{self.keyspace_url}/{collection}"
        self.collection = collection
        self.timeout = timeout
        self._token = token
        self._session = session or requests.Session()

    # -------------------------
    # Transport
    # -------------------------
    def _post(self, url: str, command: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"Token": self._token, "Content-Type": "application/json"}
        try:
            resp = self._session.post(url, json=command, headers=headers, timeout=self.timeout)
        except requests.Timeout as e:
            raise ProviderError(ErrorKind.TIMEOUT, str(e), PROVIDER) from e
        except requests.RequestException as e:
            raise ProviderError(ErrorKind.UNAVAILABLE, str(e), PROVIDER) from e

        if resp.status_code == 429:
            raise ProviderError(ErrorKind.QUOTA, resp.text[:200], PROVIDER)
        if resp.status_code >= 400:
            raise ProviderError(ErrorKind.UNAVAILABLE, f"HTTP {resp.status_code}: {resp.text[:200]}", PROVIDER)

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(ErrorKind.BAD_RESPONSE, "response body is not JSON", PROVIDER) from e

        if data.get("errors"):
            raise classify_command_errors(data["errors"])
        return data

    def _find(self, options: Dict[str, Any], sort: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        body: Dict[str, Any] = {"filter": {}, "options": options}
        if sort:
            body["sort"] = sort
        data = self._post(self.collection_url, {"find": body})
        docs = (data.get("data") or {}).get("documents")
        if docs is None:
            raise ProviderError(ErrorKind.BAD_RESPONSE, "find returned no data.documents", PROVIDER)
        return docs

    # -------------------------
    # Public API
    # -------------------------
    def similarity_search(self, vector: Sequence[float], k: int) -> List[Dict[str, Any]]:
        return self._find({"limit": k}, sort={"$vector": list(vector)})

    def fetch(self, k: int) -> List[Dict[str, Any]]:
        return self._find({"limit": k})

    def list_collections(self) -> List[str]:
        data = self._post(self.keyspace_url, {"findCollections": {}})
        return list((data.get("status") or {}).get("collections") or [])

    def ensure_collection(self, dimension: int, metric: str = "dot_product") -> bool:
        if self.collection in self.list_collections():
            logger.info("Collection %s already exists, skipping creation.", self.collection)
            return False
        self._post(
            self.keyspace_url,
            {
                "createCollection": {
                    "name": self.collection,
                    "options": {"vector": {"dimension": dimension, "metric": metric}},
                }
            },
        )
        logger.info("Collection created: %s (dimension=%d, metric=%s)", self.collection, dimension, metric)
        return True

    def insert_many(self, documents: Sequence[Dict[str, Any]]) -> int:
        inserted = 0
        for start in range(0, len(documents), INSERT_BATCH_SIZE):
            batch = list(documents[start : start + INSERT_BATCH_SIZE])
            data = self._post(self.collection_url, {"insertMany": {"documents": batch}})
            inserted += len((data.get("status") or {}).get("insertedIds") or [])
        return inserted
