# Local development vector store: FAISS index + ids.npy row mapping +
# SQLite table holding the text. Layout under FAISS_DIR:
#   faiss.index   flat index (inner product for dot_product/cosine, L2 otherwise)
#   ids.npy       FAISS row -> documents.id
#   documents.db  documents(id TEXT PRIMARY KEY, text TEXT, source TEXT)

from __future__ import annotations

import sqlite3
import threading
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import faiss
import numpy as np

from portfolio_bot.errors import ErrorKind, ProviderError

PROVIDER = "faiss"


class FaissVectorStore:
    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.index_path = self.directory / "faiss.index"
        self.ids_path = self.directory / "ids.npy"
        self.db_path = self.directory / "documents.db"

        self._conn: Optional[sqlite3.Connection] = None
        self._faiss_index: Optional[faiss.Index] = None
        self._faiss_ids: Optional[List[str]] = None
        # requests run the store from worker threads
        self._lock = threading.Lock()

    # -------------------------
    # Connections / loaders
    # -------------------------
    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path.as_posix(), check_same_thread=False)
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS documents(id TEXT PRIMARY KEY, text TEXT, source TEXT);"
            )
        return self._conn

    def _load_faiss_index(self) -> faiss.Index:
        if self._faiss_index is None:
            if not self.index_path.exists():
                raise ProviderError(ErrorKind.UNAVAILABLE, f"no index at {self.index_path}", PROVIDER)
            self._faiss_index = faiss.read_index(self.index_path.as_posix())
        return self._faiss_index

    def _load_faiss_ids(self) -> List[str]:
        if self._faiss_ids is None:
            if self.ids_path.exists():
                self._faiss_ids = np.load(self.ids_path.as_posix()).astype(str).tolist()
            else:
                self._faiss_ids = []
        return self._faiss_ids

    def _save(self) -> None:
        faiss.write_index(self._faiss_index, self.index_path.as_posix())
        np.save(self.ids_path.as_posix(), np.array(self._faiss_ids, dtype=str))

    # -------------------------
    # DB helpers
    # -------------------------
    def _fetch_doc_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        row = self._get_conn().execute(
            "SELECT id, text, source FROM documents WHERE id = ? LIMIT 1;",
            (doc_id,),
        ).fetchone()
        return {"_id": row[0], "text": row[1], "source": row[2]} if row else None

    # -------------------------
    # Public API
    # -------------------------
    def similarity_search(self, vector: Sequence[float], k: int) -> List[Dict[str, Any]]:
        with self._lock:
            index = self._load_faiss_index()
            ids = self._load_faiss_ids()
            if len(vector) != index.d:
                raise ProviderError(
                    ErrorKind.DIMENSION_MISMATCH,
                    f"query vector has dimension {len(vector)}, index expects {index.d}",
                    PROVIDER,
                )
            if index.ntotal == 0:
                return []

            qvec = np.asarray([vector], dtype="float32")
            _, rows = index.search(qvec, min(k, index.ntotal))

            docs: List[Dict[str, Any]] = []
            for row_idx in rows[0]:
                row_idx = int(row_idx)
                if 0 <= row_idx < len(ids):
                    doc = self._fetch_doc_by_id(ids[row_idx])
                    if doc:
                        docs.append(doc)
            return docs

    def fetch(self, k: int) -> List[Dict[str, Any]]:
        with self._lock:
            rows = self._get_conn().execute(
                "SELECT id, text, source FROM documents LIMIT ?;", (k,)
            ).fetchall()
        return [{"_id": r[0], "text": r[1], "source": r[2]} for r in rows]

    def ensure_collection(self, dimension: int, metric: str = "dot_product") -> bool:
        with self._lock:
            self._get_conn()
            if self.index_path.exists():
                return False
            if metric == "euclidean":
                self._faiss_index = faiss.IndexFlatL2(dimension)
            else:
                self._faiss_index = faiss.IndexFlatIP(dimension)
            self._faiss_ids = []
            self._save()
            return True

    def insert_many(self, documents: Sequence[Dict[str, Any]]) -> int:
        if not documents:
            return 0
        with self._lock:
            index = self._load_faiss_index()
            ids = self._load_faiss_ids()
            vecs = np.asarray([d["$vector"] for d in documents], dtype="float32")
            if vecs.shape[1] != index.d:
                raise ProviderError(
                    ErrorKind.DIMENSION_MISMATCH,
                    f"documents have dimension {vecs.shape[1]}, index expects {index.d}",
                    PROVIDER,
                )

            conn = self._get_conn()
            new_ids = [str(d.get("_id") or uuid.uuid4()) for d in documents]
            conn.executemany(
                "INSERT OR REPLACE INTO documents(id, text, source) VALUES (?, ?, ?);",
                [(i, d.get("text", ""), d.get("source", "")) for i, d in zip(new_ids, documents)],
            )
            conn.commit()

            index.add(vecs)
            ids.extend(new_ids)
            self._save()
            return len(documents)

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None
