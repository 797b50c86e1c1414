# load_db.py
# ============================================================
# Populate the vector collection with biography text.
#   1) Make sure the collection exists (dimension 768, dot_product)
#   2) Fetch each source (URL or local file) and strip markup
#   3) Normalize and chunk (512 chars, 100 overlap)
#   4) Embed every chunk and insert {"$vector", "text", "source"}
#
# Usage:
#   portfolio-bot-ingest                      # sources from INGEST_SOURCES
#   portfolio-bot-ingest --source notes.md --source https://example.com/cv
#   portfolio-bot-ingest --dry-run            # extract + chunk only
# ============================================================

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import requests

from portfolio_bot.errors import PortfolioBotError
from portfolio_bot.generate import ModelClient, build_model_client
from portfolio_bot.logger import get_logger
from portfolio_bot.settings import settings
from portfolio_bot.stores import Document, VectorStore, build_vector_store
from .text import chunk_text, html_to_text, normalize_text

logger = get_logger(__name__)

HTML_EXTS = {".html", ".htm"}
USER_AGENT = "portfolio-bot-ingest/0.3"


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def read_source(source: str, timeout: float = 30.0) -> str:
    """Return readable text for a URL or a local .html/.md/.txt file."""
    if is_url(source):
        resp = requests.get(source, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        resp.raise_for_status()
        return html_to_text(resp.text)

    path = Path(source)
    raw = path.read_text(encoding="utf-8", errors="ignore")
    return html_to_text(raw) if path.suffix.lower() in HTML_EXTS else raw


def build_documents(
    client: ModelClient,
    source: str,
    chunks: Sequence[str],
) -> List[Document]:
    return [{"$vector": client.embed(chunk), "text": chunk, "source": source} for chunk in chunks]


def run(
    sources: Sequence[str],
    store: Optional[VectorStore],
    client: Optional[ModelClient],
    chunk_size: int = 512,
    chunk_overlap: int = 100,
    dimension: int = 768,
    metric: str = "dot_product",
    dry_run: bool = False,
) -> Dict[str, float]:
    t0 = time.perf_counter()
    stats = {"sources": 0, "failed_sources": 0, "chunks": 0, "inserted": 0}

    if not dry_run:
        store.ensure_collection(dimension, metric)

    for source in sources:
        try:
            text = normalize_text(read_source(source))
        except (requests.RequestException, OSError) as e:
            logger.warning("Skipping %s: %s", source, e)
            stats["failed_sources"] += 1
            continue

        chunks = chunk_text(text, chunk_size, chunk_overlap)
        stats["sources"] += 1
        stats["chunks"] += len(chunks)
        logger.info("%s -> %d chunks", source, len(chunks))
        if dry_run or not chunks:
            continue

        stats["inserted"] += store.insert_many(build_documents(client, source, chunks))

    stats["elapsed_s"] = round(time.perf_counter() - t0, 2)
    return stats


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Load biography sources into the vector collection.")
    ap.add_argument("--source", action="append", dest="sources", help="URL or file path (repeatable)")
    ap.add_argument("--chunk-size", type=int, default=settings.CHUNK_SIZE)
    ap.add_argument("--chunk-overlap", type=int, default=settings.CHUNK_OVERLAP)
    ap.add_argument("--dimension", type=int, default=settings.VECTOR_DIMENSION)
    ap.add_argument("--metric", choices=["dot_product", "cosine", "euclidean"], default="dot_product")
    ap.add_argument("--dry-run", action="store_true", help="extract and chunk only; no embedding or inserts")
    return ap.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    sources = args.sources or settings.INGEST_SOURCES

    store = client = None
    try:
        if not args.dry_run:
            settings.require_complete()
            store = build_vector_store(settings)
            client = build_model_client(settings)
        stats = run(
            sources,
            store,
            client,
            chunk_size=args.chunk_size,
            chunk_overlap=args.chunk_overlap,
            dimension=args.dimension,
            metric=args.metric,
            dry_run=args.dry_run,
        )
    except PortfolioBotError as e:
        logger.error("Ingestion failed: %s", e)
        return 1

    logger.info(
        "Done: sources=%d failed=%d chunks=%d inserted=%d elapsed=%.2fs",
        stats["sources"], stats["failed_sources"], stats["chunks"], stats["inserted"], stats["elapsed_s"],
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
