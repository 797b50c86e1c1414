#!/usr/bin/env python3
# =============================================================
# text.py
# -------------------------------------------------------------
# Text extraction and chunking for the ingestion loader:
# - HTML -> readable text (script/style dropped)
# - NFKC + entity unescape + whitespace cleanup
# - fixed-size character windows with overlap
# =============================================================

from __future__ import annotations

import html
import re
import unicodedata
from typing import List

from bs4 import BeautifulSoup

# -------- regexes
_WS = re.compile(r"[ \t]+")
_MULTI_NL = re.compile(r"\n{3,}")
_CTRL = re.compile(r"[\u0000-\u0008\u000b\u000c\u000e-\u001f]")  # keep \n and \t


def html_to_text(markup: str) -> str:
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return soup.get_text(separator="\n", strip=True)


def normalize_text(s: str) -> str:
    s = unicodedata.normalize("NFKC", s)
    s = html.unescape(s)
    s = _CTRL.sub("", s)
    s = _WS.sub(" ", s)
    s = re.sub(r"[ \t]+\n", "\n", s)
    s = _MULTI_NL.sub("\n\n", s)
    return s.strip()


def chunk_text(s: str, chunk_size: int, overlap: int) -> List[str]:
    """Split into windows of ``chunk_size`` chars, each sharing ``overlap`` with the previous."""
    if overlap >= chunk_size > 0:
        raise ValueError(f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})")
    if chunk_size <= 0:
        return [s] if s else []
    n = len(s)
    chunks: List[str] = []
    i = 0
    step = chunk_size - overlap
    while i < n:
        j = min(n, i + chunk_size)
        piece = s[i:j].strip()
        if piece:
            chunks.append(piece)
        if j == n:
            break
        i += step
    return chunks
