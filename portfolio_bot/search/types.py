# Data models for the search layer: what retrieval returns and how a
# persona (prompt template, fallback table, fixed notices) is described.

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class RetrievalDocument:
    """One context snippet returned by the vector store."""
    text: str


@dataclass(frozen=True)
class FallbackTable:
    """Ordered keyword -> response-variant mapping plus the variant texts."""
    keywords: Dict[str, str]
    responses: Dict[str, str]
    default_variant: str = "default"


@dataclass(frozen=True)
class Notices:
    """Fixed user-facing replies for outcomes that are not generated answers."""
    ask_prompt: str
    rate_limited: str
    server_error: str
    invalid_request: str


@dataclass(frozen=True)
class Persona:
    """Who the bot speaks about and how it answers when the pipeline degrades."""
    key: str
    name: str
    template: str
    fallback: FallbackTable
    notices: Notices
    suggestions: List[str] = field(default_factory=list)
