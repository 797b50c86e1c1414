# Typed data shared by the model clients.

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

Embedding = List[float]
GenerationResult = Tuple[str, Dict[str, Any]]


@dataclass(frozen=True)
class GenerationRequest:
    """One prompt plus the sampling limits it is generated with."""
    prompt: str
    max_output_tokens: int = 500
    temperature: float = 0.7
