# Search layer: retrieval, personas, prompt assembly and canned fallbacks.

from .fallback import FallbackResponder
from .personas import load_persona
from .prompts import GenerationRequest, PromptBuilder
from .retriever import ContextRetriever
from .types import FallbackTable, Notices, Persona, RetrievalDocument

__all__ = [
    "ContextRetriever",
    "FallbackResponder",
    "FallbackTable",
    "GenerationRequest",
    "Notices",
    "Persona",
    "PromptBuilder",
    "RetrievalDocument",
    "load_persona",
]
