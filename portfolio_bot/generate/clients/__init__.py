# Model clients. Each one exposes:
#   embed(text) -> Embedding
#   generate(request) -> (text, meta)
# and raises ProviderError for provider failures.

from __future__ import annotations

from typing import Protocol

from portfolio_bot.settings import Settings
from ..types import Embedding, GenerationRequest, GenerationResult


class ModelClient(Protocol):
    model: str

    def embed(self, text: str) -> Embedding: ...

    def generate(self, request: GenerationRequest) -> GenerationResult: ...


def build_model_client(cfg: Settings) -> ModelClient:
    """Pick the client for cfg.LLM_PROVIDER; heavy SDKs are imported lazily."""
    overrides = {}
    if cfg.GENERATION_MODEL:
        overrides["model"] = cfg.GENERATION_MODEL
    if cfg.EMBEDDING_MODEL:
        overrides["embed_model"] = cfg.EMBEDDING_MODEL

    if cfg.LLM_PROVIDER == "gemini":
        from .gemini_client import GeminiClient
        return GeminiClient(api_key=cfg.GEMINI_API_KEY, timeout=cfg.PROVIDER_TIMEOUT_SECONDS, **overrides)
    if cfg.LLM_PROVIDER == "openai":
        from .openai_client import OpenAIClient
        return OpenAIClient(
            api_key=cfg.OPENAI_API_KEY,
            dimensions=cfg.VECTOR_DIMENSION,
            timeout=cfg.PROVIDER_TIMEOUT_SECONDS,
            **overrides,
        )
    if cfg.LLM_PROVIDER == "ollama":
        from .ollama_client import OllamaClient
        return OllamaClient(host=cfg.OLLAMA_HOST, timeout=cfg.PROVIDER_TIMEOUT_SECONDS, **overrides)

    from .echo_dev_client import EchoDevClient
    return EchoDevClient(dimension=cfg.VECTOR_DIMENSION)
