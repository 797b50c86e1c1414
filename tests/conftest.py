# Shared fakes for the pipeline, retriever and endpoint tests.

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from portfolio_bot.errors import ErrorKind, ProviderError
from portfolio_bot.pipeline import AnswerPipeline
from portfolio_bot.ratelimit import RateLimiter
from portfolio_bot.search import ContextRetriever, FallbackResponder, PromptBuilder, load_persona


class FakeModelClient:
    def __init__(
        self,
        vector: Optional[List[float]] = None,
        embed_error: Optional[Exception] = None,
        text: str = "Prince builds full-stack apps.",
        generate_error: Optional[Exception] = None,
    ):
        self.model = "fake"
        self.vector = vector if vector is not None else [0.1, 0.2, 0.3]
        self.embed_error = embed_error
        self.text = text
        self.generate_error = generate_error
        self.embed_calls: List[str] = []
        self.generate_calls: List[Any] = []

    def embed(self, text):
        self.embed_calls.append(text)
        if self.embed_error:
            raise self.embed_error
        return self.vector

    def generate(self, request):
        self.generate_calls.append(request)
        if self.generate_error:
            raise self.generate_error
        return self.text, {"engine": "fake"}


class FakeStore:
    def __init__(
        self,
        search_docs: Optional[List[Dict[str, Any]]] = None,
        search_error: Optional[Exception] = None,
        fetch_docs: Optional[List[Dict[str, Any]]] = None,
        fetch_error: Optional[Exception] = None,
    ):
        self.search_docs = search_docs or []
        self.search_error = search_error
        self.fetch_docs = fetch_docs or []
        self.fetch_error = fetch_error
        self.search_calls: List[tuple] = []
        self.fetch_calls: List[int] = []

    def similarity_search(self, vector, k):
        self.search_calls.append((list(vector), k))
        if self.search_error:
            raise self.search_error
        return self.search_docs

    def fetch(self, k):
        self.fetch_calls.append(k)
        if self.fetch_error:
            raise self.fetch_error
        return self.fetch_docs[:k]


class CountingRateLimiter(RateLimiter):
    def __init__(self):
        super().__init__(min_interval=0)
        self.calls = 0

    async def acquire(self):
        self.calls += 1
        return await super().acquire()


def dimension_error():
    return ProviderError(ErrorKind.DIMENSION_MISMATCH, "vector length 3 != 768", "fake")


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def persona():
    return load_persona("prince-pal")


@pytest.fixture
def make_pipeline(persona):
    def _make(client=None, store=None, limiter=None, fallback=None, timeout=5.0):
        return AnswerPipeline(
            model_client=client or FakeModelClient(),
            retriever=ContextRetriever(store or FakeStore(), top_k=5, fallback_limit=3, timeout=timeout),
            prompt_builder=PromptBuilder(persona.template),
            fallback=fallback or FallbackResponder(persona.fallback),
            persona=persona,
            rate_limiter=limiter or RateLimiter(min_interval=0),
            timeout=timeout,
        )
    return _make
