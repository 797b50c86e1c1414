"""
Answer pipeline: one request in, exactly one assistant message out.

Stages run strictly in order::

    Validate -> Embed -> Retrieve -> CheckContext -> Generate -> Respond

Degraded stages never fail the request. Embedding and retrieval failures leave
the context empty, which routes to the canned fallback answer. A quota failure
during generation returns the high-demand notice and any other generation
failure returns the fallback. Only an unexpected exception becomes a 500, and
even then the caller gets an assistant message.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel

from portfolio_bot.concurrency import run_blocking
from portfolio_bot.errors import ErrorKind, ProviderError
from portfolio_bot.generate import ModelClient, build_model_client
from portfolio_bot.logger import get_logger
from portfolio_bot.ratelimit import RateLimiter
from portfolio_bot.search import (
    ContextRetriever,
    FallbackResponder,
    Persona,
    PromptBuilder,
    load_persona,
)
from portfolio_bot.settings import Settings, settings
from portfolio_bot.stores import build_vector_store

logger = get_logger(__name__)


# ------------------------------------------------------------
# Wire models
# ------------------------------------------------------------
class ChatMessage(BaseModel):
    id: Optional[str] = None
    role: Literal["user", "assistant"] = "user"
    content: str = ""


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = []


class AnswerResult(BaseModel):
    id: str
    content: str
    role: Literal["assistant"] = "assistant"

    @classmethod
    def new(cls, content: str) -> "AnswerResult":
        return cls(id=str(uuid.uuid4()), content=content)


class Outcome(str, Enum):
    ASK_PROMPT = "ask_prompt"
    ANSWERED = "answered"
    FALLBACK = "fallback"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"


@dataclass
class PipelineResult:
    answer: AnswerResult
    outcome: Outcome
    status_code: int = 200


# ------------------------------------------------------------
# Pipeline
# ------------------------------------------------------------
class AnswerPipeline:
    def __init__(
        self,
        model_client: ModelClient,
        retriever: ContextRetriever,
        prompt_builder: PromptBuilder,
        fallback: FallbackResponder,
        persona: Persona,
        rate_limiter: RateLimiter,
        timeout: Optional[float] = 30.0,
    ):
        self.model_client = model_client
        self.retriever = retriever
        self.prompt_builder = prompt_builder
        self.fallback = fallback
        self.persona = persona
        self.rate_limiter = rate_limiter
        self.timeout = timeout

    def _result(self, content: str, outcome: Outcome, status_code: int = 200) -> PipelineResult:
        logger.info("Outcome: %s (status=%d)", outcome.value, status_code)
        return PipelineResult(AnswerResult.new(content), outcome, status_code)

    def server_error(self) -> PipelineResult:
        return self._result(self.persona.notices.server_error, Outcome.SERVER_ERROR, 500)

    async def _embed(self, question: str) -> Optional[List[float]]:
        await self.rate_limiter.acquire()
        try:
            vector = await run_blocking(self.model_client.embed, question, timeout=self.timeout)
        except Exception as e:
            logger.warning("Embedding generation failed: %s", e)
            return None
        logger.debug("Embedding dimensions: %d", len(vector))
        return vector

    async def answer(self, messages: Sequence[ChatMessage]) -> PipelineResult:
        try:
            return await self._answer(messages)
        except Exception:
            logger.exception("Unexpected pipeline error")
            return self.server_error()

    async def _answer(self, messages: Sequence[ChatMessage]) -> PipelineResult:
        # Validate
        question = messages[-1].content if len(messages) > 0 else ""
        if not question.strip():
            return self._result(self.persona.notices.ask_prompt, Outcome.ASK_PROMPT)

        # Embed -> Retrieve
        context = ""
        vector = await self._embed(question)
        if vector is not None:
            context = await self.retriever.retrieve_context(vector)

        # CheckContext
        if not context.strip():
            logger.info("No context retrieved, using fallback response")
            return self._result(self.fallback.respond(question), Outcome.FALLBACK)

        # Generate
        await self.rate_limiter.acquire()
        request = self.prompt_builder.build(context, question)
        try:
            text, meta = await run_blocking(self.model_client.generate, request, timeout=self.timeout)
        except ProviderError as e:
            logger.warning("AI generation failed: %s", e)
            if e.kind is ErrorKind.QUOTA:
                return self._result(self.persona.notices.rate_limited, Outcome.RATE_LIMITED)
            return self._result(self.fallback.respond(question), Outcome.FALLBACK)
        except Exception as e:
            logger.warning("AI generation failed unexpectedly: %r", e)
            return self._result(self.fallback.respond(question), Outcome.FALLBACK)

        logger.debug("Generated %d chars via %s", len(text), meta.get("engine"))
        return self._result(text, Outcome.ANSWERED)


# ------------------------------------------------------------
# Construction
# ------------------------------------------------------------
def build_pipeline(cfg: Settings) -> AnswerPipeline:
    """Wire a pipeline from settings; raises ConfigurationError when incomplete."""
    cfg.require_complete()
    persona = load_persona(cfg.PERSONA_KEY)
    return AnswerPipeline(
        model_client=build_model_client(cfg),
        retriever=ContextRetriever(
            build_vector_store(cfg),
            top_k=cfg.TOP_K,
            fallback_limit=cfg.FALLBACK_FETCH_LIMIT,
            timeout=cfg.PROVIDER_TIMEOUT_SECONDS,
        ),
        prompt_builder=PromptBuilder(
            persona.template,
            max_context_chars=cfg.MAX_CONTEXT_CHARS,
            max_question_chars=cfg.MAX_QUESTION_CHARS,
            max_output_tokens=cfg.MAX_OUTPUT_TOKENS,
            temperature=cfg.TEMPERATURE,
        ),
        fallback=FallbackResponder(persona.fallback),
        persona=persona,
        rate_limiter=RateLimiter(cfg.min_request_interval),
        timeout=cfg.PROVIDER_TIMEOUT_SECONDS,
    )


@lru_cache(maxsize=1)
def get_pipeline() -> AnswerPipeline:
    """Process-wide pipeline (and with it the shared rate limiter)."""
    return build_pipeline(settings)
