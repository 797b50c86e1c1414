# OpenAI client: Embeddings + Chat Completions, same interface as the others.

from typing import Optional

import openai
from openai import OpenAI

from portfolio_bot.errors import ErrorKind, ProviderError
from ..types import Embedding, GenerationRequest, GenerationResult

PROVIDER = "openai"


def classify_openai_error(e: Exception) -> ProviderError:
    if isinstance(e, openai.RateLimitError):
        kind = ErrorKind.QUOTA
    elif isinstance(e, openai.APITimeoutError):
        kind = ErrorKind.TIMEOUT
    else:
        kind = ErrorKind.UNAVAILABLE
    return ProviderError(kind, str(e), PROVIDER)


class OpenAIClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        embed_model: str = "text-embedding-3-small",
        dimensions: Optional[int] = None,
        timeout: Optional[float] = None,
        client: Optional[OpenAI] = None,
    ):
        self.model = model
        self.embed_model = embed_model
        self.dimensions = dimensions
        if client is None:
            kwargs = {"timeout": timeout} if timeout else {}
            client = OpenAI(api_key=api_key, **kwargs)
        self.client = client

    def embed(self, text: str) -> Embedding:
        kwargs = {"dimensions": self.dimensions} if self.dimensions else {}
        try:
            resp = self.client.embeddings.create(model=self.embed_model, input=text, **kwargs)
        except openai.OpenAIError as e:
            raise classify_openai_error(e) from e
        return list(resp.data[0].embedding)

    def generate(self, request: GenerationRequest) -> GenerationResult:
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": request.prompt}],
                temperature=request.temperature,
                max_tokens=request.max_output_tokens,
            )
        except openai.OpenAIError as e:
            raise classify_openai_error(e) from e
        text = resp.choices[0].message.content or ""
        if not text.strip():
            raise ProviderError(ErrorKind.BAD_RESPONSE, "empty completion", PROVIDER)
        return text, {"engine": PROVIDER, "model": self.model}
