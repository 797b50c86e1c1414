# Google Gemini client (google-genai SDK) for embeddings and generation.

from typing import Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from portfolio_bot.errors import ErrorKind, ProviderError
from ..types import Embedding, GenerationRequest, GenerationResult

PROVIDER = "gemini"


def classify_api_error(e: "genai_errors.APIError") -> ProviderError:
    status = str(getattr(e, "status", "") or "")
    code = getattr(e, "code", None)
    if code == 429 or status == "RESOURCE_EXHAUSTED":
        kind = ErrorKind.QUOTA
    elif code in (408, 504) or status == "DEADLINE_EXCEEDED":
        kind = ErrorKind.TIMEOUT
    else:
        kind = ErrorKind.UNAVAILABLE
    return ProviderError(kind, str(e), PROVIDER)


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.0-flash",
        embed_model: str = "text-embedding-004",
        timeout: Optional[float] = None,
        client: Optional["genai.Client"] = None,
    ):
        self.model = model
        self.embed_model = embed_model
        if client is None:
            # HttpOptions.timeout is in milliseconds
            http_options = genai_types.HttpOptions(timeout=int(timeout * 1000)) if timeout else None
            client = genai.Client(api_key=api_key, http_options=http_options)
        self.client = client

    def embed(self, text: str) -> Embedding:
        try:
            result = self.client.models.embed_content(model=self.embed_model, contents=text)
        except genai_errors.APIError as e:
            raise classify_api_error(e) from e
        if not result.embeddings or not result.embeddings[0].values:
            raise ProviderError(ErrorKind.BAD_RESPONSE, "empty embedding", PROVIDER)
        return list(result.embeddings[0].values)

    def generate(self, request: GenerationRequest) -> GenerationResult:
        config = genai_types.GenerateContentConfig(
            max_output_tokens=request.max_output_tokens,
            temperature=request.temperature,
        )
        try:
            resp = self.client.models.generate_content(model=self.model, contents=request.prompt, config=config)
        except genai_errors.APIError as e:
            raise classify_api_error(e) from e
        text = resp.text
        if not text:
            raise ProviderError(ErrorKind.BAD_RESPONSE, "empty completion", PROVIDER)
        return text, {"engine": PROVIDER, "model": self.model}
