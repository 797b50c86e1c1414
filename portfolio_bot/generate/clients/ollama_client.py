# Ollama client for local inference (embeddings + generate) over its HTTP API.

from typing import Any, Dict

import requests

from portfolio_bot.errors import ErrorKind, ProviderError
from ..types import Embedding, GenerationRequest, GenerationResult

PROVIDER = "ollama"


class OllamaClient:
    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "mistral:7b-instruct",
        embed_model: str = "nomic-embed-text",
        timeout: float = 180.0,
    ):
        self.host = host.rstrip("/")
        self.model = model
        self.embed_model = embed_model
        self.timeout = timeout

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = requests.post(f"{self.host}{path}", json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            raise ProviderError(ErrorKind.TIMEOUT, str(e), PROVIDER) from e
        except requests.RequestException as e:
            raise ProviderError(ErrorKind.UNAVAILABLE, str(e), PROVIDER) from e
        if resp.status_code == 429:
            raise ProviderError(ErrorKind.QUOTA, resp.text[:200], PROVIDER)
        if resp.status_code >= 400:
            raise ProviderError(ErrorKind.UNAVAILABLE, f"HTTP {resp.status_code}: {resp.text[:200]}", PROVIDER)
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(ErrorKind.BAD_RESPONSE, "response body is not JSON", PROVIDER) from e

    def embed(self, text: str) -> Embedding:
        data = self._post("/api/embeddings", {"model": self.embed_model, "prompt": text})
        vec = data.get("embedding")
        if not vec:
            raise ProviderError(ErrorKind.BAD_RESPONSE, "empty embedding", PROVIDER)
        return [float(x) for x in vec]

    def generate(self, request: GenerationRequest) -> GenerationResult:
        payload = {
            "model": self.model,
            "prompt": request.prompt,
            "stream": False,
            "options": {
                "temperature": float(request.temperature),
                "num_predict": int(request.max_output_tokens),
            },
        }
        data = self._post("/api/generate", payload)
        text = data.get("response") or ""
        if not text.strip():
            raise ProviderError(ErrorKind.BAD_RESPONSE, "empty completion", PROVIDER)
        return text, {"engine": PROVIDER, "model": self.model}
