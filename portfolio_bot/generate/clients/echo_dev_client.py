# Dummy model client for local dev and testing without API calls.
# Embeddings are a deterministic function of the text.

import hashlib

import numpy as np

from ..types import Embedding, GenerationRequest, GenerationResult


class EchoDevClient:
    def __init__(self, dimension: int = 768):
        self.model = "echo-dev"
        self.dimension = dimension

    def embed(self, text: str) -> Embedding:
        seed = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest()[:8], "big")
        vec = np.random.default_rng(seed).standard_normal(self.dimension).astype("float32")
        vec /= max(float(np.linalg.norm(vec)), 1e-12)
        return vec.tolist()

    def generate(self, request: GenerationRequest) -> GenerationResult:
        question = request.prompt.rsplit("Question:", 1)[-1].strip()
        text = f"[ECHO RESPONSE]\n{question or '(no user input)'}"
        meta = {"engine": "echo", "model": self.model, "temp": request.temperature, "max_tokens": request.max_output_tokens}
        return text, meta
