# Generator package: model clients that embed queries and generate answers.

from .clients import ModelClient, build_model_client
from .clients.echo_dev_client import EchoDevClient
from .types import Embedding, GenerationRequest, GenerationResult

__all__ = [
    "EchoDevClient",
    "Embedding",
    "GenerationRequest",
    "GenerationResult",
    "ModelClient",
    "build_model_client",
]
