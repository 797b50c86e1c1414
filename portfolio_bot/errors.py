"""
Error types shared by the provider adapters and the answer pipeline.

Adapters around external collaborators (model clients, vector stores) never
leak SDK exceptions upward: they raise ``ProviderError`` tagged with an
``ErrorKind`` so callers can branch on a stable value instead of matching on
provider wording.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    QUOTA = "quota"
    DIMENSION_MISMATCH = "dimension_mismatch"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
    BAD_RESPONSE = "bad_response"


class PortfolioBotError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(PortfolioBotError):
    """Required configuration is missing or invalid."""


class ProviderError(PortfolioBotError):
    """A call to an external provider failed."""

    def __init__(self, kind: ErrorKind, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.provider = provider

    def __str__(self) -> str:
        prefix = f"{self.provider}: " if self.provider else ""
        return f"{prefix}[{self.kind.value}] {self.message}"
