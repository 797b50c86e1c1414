# Canned answers for when retrieval or generation can't produce a grounded one.

from __future__ import annotations

from .types import FallbackTable


class FallbackResponder:
    """Pure keyword lookup: the first table keyword found in the question wins."""

    def __init__(self, table: FallbackTable):
        self.table = table

    def variant_for(self, question: str) -> str:
        lowered = question.lower()
        for keyword, variant in self.table.keywords.items():
            if keyword in lowered:
                return variant
        return self.table.default_variant

    def respond(self, question: str) -> str:
        return self.table.responses[self.variant_for(question)]
