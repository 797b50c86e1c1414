# Assemble the generation prompt from the persona template, the retrieved
# context and the user's question.

from __future__ import annotations

from portfolio_bot.generate.types import GenerationRequest

TRUNCATION_MARK = "..."


def truncate(text: str, max_chars: int) -> str:
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARK


class PromptBuilder:
    """Fills the ``{context}`` and ``{question}`` slots of a persona template.

    Context longer than ``max_context_chars`` and questions longer than
    ``max_question_chars`` are cut and marked with ``...``; a limit of 0
    disables the cut.
    """

    def __init__(
        self,
        template: str,
        max_context_chars: int = 8000,
        max_question_chars: int = 2000,
        max_output_tokens: int = 500,
        temperature: float = 0.7,
    ):
        self.template = template
        self.max_context_chars = max_context_chars
        self.max_question_chars = max_question_chars
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature

    def render(self, context: str, question: str) -> str:
        return self.template.format(
            context=truncate(context, self.max_context_chars),
            question=truncate(question, self.max_question_chars),
        )

    def build(self, context: str, question: str) -> GenerationRequest:
        return GenerationRequest(
            prompt=self.render(context, question),
            max_output_tokens=self.max_output_tokens,
            temperature=self.temperature,
        )
