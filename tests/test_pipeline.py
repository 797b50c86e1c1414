# ===============================================
# tests/test_pipeline.py
# Every request ends in exactly one assistant message.
# ===============================================

from conftest import CountingRateLimiter, FakeModelClient, FakeStore, dimension_error, run
from portfolio_bot.errors import ErrorKind, ProviderError
from portfolio_bot.pipeline import ChatMessage, Outcome
from portfolio_bot.search import FallbackResponder

DOCS = [{"text": "Prince interned at Dodoozy."}, {"text": "Prince built Splitmate."}]


def user(content):
    return ChatMessage(role="user", content=content)


def test_empty_messages_ask_for_a_question(make_pipeline):
    client = FakeModelClient()
    result = run(make_pipeline(client=client).answer([]))
    assert result.status_code == 200
    assert result.outcome is Outcome.ASK_PROMPT
    assert result.answer.content == "Please ask me something about Prince Pal!"
    assert result.answer.role == "assistant"
    assert client.embed_calls == []


def test_blank_latest_message_asks_for_a_question(make_pipeline):
    messages = [user("Hi"), ChatMessage(role="assistant", content="Hello"), user("   \n\t")]
    result = run(make_pipeline().answer(messages))
    assert result.outcome is Outcome.ASK_PROMPT
    assert result.status_code == 200


def test_only_latest_message_is_used(make_pipeline):
    client = FakeModelClient()
    store = FakeStore(search_docs=DOCS)
    run(make_pipeline(client=client, store=store).answer([user("first"), user("second")]))
    assert client.embed_calls == ["second"]


def test_embedding_failure_uses_fallback_without_generation(make_pipeline, persona):
    client = FakeModelClient(embed_error=ProviderError(ErrorKind.QUOTA, "quota exceeded"))
    store = FakeStore(search_docs=DOCS)
    question = "What are Prince's skills?"
    result = run(make_pipeline(client=client, store=store).answer([user(question)]))

    assert result.status_code == 200
    assert result.outcome is Outcome.FALLBACK
    assert result.answer.content == FallbackResponder(persona.fallback).respond(question)
    assert store.search_calls == []
    assert client.generate_calls == []


def test_embedding_and_retrieval_failure_scenario(make_pipeline, persona):
    client = FakeModelClient(embed_error=RuntimeError("network down"))
    store = FakeStore(search_error=RuntimeError("db down"))
    question = "What are Prince's skills?"
    result = run(make_pipeline(client=client, store=store).answer([user(question)]))
    assert result.status_code == 200
    assert result.answer.content == FallbackResponder(persona.fallback).respond(question)


def test_retrieval_with_zero_documents_uses_fallback(make_pipeline, persona):
    client = FakeModelClient()
    result = run(make_pipeline(client=client, store=FakeStore(search_docs=[])).answer([user("Hobbies?")]))
    assert result.outcome is Outcome.FALLBACK
    assert result.answer.content == persona.fallback.responses["default"]
    assert client.generate_calls == []


def test_blank_context_text_counts_as_empty(make_pipeline):
    store = FakeStore(search_docs=[{"text": "   "}])
    result = run(make_pipeline(store=store).answer([user("Hobbies?")]))
    assert result.outcome is Outcome.FALLBACK


def test_generation_text_is_returned_verbatim(make_pipeline):
    client = FakeModelClient(text="  Prince knows **Go** and Python.\n")
    store = FakeStore(search_docs=DOCS)
    pipeline = make_pipeline(client=client, store=store)

    first = run(pipeline.answer([user("What languages?")]))
    second = run(pipeline.answer([user("What languages?")]))

    assert first.status_code == 200
    assert first.outcome is Outcome.ANSWERED
    assert first.answer.content == "  Prince knows **Go** and Python.\n"
    assert first.answer.role == "assistant"
    assert first.answer.id != second.answer.id


def test_non_string_document_content_still_answers(make_pipeline):
    client = FakeModelClient()
    store = FakeStore(search_docs=[{"content": ["part one", "part two"]}])
    result = run(make_pipeline(client=client, store=store).answer([user("Projects?")]))

    assert result.status_code == 200
    assert result.outcome is Outcome.ANSWERED
    assert "part one" in client.generate_calls[0].prompt


def test_prompt_carries_context_question_and_limits(make_pipeline):
    client = FakeModelClient()
    run(make_pipeline(client=client, store=FakeStore(search_docs=DOCS)).answer([user("Where did he intern?")]))

    request = client.generate_calls[0]
    assert "Context: Prince interned at Dodoozy.\n\nPrince built Splitmate." in request.prompt
    assert "Question: Where did he intern?" in request.prompt
    assert request.max_output_tokens == 500
    assert request.temperature == 0.7


def test_dimension_mismatch_still_generates_from_unranked_docs(make_pipeline):
    client = FakeModelClient()
    store = FakeStore(search_error=dimension_error(), fetch_docs=DOCS)
    result = run(make_pipeline(client=client, store=store).answer([user("Projects?")]))
    assert result.outcome is Outcome.ANSWERED
    assert store.fetch_calls == [3]


def test_quota_during_generation_returns_high_demand_notice(make_pipeline, persona):
    client = FakeModelClient(generate_error=ProviderError(ErrorKind.QUOTA, "429 quota exceeded"))
    result = run(make_pipeline(client=client, store=FakeStore(search_docs=DOCS)).answer([user("Skills?")]))
    assert result.status_code == 200
    assert result.outcome is Outcome.RATE_LIMITED
    assert result.answer.content == persona.notices.rate_limited
    assert result.answer.content.startswith("I'm currently experiencing high demand.")


def test_other_generation_errors_use_fallback(make_pipeline, persona):
    question = "Tell me about Prince"
    for error in (ProviderError(ErrorKind.UNAVAILABLE, "503"), ValueError("bad payload")):
        client = FakeModelClient(generate_error=error)
        result = run(make_pipeline(client=client, store=FakeStore(search_docs=DOCS)).answer([user(question)]))
        assert result.status_code == 200
        assert result.outcome is Outcome.FALLBACK
        assert result.answer.content == persona.fallback.responses["biography"]


def test_rate_limiter_gates_embedding_and_generation(make_pipeline):
    limiter = CountingRateLimiter()
    run(make_pipeline(store=FakeStore(search_docs=DOCS), limiter=limiter).answer([user("Skills?")]))
    assert limiter.calls == 2


def test_rate_limiter_gates_only_embedding_on_fallback(make_pipeline):
    limiter = CountingRateLimiter()
    run(make_pipeline(store=FakeStore(), limiter=limiter).answer([user("Skills?")]))
    assert limiter.calls == 1


def test_unexpected_error_during_validation_is_server_error(make_pipeline, persona):
    class BrokenMessages(list):
        def __getitem__(self, item):
            raise RuntimeError("corrupt request")

    result = run(make_pipeline().answer(BrokenMessages([user("hi")])))
    assert result.status_code == 500
    assert result.outcome is Outcome.SERVER_ERROR
    assert result.answer.content == "I'm experiencing technical difficulties. Please try again in a moment."
    assert result.answer.role == "assistant"


def test_unexpected_error_in_fallback_is_server_error(make_pipeline):
    class BrokenResponder:
        def respond(self, question):
            raise KeyError("variant")

    client = FakeModelClient(embed_error=RuntimeError("down"))
    result = run(make_pipeline(client=client, fallback=BrokenResponder()).answer([user("hi")]))
    assert result.status_code == 500
    assert result.outcome is Outcome.SERVER_ERROR
