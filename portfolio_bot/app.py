# ============================================================
# Portfolio Bot FastAPI App
# ------------------------------------------------------------
# Routes:
#   POST /api/chat         - conversation in, one assistant message out
#   GET  /api/suggestions  - starter prompts for the chat UI
#   GET  /health, /healthz - liveness
# The answer pipeline is built once per process; missing configuration
# surfaces as a 500 on every chat request until it is fixed.
# ============================================================

from json import JSONDecodeError
from typing import List

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from portfolio_bot.errors import ConfigurationError
from portfolio_bot.logger import get_logger
from portfolio_bot.pipeline import (
    AnswerPipeline,
    AnswerResult,
    ChatRequest,
    get_pipeline,
)
from portfolio_bot.search import load_persona
from portfolio_bot.settings import settings

logger = get_logger(__name__)

# ------------------------------------------------------------
# 🚀 FastAPI init
# ------------------------------------------------------------
app = FastAPI(title="Portfolio Bot API", version="0.3")

# used when the persona file itself cannot be loaded
SERVER_ERROR_NOTICE = "I'm experiencing technical difficulties. Please try again in a moment."


class SuggestionsPayload(BaseModel):
    suggestions: List[str]


def _answer_response(content: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=AnswerResult.new(content).model_dump())


def _persona_notice(name: str, default: str) -> str:
    try:
        return getattr(load_persona(settings.PERSONA_KEY).notices, name)
    except ConfigurationError:
        return default


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Configuration error: %s", exc)
    notice = _persona_notice("server_error", SERVER_ERROR_NOTICE)
    return _answer_response(notice, 500)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected API error")
    notice = _persona_notice("server_error", SERVER_ERROR_NOTICE)
    return _answer_response(notice, 500)


# ------------------------------------------------------------
# 💬 Main chat route
# ------------------------------------------------------------
@app.post("/api/chat", response_model=AnswerResult)
async def chat(request: Request, pipeline: AnswerPipeline = Depends(get_pipeline)):
    try:
        payload = ChatRequest.model_validate(await request.json())
    except (JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        logger.info("Rejected chat request body: %s", e)
        return _answer_response(pipeline.persona.notices.invalid_request, 400)

    result = await pipeline.answer(payload.messages)
    return JSONResponse(status_code=result.status_code, content=result.answer.model_dump())


@app.get("/api/suggestions", response_model=SuggestionsPayload)
def suggestions():
    persona = load_persona(settings.PERSONA_KEY)
    return SuggestionsPayload(suggestions=persona.suggestions)


# ------------------------------------------------------------
# 🧭 Health checks
# ------------------------------------------------------------
@app.get("/healthz")
def healthz():
    return {
        "ok": True,
        "env": settings.ENV,
        "debug": settings.DEBUG,
        "app": settings.app_name,
        "provider": settings.LLM_PROVIDER,
        "vector_store": settings.VECTOR_STORE,
        "configured": not settings.missing_required(),
    }


@app.get("/health")
def health():
    return {"status": "ok", "env": settings.ENV}


@app.get("/")
def hello():
    return {"message": f"{settings.app_name} service running."}
