"""FastAPI application serving the chat widget.

Routes
------
POST /chat      Send the conversation, receive the advisor's reply
GET  /health    Liveness probe

Site analysis runs on the latest user turn before the completion call and
never fails the request: a broken site only changes the context block.
"""

import logging
from typing import Literal

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .analysis import analyze_site, latest_user_text
from .config import ChatSettings
from .config import settings as default_settings
from .core import create_fetcher
from .prompt import compose_messages
from .providers import ProviderError, build_provider

logger = logging.getLogger(__name__)

router = APIRouter()


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: list[ChatMessage]


class ChatReply(BaseModel):
    reply: str


def _error(status_code: int, error: str, **extra: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


def _missing_key(request: Request) -> JSONResponse | None:
    state = request.app.state
    if state.provider is not None:
        return None
    logger.error("No API key configured for provider %r", state.settings.provider)
    return _error(500, "API key not configured")


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Configuration errors take precedence over a bad body
    missing = _missing_key(request)
    if missing is not None:
        return missing
    if any(err.get("type") == "json_invalid" for err in exc.errors()):
        return _error(400, "Invalid JSON")
    return _error(400, "messages required")


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@router.post("/chat", response_model=ChatReply)
async def chat(payload: ChatRequest, request: Request):
    state = request.app.state
    settings: ChatSettings = state.settings

    missing = _missing_key(request)
    if missing is not None:
        return missing

    messages = [m.model_dump() for m in payload.messages]

    context = None
    if settings.site_analysis:
        context = await analyze_site(
            latest_user_text(messages),
            state.fetcher,
            min_content_length=settings.min_content_length,
        )

    try:
        reply = await state.provider.complete(
            compose_messages(messages, context, history_limit=settings.history_limit)
        )
    except ProviderError as e:
        return _error(502, "Completion provider error", detail=e.detail)

    return ChatReply(reply=reply)


def create_app(settings: ChatSettings | None = None) -> FastAPI:
    """Return a configured FastAPI application.

    The fetcher and provider are built once here from ``settings``; they
    hold configuration only, no per-request state.
    """
    settings = settings or default_settings

    app = FastAPI(title="Ava chat proxy", version=__version__)
    app.state.settings = settings
    app.state.fetcher = create_fetcher(settings)
    app.state.provider = build_provider(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.include_router(router)

    return app
