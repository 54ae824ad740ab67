"""FastAPI application exposing the chat endpoint."""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.handlers import ChatHandlers, get_chat_handlers
from src.api.request import ChatRequest, ChatResponse, ErrorResponse
from src.api.validation import InvalidRequestError
from src.utils.config import get_settings
from src.utils.logger import get_logger

logger = get_logger()


def create_app(handlers: Optional[ChatHandlers] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        handlers: Chat handlers (defaults to the global instance, created lazily)

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()
    app = FastAPI(title="Delivery Assistant")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _handlers() -> ChatHandlers:
        return handlers or get_chat_handlers()

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        logger.info(f"Rejected request to {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content=ErrorResponse(error=str(exc)).model_dump())

    @app.get("/health")
    async def health():
        return await _handlers().handle_health()

    @app.post("/chat", response_model=ChatResponse, responses={400: {"model": ErrorResponse}})
    async def chat(payload: ChatRequest):
        return await _handlers().handle_chat(payload)

    return app
