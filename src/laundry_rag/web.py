"""FastAPI web interface for the laundry advice pipeline."""

import logging
from contextlib import asynccontextmanager
from typing import Literal

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from laundry_rag import llm_client, pipeline
from laundry_rag import vector_store as vs
from laundry_rag.config import AppConfig
from laundry_rag.errors import (
    AuthenticationError,
    BadRequestError,
    CompletionError,
    ConfigurationError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

_config = AppConfig()

_GENERIC_ERROR = "죄송합니다. 잠시 후 다시 시도해주세요."


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Connect to ChromaDB and open both collections on startup."""
    cfg = _config.vector_store
    client = vs.get_client(cfg)
    application.state.chroma_client = client
    application.state.knowledge = vs.get_or_create_collection(
        client, cfg.knowledge_collection
    )
    application.state.partners = vs.get_or_create_collection(
        client, cfg.partner_collection
    )
    logger.info(
        "ChromaDB initialized (%d knowledge records, %d partner shops)",
        application.state.knowledge.count(),
        application.state.partners.count(),
    )
    yield


app = FastAPI(
    title="Laundry RAG",
    lifespan=lifespan,
    docs_url="/api/docs",
    openapi_url="/api/openapi.json",
)

router = APIRouter(prefix="/api/v1")


def get_knowledge(request: Request):
    """FastAPI dependency — return the knowledge collection from app state."""
    return getattr(request.app.state, "knowledge", None)


def get_partners(request: Request):
    """FastAPI dependency — return the partner shop collection from app state."""
    return getattr(request.app.state, "partners", None)


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=_config.chat.max_message_length)
    zipcode: str | None = None


class ShopResponse(BaseModel):
    shop_name: str
    zipcode: str
    subscription: Literal["active", "inactive"]
    specialty: list[str]
    rating: float | None = None


class ChatResponse(BaseModel):
    answer: str
    success_rate: str | None = None
    risk_level: Literal["low", "medium", "high"] | None = None
    recommended_shops: list[ShopResponse]
    disclaimer: str


class HealthResponse(BaseModel):
    status: str
    llm_connected: bool
    knowledge_records: int
    partner_shops: int


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(CompletionError)
async def completion_error_handler(request: Request, exc: CompletionError):
    """Map the completion error taxonomy onto HTTP statuses.

    Technical detail stays in the log; the body carries a short message.
    """
    logger.error(
        "Chat request failed (%s, status=%s): %s",
        type(exc).__name__,
        exc.status_code,
        exc.detail or exc,
    )
    if isinstance(exc, ConfigurationError):
        return _error_response(400, "서비스 설정이 완료되지 않았습니다. 관리자에게 문의해주세요.")
    if isinstance(exc, AuthenticationError):
        return _error_response(400, "AI 서비스 인증에 실패했습니다. API 키를 확인해주세요.")
    if isinstance(exc, RateLimitError):
        return _error_response(503, "요청이 많아 잠시 응답할 수 없습니다. 잠시 후 다시 시도해주세요.")
    if isinstance(exc, BadRequestError):
        return _error_response(502, "AI 서비스 요청이 거부되었습니다. 잠시 후 다시 시도해주세요.")
    return _error_response(502, "AI 서비스 호출에 실패했습니다. 잠시 후 다시 시도해주세요.")


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error while handling %s", request.url.path)
    return _error_response(500, _GENERIC_ERROR)


@router.get("/health", response_model=HealthResponse)
def api_health(knowledge=Depends(get_knowledge), partners=Depends(get_partners)):
    connected = llm_client.ping(_config.llm)
    return HealthResponse(
        status="healthy" if connected else "degraded",
        llm_connected=connected,
        knowledge_records=knowledge.count() if knowledge else 0,
        partner_shops=partners.count() if partners else 0,
    )


@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
)
def api_chat(
    body: ChatRequest,
    knowledge=Depends(get_knowledge),
    partners=Depends(get_partners),
):
    reply = pipeline.process_chat(
        body.message,
        body.zipcode,
        knowledge=knowledge,
        partners=partners,
        config=_config,
    )
    return reply.to_dict()


app.include_router(router)
