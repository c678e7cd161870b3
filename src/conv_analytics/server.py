"""
FastAPI Server

HTTP surface for conversation analytics.
Provides ping, ad-hoc analytics, stored conversations, reports and /metrics.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    generate_latest,
)
from pydantic import BaseModel, Field

from conv_analytics import __version__
from conv_analytics.analytics.report import render_report
from conv_analytics.analytics.service import AnalyticsService, ConversationAnalytics
from conv_analytics.config import SERVER
from conv_analytics.conversation.models import InvalidMessageError, Message, MessageRole
from conv_analytics.conversation.storage import ConversationNotFoundError, ConversationStore
from conv_analytics.utils.logging import (
    audit_logger,
    generate_request_id,
    request_id_var,
    setup_logging,
)

logger = logging.getLogger(__name__)


# Prometheus metrics - use helper to avoid duplicate registration on reload
def _get_or_create_counter(name: str, description: str, labels: list[str]) -> Counter:
    """Get existing counter or create new one."""
    if name in REGISTRY._names_to_collectors:
        return REGISTRY._names_to_collectors[name]  # type: ignore
    return Counter(name, description, labels)


def _get_or_create_histogram(
    name: str, description: str, buckets: list[float] | None = None
) -> Histogram:
    """Get existing histogram or create new one."""
    if name in REGISTRY._names_to_collectors:
        return REGISTRY._names_to_collectors[name]  # type: ignore
    kwargs: dict[str, Any] = {}
    if buckets:
        kwargs["buckets"] = buckets
    return Histogram(name, description, **kwargs)


ANALYSIS_REQUESTS = _get_or_create_counter(
    "analysis_requests_total",
    "Total analytics computations",
    ["source", "mood"],
)

ANALYSIS_DURATION = _get_or_create_histogram(
    "analysis_duration_seconds",
    "Analytics computation duration in seconds",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)


# Request/Response models
class MessageIn(BaseModel):
    """A chat message as submitted by clients."""

    role: str = Field(..., max_length=10)
    text: str = Field("", max_length=20000)
    createdAt: Any = None


class AnalyzeRequest(BaseModel):
    """Ad-hoc analytics request body."""

    messages: list[MessageIn] = Field(default_factory=list, max_length=5000)


class NewMessageRequest(BaseModel):
    """Message appended to a stored conversation."""

    role: MessageRole
    text: str = Field(..., max_length=20000)
    created_at: float | None = None


# Shared instances (initialized on first use)
_store: ConversationStore | None = None
_service: AnalyticsService | None = None


def get_store() -> ConversationStore:
    """Get or create ConversationStore instance."""
    global _store
    if _store is None:
        _store = ConversationStore()
    return _store


def get_service() -> AnalyticsService:
    """Get or create AnalyticsService instance."""
    global _service
    if _service is None:
        _service = AnalyticsService()
    return _service


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    setup_logging(level=SERVER.LOG_LEVEL)
    logger.info("Starting conversation analytics server...")
    logger.info(f"Server ready on {SERVER.HOST}:{SERVER.PORT}")

    yield

    logger.info("Shutting down conversation analytics server...")


# Create FastAPI app
app = FastAPI(
    title="Conversation Analytics API",
    description="Sentiment, mood, keyword and latency analytics for chat conversations",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SERVER.CORS_ORIGINS),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_middleware(request: Request, call_next: Any) -> Any:
    """Add request ID and timing to all requests."""
    request_id = generate_request_id()
    request_id_var.set(request_id)

    start_time = time.time()

    response = await call_next(request)

    duration = time.time() - start_time
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Response-Time"] = f"{duration:.3f}s"

    return response


def _run_analysis(
    service: AnalyticsService,
    messages: list[Message],
    conversation_id: str | None,
) -> ConversationAnalytics:
    """Analyze messages and record metrics and an audit event."""
    start_time = time.time()
    analytics = service.analyze(messages)
    duration = time.time() - start_time

    ANALYSIS_DURATION.observe(duration)
    ANALYSIS_REQUESTS.labels(
        source="stored" if conversation_id else "adhoc",
        mood=analytics.user_mood_label,
    ).inc()
    audit_logger.log_analysis(
        conversation_id=conversation_id,
        message_count=len(messages),
        sentiment_score=analytics.sentiment_score,
        mood_label=analytics.user_mood_label,
        duration_ms=duration * 1000,
    )
    return analytics


@app.get("/api/ping")
async def ping() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "timestamp": int(time.time() * 1000)}


@app.post("/api/analytics")
async def analyze(
    body: AnalyzeRequest,
    service: AnalyticsService = Depends(get_service),
) -> dict[str, Any]:
    """
    Analyze an ad-hoc list of messages.

    Returns the camelCase analytics dictionary; absent values are omitted.
    """
    try:
        messages = [Message.from_dict(m.model_dump()) for m in body.messages]
    except InvalidMessageError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return _run_analysis(service, messages, conversation_id=None).to_dict()


@app.get("/api/conversations")
async def list_conversations(
    store: ConversationStore = Depends(get_store),
) -> list[dict[str, Any]]:
    """List stored conversations, most recently updated first."""
    return [c.summary() for c in await store.list_conversations()]


@app.post("/api/conversations", status_code=201)
async def create_conversation(
    store: ConversationStore = Depends(get_store),
) -> dict[str, str]:
    """Create an empty conversation."""
    conversation_id = await store.create_conversation()
    audit_logger.log_conversation_event("created", conversation_id)
    return {"id": conversation_id}


@app.post("/api/conversations/{conversation_id}/messages", status_code=201)
async def add_message(
    conversation_id: str,
    body: NewMessageRequest,
    store: ConversationStore = Depends(get_store),
) -> dict[str, Any]:
    """Append a message to a stored conversation."""
    try:
        message = await store.add_message(
            conversation_id, body.role, body.text, created_at=body.created_at
        )
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail="Conversation not found") from e

    audit_logger.log_conversation_event(
        "message_added", conversation_id, role=message.role.value, text_length=len(message.text)
    )
    return message.to_dict()


@app.get("/api/conversations/{conversation_id}/analytics")
async def conversation_analytics(
    conversation_id: str,
    store: ConversationStore = Depends(get_store),
    service: AnalyticsService = Depends(get_service),
) -> dict[str, Any]:
    """Analytics for a stored conversation."""
    try:
        messages = await store.get_messages(conversation_id)
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail="Conversation not found") from e

    return _run_analysis(service, messages, conversation_id).to_dict()


@app.get("/api/conversations/{conversation_id}/report")
async def conversation_report(
    conversation_id: str,
    store: ConversationStore = Depends(get_store),
    service: AnalyticsService = Depends(get_service),
) -> PlainTextResponse:
    """Plain-text analytics report for a stored conversation."""
    try:
        messages = await store.get_messages(conversation_id)
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail="Conversation not found") from e

    analytics = _run_analysis(service, messages, conversation_id)
    return PlainTextResponse(content=render_report(analytics, messages))


@app.delete("/api/conversations/{conversation_id}")
async def delete_conversation(
    conversation_id: str,
    store: ConversationStore = Depends(get_store),
) -> dict[str, bool]:
    """Delete a stored conversation and its messages."""
    if not await store.delete_conversation(conversation_id):
        raise HTTPException(status_code=404, detail="Conversation not found")

    audit_logger.log_conversation_event("deleted", conversation_id)
    return {"deleted": True}


@app.get("/metrics")
async def metrics() -> PlainTextResponse:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    return PlainTextResponse(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "name": "Conversation Analytics API",
        "version": __version__,
        "docs": "/docs",
        "health": "/api/ping",
    }


def main() -> None:
    """Run the server using uvicorn."""
    import uvicorn

    uvicorn.run(
        "conv_analytics.server:app",
        host=SERVER.HOST,
        port=SERVER.PORT,
        reload=SERVER.DEBUG,
        log_level=SERVER.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
