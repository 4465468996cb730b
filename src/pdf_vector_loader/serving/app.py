"""FastAPI application that runs startup ingestion and reports readiness."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response, status
from pydantic import BaseModel

from pdf_vector_loader import bootstrap
from pdf_vector_loader.config import settings
from pdf_vector_loader.errors import IngestionError
from pdf_vector_loader.ingestion.models import IngestionResult

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run ingestion before the server accepts traffic."""
    logging.basicConfig(level=settings.log_level)
    try:
        bootstrap.initialize()
    except IngestionError:
        # Keep serving /health; /ready reports the failure.
        logger.exception("Service starting without a loaded vector store")
    yield


app = FastAPI(
    title="PDF Vector Loader",
    version="0.1.0",
    description="Loads a PDF into a vector store once and reports readiness.",
    lifespan=lifespan,
)


# ── Response schemas ──────────────────────────────────────────────────
class ReadinessResponse(BaseModel):
    """Readiness payload."""

    ready: bool
    result: IngestionResult | None = None
    error: str | None = None


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/ready", response_model=ReadinessResponse)
async def ready(response: Response) -> ReadinessResponse:
    """Readiness probe — 503 until startup ingestion has succeeded."""
    if bootstrap.is_ready():
        return ReadinessResponse(ready=True, result=bootstrap.last_result())

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = bootstrap.last_error()
    return ReadinessResponse(ready=False, error=str(error) if error else None)
