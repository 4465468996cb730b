"""Domain models flowing through the ingestion pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class PageRecord(BaseModel):
    """Raw text of one PDF page (or one group of consecutive pages).

    Attributes
    ----------
    page_number:
        1-based number of the page (first page of the group when grouped).
    text:
        Extracted page text.
    metadata:
        Extractor-supplied metadata (``source``, ``page_end`` …).
    """

    model_config = {"frozen": True}

    page_number: int = Field(ge=1)
    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class Chunk(BaseModel):
    """A token window over the concatenated page stream.

    ``token_start`` / ``token_end`` are half-open offsets into the stream;
    ``page_start`` / ``page_end`` give the range of pages the window touches.
    """

    model_config = {"frozen": True}

    page_start: int
    page_end: int
    token_start: int
    token_end: int
    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def token_count(self) -> int:
        return self.token_end - self.token_start

    @property
    def source_page(self) -> int | tuple[int, int]:
        """Single page number, or the ``(first, last)`` range when spanning pages."""
        if self.page_start == self.page_end:
            return self.page_start
        return (self.page_start, self.page_end)


class IndexedDocument(BaseModel):
    """A chunk paired with its embedding, ready to hand to a vector store."""

    model_config = {"frozen": True}

    id: str
    text: str
    embedding: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)


class IngestionState(str, Enum):
    """Steps of :class:`~pdf_vector_loader.ingestion.controller.IngestionController`."""

    IDLE = "idle"
    CHECKING = "checking"
    EXTRACTING = "extracting"
    SPLITTING = "splitting"
    EMBEDDING = "embedding"
    STORING = "storing"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


class IngestionStatus(str, Enum):
    LOADED = "loaded"
    SKIPPED = "skipped"


class IngestionResult(BaseModel):
    """Outcome of a startup ingestion attempt.

    Attributes
    ----------
    status:
        ``loaded`` when documents were written, ``skipped`` when the store
        already held records.
    chunk_count:
        Number of records written (``0`` when skipped).
    existing_count:
        ``store.count()`` observed before deciding.
    page_count:
        Page records extracted (``0`` when skipped).
    elapsed_seconds:
        Wall-clock duration of the attempt.
    """

    status: IngestionStatus
    chunk_count: int = 0
    existing_count: int = 0
    page_count: int = 0
    elapsed_seconds: float = 0.0

    @property
    def skipped(self) -> bool:
        return self.status is IngestionStatus.SKIPPED

    @property
    def loaded(self) -> bool:
        return self.status is IngestionStatus.LOADED
