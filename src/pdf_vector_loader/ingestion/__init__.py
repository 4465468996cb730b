"""
Ingestion — page extraction, token chunking, embedding, and the
idempotent startup controller that stores the result.

Public surface
--------------
- :class:`IngestionController` / :func:`ingest_if_empty` — load a PDF once.
- :class:`TokenChunker` — overlapping token windows over page records.
- :class:`PageExtractor`, :class:`PdfPageExtractor` — PDF → page records.
- :class:`EmbeddingClient`, :class:`HuggingFaceEmbeddingClient` — text → vector.
"""

from pdf_vector_loader.ingestion.chunker import TiktokenTokenizer, Tokenizer, TokenChunker
from pdf_vector_loader.ingestion.controller import IngestionController, ingest_if_empty
from pdf_vector_loader.ingestion.models import (
    Chunk,
    IndexedDocument,
    IngestionResult,
    IngestionState,
    IngestionStatus,
    PageRecord,
)

__all__ = [
    "Chunk",
    "EmbeddingClient",
    "HuggingFaceEmbeddingClient",
    "IndexedDocument",
    "IngestionController",
    "IngestionResult",
    "IngestionState",
    "IngestionStatus",
    "PageExtractor",
    "PageRecord",
    "PdfPageExtractor",
    "TiktokenTokenizer",
    "TokenChunker",
    "Tokenizer",
    "ingest_if_empty",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import the PDF and embedding backends to keep imports light."""
    if name in ("EmbeddingClient", "HuggingFaceEmbeddingClient"):
        from pdf_vector_loader.ingestion import embedder

        return getattr(embedder, name)
    if name in ("PageExtractor", "PdfPageExtractor"):
        from pdf_vector_loader.ingestion import loader

        return getattr(loader, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
