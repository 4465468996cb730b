"""Process-wide startup hook.

:func:`initialize` is called once when the service starts.  It builds the
chunker first, so a bad chunking configuration fails before any
collaborator opens a file, a model or a connection, then runs
:meth:`IngestionController.ingest_if_empty` and remembers the outcome.

Usage::

    from pdf_vector_loader import bootstrap

    result = bootstrap.initialize()
    assert bootstrap.is_ready()
"""

from __future__ import annotations

import logging
import threading

from pdf_vector_loader.config import Settings, settings as default_settings
from pdf_vector_loader.ingestion.chunker import TiktokenTokenizer, TokenChunker
from pdf_vector_loader.ingestion.controller import IngestionController
from pdf_vector_loader.ingestion.embedder import EmbeddingClient, get_embedding_client
from pdf_vector_loader.ingestion.loader import PageExtractor, PdfPageExtractor
from pdf_vector_loader.ingestion.models import IngestionResult
from pdf_vector_loader.store.base import VectorStoreBase

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_result: IngestionResult | None = None
_error: BaseException | None = None


def initialize(
    config: Settings | None = None,
    *,
    store: VectorStoreBase | None = None,
    embedder: EmbeddingClient | None = None,
    extractor: PageExtractor | None = None,
    chunker: TokenChunker | None = None,
) -> IngestionResult:
    """Run startup ingestion once per process and return its result.

    Collaborators left as ``None`` are built from *config* (defaults to the
    global settings).  A second call returns the cached result without
    touching the store again; call :func:`reset` to force a new attempt.

    Raises
    ------
    IngestionError
        Whatever the controller raised.  The failure is remembered and
        :func:`is_ready` stays ``False``.
    """
    global _result, _error

    with _lock:
        if _result is not None:
            return _result

        config = config or default_settings
        _error = None
        try:
            if chunker is None:
                chunker = TokenChunker(
                    config.chunking_config(),
                    TiktokenTokenizer(config.tokenizer_encoding),
                )
            if extractor is None:
                extractor = PdfPageExtractor(
                    pages_per_document=config.pages_per_document,
                    top_lines_to_delete=config.page_top_lines_to_delete,
                    bottom_lines_to_delete=config.page_bottom_lines_to_delete,
                )
            if embedder is None:
                embedder = get_embedding_client(config)
            if store is None:
                from pdf_vector_loader.store.chroma_store import ChromaVectorStore

                store = ChromaVectorStore(
                    config.chroma_collection,
                    host=config.chroma_host,
                    port=config.chroma_port,
                    distance_metric=config.chroma_distance_metric,
                    upsert_batch_size=config.upsert_batch_size,
                )

            controller = IngestionController(
                store,
                embedder,
                extractor,
                chunker,
                embedding_workers=config.embedding_workers,
            )
            _result = controller.ingest_if_empty(config.pdf_path)
        except Exception as exc:
            _error = exc
            logger.error("Startup ingestion failed: %s", exc)
            raise

        logger.info("Startup ingestion finished: %s", _result.status.value)
        return _result


def is_ready() -> bool:
    """``True`` once :func:`initialize` has completed without error."""
    return _result is not None


def last_result() -> IngestionResult | None:
    return _result


def last_error() -> BaseException | None:
    return _error


def reset() -> None:
    """Forget the cached outcome (primarily for testing)."""
    global _result, _error
    with _lock:
        _result = None
        _error = None
