"""Idempotent startup ingestion — load the PDF only when the store is empty.

The controller walks a small state machine::

    CHECKING ─┬─ count() > 0 ──▶ SKIPPED
              └─ count() == 0 ─▶ EXTRACTING ▶ SPLITTING ▶ EMBEDDING ▶ STORING ▶ DONE

Any exception moves it to ``FAILED`` and is re-raised unchanged.

``store.count() == 0`` is the only guard against loading twice.  The
check and the write are not atomic: two processes starting together
against an empty store can both load.  Record ids are derived from the
document content and the chunk's token span, so the second load upserts
the same ids instead of adding rows.  A write that fails half-way can
leave ``count() > 0`` and make the next start skip; that case is logged
and must be repaired by clearing the collection.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from pdf_vector_loader.errors import EmbeddingError
from pdf_vector_loader.ingestion.models import (
    Chunk,
    IndexedDocument,
    IngestionResult,
    IngestionState,
    IngestionStatus,
    PageRecord,
)

if TYPE_CHECKING:
    from pdf_vector_loader.ingestion.chunker import TokenChunker
    from pdf_vector_loader.ingestion.embedder import EmbeddingClient
    from pdf_vector_loader.ingestion.loader import PageExtractor
    from pdf_vector_loader.store.base import VectorStoreBase

logger = logging.getLogger(__name__)


def document_fingerprint(pages: Sequence[PageRecord]) -> str:
    """Return a stable content hash for an extracted document."""
    digest = hashlib.sha256()
    for page in pages:
        digest.update(f"{page.page_number}\x00".encode())
        digest.update(page.text.encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()[:16]


def record_id(document_id: str, chunk: Chunk) -> str:
    """Deterministic record id: ``<document_id>_<token_start>_<token_end>``."""
    return f"{document_id}_{chunk.token_start}_{chunk.token_end}"


class IngestionController:
    """Orchestrate extractor → chunker → embedder → store for one PDF.

    Parameters
    ----------
    store:
        Destination vector store; its ``count()`` is the idempotency guard.
    embedder:
        Embedding backend.
    extractor:
        Page extractor for the PDF resource.
    chunker:
        Configured :class:`TokenChunker`.
    embedding_workers:
        Threads used to embed chunks concurrently.  ``1`` embeds in one
        ``embed_many`` call.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: EmbeddingClient,
        extractor: PageExtractor,
        chunker: TokenChunker,
        *,
        embedding_workers: int = 1,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.extractor = extractor
        self.chunker = chunker
        self.embedding_workers = max(embedding_workers, 1)
        self.state = IngestionState.IDLE

    # -- public API -----------------------------------------------------------

    def ingest_if_empty(self, pdf_resource: str | Path) -> IngestionResult:
        """Load *pdf_resource* into the store unless the store already has records.

        Returns
        -------
        IngestionResult
            ``skipped`` with the existing count, or ``loaded`` with the
            number of records written.

        Raises
        ------
        IngestionError
            Any extractor, embedder or store failure; nothing is retried.
        """
        t0 = time.monotonic()
        try:
            self._enter(IngestionState.CHECKING)
            existing = self.store.count()
            logger.info(
                "Records in vector store %r = %d", self._store_name, existing
            )
            if existing > 0:
                self._enter(IngestionState.SKIPPED)
                logger.info("Vector store already populated; skipping ingestion of %s", pdf_resource)
                return IngestionResult(
                    status=IngestionStatus.SKIPPED,
                    existing_count=existing,
                    elapsed_seconds=time.monotonic() - t0,
                )

            logger.info("Loading %s ...", pdf_resource)
            self._enter(IngestionState.EXTRACTING)
            pages = self.extractor.extract(pdf_resource)

            self._enter(IngestionState.SPLITTING)
            document_id = document_fingerprint(pages)
            source = self._source_name(pages, pdf_resource)
            chunks = self.chunker.chunk(
                pages, metadata={"source": source, "document_id": document_id}
            )
            if not chunks:
                logger.warning("%s produced no text chunks; nothing to store", source)

            self._enter(IngestionState.EMBEDDING)
            vectors = self._embed([chunk.text for chunk in chunks])
            records = [
                IndexedDocument(
                    id=record_id(document_id, chunk),
                    text=chunk.text,
                    embedding=vector,
                    metadata=chunk.metadata,
                )
                for chunk, vector in zip(chunks, vectors)
            ]

            self._enter(IngestionState.STORING)
            if records:
                self.store.upsert(records)

            self._enter(IngestionState.DONE)
        except Exception:
            failed_in = self.state
            self.state = IngestionState.FAILED
            logger.error("Ingestion of %s failed during %s", pdf_resource, failed_in.value)
            if failed_in is IngestionState.STORING:
                logger.error(
                    "Collection %r may hold a partial load; clear it before restarting "
                    "or the next start will skip ingestion",
                    self._store_name,
                )
            raise

        elapsed = time.monotonic() - t0
        logger.info(
            "Ingested %d chunks from %d pages in %.1fs; ready to serve requests",
            len(records),
            len(pages),
            elapsed,
        )
        return IngestionResult(
            status=IngestionStatus.LOADED,
            chunk_count=len(records),
            existing_count=existing,
            page_count=len(pages),
            elapsed_seconds=elapsed,
        )

    # -- internals ------------------------------------------------------------

    @property
    def _store_name(self) -> str:
        return getattr(self.store, "collection_name", type(self.store).__name__)

    def _enter(self, state: IngestionState) -> None:
        logger.debug("Ingestion state %s -> %s", self.state.value, state.value)
        self.state = state

    def _embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        if self.embedding_workers > 1 and len(texts) > 1:
            with ThreadPoolExecutor(max_workers=self.embedding_workers) as pool:
                vectors = list(pool.map(self.embedder.embed, texts))
        else:
            vectors = self.embedder.embed_many(texts)

        if len(vectors) != len(texts):
            raise EmbeddingError(f"Expected {len(texts)} embeddings, got {len(vectors)}")
        dims = {len(vector) for vector in vectors}
        if len(dims) != 1 or 0 in dims:
            raise EmbeddingError(f"Inconsistent embedding dimensions: {sorted(dims)}")
        logger.info("Embedded %d chunks (dim=%d)", len(vectors), dims.pop())
        return vectors

    @staticmethod
    def _source_name(pages: Sequence[PageRecord], pdf_resource: str | Path) -> str:
        if pages and pages[0].metadata.get("source"):
            return str(pages[0].metadata["source"])
        return Path(str(pdf_resource)).name


def ingest_if_empty(
    pdf_resource: str | Path,
    store: VectorStoreBase,
    embedder: EmbeddingClient,
    extractor: PageExtractor,
    chunker: TokenChunker,
) -> IngestionResult:
    """Functional shortcut for :meth:`IngestionController.ingest_if_empty`."""
    controller = IngestionController(store, embedder, extractor, chunker)
    return controller.ingest_if_empty(pdf_resource)
