"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import chromadb

from pdf_vector_loader.config import settings
from pdf_vector_loader.errors import StoreError
from pdf_vector_loader.ingestion.models import IndexedDocument
from pdf_vector_loader.store.base import VectorStoreBase

logger = logging.getLogger(__name__)


def _flatten_metadata(metadata: dict[str, Any]) -> dict[str, str | int | float | bool]:
    """Keep only the scalar values Chroma accepts as metadata."""
    flat: dict[str, str | int | float | bool] = {}
    for key, value in metadata.items():
        if isinstance(value, (str, int, float, bool)):
            flat[key] = value
    return flat


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host / port:
        Chroma server location; ignored when *client* is given.
    distance_metric:
        ``cosine`` | ``l2`` | ``ip``, applied when the collection is created.
    upsert_batch_size:
        Max records per ``collection.upsert`` call.
    client:
        Pre-built Chroma client (e.g. ``chromadb.PersistentClient``).
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        distance_metric: str = settings.chroma_distance_metric,
        upsert_batch_size: int = settings.upsert_batch_size,
        client: Any | None = None,
    ) -> None:
        super().__init__(collection_name)
        self.upsert_batch_size = upsert_batch_size
        try:
            self._client = client if client is not None else chromadb.HttpClient(host=host, port=port)
            self._collection = self._client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": distance_metric},
            )
        except Exception as exc:
            raise StoreError(f"Could not open Chroma collection {collection_name!r}") from exc

    # -- VectorStoreBase overrides --------------------------------------------

    def count(self) -> int:
        try:
            return int(self._collection.count())
        except Exception as exc:
            raise StoreError(f"Could not count records in {self.collection_name!r}") from exc

    def upsert(self, records: Sequence[IndexedDocument]) -> None:
        if not records:
            return

        ids = [record.id for record in records]
        embeddings = [list(record.embedding) for record in records]
        documents = [record.text for record in records]
        metadatas = [_flatten_metadata(record.metadata) for record in records]

        batches = 0
        for start in range(0, len(ids), self.upsert_batch_size):
            end = start + self.upsert_batch_size
            try:
                self._collection.upsert(
                    ids=ids[start:end],
                    embeddings=embeddings[start:end],
                    documents=documents[start:end],
                    metadatas=metadatas[start:end],
                )
            except Exception as exc:
                raise StoreError(
                    f"Upsert into {self.collection_name!r} failed after {start} records"
                ) from exc
            batches += 1
            logger.info("  upserted batch %d (%d-%d)", batches, start, min(end, len(ids)))

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
