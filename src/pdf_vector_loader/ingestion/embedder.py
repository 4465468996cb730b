"""Embedding clients — text to fixed-length float vectors."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence

from langchain_huggingface import HuggingFaceEmbeddings

from pdf_vector_loader.config import Settings, settings
from pdf_vector_loader.errors import EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingClient(ABC):
    """Backend-agnostic embedding interface.

    Implementations must be safe to call from several threads at once;
    the controller may fan chunks out over a thread pool.
    """

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Return the embedding of a single chunk of text."""
        ...

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed several texts, preserving order.  Override for batching."""
        return [self.embed(text) for text in texts]


class HuggingFaceEmbeddingClient(EmbeddingClient):
    """Sentence-transformer embeddings through ``langchain_huggingface``.

    Parameters
    ----------
    model_name:
        HuggingFace model identifier.
    normalize_embeddings:
        Whether to L2-normalise vectors (recommended for cosine similarity).
    batch_size:
        Number of texts per forward pass in :meth:`embed_many`.
    """

    def __init__(
        self,
        model_name: str = settings.embedding_model,
        *,
        normalize_embeddings: bool = True,
        batch_size: int = 64,
    ) -> None:
        self.model_name = model_name
        self.normalize_embeddings = normalize_embeddings
        self.batch_size = batch_size
        self._embeddings: HuggingFaceEmbeddings | None = None
        self._load_lock = threading.Lock()

    @property
    def _model(self) -> HuggingFaceEmbeddings:
        # Worker threads may race here on the first embed() call.
        if self._embeddings is None:
            with self._load_lock:
                if self._embeddings is None:
                    self._embeddings = self._load()
        return self._embeddings

    def _load(self) -> HuggingFaceEmbeddings:
        logger.info("Loading embedding model %s", self.model_name)
        try:
            return HuggingFaceEmbeddings(
                model_name=self.model_name,
                encode_kwargs={"normalize_embeddings": self.normalize_embeddings},
            )
        except Exception as exc:
            raise EmbeddingError(f"Could not load embedding model {self.model_name!r}") from exc

    def embed(self, text: str) -> list[float]:
        model = self._model
        try:
            return list(model.embed_documents([text])[0])
        except Exception as exc:
            raise EmbeddingError(f"Embedding failed with model {self.model_name!r}: {exc}") from exc

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        model = self._model
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = list(texts[start:start + self.batch_size])
            try:
                vectors.extend(list(v) for v in model.embed_documents(batch))
            except Exception as exc:
                raise EmbeddingError(
                    f"Embedding failed with model {self.model_name!r}: {exc}"
                ) from exc
            logger.debug("  embedded %d / %d", len(vectors), len(texts))
        return vectors


def get_embedding_client(config: Settings = settings) -> HuggingFaceEmbeddingClient:
    """Return the configured sentence-transformer embedding client."""
    return HuggingFaceEmbeddingClient(
        config.embedding_model,
        normalize_embeddings=config.normalize_embeddings,
    )
