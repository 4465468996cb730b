"""
Vector stores — persistence for embedded chunks.

- :class:`VectorStoreBase` — abstract backend (subclass for pgvector, etc.).
- :class:`ChromaVectorStore` — default Chroma backend.
"""

from pdf_vector_loader.store.base import VectorStoreBase

__all__ = ["ChromaVectorStore", "VectorStoreBase"]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from pdf_vector_loader.store.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
