"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class ChunkingConfig(BaseModel):
    """Token-window parameters for :class:`~pdf_vector_loader.ingestion.chunker.TokenChunker`.

    Attributes
    ----------
    chunk_size:
        Number of tokens per window.
    overlap:
        Tokens shared by consecutive windows (``0 <= overlap < chunk_size``).
    min_chunk_size:
        A trailing window adding fewer new tokens than this is merged into
        the previous chunk.
    max_chunk_size:
        Hard upper bound on a chunk's token count.
    trim:
        Strip leading/trailing whitespace from each chunk's text.
    """

    model_config = {"frozen": True}

    chunk_size: int = 1000
    overlap: int = 400
    min_chunk_size: int = 10
    max_chunk_size: int = 5000
    trim: bool = True


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Source document
    pdf_path: str = Field(default="data/document.pdf", description="Path to the PDF ingested at startup")
    pages_per_document: int = Field(default=1, description="Consecutive PDF pages grouped into one page record")
    page_top_lines_to_delete: int = 0
    page_bottom_lines_to_delete: int = 0

    # Chunking
    chunk_size: int = 1000
    chunk_overlap: int = 400
    min_chunk_size: int = 10
    max_chunk_size: int = 5000
    trim_chunks: bool = True
    tokenizer_encoding: str = "cl100k_base"

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    normalize_embeddings: bool = True
    embedding_workers: int = Field(default=1, description="Threads used to embed chunks; 1 disables the pool")

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "pdf_chunks"
    chroma_distance_metric: str = "cosine"
    upsert_batch_size: int = 5000

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def chunking_config(self) -> ChunkingConfig:
        """Return the chunking parameters as a :class:`ChunkingConfig`."""
        return ChunkingConfig(
            chunk_size=self.chunk_size,
            overlap=self.chunk_overlap,
            min_chunk_size=self.min_chunk_size,
            max_chunk_size=self.max_chunk_size,
            trim=self.trim_chunks,
        )


# Singleton — import `settings` wherever needed.
settings = Settings()
