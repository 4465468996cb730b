"""Unit tests for the HuggingFace embedding client."""

from __future__ import annotations

import time
from unittest.mock import patch

import pytest
from fakes import FakeExtractor, FakeVectorStore, WordTokenizer, make_page

from pdf_vector_loader.config import ChunkingConfig, Settings
from pdf_vector_loader.errors import EmbeddingError
from pdf_vector_loader.ingestion.chunker import TokenChunker
from pdf_vector_loader.ingestion.controller import IngestionController
from pdf_vector_loader.ingestion.embedder import HuggingFaceEmbeddingClient, get_embedding_client

MODEL = "sentence-transformers/all-MiniLM-L6-v2"


def test_model_loaded_lazily_once() -> None:
    with patch("pdf_vector_loader.ingestion.embedder.HuggingFaceEmbeddings") as hf_cls:
        hf_cls.return_value.embed_documents.return_value = [[0.1, 0.2]]
        client = HuggingFaceEmbeddingClient(MODEL)
        hf_cls.assert_not_called()

        client.embed("a")
        client.embed("b")

    hf_cls.assert_called_once_with(
        model_name=MODEL,
        encode_kwargs={"normalize_embeddings": True},
    )


def test_embed_returns_single_vector() -> None:
    with patch("pdf_vector_loader.ingestion.embedder.HuggingFaceEmbeddings") as hf_cls:
        hf_cls.return_value.embed_documents.return_value = [[0.1, 0.2, 0.3]]
        vector = HuggingFaceEmbeddingClient(MODEL).embed("hello")

    assert vector == [0.1, 0.2, 0.3]
    hf_cls.return_value.embed_documents.assert_called_once_with(["hello"])


def test_embed_many_batches() -> None:
    with patch("pdf_vector_loader.ingestion.embedder.HuggingFaceEmbeddings") as hf_cls:
        hf_cls.return_value.embed_documents.side_effect = lambda batch: [[float(len(t))] for t in batch]
        vectors = HuggingFaceEmbeddingClient(MODEL, batch_size=2).embed_many(["a", "bb", "ccc"])

    assert vectors == [[1.0], [2.0], [3.0]]
    assert hf_cls.return_value.embed_documents.call_count == 2


def test_backend_failure_wrapped() -> None:
    with patch("pdf_vector_loader.ingestion.embedder.HuggingFaceEmbeddings") as hf_cls:
        hf_cls.return_value.embed_documents.side_effect = TimeoutError("upstream timeout")
        with pytest.raises(EmbeddingError, match="upstream timeout") as excinfo:
            HuggingFaceEmbeddingClient(MODEL).embed("hello")

    assert isinstance(excinfo.value.__cause__, TimeoutError)


def test_model_load_failure_wrapped() -> None:
    with patch("pdf_vector_loader.ingestion.embedder.HuggingFaceEmbeddings") as hf_cls:
        hf_cls.side_effect = OSError("model not found")
        with pytest.raises(EmbeddingError, match="Could not load"):
            HuggingFaceEmbeddingClient("no/such-model").embed_many(["x"])


def test_factory_uses_settings() -> None:
    config = Settings(embedding_model="my/model", normalize_embeddings=False)
    client = get_embedding_client(config)
    assert client.model_name == "my/model"
    assert client.normalize_embeddings is False


def test_model_loaded_once_across_worker_threads() -> None:
    def slow_model(**kwargs):
        time.sleep(0.3)
        return model

    with patch("pdf_vector_loader.ingestion.embedder.HuggingFaceEmbeddings") as hf_cls:
        model = hf_cls.return_value
        model.embed_documents.side_effect = lambda batch: [[0.1, 0.2] for _ in batch]
        hf_cls.side_effect = slow_model

        chunker = TokenChunker(
            ChunkingConfig(chunk_size=10, overlap=0, min_chunk_size=1, max_chunk_size=10),
            WordTokenizer(),
        )
        controller = IngestionController(
            FakeVectorStore(),
            HuggingFaceEmbeddingClient(MODEL),
            FakeExtractor([make_page(1, 80)]),
            chunker,
            embedding_workers=4,
        )
        result = controller.ingest_if_empty("doc.pdf")

    assert result.chunk_count == 8
    assert hf_cls.call_count == 1
