"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import pytest
from fakes import FakeEmbedder, FakeVectorStore, WordTokenizer, make_page

from pdf_vector_loader import bootstrap
from pdf_vector_loader.ingestion.models import PageRecord


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


@pytest.fixture()
def word_tokenizer() -> WordTokenizer:
    return WordTokenizer()


@pytest.fixture()
def fake_store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture()
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture()
def two_page_document() -> list[PageRecord]:
    """Page 1 = 1200 tokens, page 2 = 300 tokens."""
    return [make_page(1, 1200), make_page(2, 300)]


@pytest.fixture(autouse=True)
def _reset_bootstrap():
    bootstrap.reset()
    yield
    bootstrap.reset()
