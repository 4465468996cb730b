"""Idempotent, startup-time ingestion of a PDF into a vector store."""

__version__ = "0.1.0"
