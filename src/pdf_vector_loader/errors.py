"""Exception hierarchy for the ingestion stack.

Every failure raised by the loader derives from :class:`IngestionError`, so
the startup hook can catch a single type and refuse to report readiness.
Collaborator exceptions are wrapped with ``raise ... from exc`` so the
original cause stays on ``__cause__``.
"""

from __future__ import annotations


class IngestionError(RuntimeError):
    """Base class for all ingestion failures."""


class ConfigurationError(IngestionError, ValueError):
    """Invalid chunking or loader parameters; raised before any I/O."""


class ResourceNotFoundError(IngestionError):
    """The PDF resource could not be located or opened."""


class ExtractionError(IngestionError):
    """The PDF could be opened but its pages could not be read."""


class EmbeddingError(IngestionError):
    """The embedding backend failed (quota, timeout, model load, ...)."""


class StoreError(IngestionError):
    """The vector store rejected a count or write."""
