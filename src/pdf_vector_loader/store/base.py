"""Abstract base class for vector-store backends.

Adding a new backend (pgvector, Qdrant …) only requires subclassing
:class:`VectorStoreBase` and implementing the three abstract methods.
The ingestion controller is backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from pdf_vector_loader.ingestion.models import IndexedDocument


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / table / index.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    @abstractmethod
    def count(self) -> int:
        """Return the number of records currently committed to the collection.

        The ingestion controller treats ``0`` as "never loaded"; backends
        must not count records from an uncommitted write.
        """
        ...

    @abstractmethod
    def upsert(self, records: Sequence[IndexedDocument]) -> None:
        """Insert *records*, replacing any existing record with the same ``id``.

        Raises
        ------
        StoreError
            On connectivity or constraint failures.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
