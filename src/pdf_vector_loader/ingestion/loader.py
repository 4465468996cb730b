"""Page extractors — thin wrappers around LangChain document loaders."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING

from langchain_community.document_loaders import PyPDFLoader

from pdf_vector_loader.errors import ConfigurationError, ExtractionError, ResourceNotFoundError
from pdf_vector_loader.ingestion.models import PageRecord

if TYPE_CHECKING:
    from langchain_core.documents import Document

logger = logging.getLogger(__name__)

PACKAGE_SCHEME = "package:"


def resolve_resource(location: str | Path) -> Path:
    """Turn a configured PDF location into a filesystem path.

    Two forms are accepted:

    * a plain filesystem path, e.g. ``data/manual.pdf``;
    * a packaged asset, ``package:<module>:<relative/path.pdf>``, resolved
      with :mod:`importlib.resources`.

    Raises
    ------
    ResourceNotFoundError
        If the location does not point at an existing file.
    """
    text = str(location)
    if text.startswith(PACKAGE_SCHEME):
        package, _, relative = text[len(PACKAGE_SCHEME):].partition(":")
        if not package or not relative:
            raise ResourceNotFoundError(
                f"Packaged resource must look like 'package:<module>:<path>', got {text!r}"
            )
        try:
            path = Path(str(resources.files(package).joinpath(relative)))
        except ModuleNotFoundError as exc:
            raise ResourceNotFoundError(f"Package {package!r} not importable") from exc
    else:
        path = Path(text).expanduser()

    if not path.is_file():
        raise ResourceNotFoundError(f"PDF resource not found: {path}")
    return path


class PageExtractor(ABC):
    """Turn a document resource into ordered :class:`PageRecord` objects."""

    @abstractmethod
    def extract(self, resource: str | Path) -> list[PageRecord]:
        """Return one record per page (or page group), in document order."""
        ...


class PdfPageExtractor(PageExtractor):
    """PDF extractor built on ``PyPDFLoader``.

    Parameters
    ----------
    pages_per_document:
        Number of consecutive pages folded into a single :class:`PageRecord`.
    top_lines_to_delete / bottom_lines_to_delete:
        Text lines dropped from the top / bottom of every page, e.g. running
        headers and footers.
    """

    def __init__(
        self,
        *,
        pages_per_document: int = 1,
        top_lines_to_delete: int = 0,
        bottom_lines_to_delete: int = 0,
    ) -> None:
        if pages_per_document < 1:
            raise ConfigurationError(f"pages_per_document ({pages_per_document}) must be >= 1")
        self.pages_per_document = pages_per_document
        self.top_lines_to_delete = max(top_lines_to_delete, 0)
        self.bottom_lines_to_delete = max(bottom_lines_to_delete, 0)

    def extract(self, resource: str | Path) -> list[PageRecord]:
        path = resolve_resource(resource)
        logger.info("Extracting pages from %s", path)
        try:
            documents = PyPDFLoader(str(path)).load()
        except Exception as exc:
            raise ExtractionError(f"Failed to read PDF {path}: {exc}") from exc

        records = self._group(documents, source=path.name)
        logger.info("Extracted %d page records from %s", len(records), path.name)
        return records

    # -- internals ------------------------------------------------------------

    def _format(self, text: str) -> str:
        if not (self.top_lines_to_delete or self.bottom_lines_to_delete):
            return text
        lines = text.splitlines()
        end = len(lines) - self.bottom_lines_to_delete
        return "\n".join(lines[self.top_lines_to_delete:max(end, 0)])

    def _group(self, documents: list[Document], *, source: str) -> list[PageRecord]:
        records: list[PageRecord] = []
        size = self.pages_per_document
        for offset in range(0, len(documents), size):
            group = documents[offset:offset + size]
            first = int(group[0].metadata.get("page", offset)) + 1
            last = int(group[-1].metadata.get("page", offset + len(group) - 1)) + 1
            text = "\n".join(self._format(doc.page_content) for doc in group)
            records.append(
                PageRecord(
                    page_number=first,
                    text=text,
                    metadata={"source": source, "page_end": last},
                )
            )
        return records
