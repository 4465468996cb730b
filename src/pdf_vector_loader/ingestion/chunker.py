"""Token-window chunking over a sequence of page records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Protocol, Sequence

import tiktoken

from pdf_vector_loader.config import ChunkingConfig
from pdf_vector_loader.errors import ConfigurationError
from pdf_vector_loader.ingestion.models import Chunk, PageRecord

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"


class Tokenizer(Protocol):
    """Anything that maps text to token ids and back.

    ``decode`` receives arbitrary slices of an encoded stream, so it must
    tolerate slices that start or end inside a multi-byte character.
    """

    def encode(self, text: str) -> list[int]: ...

    def decode(self, tokens: list[int]) -> str: ...


class TiktokenTokenizer:
    """BPE tokenizer backed by :mod:`tiktoken`.

    The encoding is loaded on first use, so constructing a chunker does not
    touch the network or the tiktoken cache.
    """

    def __init__(self, encoding_name: str = "cl100k_base") -> None:
        self.encoding_name = encoding_name

    @cached_property
    def _encoding(self) -> tiktoken.Encoding:
        return tiktoken.get_encoding(self.encoding_name)

    def encode(self, text: str) -> list[int]:
        # PDF text may legitimately contain "<|endoftext|>"; treat it as text.
        return self._encoding.encode(text, disallowed_special=())

    def decode(self, tokens: list[int]) -> str:
        # A window edge can split a UTF-8 sequence; drop the partial bytes.
        return self._encoding.decode_bytes(tokens).decode("utf-8", errors="ignore")


@dataclass
class _PageSpan:
    record: PageRecord
    start: int
    tokens: list[int]

    @property
    def end(self) -> int:
        return self.start + len(self.tokens)

    @property
    def last_page(self) -> int:
        return int(self.record.metadata.get("page_end", self.record.page_number))


def validate_chunking_config(config: ChunkingConfig) -> None:
    """Raise :class:`ConfigurationError` when *config* cannot produce valid chunks."""
    if config.chunk_size <= 0:
        raise ConfigurationError(f"chunk_size ({config.chunk_size}) must be > 0")
    if not 0 <= config.overlap < config.chunk_size:
        raise ConfigurationError(
            f"overlap ({config.overlap}) must be >= 0 and < chunk_size ({config.chunk_size})"
        )
    if not 0 <= config.min_chunk_size <= config.chunk_size:
        raise ConfigurationError(
            f"min_chunk_size ({config.min_chunk_size}) must be between 0 and "
            f"chunk_size ({config.chunk_size})"
        )
    if config.chunk_size > config.max_chunk_size:
        raise ConfigurationError(
            f"chunk_size ({config.chunk_size}) must be <= max_chunk_size ({config.max_chunk_size})"
        )


class TokenChunker:
    """Split page records into overlapping, token-bounded chunks.

    Parameters
    ----------
    config:
        Window parameters; validated immediately.
    tokenizer:
        Token codec.  Defaults to :class:`TiktokenTokenizer` (``cl100k_base``).
        Query-side code must use the same tokenizer.
    page_separator:
        String placed between the text of two pages inside one chunk.

    Raises
    ------
    ConfigurationError
        If *config* is inconsistent (see :func:`validate_chunking_config`).
    """

    def __init__(
        self,
        config: ChunkingConfig | None = None,
        tokenizer: Tokenizer | None = None,
        *,
        page_separator: str = PAGE_SEPARATOR,
    ) -> None:
        self.config = config or ChunkingConfig()
        validate_chunking_config(self.config)
        self.tokenizer: Tokenizer = tokenizer or TiktokenTokenizer()
        self.page_separator = page_separator

    # -- public API -----------------------------------------------------------

    def chunk(
        self,
        pages: Sequence[PageRecord],
        metadata: dict[str, Any] | None = None,
    ) -> list[Chunk]:
        """Return the chunks covering *pages*, in stream order.

        Parameters
        ----------
        pages:
            Page records in document order.
        metadata:
            Base metadata copied into every chunk (e.g. ``{"source": ...}``).
        """
        spans = self._tokenize(pages)
        total = spans[-1].end if spans else 0
        windows = self.windows(total)

        texts: list[tuple[int, int, str, int, int]] = []
        for start, end in windows:
            text, first_page, last_page = self._render(spans, start, end)
            if self.config.trim:
                text = text.strip()
            if not text:
                logger.debug("Dropping whitespace-only window %d-%d", start, end)
                continue
            texts.append((start, end, text, first_page, last_page))

        base = dict(metadata or {})
        chunks: list[Chunk] = []
        for index, (start, end, text, first_page, last_page) in enumerate(texts):
            chunks.append(
                Chunk(
                    page_start=first_page,
                    page_end=last_page,
                    token_start=start,
                    token_end=end,
                    text=text,
                    metadata={
                        **base,
                        "chunk_index": index,
                        "chunk_count": len(texts),
                        "page_start": first_page,
                        "page_end": last_page,
                        "token_start": start,
                        "token_end": end,
                        "token_count": end - start,
                        "char_count": len(text),
                    },
                )
            )

        logger.info(
            "Split %d pages (%d tokens) into %d chunks", len(pages), total, len(chunks)
        )
        return chunks

    def windows(self, total: int) -> list[tuple[int, int]]:
        """Return the half-open ``(start, end)`` token windows for a stream of *total* tokens."""
        if total <= 0:
            return []

        size = self.config.chunk_size
        step = size - self.config.overlap
        windows: list[tuple[int, int]] = []
        start = 0
        while True:
            end = min(start + size, total)
            windows.append((start, end))
            if end >= total:
                break
            start += step

        if len(windows) > 1:
            prev_start, prev_end = windows[-2]
            new_tokens = total - prev_end
            if (
                new_tokens < self.config.min_chunk_size
                and total - prev_start <= self.config.max_chunk_size
            ):
                logger.debug(
                    "Merging %d-token tail into window %d-%d", new_tokens, prev_start, prev_end
                )
                windows[-2:] = [(prev_start, total)]
        return windows

    # -- internals ------------------------------------------------------------

    def _tokenize(self, pages: Sequence[PageRecord]) -> list[_PageSpan]:
        spans: list[_PageSpan] = []
        offset = 0
        for page in pages:
            tokens = list(self.tokenizer.encode(page.text))
            spans.append(_PageSpan(record=page, start=offset, tokens=tokens))
            offset += len(tokens)
        return spans

    def _render(self, spans: list[_PageSpan], start: int, end: int) -> tuple[str, int, int]:
        pieces: list[str] = []
        touched: list[_PageSpan] = []
        for span in spans:
            if not span.tokens or span.end <= start or span.start >= end:
                continue
            lo = max(start, span.start) - span.start
            hi = min(end, span.end) - span.start
            pieces.append(self.tokenizer.decode(span.tokens[lo:hi]))
            touched.append(span)
        return (
            self.page_separator.join(pieces),
            touched[0].record.page_number,
            touched[-1].last_page,
        )
