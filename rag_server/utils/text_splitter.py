"""Recursive-length chunking shared by the API, the knowledge base and the CLI."""

from __future__ import annotations

import logging
from typing import Any

from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

__all__ = [
    "DEFAULT_CHUNK_OVERLAP",
    "DEFAULT_CHUNK_SIZE",
    "SEPARATORS",
    "build_splitter",
    "split_text",
]

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 100
DEFAULT_CHUNK_OVERLAP = 0

# Coarsest first: paragraph, line, sentence, word, then raw characters.
SEPARATORS = ["\n\n", "\n", ". ", "! ", "? ", " ", ""]


def build_splitter(
    chunk_size: int = DEFAULT_CHUNK_SIZE, chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
) -> RecursiveCharacterTextSplitter:
    """Return a splitter that keeps each separator on the piece it ends."""
    return RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        separators=SEPARATORS,
        keep_separator="end",
        strip_whitespace=True,
    )


def split_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    metadata: dict[str, Any] | None = None,
) -> list[Document]:
    """Split *text* into ordered, optionally *overlapping* chunks.

    Never raises: any failure is logged and an empty list is returned.
    ``metadata`` (if given) is copied onto every chunk.
    """
    try:
        splitter = build_splitter(chunk_size, chunk_overlap)
        return splitter.split_documents(
            [Document(page_content=text, metadata=dict(metadata or {}))]
        )
    except Exception:
        logger.exception(
            "Recursive split failed (chunk_size=%s, chunk_overlap=%s)",
            chunk_size,
            chunk_overlap,
        )
        return []
