"""Chunking strategies behind a single ``split(text, size, overlap)`` interface."""

from __future__ import annotations

from typing import Any
from typing import Protocol

from langchain_core.documents import Document
from langchain_core.language_models import BaseChatModel

from rag_server.core.chains.split_chain import LLMTextSplitter
from rag_server.core.config import Settings
from rag_server.core.types import SplitResult
from rag_server.utils.text_splitter import DEFAULT_CHUNK_OVERLAP
from rag_server.utils.text_splitter import DEFAULT_CHUNK_SIZE
from rag_server.utils.text_splitter import split_text

RECURSIVE = "recursive"
LLM = "llm"


class SplitValidationError(ValueError):
    """Request-level split parameters are invalid."""


class Splitter(Protocol):
    name: str

    def split(
        self, text: str, chunk_size: int = ..., chunk_overlap: int = ...
    ) -> list[Document]: ...

    def try_split(
        self, text: str, chunk_size: int = ..., chunk_overlap: int = ...
    ) -> SplitResult: ...


class RecursiveSplitter:
    name = RECURSIVE

    def __init__(self, metadata: dict[str, Any] | None = None):
        self.metadata = metadata

    def try_split(
        self,
        text: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    ) -> SplitResult:
        chunks = split_text(text, chunk_size, chunk_overlap, metadata=self.metadata)
        if not chunks and text.strip():
            return SplitResult(error="recursive split produced no chunks")
        return SplitResult(chunks=chunks)

    def split(
        self,
        text: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    ) -> list[Document]:
        return split_text(text, chunk_size, chunk_overlap, metadata=self.metadata)


class LLMSplitter(LLMTextSplitter):
    name = LLM


def get_splitter(
    split_type: str | None = None,
    llm: BaseChatModel | None = None,
    cfg: Settings | None = None,
    metadata: dict[str, Any] | None = None,
) -> Splitter:
    """``"llm"`` selects the LLM-delegated splitter; anything else is recursive.

    ``metadata`` defaults only apply to the recursive splitter.
    """
    if split_type == LLM:
        return LLMSplitter(llm=llm, cfg=cfg)
    return RecursiveSplitter(metadata=metadata)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_split_params(
    text: Any, chunk_size: Any = None, chunk_overlap: Any = None
) -> None:
    """Reject inputs no splitter should see. Raises ``SplitValidationError``."""
    if not isinstance(text, str) or not text.strip():
        raise SplitValidationError("text must not be empty")

    if chunk_size is not None and (not _is_int(chunk_size) or chunk_size <= 0):
        raise SplitValidationError("chunkSize must be a positive integer")

    if chunk_overlap is not None and (
        not _is_int(chunk_overlap) or chunk_overlap < 0
    ):
        raise SplitValidationError(
            "chunkOverlap must be an integer greater than or equal to 0"
        )

    if (
        chunk_size is not None
        and chunk_overlap is not None
        and chunk_overlap >= chunk_size
    ):
        raise SplitValidationError("chunkOverlap must be less than chunkSize")


def split_with(
    split_type: str | None,
    text: str,
    chunk_size: int | None = None,
    chunk_overlap: int | None = None,
    llm: BaseChatModel | None = None,
    cfg: Settings | None = None,
    metadata: dict[str, Any] | None = None,
) -> SplitResult:
    """Validate, pick a strategy and split; absent sizes fall back to defaults."""
    validate_split_params(text, chunk_size, chunk_overlap)
    size = DEFAULT_CHUNK_SIZE if chunk_size is None else chunk_size
    overlap = DEFAULT_CHUNK_OVERLAP if chunk_overlap is None else chunk_overlap
    splitter = get_splitter(split_type, llm=llm, cfg=cfg, metadata=metadata)
    return splitter.try_split(text, size, overlap)
