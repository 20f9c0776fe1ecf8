"""Domain models shared across the package."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Any

from langchain_core.documents import Document


def chunk_to_dict(doc: Document) -> dict[str, Any]:
    """JSON-friendly view of a chunk."""
    return {"content": doc.page_content, "metadata": dict(doc.metadata), "id": doc.id}


@dataclass
class SplitResult:
    """Outcome of a split: the chunks, plus the failure reason if one occurred.

    An empty ``chunks`` list with ``error=None`` means the strategy ran and
    produced nothing; a non-None ``error`` means it failed upstream.
    """

    chunks: list[Document] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
