from __future__ import annotations

from typing import Any

from rag_server.core.config import Settings


def get_test_settings() -> Settings:
    """Returns a Settings instance for testing.

    Automatically uses TEST_PINECONE_INDEX and TEST_SUPABASE_TABLE_PREFIX
    environment variables when available.
    """
    return Settings.for_testing()


class InMemoryKnowledgeStore:
    """Stands in for ``SupabaseKnowledgeStore`` with the same method surface."""

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}

    def insert_knowledge_base(self, record: dict[str, Any]) -> dict[str, Any]:
        self.rows[record["collection_name"]] = dict(record)
        return dict(record)

    def list_knowledge_bases(self, limit: int = 1000) -> list[dict[str, Any]]:
        rows = sorted(self.rows.values(), key=lambda r: r["created_at"])
        return [dict(r) for r in rows[:limit]]

    def get_knowledge_base(self, collection_name: str) -> dict[str, Any] | None:
        row = self.rows.get(collection_name)
        return dict(row) if row else None

    def update_knowledge_base(
        self, collection_name: str, fields: dict[str, Any]
    ) -> dict[str, Any] | None:
        row = self.rows.get(collection_name)
        if row is None:
            return None
        row.update(fields)
        return dict(row)

    def delete_knowledge_base(self, collection_name: str) -> None:
        self.rows.pop(collection_name, None)
