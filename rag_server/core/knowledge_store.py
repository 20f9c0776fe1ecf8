"""Supabase-backed records for knowledge bases.

Pinecone holds the vectors (one namespace per knowledge base); this table is
the system-of-record for the human-facing name and description:

    create table if not exists knowledge_bases (
      collection_name text primary key,
      name text not null,
      description text default '',
      created_at timestamptz default now()
    );
"""

from __future__ import annotations

from typing import Any, cast

from supabase import create_client

from rag_server.core.config import ConfigurationError
from rag_server.core.config import Settings


class SupabaseTables:
    knowledge_bases: str

    def __init__(self) -> None:
        self.knowledge_bases = "knowledge_bases"

    @classmethod
    def with_prefix(cls, prefix: str) -> SupabaseTables:
        inst = cls()
        inst.knowledge_bases = f"{prefix or ''}knowledge_bases"
        return inst


class SupabaseKnowledgeStore:
    """CRUD over the ``knowledge_bases`` table."""

    def __init__(
        self, cfg: Settings | None = None, tables: SupabaseTables | None = None
    ):
        self.cfg = cfg or Settings()
        if tables is None and self.cfg.supabase_table_prefix:
            tables = SupabaseTables.with_prefix(self.cfg.supabase_table_prefix)
        self.tables = tables or SupabaseTables()

        if not self.cfg.supabase_url or not self.cfg.supabase_key:
            raise ConfigurationError(
                "Supabase configuration missing. Set SUPABASE_URL and SUPABASE_KEY."
            )

        self.client = create_client(self.cfg.supabase_url, self.cfg.supabase_key)

    def _table(self):
        return self.client.table(self.tables.knowledge_bases)

    @staticmethod
    def _rows(res: Any) -> list[dict[str, Any]]:
        # The supabase client returns an object; duck-type data attr
        data_any = getattr(res, "data", res)
        return cast("list[dict[str, Any]] | None", data_any) or []

    def insert_knowledge_base(self, record: dict[str, Any]) -> dict[str, Any]:
        rows = self._rows(self._table().insert(record).execute())
        return rows[0] if rows else record

    def list_knowledge_bases(self, limit: int = 1000) -> list[dict[str, Any]]:
        res = (
            self._table()
            .select("collection_name, name, description, created_at")
            .order("created_at", desc=False)
            .limit(limit)
            .execute()
        )
        return self._rows(res)

    def get_knowledge_base(self, collection_name: str) -> dict[str, Any] | None:
        res = (
            self._table()
            .select("collection_name, name, description, created_at")
            .eq("collection_name", collection_name)
            .limit(1)
            .execute()
        )
        rows = self._rows(res)
        return rows[0] if rows else None

    def update_knowledge_base(
        self, collection_name: str, fields: dict[str, Any]
    ) -> dict[str, Any] | None:
        res = self._table().update(fields).eq("collection_name", collection_name).execute()
        rows = self._rows(res)
        return rows[0] if rows else None

    def delete_knowledge_base(self, collection_name: str) -> None:
        self._table().delete().eq("collection_name", collection_name).execute()
