"""Facade that ties embeddings + vector store + knowledge-base records together.

Failures from the hosted services are logged and reported as ``False`` /
``None`` / ``[]``. Two kinds of error propagate instead:

- ``ConfigurationError`` (missing credentials)
- ``KnowledgeBaseNotFoundError`` (unknown collection name)
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from datetime import timezone
import logging
from typing import Any
import uuid

from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from rag_server.core.collection_cache import BoundedCache
from rag_server.core.config import Settings
from rag_server.core.embeddings import get_embeddings
from rag_server.core.knowledge_store import SupabaseKnowledgeStore
from rag_server.core.vector_store.pinecone import PineconeVectorStore

logger = logging.getLogger(__name__)


class KnowledgeBaseNotFoundError(LookupError):
    def __init__(self, collection_name: str):
        super().__init__(f"Knowledge base {collection_name!r} does not exist")
        self.collection_name = collection_name


def build_collection_name(name: str) -> str:
    """Unique collection name for a user-supplied knowledge-base name."""
    return f"{name}_{uuid.uuid4()}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class KnowledgeBaseService:
    """High-level API used by the HTTP routes and the ingest CLI."""

    def __init__(
        self,
        cfg: Settings | None = None,
        store: SupabaseKnowledgeStore | None = None,
        embeddings: Embeddings | None = None,
        vector_store_factory: Callable[[str], Any] | None = None,
        cache: BoundedCache[str, Any] | None = None,
    ):
        """Initialize the service.

        Args:
            cfg: Settings; defaults to the process environment
            store: Knowledge-base record store (Supabase by default)
            embeddings: Embeddings used by the default Pinecone factory
            vector_store_factory: ``collection_name -> vector store``; tests
                inject an in-memory store here
            cache: Cache of vector-store handles keyed by collection name
        """
        self.cfg = cfg or Settings()
        self.store = store or SupabaseKnowledgeStore(cfg=self.cfg)
        self._embeddings = embeddings
        self._vector_store_factory = vector_store_factory or self._pinecone_store
        if cache is None:
            cache = BoundedCache(
                max_size=self.cfg.collection_cache_size,
                ttl=self.cfg.collection_cache_ttl,
            )
        self.cache = cache

    # -------- Collection handles -----------------------------------------
    def _pinecone_store(self, collection_name: str) -> PineconeVectorStore:
        embeddings = self._embeddings or get_embeddings()
        return PineconeVectorStore(embeddings, collection_name, cfg=self.cfg)

    def _open_collection(self, collection_name: str) -> Any:
        if self.store.get_knowledge_base(collection_name) is None:
            raise KnowledgeBaseNotFoundError(collection_name)
        return self._vector_store_factory(collection_name)

    def get_collection(self, collection_name: str) -> Any:
        return self.cache.get_or_create(collection_name, self._open_collection)

    # -------- Knowledge bases --------------------------------------------
    def create_knowledge_base(
        self, name: str, description: str | None = None
    ) -> dict[str, Any] | None:
        record = {
            "collection_name": build_collection_name(name),
            "name": name,
            "description": description or "",
            "created_at": _now(),
        }
        try:
            created = self.store.insert_knowledge_base(record)
        except Exception:
            logger.exception("Failed to create knowledge base %s", name)
            return None
        logger.info("Knowledge base %s created", record["collection_name"])
        return created

    def list_knowledge_bases(self) -> list[dict[str, Any]]:
        try:
            return self.store.list_knowledge_bases()
        except Exception:
            logger.exception("Failed to list knowledge bases")
            return []

    def update_knowledge_base(
        self,
        collection_name: str,
        new_name: str | None = None,
        new_description: str | None = None,
    ) -> bool:
        if not new_name and not new_description:
            logger.info("No new name or description for %s; nothing to update", collection_name)
            return True

        fields: dict[str, Any] = {}
        if new_name:
            fields["name"] = new_name
        if new_description:
            fields["description"] = new_description

        try:
            updated = self.store.update_knowledge_base(collection_name, fields)
        except Exception:
            logger.exception("Failed to update knowledge base %s", collection_name)
            return False
        if updated is None:
            raise KnowledgeBaseNotFoundError(collection_name)

        self.cache.evict(collection_name)
        logger.info("Knowledge base %s updated", collection_name)
        return True

    def delete_knowledge_base(self, collection_name: str) -> bool:
        collection = self.get_collection(collection_name)
        try:
            collection.delete_all()
            self.store.delete_knowledge_base(collection_name)
        except Exception:
            logger.exception("Failed to delete knowledge base %s", collection_name)
            return False
        finally:
            self.cache.evict(collection_name)

        logger.info("Knowledge base %s deleted", collection_name)
        return True

    # -------- Documents --------------------------------------------------
    def add_documents(
        self, collection_name: str, documents: list[Document]
    ) -> list[str] | None:
        """Upsert chunks with fresh ids; returns the ids in chunk order."""
        collection = self.get_collection(collection_name)

        prepared = []
        for doc in documents:
            metadata = dict(doc.metadata) or {"created_at": _now()}
            prepared.append(
                Document(
                    page_content=doc.page_content,
                    metadata=metadata,
                    id=str(uuid.uuid4()),
                )
            )

        try:
            collection.upsert(prepared)
        except Exception:
            logger.exception("Failed to add documents to %s", collection_name)
            return None

        logger.info("Added %d documents to %s", len(prepared), collection_name)
        return [doc.id for doc in prepared]

    def search_similar_documents(
        self,
        collection_name: str,
        query: str,
        k: int = 5,
        filter: dict[str, Any] | None = None,
    ) -> list[Document]:
        collection = self.get_collection(collection_name)
        try:
            return collection.similarity_search(query, k=k, filter=filter)
        except Exception:
            logger.exception("Similarity search in %s failed", collection_name)
            return []

    def delete_documents(self, collection_name: str, ids: list[str]) -> bool:
        if not ids:
            logger.warning("No document ids given for deletion from %s", collection_name)
            return False

        collection = self.get_collection(collection_name)
        try:
            collection.delete(ids)
        except Exception:
            logger.exception("Failed to delete documents from %s", collection_name)
            return False

        logger.info("Deleted %d documents from %s", len(ids), collection_name)
        return True

    def get_collection_stats(self, collection_name: str) -> dict[str, int] | None:
        collection = self.get_collection(collection_name)
        try:
            return {"count": collection.count()}
        except Exception:
            logger.exception("Failed to read stats for %s", collection_name)
            return None
