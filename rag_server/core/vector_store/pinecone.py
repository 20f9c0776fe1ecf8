"""Production VectorStore - one Pinecone namespace per knowledge base."""

from __future__ import annotations

from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_pinecone import PineconeVectorStore as LangchainPinecone
from pinecone import Pinecone
from pinecone import ServerlessSpec

from rag_server.core.config import ConfigurationError
from rag_server.core.config import Settings


class PineconeVectorStore(LangchainPinecone):
    """Thin adapter for the official Langchain Pinecone integration.

    Every read and write is pinned to ``collection_name`` (the namespace).
    """

    def __init__(
        self,
        embeddings: Embeddings,
        collection_name: str,
        cfg: Settings | None = None,
        **kwargs,
    ):
        self.cfg = cfg or Settings()
        if not self.cfg.pinecone_api_key:
            raise ConfigurationError("Pinecone API key missing. Set PINECONE_API_KEY.")

        pc = Pinecone(api_key=self.cfg.pinecone_api_key)
        if self.cfg.pinecone_index not in pc.list_indexes().names():
            pc.create_index(
                name=self.cfg.pinecone_index,
                dimension=self.cfg.embedding_dim,
                metric="cosine",
                spec=ServerlessSpec(cloud="aws", region=self.cfg.pinecone_env),
            )

        self.collection_name = collection_name
        super().__init__(
            index_name=self.cfg.pinecone_index,
            embedding=embeddings,
            namespace=collection_name,
            pinecone_api_key=self.cfg.pinecone_api_key,
            **kwargs,
        )

    def upsert(self, documents: list[Document]) -> list[str]:
        """Insert or update documents keyed by ``Document.id``."""
        ids = [doc.id for doc in documents]
        return super().add_documents(
            documents, ids=ids, namespace=self.collection_name
        )

    def similarity_search(
        self, query: str, k: int = 5, filter: dict | None = None, **kwargs
    ) -> list[Document]:
        return super().similarity_search(
            query,
            k=k,
            filter=filter,
            namespace=self.collection_name,
            **kwargs,
        )

    def delete(self, ids: list[str]) -> None:
        """Delete vectors by ID."""
        self.index.delete(ids=ids, namespace=self.collection_name)

    def delete_all(self) -> None:
        """Delete every vector in this knowledge base's namespace."""
        self.index.delete(delete_all=True, namespace=self.collection_name)

    def count(self) -> int:
        """Number of vectors stored in the namespace."""
        stats = self.index.describe_index_stats()
        namespaces = getattr(stats, "namespaces", None) or {}
        summary = namespaces.get(self.collection_name)
        return int(getattr(summary, "vector_count", 0)) if summary else 0

    @property
    def index(self):
        """Return the underlying pinecone `Index` object."""
        return getattr(self, "_index", None)
