from __future__ import annotations

from typing import Any

from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_core.vectorstores import VectorStore


class MockVectorStore(VectorStore):
    """In-memory stand-in for one knowledge-base namespace, used in tests.

    Search ranks by word overlap (Jaccard) so results are deterministic.
    """

    def __init__(
        self, embeddings: Embeddings, collection_name: str = "mock", **kwargs: Any
    ):
        self._embeddings = embeddings
        self.collection_name = collection_name
        self._store: dict[str, Document] = {}

    @classmethod
    def from_texts(
        cls,
        texts: list[str],
        embedding: Embeddings,
        metadatas: list[dict] | None = None,
        **kwargs: Any,
    ) -> MockVectorStore:
        instance = cls(embedding, **kwargs)
        metadatas = metadatas or [{} for _ in texts]
        ids = kwargs.get("ids") or [str(i) for i in range(len(texts))]
        instance.upsert(
            [
                Document(page_content=text, metadata=metadata, id=doc_id)
                for text, metadata, doc_id in zip(texts, metadatas, ids)
            ]
        )
        return instance

    def add_documents(self, documents: list[Document], **kwargs: Any) -> list[str]:
        ids = kwargs.get("ids") or [doc.id for doc in documents]
        if any(doc_id is None for doc_id in ids):
            raise ValueError("Every document needs an id.")
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate document IDs detected in upsert operation.")

        for doc_id, doc in zip(ids, documents):
            self._store[doc_id] = Document(
                page_content=doc.page_content, metadata=dict(doc.metadata), id=doc_id
            )
        return list(ids)

    def upsert(self, documents: list[Document]) -> list[str]:
        return self.add_documents(documents)

    def similarity_search(
        self, query: str, k: int = 4, filter: dict | None = None, **kwargs: Any
    ) -> list[Document]:
        query_words = set(query.lower().split())
        scored = []
        for position, doc in enumerate(self._store.values()):
            if filter and any(doc.metadata.get(key) != val for key, val in filter.items()):
                continue
            words = set(doc.page_content.lower().split())
            union = query_words | words
            score = len(query_words & words) / len(union) if union else 0.0
            scored.append((-score, position, doc))

        scored.sort(key=lambda item: (item[0], item[1]))
        return [doc for _, _, doc in scored[:k]]

    def delete(self, ids: list[str]) -> None:
        if not ids:
            raise ValueError("No document IDs provided for deletion.")
        for doc_id in ids:
            self._store.pop(doc_id, None)

    def delete_all(self) -> None:
        self._store.clear()

    def count(self) -> int:
        return len(self._store)

    def get_all_documents(self) -> list[Document]:
        return list(self._store.values())
