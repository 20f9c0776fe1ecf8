from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from rag_server.core.config import Settings
from rag_server.core.knowledge_base import KnowledgeBaseService
from rag_server.core.vector_store.mock import MockVectorStore
from tests.helpers import InMemoryKnowledgeStore


@pytest.fixture
def mock_embeddings():
    """Fixture for a mock embeddings object."""
    return MagicMock()


@pytest.fixture
def mock_vector_store(mock_embeddings) -> MockVectorStore:
    """Fixture for a MockVectorStore instance."""
    return MockVectorStore(embeddings=mock_embeddings)


@pytest.fixture
def knowledge_store() -> InMemoryKnowledgeStore:
    return InMemoryKnowledgeStore()


@pytest.fixture
def vector_stores(mock_embeddings) -> dict[str, MockVectorStore]:
    """Every MockVectorStore the service opened, keyed by collection name."""
    return {}


@pytest.fixture
def store_factory(mock_embeddings, vector_stores):
    def _factory(collection_name: str) -> MockVectorStore:
        store = vector_stores.setdefault(
            collection_name, MockVectorStore(mock_embeddings, collection_name)
        )
        return store

    return MagicMock(side_effect=_factory)


@pytest.fixture
def kb_service(knowledge_store, store_factory) -> KnowledgeBaseService:
    return KnowledgeBaseService(
        cfg=Settings(),
        store=knowledge_store,
        vector_store_factory=store_factory,
    )
