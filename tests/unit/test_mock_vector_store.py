"""Unit tests for the in-memory MockVectorStore used by the service tests."""

from __future__ import annotations

from langchain_core.documents import Document
import pytest

from rag_server.core.vector_store.mock import MockVectorStore

pytestmark = pytest.mark.unit


def test_from_texts(mock_embeddings):
    store = MockVectorStore.from_texts(
        ["first", "second"], mock_embeddings, metadatas=[{"n": 1}, {"n": 2}]
    )
    docs = store.get_all_documents()
    assert [d.page_content for d in docs] == ["first", "second"]
    assert [d.metadata for d in docs] == [{"n": 1}, {"n": 2}]
    assert store.count() == 2


def test_upsert_replaces_same_id(mock_vector_store):
    mock_vector_store.upsert([Document(page_content="old", id="1")])
    mock_vector_store.upsert([Document(page_content="new", id="1")])
    assert [d.page_content for d in mock_vector_store.get_all_documents()] == ["new"]


def test_upsert_rejects_duplicates_and_missing_ids(mock_vector_store):
    with pytest.raises(ValueError, match="Duplicate document IDs"):
        mock_vector_store.upsert(
            [Document(page_content="a", id="x"), Document(page_content="b", id="x")]
        )
    with pytest.raises(ValueError, match="needs an id"):
        mock_vector_store.upsert([Document(page_content="a")])


def test_similarity_search_ranks_by_overlap(mock_vector_store):
    mock_vector_store.upsert(
        [
            Document(page_content="red apples", id="1"),
            Document(page_content="green apples and pears", id="2"),
            Document(page_content="blue sky", id="3"),
        ]
    )
    hits = mock_vector_store.similarity_search("red apples", k=2)
    assert [h.id for h in hits] == ["1", "2"]


def test_delete(mock_vector_store):
    mock_vector_store.upsert([Document(page_content="a", id="1")])
    mock_vector_store.delete(["1", "unknown"])
    assert mock_vector_store.count() == 0
    with pytest.raises(ValueError, match="No document IDs"):
        mock_vector_store.delete([])
