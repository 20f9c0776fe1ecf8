from __future__ import annotations

from langchain_core.language_models.fake_chat_models import FakeListChatModel
import pytest

from rag_server.core.splitting import LLMSplitter
from rag_server.core.splitting import RecursiveSplitter
from rag_server.core.splitting import SplitValidationError
from rag_server.core.splitting import get_splitter
from rag_server.core.splitting import split_with
from rag_server.core.splitting import validate_split_params

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Strategy selection
# ---------------------------------------------------------------------------


def test_llm_type_selects_llm_splitter():
    assert isinstance(get_splitter("llm"), LLMSplitter)


@pytest.mark.parametrize("split_type", [None, "recursive", "langchain", "LLM", ""])
def test_anything_else_selects_recursive(split_type):
    splitter = get_splitter(split_type)
    assert isinstance(splitter, RecursiveSplitter)
    assert splitter.name == "recursive"


def test_both_strategies_share_the_interface():
    llm = FakeListChatModel(responses=["Chunk 1: one\nChunk 2: two"])
    for splitter in (get_splitter("recursive"), get_splitter("llm", llm=llm)):
        chunks = splitter.split("one two", 4, 0)
        assert [c.page_content for c in chunks] == ["one", "two"]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text, size, overlap, message",
    [
        ("", None, None, "text must not be empty"),
        ("   \n", None, None, "text must not be empty"),
        (None, None, None, "text must not be empty"),
        ("hello", 0, None, "chunkSize must be a positive integer"),
        ("hello", -3, None, "chunkSize must be a positive integer"),
        ("hello", 2.5, None, "chunkSize must be a positive integer"),
        ("hello", True, None, "chunkSize must be a positive integer"),
        ("hello", "10", None, "chunkSize must be a positive integer"),
        ("hello", None, -1, "chunkOverlap must be an integer"),
        ("hello", None, 1.0, "chunkOverlap must be an integer"),
        ("hello", 10, 10, "chunkOverlap must be less than chunkSize"),
        ("hello", 10, 11, "chunkOverlap must be less than chunkSize"),
    ],
)
def test_invalid_params_are_rejected(text, size, overlap, message):
    with pytest.raises(SplitValidationError, match=message):
        validate_split_params(text, size, overlap)


@pytest.mark.parametrize(
    "size, overlap", [(None, None), (10, None), (None, 0), (10, 0), (10, 9)]
)
def test_valid_params_pass(size, overlap):
    validate_split_params("hello", size, overlap)


def test_validation_runs_before_any_splitter(mocker):
    spy = mocker.patch("rag_server.core.splitting.get_splitter")
    with pytest.raises(SplitValidationError):
        split_with("llm", "hello", chunk_size=5, chunk_overlap=5)
    spy.assert_not_called()


# ---------------------------------------------------------------------------
# split_with
# ---------------------------------------------------------------------------


def test_split_with_applies_defaults():
    text = "word " * 60
    result = split_with(None, text)
    assert result.ok
    assert all(len(c.page_content) <= 100 for c in result.chunks)
    assert len(result.chunks) == 3


def test_split_with_reports_recursive_failure():
    # overlap alone is valid, but exceeds the default chunk size of 100
    result = split_with("recursive", "some text", chunk_overlap=150)
    assert result.chunks == []
    assert not result.ok


def test_split_with_passes_metadata_to_recursive():
    result = split_with(None, "One. Two.", chunk_size=5, metadata={"source": "a.md"})
    assert [c.metadata for c in result.chunks] == [{"source": "a.md"}, {"source": "a.md"}]


def test_split_with_llm_uses_given_model():
    llm = FakeListChatModel(responses=["Chunk 1: only"])
    result = split_with("llm", "only", llm=llm)
    assert result.ok
    assert result.chunks[0].metadata == {"index": 0, "source": "llm"}
