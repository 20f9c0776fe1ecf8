"""OpenAI embeddings used to index knowledge-base chunks."""

from __future__ import annotations

from functools import lru_cache

from langchain_core.embeddings import Embeddings
from langchain_openai import OpenAIEmbeddings
from pydantic import SecretStr

from rag_server.core.config import ConfigurationError
from rag_server.core.config import Settings


@lru_cache(maxsize=1)
def get_embeddings() -> Embeddings:
    """Process-wide OpenAIEmbeddings instance sized to ``EMBEDDING_DIM``."""
    cfg = Settings()
    if not cfg.openai_api_key:
        raise ConfigurationError("OpenAI API key missing. Set OPENAI_API_KEY.")
    return OpenAIEmbeddings(
        model=cfg.embedding_model,
        api_key=SecretStr(cfg.openai_api_key),
        dimensions=cfg.embedding_dim,
        chunk_size=1000,  # Match OpenAI API limit
    )
