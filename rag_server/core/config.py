"""Global configuration (12-factor style).

Environment variables (all optional at import time; features that need a
credential raise :class:`ConfigurationError` when they are used without it):

* ``OPENROUTER_API_KEY``  - required for ``type=llm`` splitting
* ``OPENROUTER_MODEL``    - default: ``"qwen/qwen3-30b-a3b:free"``
* ``OPENAI_API_KEY``      - required for knowledge-base embeddings
* ``PINECONE_API_KEY``    - required for knowledge-base storage
* ``PINECONE_INDEX``      - default: ``"rag-knowledge-base"``
* ``SUPABASE_URL`` / ``SUPABASE_KEY`` - required for knowledge-base records
* ``LANGSEARCH_API_KEY``  - required for reranked search
* ``PORT``                - default: ``3008``

Test environment variables:
* ``TEST_PINECONE_INDEX``         - default: ``"rag-knowledge-base-test"``
* ``TEST_SUPABASE_TABLE_PREFIX``  - default: ``"test_"``

Usage:

    from rag_server.core.config import Settings
    settings = Settings()  # auto-loads & validates env vars

    # For tests:
    test_settings = Settings.for_testing()
"""

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class ConfigurationError(RuntimeError):
    """A required credential or setting is missing."""


class Settings(BaseSettings):
    """Typed view over process environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    port: int = 3008
    log_level: str = "INFO"

    # LLM-delegated splitting (OpenAI-compatible chat completions)
    openrouter_api_key: str | None = None
    openrouter_model: str = "qwen/qwen3-30b-a3b:free"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_timeout: float = 60.0

    # Embeddings
    openai_api_key: str | None = None
    embedding_model: str = "text-embedding-3-small"
    embedding_dim: int = 1536

    # Vector storage
    pinecone_api_key: str | None = None
    pinecone_env: str = "us-east-1"
    pinecone_index: str = "rag-knowledge-base"

    # Knowledge-base records
    supabase_url: str | None = None
    supabase_key: str | None = None
    supabase_table_prefix: str | None = None

    # Reranking
    langsearch_api_key: str | None = None
    langsearch_model: str = "langsearch-reranker-v1"
    langsearch_url: str = "https://api.langsearch.com/v1/rerank"

    # Collection handle cache
    collection_cache_size: int = 32
    collection_cache_ttl: float = 600.0

    # Test-specific environment variables
    test_pinecone_index: str = "rag-knowledge-base-test"
    test_supabase_table_prefix: str | None = "test_"

    @classmethod
    def for_testing(cls) -> "Settings":
        """Returns a Settings instance configured for testing.

        Uses TEST_* environment variables when available, falling back to
        regular values if not set.
        """
        settings = cls()

        if settings.test_pinecone_index:
            settings.pinecone_index = settings.test_pinecone_index
        if settings.test_supabase_table_prefix:
            settings.supabase_table_prefix = settings.test_supabase_table_prefix

        return settings

    def missing_knowledge_base_settings(self) -> list[str]:
        """Names of the unset variables the knowledge-base routes depend on."""
        required = {
            "OPENAI_API_KEY": self.openai_api_key,
            "PINECONE_API_KEY": self.pinecone_api_key,
            "SUPABASE_URL": self.supabase_url,
            "SUPABASE_KEY": self.supabase_key,
        }
        return [name for name, value in required.items() if not value]

    def require_openrouter_api_key(self) -> str:
        if not self.openrouter_api_key:
            raise ConfigurationError(
                "OpenRouter API key missing. Set OPENROUTER_API_KEY to use LLM splitting."
            )
        return self.openrouter_api_key
