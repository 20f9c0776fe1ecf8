"""
Shared pytest fixtures for all tests.
"""

from pathlib import Path

import pytest

from rag_server.api.routes_knowledge import get_knowledge_base_service
from rag_server.core.embeddings import get_embeddings

# ---------------------------------------------------------------------------
# Automatic test markers based on path
# ---------------------------------------------------------------------------
# Tests in ``tests/unit`` get the ``unit`` marker and tests in
# ``tests/integration`` get ``integration``, so ``pytest -m unit`` works
# without decorating every test.


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    root_path = Path(config.rootdir)

    for item in items:
        rel_path = Path(item.fspath).resolve().relative_to(root_path).as_posix()

        if rel_path.startswith("tests/unit/"):
            item.add_marker("unit")
        elif rel_path.startswith("tests/integration/"):
            item.add_marker("integration")


# ---------------------------------------------------------------------------
# Hermetic environment
# ---------------------------------------------------------------------------
# Every credential is blanked so no test can reach a hosted service, even when
# the developer has a populated ``.env``. Tests that need a key set it
# explicitly.

CREDENTIAL_VARS = [
    "OPENROUTER_API_KEY",
    "OPENAI_API_KEY",
    "PINECONE_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "LANGSEARCH_API_KEY",
]


@pytest.fixture(autouse=True)
def _hermetic_env(monkeypatch):
    for name in CREDENTIAL_VARS:
        monkeypatch.setenv(name, "")
    get_embeddings.cache_clear()
    get_knowledge_base_service.cache_clear()
    yield
    get_embeddings.cache_clear()
    get_knowledge_base_service.cache_clear()
