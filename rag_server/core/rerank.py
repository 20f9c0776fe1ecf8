"""Rerank search hits with the LangSearch rerank API."""

from __future__ import annotations

import logging
from typing import Any

import requests

from rag_server.core.config import ConfigurationError
from rag_server.core.config import Settings

logger = logging.getLogger(__name__)


def rerank_documents(
    query: str,
    documents: list[str],
    top_n: int | None = None,
    return_documents: bool = True,
    cfg: Settings | None = None,
    timeout: float = 30,
) -> list[dict[str, Any]] | None:
    """Return LangSearch results (``index``, ``relevance_score``, ``document``).

    ``None`` signals an upstream failure; a missing API key raises
    ``ConfigurationError``.
    """
    cfg = cfg or Settings()
    if not cfg.langsearch_api_key:
        raise ConfigurationError("LangSearch API key missing. Set LANGSEARCH_API_KEY.")

    payload = {
        "model": cfg.langsearch_model,
        "query": query,
        "top_n": top_n if top_n is not None else len(documents),
        "return_documents": return_documents,
        "documents": documents,
    }

    try:
        response = requests.post(
            cfg.langsearch_url,
            headers={
                "Authorization": f"Bearer {cfg.langsearch_api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        logger.error("LangSearch rerank request error: %s", e)
        return None

    if not response.ok:
        logger.error("LangSearch rerank failed: %s %s", response.status_code, response.text)
        return None

    try:
        body = response.json()
    except ValueError as e:
        logger.error("LangSearch rerank returned a non-JSON body: %s", e)
        return None

    if not isinstance(body, dict) or body.get("code") != 200:
        logger.error("LangSearch rerank returned an error body: %s", body)
        return None

    return body.get("results") or []
