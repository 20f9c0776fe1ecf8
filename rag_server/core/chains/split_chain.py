"""LLM-delegated chunking.

The model receives the text plus an instruction prompt and answers with rows
like ``Chunk 1: ...``. Those rows are parsed back into ordered chunks:

- only lines matching ``^Chunk\\s+\\d+:`` (any case) are kept
- content is everything after the first ``:``
- ``index`` is the position among kept lines; the number the model printed
  in its label is not used
"""

from __future__ import annotations

import logging
import re

from langchain_core.documents import Document
from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI
from openai import APIStatusError
from pydantic import SecretStr

from rag_server.core.config import Settings
from rag_server.core.types import SplitResult

logger = logging.getLogger(__name__)

LLM_SOURCE = "llm"
FALLBACK_CHUNK_SIZE = 100

_CHUNK_LINE_RE = re.compile(r"^Chunk\s+\d+:", re.IGNORECASE)
_LINE_BREAKS_RE = re.compile(r"\n+")
_LABEL_SEPARATOR_RE = re.compile(r":\s*")


def build_system_prompt(chunk_size: int, chunk_overlap: int) -> str:
    """Instruction prompt embedding the length and overlap constraints."""
    max_length = chunk_size if chunk_size > 0 else FALLBACK_CHUNK_SIZE
    overlap = chunk_overlap if chunk_overlap >= 0 else 0

    if overlap > 0:
        overlap_instruction = (
            f"Ensure each chunk shares approximately {overlap} trailing characters "
            "with the previous chunk to preserve context."
        )
    else:
        overlap_instruction = "Do not introduce overlap between consecutive chunks."

    return "\n\n".join(
        [
            "You are a text segmentation assistant preparing documents for "
            "retrieval augmented generation.",
            "Split the user-provided text into coherent chunks no longer than "
            f"{max_length} characters each.",
            overlap_instruction,
            "Keep sentences intact when possible, but never exceed the maximum "
            "length. Trim excessive whitespace and normalise line breaks inside "
            "each chunk.",
            "Respond with plain text labelled rows using the format "
            "`Chunk <number>: <content>` for every chunk in order. Do not include "
            "any additional commentary or metadata.",
        ]
    )


def parse_chunks_from_text(raw: str) -> list[Document]:
    """Turn the model's ``Chunk <n>: <content>`` rows into ordered chunks."""
    lines = [line.strip() for line in _LINE_BREAKS_RE.split(raw or "")]
    chunk_lines = [line for line in lines if line and _CHUNK_LINE_RE.match(line)]

    contents = []
    for line in chunk_lines:
        content = _LABEL_SEPARATOR_RE.split(line, maxsplit=1)[1].strip()
        if content:
            contents.append(content)

    return [
        Document(page_content=content, metadata={"index": i, "source": LLM_SOURCE})
        for i, content in enumerate(contents)
    ]


def get_split_llm(cfg: Settings | None = None) -> BaseChatModel:
    """Chat model pointed at the configured OpenAI-compatible endpoint.

    Raises ``ConfigurationError`` when no API key is configured.
    """
    cfg = cfg or Settings()
    api_key = cfg.require_openrouter_api_key()
    return ChatOpenAI(
        model=cfg.openrouter_model,
        temperature=0,
        api_key=SecretStr(api_key),
        base_url=cfg.openrouter_base_url,
        timeout=cfg.openrouter_timeout,
        max_retries=0,
    )


def get_split_chain(llm: BaseChatModel) -> Runnable:
    """``{"instructions", "text"}`` -> raw model text."""
    prompt = ChatPromptTemplate.from_messages(
        [("system", "{instructions}"), ("human", "{text}")]
    )
    return prompt | llm | StrOutputParser()


class LLMTextSplitter:
    """Delegates chunking to a hosted chat model."""

    def __init__(self, llm: BaseChatModel | None = None, cfg: Settings | None = None):
        self.llm = llm
        self.cfg = cfg

    def try_split(
        self, text: str, chunk_size: int = 100, chunk_overlap: int = 0
    ) -> SplitResult:
        # Missing credentials are fatal and must reach the caller.
        llm = self.llm or get_split_llm(self.cfg)
        chain = get_split_chain(llm)

        try:
            raw = chain.invoke(
                {
                    "instructions": build_system_prompt(chunk_size, chunk_overlap),
                    "text": text,
                }
            )
        except APIStatusError as e:
            logger.error("LLM split request failed: %s %s", e.status_code, e.message)
            return SplitResult(error=f"upstream returned HTTP {e.status_code}")
        except Exception as e:
            logger.exception("LLM split failed")
            return SplitResult(error=f"upstream call failed: {type(e).__name__}")

        if not raw or not raw.strip():
            logger.error("LLM split response missing content")
            return SplitResult(error="upstream response missing content")

        chunks = parse_chunks_from_text(raw)
        if not chunks:
            logger.warning("LLM split response had no 'Chunk <n>:' rows")
        return SplitResult(chunks=chunks)

    def split(
        self, text: str, chunk_size: int = 100, chunk_overlap: int = 0
    ) -> list[Document]:
        return self.try_split(text, chunk_size, chunk_overlap).chunks


def split_text_by_llm(
    text: str,
    chunk_size: int = 100,
    chunk_overlap: int = 0,
    llm: BaseChatModel | None = None,
    cfg: Settings | None = None,
) -> list[Document]:
    """Functional shortcut for :class:`LLMTextSplitter`."""
    return LLMTextSplitter(llm=llm, cfg=cfg).split(text, chunk_size, chunk_overlap)
