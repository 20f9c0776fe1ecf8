from __future__ import annotations

from functools import lru_cache
import logging
from typing import Any

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from langchain_core.documents import Document
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import StrictInt

from rag_server.core.config import ConfigurationError
from rag_server.core.config import Settings
from rag_server.core.knowledge_base import KnowledgeBaseService
from rag_server.core.rerank import rerank_documents
from rag_server.core.splitting import split_with
from rag_server.core.types import chunk_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/knowledge-base")


@lru_cache(maxsize=1)
def get_knowledge_base_service() -> KnowledgeBaseService:
    """Process-wide service so the collection cache outlives a request."""
    cfg = Settings()
    missing = cfg.missing_knowledge_base_settings()
    if missing:
        raise ConfigurationError(
            f"Knowledge base is not configured. Missing: {', '.join(missing)}"
        )
    return KnowledgeBaseService(cfg=cfg)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateKnowledgeBaseRequest(_CamelModel):
    name: str = Field(..., description="Human-facing knowledge base name")
    description: str | None = None


class UpdateKnowledgeBaseRequest(_CamelModel):
    new_name: str | None = Field(default=None, alias="newName")
    new_description: str | None = Field(default=None, alias="newDescription")


class AddDocumentsRequest(_CamelModel):
    text: str = Field(..., description="Text to split and index")
    chunk_size: StrictInt | None = Field(default=None, alias="chunkSize")
    chunk_overlap: StrictInt | None = Field(default=None, alias="chunkOverlap")
    type: str | None = None


class DeleteDocumentsRequest(_CamelModel):
    ids: list[str]


class SearchRequest(_CamelModel):
    query: str
    k: int = Field(default=5, ge=1, le=50, description="Number of hits")
    filter: dict[str, Any] | None = Field(
        default=None, description="Metadata filter passed to the vector store"
    )
    rerank: bool = False
    top_n: int | None = Field(default=None, ge=1, alias="topN")


def _ok(data: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    return body


def _failed(action: str) -> HTTPException:
    return HTTPException(status_code=502, detail=f"Failed to {action}")


def _apply_rerank(
    query: str, docs: list[Document], top_n: int | None
) -> list[Document]:
    fallback = docs[:top_n] if top_n else docs
    results = rerank_documents(query, [doc.page_content for doc in docs], top_n=top_n)
    if results is None:
        logger.warning("Rerank failed; returning similarity order")
        return fallback

    reranked = []
    for item in results:
        index = item.get("index") if isinstance(item, dict) else None
        if (
            not isinstance(index, int)
            or isinstance(index, bool)
            or not 0 <= index < len(docs)
        ):
            logger.warning("Ignoring rerank result with unusable index: %r", item)
            continue
        doc = docs[index]
        reranked.append(
            Document(
                page_content=doc.page_content,
                metadata={**doc.metadata, "relevance_score": item.get("relevance_score")},
                id=doc.id,
            )
        )

    if not reranked:
        logger.warning("Rerank returned no usable results; returning similarity order")
        return fallback
    return reranked


@router.post("", status_code=201)
def create_knowledge_base(
    req: CreateKnowledgeBaseRequest,
    service: KnowledgeBaseService = Depends(get_knowledge_base_service),
) -> dict[str, Any]:
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="Knowledge base name cannot be empty")

    description = req.description.strip() if req.description else None
    record = service.create_knowledge_base(req.name.strip(), description)
    if record is None:
        raise _failed("create knowledge base")
    return _ok(record)


@router.get("/collections")
def list_knowledge_bases(
    service: KnowledgeBaseService = Depends(get_knowledge_base_service),
) -> dict[str, Any]:
    return _ok(service.list_knowledge_bases())


@router.put("/{collection_name}")
def update_knowledge_base(
    collection_name: str,
    req: UpdateKnowledgeBaseRequest,
    service: KnowledgeBaseService = Depends(get_knowledge_base_service),
) -> dict[str, Any]:
    if not service.update_knowledge_base(
        collection_name, new_name=req.new_name, new_description=req.new_description
    ):
        raise _failed("update knowledge base")
    return _ok()


@router.delete("/{collection_name}")
def delete_knowledge_base(
    collection_name: str,
    service: KnowledgeBaseService = Depends(get_knowledge_base_service),
) -> dict[str, Any]:
    if not service.delete_knowledge_base(collection_name):
        raise _failed("delete knowledge base")
    return _ok()


@router.post("/{collection_name}/documents")
def add_documents(
    collection_name: str,
    req: AddDocumentsRequest,
    service: KnowledgeBaseService = Depends(get_knowledge_base_service),
) -> dict[str, Any]:
    result = split_with(
        req.type,
        req.text,
        chunk_size=req.chunk_size,
        chunk_overlap=req.chunk_overlap,
        cfg=service.cfg,
    )
    if not result.ok:
        raise HTTPException(status_code=502, detail=f"Text split failed: {result.error}")
    if not result.chunks:
        raise HTTPException(status_code=422, detail="Text split produced no chunks")

    ids = service.add_documents(collection_name, result.chunks)
    if ids is None:
        raise _failed("add documents")

    chunks = [
        {**chunk_to_dict(chunk), "id": doc_id}
        for chunk, doc_id in zip(result.chunks, ids)
    ]
    return _ok({"ids": ids, "chunks": chunks})


@router.delete("/{collection_name}/documents")
def delete_documents(
    collection_name: str,
    req: DeleteDocumentsRequest,
    service: KnowledgeBaseService = Depends(get_knowledge_base_service),
) -> dict[str, Any]:
    if not req.ids:
        raise HTTPException(status_code=400, detail="ids cannot be empty")
    if not service.delete_documents(collection_name, req.ids):
        raise _failed("delete documents")
    return _ok()


@router.post("/{collection_name}/search")
def search_documents(
    collection_name: str,
    req: SearchRequest,
    service: KnowledgeBaseService = Depends(get_knowledge_base_service),
) -> dict[str, Any]:
    if not req.query.strip():
        raise HTTPException(status_code=400, detail="Query cannot be empty")

    docs = service.search_similar_documents(
        collection_name, req.query, k=req.k, filter=req.filter
    )
    if req.rerank and docs:
        docs = _apply_rerank(req.query, docs, req.top_n)
    return _ok([chunk_to_dict(doc) for doc in docs])


@router.get("/{collection_name}/stats")
def collection_stats(
    collection_name: str,
    service: KnowledgeBaseService = Depends(get_knowledge_base_service),
) -> dict[str, Any]:
    stats = service.get_collection_stats(collection_name)
    if stats is None:
        raise _failed("read collection stats")
    return _ok(stats)
