from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi import Response
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import StrictInt

from rag_server.core.config import Settings
from rag_server.core.splitting import split_with
from rag_server.core.types import chunk_to_dict

router = APIRouter()

SPLIT_ERROR_HEADER = "X-Split-Error"


class SplitTextRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., description="Text to split")
    chunk_size: StrictInt | None = Field(
        default=None, alias="chunkSize", description="Maximum chunk length"
    )
    chunk_overlap: StrictInt | None = Field(
        default=None,
        alias="chunkOverlap",
        description="Characters shared between consecutive chunks",
    )
    type: str | None = Field(
        default=None, description='"llm" delegates to a chat model; otherwise recursive'
    )


@router.post("/api/split-text")
def split_text(req: SplitTextRequest, response: Response) -> list[dict[str, Any]]:
    result = split_with(
        req.type,
        req.text,
        chunk_size=req.chunk_size,
        chunk_overlap=req.chunk_overlap,
        cfg=Settings(),
    )
    # Body stays a plain chunk list; the header tells "failed" apart from "empty".
    if not result.ok:
        response.headers[SPLIT_ERROR_HEADER] = result.error or "split failed"
    return [chunk_to_dict(chunk) for chunk in result.chunks]
