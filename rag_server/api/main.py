from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import PlainTextResponse
import uvicorn

from rag_server.api.routes_knowledge import router as knowledge_router
from rag_server.api.routes_split import router as split_router
from rag_server.core.config import ConfigurationError
from rag_server.core.config import Settings
from rag_server.core.knowledge_base import KnowledgeBaseNotFoundError
from rag_server.core.splitting import SplitValidationError
from rag_server.utils.log_utils import configure_logging

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app() -> FastAPI:
    settings = Settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="RAG Split Server", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _request_validation(_: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": _validation_message(exc)})

    @app.exception_handler(SplitValidationError)
    async def _split_validation(_: Request, exc: SplitValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(KnowledgeBaseNotFoundError)
    async def _not_found(_: Request, exc: KnowledgeBaseNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigurationError)
    async def _configuration(_: Request, exc: ConfigurationError):
        logger.error("Configuration error: %s", exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.get("/api/", response_class=PlainTextResponse)
    def welcome() -> str:
        return "Welcome to RAG Server"

    @app.get("/health")
    def health() -> dict[str, object]:
        cfg = Settings()
        missing = cfg.missing_knowledge_base_settings()
        return {
            "status": "ok",
            "llm_split_configured": bool(cfg.openrouter_api_key),
            "knowledge_base_configured": not missing,
            "knowledge_base_missing": missing,
            "rerank_configured": bool(cfg.langsearch_api_key),
        }

    app.include_router(split_router)
    app.include_router(knowledge_router)
    return app


app = create_app()


def main() -> None:  # pragma: no cover
    uvicorn.run(app, host="0.0.0.0", port=Settings().port)


if __name__ == "__main__":  # pragma: no cover
    main()
