"""
FastAPI HTTP Transport for Access Status Service

Provides REST endpoints:
- / - Plain-text liveness banner
- /health - Liveness probe
- /ready - Readiness probe (checks the cache store)
- /api/predict - Resolve a query and return per-country access status
- /api/search-substance - Alias of /api/predict
- /api/refresh - Force re-enrichment of named substances

NOTE: Do NOT add `from __future__ import annotations` to this file.
PEP 563 breaks FastAPI's runtime introspection for parameter sources.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from ...adapters.protocols import CacheStore
from ...config import AccessServiceConfig, load_config
from ...core.models import PipelineState, ResultEnvelope
from ...core.orchestrator import AccessOrchestrator
from ...errors import AccessStatusError
from ...factory import create_cache_store, create_orchestrator

logger = logging.getLogger(__name__)

BANNER = "Drug legality backend is live!"


# Request models
class PredictRequest(BaseModel):
    """Request body for /api/predict. `substance` is accepted as an alias."""

    prompt: str | None = None
    substance: str | None = None

    @property
    def query(self) -> str:
        return (self.prompt or "").strip() or (self.substance or "").strip()


class RefreshRequest(BaseModel):
    """Request body for /api/refresh."""

    substances: list[str] = Field(default_factory=list)


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        content={"success": False, "error": error, "message": message},
        status_code=status_code,
    )


def envelope_status_code(envelope: ResultEnvelope) -> int:
    """HTTP status for an orchestrator result."""
    if envelope.success:
        return 200
    if envelope.state == PipelineState.UNRESOLVED:
        return 404
    return 500


def create_app(
    config: AccessServiceConfig | None = None,
    orchestrator: AccessOrchestrator | None = None,
    cache_store: CacheStore | None = None,
) -> FastAPI:
    """
    Create a FastAPI application for the access status service.

    Collaborators not passed in are built from config at startup and
    released at shutdown.

    Args:
        config: Service configuration (loaded from environment if None)
        orchestrator: Pre-built orchestrator (tests)
        cache_store: Pre-built cache store (tests)

    Returns:
        FastAPI application instance
    """
    _config = config or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        logger.info(f"Starting access status service: {_config.server_name}")

        store = cache_store
        owned_store = None
        if store is None:
            store = owned_store = await create_cache_store(_config)

        app.state.cache_store = store
        if orchestrator is None:
            app.state.orchestrator = create_orchestrator(_config, store)
        else:
            app.state.orchestrator = orchestrator

        logger.info("Access status service initialized")
        yield

        logger.info("Shutting down access status service")
        if owned_store is not None:
            await owned_store.close()
        logger.info("Access status service shut down")

    app = FastAPI(
        title="Access Status Service",
        description="Resolves substance names and reports per-country legal or medical access",
        version=_config.server_version,
        lifespan=lifespan,
    )

    def get_orchestrator() -> AccessOrchestrator:
        orch = getattr(app.state, "orchestrator", None)
        if orch is None:
            raise RuntimeError("Orchestrator not initialized")
        return orch

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        if request.url.path == "/api/refresh":
            return _error_response(400, "missing_substances", "substances must be a list of names")
        return _error_response(400, "missing_prompt", "Missing prompt")

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        """Plain-text banner."""
        return BANNER

    @app.get("/health")
    async def liveness_check() -> JSONResponse:
        """Liveness probe - just checks if process is alive."""
        return JSONResponse(content={"status": "alive"}, status_code=200)

    @app.get("/ready")
    async def readiness_check() -> JSONResponse:
        """Readiness probe - checks the cache store."""
        store = getattr(app.state, "cache_store", None)
        if store is None:
            cache_health: dict[str, Any] = {"connected": False, "error": "store not initialized"}
        else:
            cache_health = await store.health()

        ready = bool(cache_health.get("connected"))
        return JSONResponse(
            content={
                "status": "ready" if ready else "not_ready",
                "checks": {"cache": cache_health},
            },
            status_code=200 if ready else 503,
        )

    async def _predict(body: PredictRequest) -> JSONResponse:
        query = body.query
        if not query:
            return _error_response(400, "missing_prompt", "Missing prompt")

        try:
            envelope = await get_orchestrator().process(query)
        except Exception as e:
            logger.exception(f"Error processing query: {e}")
            return _error_response(500, "internal_error", "Internal server error")

        return JSONResponse(
            content=envelope.to_dict(),
            status_code=envelope_status_code(envelope),
        )

    @app.post("/api/predict")
    async def predict_endpoint(body: PredictRequest) -> JSONResponse:
        """Resolve a query and return per-country access status."""
        return await _predict(body)

    @app.post("/api/search-substance")
    async def search_substance_endpoint(body: PredictRequest) -> JSONResponse:
        """Same pipeline as /api/predict."""
        return await _predict(body)

    @app.post("/api/refresh")
    async def refresh_endpoint(body: RefreshRequest) -> JSONResponse:
        """Re-enrich the named substances and overwrite their cached rows."""
        names = [name.strip() for name in body.substances]
        if not names or not all(names):
            return _error_response(400, "missing_substances", "No substances to refresh")

        try:
            results = await get_orchestrator().refresh(names)
        except AccessStatusError as e:
            logger.error(f"Refresh failed: {e}")
            return _error_response(500, e.code, e.message)
        except Exception as e:
            logger.exception(f"Error refreshing substances: {e}")
            return _error_response(500, "internal_error", "Internal server error")

        return JSONResponse(
            content={
                "success": True,
                "refreshed": len(results),
                "results": [r.to_dict() for r in results],
            }
        )

    return app


async def run_http_server(config: AccessServiceConfig | None = None) -> None:
    """
    Run the HTTP server.

    Args:
        config: Service configuration
    """
    import uvicorn

    _config = config or load_config()
    app = create_app(_config)

    logger.info(f"Starting HTTP server on {_config.host}:{_config.port}")

    server_config = uvicorn.Config(
        app,
        host=_config.host,
        port=_config.port,
        log_level=_config.log_level.lower(),
    )
    server = uvicorn.Server(server_config)
    await server.serve()
