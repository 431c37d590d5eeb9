from collections.abc import Callable

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from decision_cache.api.dependencies import CacheHandlerDep, RoutingHandlerDep, make_lifespan
from decision_cache.config import settings
from decision_cache.dto import (
    ApprovalRateResponse,
    CacheStatsResponse,
    CleanupRequest,
    CleanupResponse,
    ExactLookupRequest,
    ExactLookupResponse,
    ExactStoreRequest,
    FeedbackRequest,
    HealthCheckResponse,
    RoutingDecideRequest,
    RoutingDecisionResponse,
    SemanticLookupRequest,
    SemanticLookupResponse,
    SemanticStoreRequest,
    StoreResponse,
    WarmupRequest,
    WarmupResponse,
)
from decision_cache.engine import DecisionEngine
from decision_cache.entities import Band
from decision_cache.logging_utils import setup_logging


def create_app(engine_factory: Callable[[], DecisionEngine] | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        engine_factory: Builds the engine at startup. Defaults to DecisionEngine.create.
    """
    app = FastAPI(
        title="Decision Cache API",
        description="Tiered response cache and complexity-band routing policy",
        version="0.1.0",
        lifespan=make_lifespan(engine_factory or DecisionEngine.create),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root() -> dict:
        """Service information."""
        return {
            "name": "Decision Cache API",
            "version": "0.1.0",
            "endpoints": {
                "health": "GET /health",
                "stats": "GET /stats",
                "exact_lookup": "POST /cache/exact/lookup",
                "exact_store": "PUT /cache/exact",
                "semantic_lookup": "POST /cache/semantic/lookup",
                "semantic_store": "PUT /cache/semantic",
                "cleanup": "POST /cache/cleanup",
                "warmup": "POST /cache/warmup",
                "decide": "POST /routing/decide",
                "feedback": "POST /routing/feedback",
                "approval_rate": "GET /routing/approval-rate/{band}",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    def health(handler: CacheHandlerDep):
        result = handler.health_check()
        if result.cache_healthy:
            return result
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=result.model_dump())

    @app.get("/stats", response_model=CacheStatsResponse)
    def stats(handler: CacheHandlerDep) -> CacheStatsResponse:
        return handler.get_stats()

    @app.post("/cache/exact/lookup", response_model=ExactLookupResponse)
    def lookup_exact(request: ExactLookupRequest, handler: CacheHandlerDep) -> ExactLookupResponse:
        return handler.lookup_exact(request)

    @app.put("/cache/exact", response_model=StoreResponse)
    def store_exact(request: ExactStoreRequest, handler: CacheHandlerDep) -> StoreResponse:
        return handler.store_exact(request)

    @app.post("/cache/semantic/lookup", response_model=SemanticLookupResponse)
    def lookup_semantic(request: SemanticLookupRequest, handler: CacheHandlerDep) -> SemanticLookupResponse:
        return handler.lookup_semantic(request)

    @app.put("/cache/semantic", response_model=StoreResponse)
    def store_semantic(request: SemanticStoreRequest, handler: CacheHandlerDep) -> StoreResponse:
        return handler.store_semantic(request)

    @app.post("/cache/cleanup", response_model=CleanupResponse)
    def cleanup(request: CleanupRequest, handler: CacheHandlerDep) -> CleanupResponse:
        return handler.cleanup(request)

    @app.post("/cache/warmup", response_model=WarmupResponse)
    def warmup(request: WarmupRequest, handler: CacheHandlerDep) -> WarmupResponse:
        return handler.warmup(request)

    @app.post("/routing/decide", response_model=RoutingDecisionResponse)
    def decide(request: RoutingDecideRequest, handler: RoutingHandlerDep) -> RoutingDecisionResponse:
        return handler.decide(request)

    @app.post("/routing/feedback")
    def feedback(request: FeedbackRequest, handler: RoutingHandlerDep) -> dict:
        return handler.record_feedback(request)

    @app.get("/routing/approval-rate/{band}", response_model=ApprovalRateResponse)
    def approval_rate(band: Band, handler: RoutingHandlerDep) -> ApprovalRateResponse:
        return handler.approval_rate(band)

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    setup_logging(settings.debug)
    uvicorn.run(
        "decision_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    run()
