"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Engine and handlers stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from decision_cache.engine import DecisionEngine
from decision_cache.handlers import CacheHandler, RoutingHandler

logger = logging.getLogger(__name__)


def get_cache_handler(request: Request) -> CacheHandler:
    """Dependency injection for CacheHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "cache_handler", None)
    if handler is None:
        raise RuntimeError("CacheHandler not initialized. Check lifespan setup.")
    return handler


def get_routing_handler(request: Request) -> RoutingHandler:
    """Dependency injection for RoutingHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "routing_handler", None)
    if handler is None:
        raise RuntimeError("RoutingHandler not initialized. Check lifespan setup.")
    return handler


def make_lifespan(engine_factory: Callable[[], DecisionEngine]):
    """Build a lifespan that creates the engine on startup.

    Args:
        engine_factory: Returns the engine to serve (DecisionEngine.create by default)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = engine_factory()

        app.state.engine = engine
        app.state.cache_handler = CacheHandler(cache_service=engine.cache)
        app.state.routing_handler = RoutingHandler(routing_service=engine.routing)

        logger.info(
            "Decision cache service initialized (threshold=%s, ttl=%ss, bands=%s)",
            engine.cache.threshold,
            engine.cache.ttl,
            engine.routing.band_thresholds,
        )

        yield

        engine.close()
        del app.state.routing_handler
        del app.state.cache_handler
        del app.state.engine
        logger.info("Decision cache service shut down")

    return lifespan


# Type aliases for cleaner dependency injection
CacheHandlerDep = Annotated[CacheHandler, Depends(get_cache_handler)]
RoutingHandlerDep = Annotated[RoutingHandler, Depends(get_routing_handler)]
