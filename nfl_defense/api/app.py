"""
FastAPI application serving the NFL defense stats envelope.

Endpoints:
- GET /api/nfl-stats - team defense records with efficiency ratings
- GET /health - liveness check

Successful envelopes are cached in memory for ``settings.cache_ttl_seconds``;
error envelopes are never cached so a retry always re-runs the pipeline.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.status import HTTP_200_OK, HTTP_500_INTERNAL_SERVER_ERROR

from nfl_defense.config.settings import settings
from nfl_defense.fetchers.espn_fetcher import EspnFetcher
from nfl_defense.logging.setup import setup_logging
from nfl_defense.models.envelope import ErrorEnvelope
from nfl_defense.pipeline.defense_pipeline import run_defense_cycle
from .cache import StatsCache

FetcherFactory = Callable[[], EspnFetcher]


def create_app(
    fetcher_factory: Optional[FetcherFactory] = None,
    cache_ttl: Optional[int] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        fetcher_factory: Builds the fetcher for each pipeline run (default EspnFetcher)
        cache_ttl: Seconds to cache a successful envelope (default from settings)
        configure_logging: Install the Loguru sinks on startup

    Returns:
        Configured FastAPI application instance
    """
    fetcher_factory = fetcher_factory or EspnFetcher
    ttl = settings.cache_ttl_seconds if cache_ttl is None else cache_ttl

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if configure_logging:
            setup_logging()
        logger.info(f"Starting NFL defense stats API (season {settings.season})")
        yield
        app.state.cache.clear()
        logger.info("NFL defense stats API stopped")

    app = FastAPI(
        title="NFL Defense Stats API",
        description="Normalized NFL team defense statistics with a composite efficiency rating",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.cache = StatsCache(ttl=ttl)
    app.state.refresh_lock = asyncio.Lock()

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        }

    @app.get("/api/nfl-stats", tags=["stats"])
    async def get_nfl_stats():
        cached = app.state.cache.get()
        if cached is not None:
            logger.debug("Serving cached stats envelope")
            return _json(cached, HTTP_200_OK)

        async with app.state.refresh_lock:
            # Another request may have refreshed while we waited
            cached = app.state.cache.get()
            if cached is not None:
                return _json(cached, HTTP_200_OK)

            async with fetcher_factory() as fetcher:
                envelope = await run_defense_cycle(fetcher)

            if isinstance(envelope, ErrorEnvelope):
                return _json(envelope.to_payload(), HTTP_500_INTERNAL_SERVER_ERROR)

            payload = envelope.to_payload()
            app.state.cache.set(payload)
            return _json(payload, HTTP_200_OK)

    def _json(payload: dict, status_code: int) -> JSONResponse:
        if status_code >= 400 or ttl <= 0:
            cache_control = "no-cache, no-store, must-revalidate"
        else:
            cache_control = f"public, max-age={ttl}"
        return JSONResponse(
            status_code=status_code,
            content=payload,
            headers={"Cache-Control": cache_control},
        )

    return app


app = create_app()
