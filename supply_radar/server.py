"""
HTTP boundary for the dashboard.

Routes:
  GET /api/dashboard: full ``DashboardPayload`` as camelCase JSON.
  GET /health        liveness probe.

Every dashboard request re-runs the whole fetch fan-out; there is no cache.
Static assets and HTML rendering are served elsewhere.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from supply_radar.config import AppConfig
from supply_radar.pipeline.assembler import AggregationError, DashboardAssembler

logger = logging.getLogger(__name__)

SERVICE_NAME = "supply-radar"


def create_app(
    config: AppConfig,
    assembler: Optional[DashboardAssembler] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config:    Application config.
        assembler: Pre-built assembler (tests inject one wired to a mock
                   transport).  Default: ``DashboardAssembler(config)``.
    """
    dashboard = assembler or DashboardAssembler(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting %s | timeout=%.1fs | tickers=%d",
            SERVICE_NAME,
            config.http.timeout_seconds,
            sum(len(g) for g in (
                config.tickers.metals, config.tickers.us,
                config.tickers.apac, config.tickers.eu,
            )) + 1,
        )
        yield
        logger.info("Shutting down %s", SERVICE_NAME)

    app = FastAPI(
        title="Supply Radar",
        description="Realtime supply-chain disruption dashboard data",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "service": SERVICE_NAME}

    @app.get("/api/dashboard")
    async def get_dashboard() -> JSONResponse:
        try:
            payload = await dashboard.build()
        except AggregationError as exc:
            logger.error(
                "Dashboard build failed | stage=%s | feed=%s",
                exc.stage, exc.feed, exc_info=True,
            )
            return _error_response(exc)
        except Exception as exc:
            logger.error("Dashboard build failed: %s", exc, exc_info=True)
            return _error_response(exc)
        return JSONResponse(content=payload.to_wire())

    return app


def _error_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"message": "Failed to build dashboard", "error": str(exc)},
    )
