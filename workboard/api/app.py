"""
FastAPI Application - Personal Work Dashboard API

Read-only JSON endpoints aggregating the caller's Linear issues and GitHub
pull requests for a dashboard front end.

Usage:
    # Development
    uvicorn workboard.api.app:app --reload --port 8000

    # Production
    python -m workboard --host 0.0.0.0 --port 8000

API Documentation:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from workboard import __version__
from workboard.api.middleware import RequestIDMiddleware, add_cors_middleware
from workboard.collectors.base import CachedPayload
from workboard.collectors.issue_aggregator import IssueAggregator
from workboard.collectors.pr_aggregator import PullRequestAggregator
from workboard.core import ConfigurationError, SecureConfig, get_config, get_logger, setup_logging
from workboard.storage.cache import CacheStore, ResponseCache, build_cache_store
from workboard.utils.datetime_utils import utc_now_iso

logger = get_logger(__name__)


def _payload_response(payload: CachedPayload) -> Response:
    """Serve an aggregator payload as-is with its cache status."""
    return Response(
        content=payload.body,
        media_type="application/json",
        headers={"x-cache": payload.cache_status},
    )


def create_app(
    config: SecureConfig | None = None,
    cache_store: CacheStore | None = None,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        config: Configuration source (defaults to the process-wide config)
        cache_store: Cache backend; built from CACHE_BACKEND when omitted
        http_transport: httpx transport for upstream calls (tests pass a MockTransport)
    """
    config = config or get_config()
    server_config = config.get_server_config()
    setup_logging(level=server_config.log_level, json_output=server_config.json_logs)

    store = cache_store if cache_store is not None else build_cache_store(config.get_cache_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Workboard API starting up",
            extra={"cache_backend": app.state.cache.backend_name, "upstreams": config.configured_upstreams()},
        )
        yield
        if app.state.cache.store is not None:
            app.state.cache.store.close()
        logger.info("Workboard API shutting down")

    app = FastAPI(
        title="Workboard API",
        description="Linear issues and GitHub pull requests for a personal work dashboard",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.cache = ResponseCache(store)
    app.state.http_transport = http_transport

    # Middleware order matters - last added is executed first
    add_cors_middleware(app, server_config.cors_allow_origins)
    app.add_middleware(RequestIDMiddleware)

    # ============================================================
    # Health Check
    # ============================================================

    @app.get("/health", tags=["Health"])
    async def health_check():
        """
        Health check endpoint for monitoring.

        Reports which upstream tokens are configured and the active cache
        backend. No upstream calls are made.
        """
        return {
            "status": "healthy",
            "timestamp": utc_now_iso(),
            "version": __version__,
            "upstreams": config.configured_upstreams(),
            "cache": {"backend": app.state.cache.backend_name},
        }

    # ============================================================
    # Linear Issues
    # ============================================================

    @app.get("/api/linear/issues", tags=["Linear"])
    async def linear_issues():
        """
        Open Linear issues assigned to or created by the token owner.

        Returns:
            {generatedAt, issues} ordered by priority then most recent update
        """
        try:
            linear_config = config.get_linear_config()
            http_config = config.get_http_config()
        except ConfigurationError as e:
            logger.error("Linear not configured", extra={"error": str(e)})
            return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(e)})

        aggregator = IssueAggregator(linear_config, app.state.cache, http_config, app.state.http_transport)
        try:
            payload = await aggregator.collect()
        except Exception as e:
            logger.error("Failed to fetch Linear issues", extra={"error": str(e)}, exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Failed to fetch Linear issues", "details": str(e)},
            )

        return _payload_response(payload)

    # ============================================================
    # GitHub Overview
    # ============================================================

    @app.get("/api/gh/overview", tags=["GitHub"])
    async def github_overview():
        """
        Open pull requests in the mine / review / assigned buckets.

        Returns:
            {generatedAt, scopeOrgs, buckets}; pending PRs may carry CI jobs
        """
        try:
            github_config = config.get_github_config()
            http_config = config.get_http_config()
        except ConfigurationError as e:
            logger.error("GitHub not configured", extra={"error": str(e)})
            return PlainTextResponse(str(e), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

        aggregator = PullRequestAggregator(github_config, app.state.cache, http_config, app.state.http_transport)
        try:
            payload = await aggregator.collect()
        except Exception as e:
            logger.error("Failed to fetch GitHub overview", extra={"error": str(e)}, exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Failed to fetch GitHub overview", "details": str(e)},
            )

        return _payload_response(payload)

    return app


# Create app instance
app = create_app()
