"""SampleGraph FastAPI application entry point.

Wires the cache, the upstream provider, the orchestrator and the graph
builder together via constructor injection, stores them on ``app.state``
for the routes, and closes the shared HTTP client and cache connection on
shutdown.

Settings are loaded when the app is created, so a missing credential,
cache URL or TTL fails fast with ``ConfigurationError`` instead of on the
first request.  ``main()`` is the ``samplegraph`` console script.
"""

from __future__ import annotations

import argparse
import sys
from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from samplegraph import __version__
from samplegraph.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    configure_rate_limit,
)
from samplegraph.api.routes import router as api_router
from samplegraph.config.loader import load_config
from samplegraph.config.settings import Settings, load_settings
from samplegraph.interfaces.cache_provider import ICacheProvider
from samplegraph.pipeline.graph_builder import SampleGraphBuilder
from samplegraph.pipeline.orchestrator import SampleQueryOrchestrator
from samplegraph.providers.cache.memory_cache import MemoryCacheProvider
from samplegraph.providers.cache.redis_cache import RedisCacheProvider
from samplegraph.providers.upstream.genius_provider import GeniusTrackProvider, build_http_client
from samplegraph.utils.errors import ConfigurationError
from samplegraph.utils.logging import configure_logging, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def _build_cache(app_settings: Settings) -> ICacheProvider:
    if app_settings.uses_memory_cache:
        return MemoryCacheProvider()
    return RedisCacheProvider.from_url(
        app_settings.database_url, timeout=app_settings.cache_timeout_seconds
    )


def _build_all(app_settings: Settings, config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    http_client = build_http_client(
        base_url=app_settings.genius_base_url,
        api_key=app_settings.genius_key,
        timeout=app_settings.upstream_timeout_seconds,
    )
    provider = GeniusTrackProvider(
        http_client=http_client,
        min_confidence=config["search"]["min_confidence"],
    )
    cache = _build_cache(app_settings)

    orchestrator = SampleQueryOrchestrator(
        cache=cache,
        upstream=provider,
        ttl_seconds=app_settings.redis_key_expiry,
        namespace=app_settings.cache_namespace,
        include_interpolations=config["relationships"]["include_interpolations"],
        max_search_results=config["search"]["max_results"],
    )
    graph_builder = SampleGraphBuilder(
        orchestrator=orchestrator,
        default_degree=config["graph"]["default_degree"],
        max_degree=config["graph"]["max_degree"],
        concurrency=config["graph"]["concurrency"],
    )

    return {
        "http_client": http_client,
        "provider": provider,
        "cache": cache,
        "orchestrator": orchestrator,
        "graph_builder": graph_builder,
    }


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    settings: Settings | None = None,
    config: dict[str, Any] | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Raises
    ------
    ConfigurationError
        If settings are not supplied and cannot be loaded from the environment.
    """
    app_settings = settings if settings is not None else load_settings()
    app_config = config if config is not None else load_config(app_settings.config_path)

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        components = _build_all(app_settings, app_config)
        for key, value in components.items():
            setattr(application.state, key, value)

        _logger.info(
            "app_startup",
            version=__version__,
            environment=app_settings.app_env,
            cache_backend=components["cache"].get_provider_name(),
            upstream=components["provider"].get_provider_name(),
        )

        yield

        await components["http_client"].aclose()
        await components["cache"].close()
        _logger.info("app_shutdown", message="HTTP client and cache closed")

    application = FastAPI(
        title="SampleGraph API",
        version=__version__,
        description=(
            "Look up which tracks a song samples and which tracks sample it, "
            "backed by the Genius API with a shared cache in front."
        ),
        lifespan=_lifespan,
    )

    # Last added runs first.
    application.add_middleware(ErrorHandlingMiddleware)
    configure_rate_limit(application, app_config["api"].get("rate_limit"))
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_config["api"]["cors_origins"])

    application.include_router(api_router)
    return application


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Run the API server under uvicorn."""
    parser = argparse.ArgumentParser(prog="samplegraph", description="Run the SampleGraph API server.")
    parser.add_argument("--host", default=None, help="Bind address (default: APP_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: APP_PORT)")
    args = parser.parse_args(argv)

    try:
        app_settings = load_settings()
        configure_logging(
            log_level=app_settings.log_level,
            json_output=app_settings.app_env == "production",
        )
        application = create_app(settings=app_settings)
    except ConfigurationError as exc:
        _logger.error("startup_failed", error=str(exc))
        return 1

    uvicorn.run(
        application,
        host=args.host or app_settings.app_host,
        port=args.port or app_settings.app_port,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
