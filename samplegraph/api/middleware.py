"""API middleware: CORS, rate limiting, request logging, and error handling.

Starlette runs middleware as a stack, last added first.  ``create_app``
adds ``ErrorHandlingMiddleware``, then the rate limiter, then
``RequestLoggingMiddleware``, so a request flows

    Client -> RequestLogging -> RateLimit -> ErrorHandling -> route handler

and the logged status is the one the client actually receives, including
the 429 from the limiter and the 404/502 produced by the error handler.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from samplegraph.api.schemas import ErrorResponse
from samplegraph.utils.errors import (
    CacheUnavailableError,
    ResolutionFailureReason,
    SampleGraphError,
    TrackResolutionFailedError,
    UpstreamError,
)
from samplegraph.utils.logging import (
    REQUEST_ID_HEADER,
    bind_request_id,
    clear_request_id,
    get_logger,
)

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Allow cross-origin ``GET`` requests from *allowed_origins* (default: any).

    The API is read-only, so no other method and no credentials are allowed.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Render a limiter rejection with the standard error body."""
    _logger.warning(
        "rate_limit_exceeded",
        client=get_remote_address(request),
        limit=exc.detail,
        path=str(request.url.path),
    )
    body = ErrorResponse(error="RateLimitExceeded", detail=f"Rate limit exceeded: {exc.detail}")
    return JSONResponse(status_code=429, content=body.model_dump())


def configure_rate_limit(app: FastAPI, rate_limit: str | None) -> Limiter:
    """Give each client address a budget of *rate_limit* requests across all routes.

    *rate_limit* uses the ``limits`` notation, e.g. ``"20/minute"``.  An
    empty value installs the limiter disabled.  Counters live in process
    memory, so each worker enforces its own budget.
    """
    limiter = Limiter(
        key_func=get_remote_address,
        application_limits=[rate_limit] if rate_limit else [],
        enabled=bool(rate_limit),
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    return limiter


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration.

    Binds a request id for the lifetime of the request so that every event
    logged downstream carries it, and echoes it in ``X-Request-ID``.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None
        request_id = bind_request_id(request.headers.get(REQUEST_ID_HEADER))

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )
            clear_request_id()


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


def status_for_error(exc: SampleGraphError) -> int:
    """Map an application error to the HTTP status returned to clients."""
    if isinstance(exc, TrackResolutionFailedError):
        return 404 if exc.reason is ResolutionFailureReason.NOT_FOUND else 502
    if isinstance(exc, (UpstreamError, CacheUnavailableError)):
        return 502
    return 500


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``SampleGraphError`` subclasses and return structured JSON errors.

    Clients get the exception class name and its message only.  The chained
    provider error (``__cause__``) is logged server-side and never leaves
    the process.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except SampleGraphError as exc:
            status_code = status_for_error(exc)
            cause = exc.__cause__
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                status=status_code,
                cause=str(cause) if cause is not None else None,
                path=str(request.url.path),
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
            )
            return JSONResponse(
                status_code=status_code,
                content=body.model_dump(),
            )
