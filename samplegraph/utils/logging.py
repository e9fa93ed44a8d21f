"""structlog configuration and request-scoped log context.

Every event goes through one processor chain.  It ends in a coloured
console renderer during development and a JSON renderer in production
(``APP_ENV=production`` or ``json_output=True``).  uvicorn and httpx log
through stdlib ``logging``; their records are routed into the same chain
with ``ProcessorFormatter``, so one request produces uniform lines.

``bind_request_id`` puts a per-request id into structlog's contextvars.
Every event logged while that request is handled (orchestrator phases,
upstream retries, cache warnings) carries ``request_id``, which is how
the lines of one lookup are grouped in production logs.
"""

import logging
import os
import re
import sys
import uuid

import structlog

REQUEST_ID_HEADER = "X-Request-ID"

_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Render JSON regardless of ``APP_ENV``.

    Returns:
        The root structlog logger.
    """
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"

    # merge_contextvars must run first so request_id lands on every event.
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    renderer: structlog.types.Processor
    if use_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    # httpx logs every request at INFO; the request middleware already does.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound with ``logger_name=name``.

    Configures logging with defaults on first use.
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)


def bind_request_id(request_id: str | None = None) -> str:
    """Bind a request id to the log context of the current task.

    A client-supplied id is kept when it is a short token of letters,
    digits, ``.``, ``_`` or ``-``; anything else is replaced with a fresh
    random id.  Returns the id that was bound.
    """
    if not request_id or not _REQUEST_ID_PATTERN.match(request_id):
        request_id = uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(request_id=request_id)
    return request_id


def clear_request_id() -> None:
    structlog.contextvars.unbind_contextvars("request_id")
