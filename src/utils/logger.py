import logging
import sys

import structlog
from fastapi import Request
from structlog.stdlib import ProcessorFormatter

# Context bound by the request middleware and the auth dependency
REQUEST_CONTEXT_KEYS = ("request_id", "ip_address", "user_id", "company_id")


def get_client_ip(request: Request) -> str:
    """Client address, preferring the first hop of ``X-Forwarded-For``."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def add_request_context(
    logger: structlog.BoundLogger, method_name: str, event_dict: dict
) -> dict:
    bound = structlog.contextvars.get_contextvars()
    for key in REQUEST_CONTEXT_KEYS:
        if bound.get(key):
            event_dict.setdefault(key, bound[key])
    return event_dict


def _renderer(is_production: bool):
    if is_production:
        return structlog.processors.JSONRenderer(sort_keys=False)
    return structlog.dev.ConsoleRenderer(colors=True, pad_event=8)


def setup_logging(is_production: bool = False, debug: bool = False):
    """Route structlog and stdlib logging through one stdout handler.

    Production emits one JSON object per line, development a coloured
    console line. Returns a logger for the caller's own startup messages.
    """
    log_level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            add_request_context,
            structlog.processors.UnicodeDecoder(),
            ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(processor=_renderer(is_production)))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    # Request logging middleware replaces uvicorn's access log
    for name in ("uvicorn", "uvicorn.access"):
        logging.getLogger(name).handlers = []
    # DATABASE_ECHO turns SQL logging on through the engine
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return structlog.get_logger("src.main")


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)
