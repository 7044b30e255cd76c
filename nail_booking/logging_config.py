"""Structured logging for the booking client and the mock backend.

structlog renders JSON lines on top of the standard library logger, so
third-party loggers (urllib3, werkzeug, tenacity retries) end up in the
same stream. Inside the mock backend every line of a request carries its
``request_id``.
"""
import logging
import sys
import uuid

import structlog

from nail_booking import config

# Chatty libraries kept at WARNING unless the app runs at DEBUG
QUIET_LOGGERS = ("urllib3", "werkzeug")


def add_app_name(logger, method_name, event_dict):
    event_dict.setdefault("app", "nail-booking")
    return event_dict


def setup_structured_logging(log_level: str = config.LOG_LEVEL):
    """
    Configure structlog and the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_app_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """'req-' followed by 12 hex characters."""
    return f"req-{uuid.uuid4().hex[:12]}"


class RequestIDMiddleware:
    """WSGI middleware tagging each mock-API exchange with X-Request-ID.

    The id sent by the client transport is reused when present, so both
    sides of a call log the same value; it is also bound into structlog's
    context for the duration of the request.
    """

    def __init__(self, wsgi_app):
        self.wsgi_app = wsgi_app

    def __call__(self, environ, start_response):
        request_id = environ.get("HTTP_X_REQUEST_ID") or generate_request_id()
        environ["REQUEST_ID"] = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=environ.get("PATH_INFO", ""),
        )

        def tagged_start_response(status, headers, exc_info=None):
            headers.append(("X-Request-ID", request_id))
            return start_response(status, headers, exc_info)

        return self.wsgi_app(environ, tagged_start_response)
