"""
Structured logging configuration.

structlog builds the event; the stdlib handler renders it as one flat JSON
object through python-json-logger. Event keys land at the top level next to
``@timestamp``, ``level``, ``logger`` and ``event``.

Request-scoped fields (``request_id``, ``method``, ``path``, ``profile_id``,
``profile_type``) live in structlog contextvars and are merged into every
event logged while a request is handled.
"""
import logging
import sys
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO

import structlog
from pythonjsonlogger.json import JsonFormatter

from marketplace_payments.config import get_settings

REQUEST_CONTEXT_FIELDS = ("request_id", "method", "path", "profile_id", "profile_type")


def add_service_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Tag every event with the service name and environment."""
    settings = get_settings()
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("env", settings.app_env)
    return event_dict


def render_money_and_enums(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """
    Render Decimal amounts as fixed-point strings and enums as their values.

    Balances and prices then appear in logs exactly as in API responses
    (``"120.00"``) instead of floats or reprs.
    """
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
        elif isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def bind_request_context(**fields: Any) -> None:
    """Attach request-scoped fields to all subsequent events of this request."""
    unknown = set(fields) - set(REQUEST_CONTEXT_FIELDS)
    if unknown:
        raise ValueError(f"Not request context fields: {sorted(unknown)}")
    structlog.contextvars.bind_contextvars(**fields)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def build_json_handler(stream: TextIO = sys.stdout) -> logging.Handler:
    """Stream handler that writes one JSON object per record."""
    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={
                "asctime": "@timestamp",
                "levelname": "level",
                "name": "logger",
                "message": "event",
            },
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
    )
    return handler


def setup_logging() -> None:
    """
    Configure structlog over stdlib logging with a JSON handler on stdout.

    Safe to call more than once; the root handlers are replaced each time.
    """
    settings = get_settings()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_service_context,
            render_money_and_enums,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(build_json_handler())

    # SQL statements only when echo is on
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "logging_configured",
        log_level=settings.log_level,
    )
