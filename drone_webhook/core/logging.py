"""Structured logging for webhook delivery.

Importing this module configures nothing. Applications that embed the
notifier call :func:`configure_logging` once at startup; until then log
calls go through structlog's defaults and the root logger is left alone.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from drone_webhook.core.config import Settings, get_settings

# Event keys that may carry credentials.
SENSITIVE_KEYS = frozenset({"secret", "signature", "authorization"})


def redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential values before rendering."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = "[redacted]"
    return event_dict


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Route structlog through stdlib logging.

    Args:
        settings: Application settings (default from environment)
    """
    settings = settings or get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
    ]
    if settings.debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        structlog logger
    """
    return structlog.get_logger(name)


def delivery_logger(
    logger: structlog.stdlib.BoundLogger,
    endpoint: str,
    event: str,
) -> structlog.stdlib.BoundLogger:
    """Bind the endpoint and event classifier of one delivery attempt."""
    return logger.bind(endpoint=endpoint, webhook_event=event)
