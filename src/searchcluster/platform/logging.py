"""
SearchCluster Structured Logging

Configures structlog for the cluster tools. Events raised while a host is
being addressed carry the service and host through `host_context`, so the
engine and transport log lines can be told apart across a fan-out.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

from searchcluster.platform.config import settings

# httpx and httpcore log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure structured logging for the cluster tools."""

    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
            if settings.APP_ENV == "production"
            else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # Request lines from the HTTP client only at debug level
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(
            log_level if log_level <= logging.DEBUG else logging.WARNING
        )


@contextmanager
def host_context(service: str, host: str) -> Iterator[None]:
    """Bind the service and host being addressed to every event logged inside."""
    with structlog.contextvars.bound_contextvars(service=service, cluster_host=host):
        yield


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)
