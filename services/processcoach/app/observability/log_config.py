"""structlog configuration.

Call :func:`configure_logging` once at startup; later calls are no-ops.
"""
from __future__ import annotations

import logging
import sys

import structlog

from ..config import get_settings

_configured = False


def configure_logging(level: str | None = None) -> None:
    global _configured
    if _configured:
        return
    name = (level or get_settings().observability.log_level).upper()
    numeric = getattr(logging, name, logging.INFO)

    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        stream=sys.stdout,
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        cache_logger_on_first_use=True,
    )
    _configured = True


__all__ = ["configure_logging"]
