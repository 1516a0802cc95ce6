"""
structlog configuration shared by every FinCraft entry point.

PURPOSE:
- One JSON line per event on stdout, so uvicorn, Lambda and the CLI produce
  logs that can be filtered by request_id, event name or error kind.

CONTEXT:
- configure_logging() runs once at import of an entry point (API app, Lambda
  handler, CLI). Library modules only call get_logger(component=...).
"""

from __future__ import annotations
import logging
import os
import sys

import structlog

DEFAULT_LEVEL = "INFO"

_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
    structlog.processors.JSONRenderer(),
]


def _resolve_level(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL") or DEFAULT_LEVEL).upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: str | None = None):
    """
    Route structlog through stdlib logging with a JSON renderer.

    parameters:
    - level: str (optional) – wins over LOG_LEVEL; unknown names fall back to INFO.

    returns:
    - structlog.BoundLogger – bound with service and env.

    sample line:
    {"event": "model.generate.done", "level": "info", "timestamp": "...",
     "service": "FinCraft", "env": "dev", "component": "recommendation_client",
     "latency_ms": 2140.3, "sources": 6}
    """
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=_resolve_level(level))

    structlog.configure(
        processors=_PROCESSORS,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return get_logger()


def get_logger(**bindings):
    """Logger bound with service/env plus any extra key/values (e.g. component="normalizer")."""
    return structlog.get_logger("fincraft").bind(
        service="FinCraft", env=os.getenv("ENV", "dev"), **bindings
    )
