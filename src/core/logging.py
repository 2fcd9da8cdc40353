from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from src.core.config import Settings

_CONFIGURED = False


def _service_context(settings: Settings) -> Any:
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", settings.app_name)
        event_dict.setdefault("environment", settings.environment)
        return event_dict

    return processor


def setup_logging(settings: Settings) -> None:
    """Configure structlog once per process.

    Local runs get the console renderer; every other environment emits one JSON
    object per line with request context merged from contextvars.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(level=level, format="%(message)s", stream=sys.stdout)
    # passlib warns about the bcrypt backend version on first hash
    logging.getLogger("passlib").setLevel(logging.ERROR)

    renderer: Any
    if settings.environment == "local":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _service_context(settings),
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True
