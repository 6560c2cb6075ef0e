from __future__ import annotations

import logging
from typing import Optional

import structlog

HANDLER_NAME = "coursemaster"
QUIET_LOGGERS = ("urllib3",)


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Route structlog events and stdlib log records through one renderer.

    The transport logs structured events via structlog while the state containers use
    `logging.getLogger(__name__)`; both end up on a single root handler formatted by
    `structlog.stdlib.ProcessorFormatter`, as console lines or JSON. Calling this again
    replaces the handler instead of stacking another one.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    shared = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(numeric_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.configure(
        processors=[
            *shared,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def get_logger(name: Optional[str] = None):
    """Return a structlog logger that inherits the global configuration."""
    return structlog.get_logger(name)
