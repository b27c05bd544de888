"""
Structured logging for PMEC.

The library never configures logging on import. Applications that want
PMEC output call configure_logging() once at startup.
"""

import sys
import logging
from typing import Any, Dict

import structlog


def configure_logging(log_level: str = "info", json: bool = False) -> None:
    """
    Configure structured logging.

    Args:
        log_level: Standard level name (debug, info, warning, ...)
        json: Render events as JSON instead of key=value console output
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_component,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )


def add_component(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Tag events with the PMEC component that emitted them."""
    logger_name = event_dict.get("logger", "")
    if logger_name.startswith("pmec."):
        event_dict["component"] = logger_name.split(".")[1]
    return event_dict


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
