"""structlog setup for the package server."""

import logging
import os
import sys
from typing import Any, List, Optional

import structlog


def _processors(is_development: bool) -> List[Any]:
    common = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if is_development:
        return common + [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return common + [structlog.processors.JSONRenderer()]


def setup_logging(log_level: str = "INFO", environment: Optional[str] = None) -> None:
    """Route structlog through stdlib logging on stdout.

    ENVIRONMENT=development (the default) renders for humans, anything else
    renders one JSON object per line.
    """
    if environment:
        os.environ["ENVIRONMENT"] = environment
    is_development = os.getenv("ENVIRONMENT", "development") == "development"
    level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)

    # werkzeug prints its own request lines; keep them at our level
    logging.getLogger("werkzeug").setLevel(level)

    structlog.configure(
        processors=_processors(is_development),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
