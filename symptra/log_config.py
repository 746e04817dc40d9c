# symptra/log_config.py
import logging
import sys
from typing import List

import structlog
from structlog.stdlib import LoggerFactory
from structlog.types import Processor

from . import config


def configure_logging(level: str = config.LOG_LEVEL, json_logs: bool = config.LOG_JSON) -> None:
    """
    Configure structlog on top of the standard library logger.

    Console rendering by default, JSON lines when LOG_JSON is set.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level.upper(),
    )

    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_logs:
        processors.extend([
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ])
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
