# eisenmatrix/util/log.py
"""structlog configuration.

Library modules only call `structlog.get_logger(__name__)`; the CLI calls
`configure_logging` once at startup. Output goes to stderr so command
output on stdout stays parseable.
"""
from __future__ import annotations

import logging
import sys
from typing import List

import structlog
from structlog.typing import Processor


def configure_logging(level: str = "WARNING", fmt: str = "console") -> None:
    lvl = getattr(logging, str(level).upper(), logging.WARNING)

    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(lvl),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
