"""Structured logging configuration using *structlog*.

Log lines carry dotted event names (``fusion.fused``, ``ledger.retrain``,
``engine.decided`` …) plus key/value context.  Values bound with
:func:`structlog.contextvars.bind_contextvars` (the HTTP request id, for
instance) are merged into every line emitted while they are bound.
"""

from __future__ import annotations

import logging
import sys
from typing import Literal

import structlog

LogFormat = Literal["auto", "console", "json"]


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger, never captured at configure time.
    return structlog.PrintLogger(sys.stderr)


def _renderer(fmt: LogFormat) -> structlog.typing.Processor:
    if fmt == "console" or (fmt == "auto" and sys.stderr.isatty()):
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(level: str = "INFO", fmt: LogFormat = "auto") -> None:
    """Configure *structlog* for the core and its host.

    Call once at startup.  ``fmt="auto"`` renders for humans on a terminal
    and JSON lines otherwise.  Standard-library loggers (uvicorn) are set
    to the same level and written to stderr.
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, stream=sys.stderr, format="%(message)s")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(fmt),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
