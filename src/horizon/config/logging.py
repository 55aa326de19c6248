"""structlog configuration for the horizon CLI and host process.

Every record, from structlog or from a stdlib ``logging.getLogger(__name__)``
logger, carries the host process identity: ``pid``, plus ``runtime_context``
(console or server) and ``environment`` when the host supplies them. A
worker log line can then be traced back to the supervisor that spawned it.

Two output modes:
- Human (default): colored console output to stderr
- JSON (--log-json): Structured JSON lines to stderr
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

# Chatty third-party loggers held at WARNING even in verbose mode.
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "pluggy")


def add_process_id(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    event_dict.setdefault("pid", os.getpid())
    return event_dict


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    runtime_context: str | None = None,
    environment: str | None = None,
) -> None:
    """Configure structlog processors, output routing and process context.

    Args:
        verbose: Enable DEBUG-level output for ``horizon`` loggers.
            When False, only WARNING+.
        log_json: Use JSON renderer instead of console renderer.
        runtime_context: ``"console"`` or ``"server"``, bound to every record.
        environment: Host environment name, bound to every record.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_process_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("horizon").setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.contextvars.clear_contextvars()
    context = {"runtime_context": runtime_context, "environment": environment}
    structlog.contextvars.bind_contextvars(**{k: v for k, v in context.items() if v})
