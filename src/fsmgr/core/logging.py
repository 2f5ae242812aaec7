"""
fsmgr structured logging.

Every tool invocation and every format/resize decision is logged so a
failed boot-time format can be reconstructed afterwards. Tool output is
logged through :func:`tool_logger`, which tags each line with the tool
that printed it.
"""

from __future__ import annotations

import logging
import sys
import time
from datetime import date
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from fsmgr.core.config import LoggingConfig


def setup_logging(config: LoggingConfig) -> None:
    """Configure structured logging for fsmgr.

    Safe to call more than once; the latest configuration replaces the
    handlers installed by an earlier call.
    """
    handlers: list[logging.Handler] = []

    if config.console_enabled:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        handlers.append(console_handler)

    if config.file_enabled:
        config.log_directory.mkdir(parents=True, exist_ok=True)
        log_file = config.log_directory / f"fsmgr_{date.today():%Y%m%d}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, format="%(message)s", force=True)

    renderer: structlog.types.Processor
    if config.json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name or "fsmgr")


def tool_logger(tool: str) -> structlog.stdlib.BoundLogger:
    """Logger for the output of an external tool."""
    return get_logger("fsmgr.tool").bind(tool=tool)


class OperationLogger:
    """
    Logs the start and the outcome of a format or resize.

    The operation counts as failed if its body raises, or if it records a
    nonzero ``exit_code`` with :meth:`update`.
    """

    def __init__(
        self,
        operation: str,
        logger: structlog.stdlib.BoundLogger | None = None,
        **context: Any,
    ):
        self.operation = operation
        self.logger = (logger or get_logger()).bind(operation=operation)
        self.context = dict(context)
        self._started = 0.0

    def __enter__(self) -> OperationLogger:
        self._started = time.monotonic()
        self.logger.info(f"Starting {self.operation}", **self.context)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        fields = dict(self.context, duration_seconds=round(time.monotonic() - self._started, 3))
        if exc_type is not None:
            fields.update(error_type=exc_type.__name__, error=str(exc_val))

        if exc_type is not None or fields.get("exit_code", 0) != 0:
            self.logger.error(f"Failed {self.operation}", **fields)
        else:
            self.logger.info(f"Completed {self.operation}", **fields)

    def update(self, **additional_context: Any) -> None:
        """Add fields to the completion event."""
        self.context.update(additional_context)
