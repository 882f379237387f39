"""
DiskCensus structured logging.

Provides structured logging for the inventory run. The debug channel
carries parser tier selections and attribute fallbacks; per-disk problems
that do not abort the run are warnings counted by OperationLogger.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from diskcensus.core.config import LoggingConfig


_configured = False


def setup_logging(config: LoggingConfig) -> None:
    """Configure structured logging for DiskCensus. Later calls are no-ops."""
    global _configured

    if _configured:
        return

    handlers: list[logging.Handler] = []

    if config.console_enabled:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, config.level))
        handlers.append(console_handler)

    if config.file_enabled:
        config.log_directory.mkdir(parents=True, exist_ok=True)
        log_file = config.log_directory / f"diskcensus_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, format="%(message)s")

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if config.json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name or "diskcensus")


class OperationLogger:
    """
    Context manager that logs one census operation with its duration.

    The operation name and context are bound to ``logger`` so every event
    logged through it carries them. Problems that should not abort the
    operation (a disk block that fails to parse) are reported with
    ``issue()``; the completion event is a warning when any were raised.
    """

    def __init__(
        self,
        operation: str,
        logger: structlog.stdlib.BoundLogger | None = None,
        **context: Any,
    ):
        self.operation = operation
        self.logger = (logger or get_logger()).bind(operation=operation, **context)
        self.issues: list[str] = []
        self.start_time: datetime | None = None

    def __enter__(self) -> OperationLogger:
        self.start_time = datetime.now()
        self.logger.debug(f"Starting {self.operation}")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        duration = (datetime.now() - self.start_time).total_seconds() if self.start_time else 0

        if exc_type is not None:
            self.logger.error(
                f"Failed {self.operation}",
                duration_seconds=duration,
                error_type=exc_type.__name__,
                error=str(exc_val),
            )
            return

        log = self.logger.warning if self.issues else self.logger.info
        log(f"Completed {self.operation}", duration_seconds=duration, issues=len(self.issues))

    def update(self, **additional_context: Any) -> None:
        """Bind more context to the operation."""
        self.logger = self.logger.bind(**additional_context)

    def issue(self, message: str, **context: Any) -> str:
        """Log a non-fatal problem, count it, and return the message."""
        self.issues.append(message)
        self.logger.warning(message, **context)
        return message
