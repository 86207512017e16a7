"""Structured logging for strategy-screener.

Provides JSON-formatted logging with context support for
scan tracking and debugging.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

# LogRecord attributes that are not user-supplied context
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename",
    "funcName", "levelname", "levelno", "lineno",
    "module", "msecs", "pathname", "process",
    "processName", "relativeCreated", "stack_info",
    "thread", "threadName", "exc_info", "exc_text",
    "message", "asctime", "taskName",
})


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, include_extras: bool = True):
        """Initialize JSON formatter.

        Args:
            include_extras: Include extra fields in output
        """
        super().__init__()
        self._include_extras = include_extras

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted string
        """
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add location info
        if record.pathname:
            log_data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        if self._include_extras:
            extras = {}
            for key, value in _extras(record).items():
                try:
                    json.dumps(value)  # Check if serializable
                    extras[key] = value
                except (TypeError, ValueError):
                    extras[key] = str(value)

            if extras:
                log_data["context"] = extras

        return json.dumps(log_data)


class TextFormatter(logging.Formatter):
    """Text formatter with context support."""

    def __init__(self):
        """Initialize text formatter."""
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as text, appending ``key=value`` context."""
        base = super().format(record)

        extras = [f"{key}={value}" for key, value in _extras(record).items()]
        if extras:
            return f"{base} | {' '.join(extras)}"

        return base


class ScanLogger:
    """Specialized logger for scan lifecycle events.

    Example:
        >>> logger = ScanLogger("screener.scan")
        >>> logger.scan_submitted(offset=0, limit=50, entry_rules=2)
    """

    def __init__(self, name: str):
        """Initialize scan logger.

        Args:
            name: Logger name
        """
        self._logger = logging.getLogger(name)

    def scan_submitted(self, offset: int, limit: int, **context: Any) -> None:
        """Log a page request being sent.

        Args:
            offset: Page cursor
            limit: Page size
            **context: Additional context
        """
        self._logger.info(
            f"Scan page requested: offset={offset} limit={limit}",
            extra={"event": "scan_submitted", "offset": offset, "limit": limit, **context},
        )

    def page_received(self, offset: int, rows: int, total: int, has_more: bool, **context: Any) -> None:
        """Log a page applied to the accumulated results.

        Args:
            offset: Page cursor the request was sent with
            rows: Rows in this page
            total: Accumulated rows after applying the page
            has_more: Continuation flag after this page
            **context: Additional context
        """
        self._logger.info(
            f"Scan page received: {rows} rows (total={total}, more={has_more})",
            extra={
                "event": "page_received",
                "offset": offset,
                "rows": rows,
                "total": total,
                "has_more": has_more,
                **context,
            },
        )

    def page_discarded(self, offset: int, generation: int, current_generation: int, **context: Any) -> None:
        """Log a response dropped because the session was reset meanwhile."""
        self._logger.warning(
            f"Discarded stale scan page: offset={offset}",
            extra={
                "event": "page_discarded",
                "offset": offset,
                "generation": generation,
                "current_generation": current_generation,
                **context,
            },
        )

    def scan_rejected(self, reason: str, **context: Any) -> None:
        """Log a submission refused before any request was made."""
        self._logger.info(
            f"Scan rejected: {reason}",
            extra={"event": "scan_rejected", "reason": reason, **context},
        )

    def scan_failed(self, offset: int, error: str, **context: Any) -> None:
        """Log a failed page request."""
        self._logger.error(
            f"Scan page failed: offset={offset} - {error}",
            extra={"event": "scan_failed", "offset": offset, "error": error, **context},
        )


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    file: str | Path | None = None,
    rotate_size_mb: int = 10,
    retain_count: int = 5,
) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Log format ('json' or 'text')
        file: Log file path (None for stdout only)
        rotate_size_mb: Log rotation size in MB
        retain_count: Number of rotated files to retain
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    root_logger.handlers.clear()

    if format == "json":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if file:
        file_path = Path(file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=rotate_size_mb * 1024 * 1024,
            backupCount=retain_count,
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def setup_logging_from_settings(settings=None) -> None:
    """Configure logging from ``Settings.logging``."""
    if settings is None:
        from config.settings import get_settings
        settings = get_settings()
    cfg = settings.logging
    setup_logging(
        level=cfg.level,
        format=cfg.format,
        file=cfg.file,
        rotate_size_mb=cfg.rotate_size_mb,
        retain_count=cfg.retain_count,
    )


def get_scan_logger(name: str) -> ScanLogger:
    """Get a scan logger instance."""
    return ScanLogger(name)
