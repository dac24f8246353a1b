"""
Structured logging system for bizslug.

Provides centralized logging with console and file outputs, log levels,
and counters for monitoring slug resolution and rename health.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for slug resolution and persistence.
    """

    def __init__(
        self,
        name: str = "bizslug",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        self.metrics = {
            "slugs_resolved": 0,
            "exists_checks": 0,
            "collisions": 0,
            "ceiling_fallbacks": 0,
            "renames": 0,
            "rename_failures": 0,
            "errors_by_type": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"bizslug_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str, ensure_ascii=False)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_exists_check(self, collided: bool):
        """Record one existence probe against the store."""
        self.metrics["exists_checks"] += 1
        if collided:
            self.metrics["collisions"] += 1

    def record_resolution(self, fell_back: bool = False):
        """Record a resolved slug, and whether the counter ceiling was hit."""
        self.metrics["slugs_resolved"] += 1
        if fell_back:
            self.metrics["ceiling_fallbacks"] += 1

    def record_rename(self):
        self.metrics["renames"] += 1

    def record_rename_failure(self, error_type: str):
        """Record a rename whose store update failed."""
        self.metrics["rename_failures"] += 1
        self.record_error(error_type)

    def record_error(self, error_type: str):
        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = self.metrics.copy()
        metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        if metrics_copy["exists_checks"] > 0:
            metrics_copy["collision_rate"] = round(
                metrics_copy["collisions"] / metrics_copy["exists_checks"], 3
            )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Slug Session Metrics ===")
        self.info(f"Slugs resolved: {metrics['slugs_resolved']}")
        self.info(
            f"Existence checks: {metrics['exists_checks']} "
            f"({metrics['collisions']} collisions)"
        )
        if metrics["ceiling_fallbacks"]:
            self.info(f"Timestamp fallbacks: {metrics['ceiling_fallbacks']}")
        self.info(f"Renames: {metrics['renames']} ({metrics['rename_failures']} failed)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "bizslug",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Level and log directory default to BIZSLUG_LOG_LEVEL and BIZSLUG_LOG_DIR.
    File output is only enabled when a log directory is configured.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        if level is None:
            level = os.getenv("BIZSLUG_LOG_LEVEL", "INFO")
        if "log_dir" not in kwargs and os.getenv("BIZSLUG_LOG_DIR"):
            kwargs["log_dir"] = Path(os.environ["BIZSLUG_LOG_DIR"])
        kwargs.setdefault("enable_file", kwargs.get("log_dir") is not None)
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
