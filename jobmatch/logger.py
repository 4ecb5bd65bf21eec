"""
Structured logging system for jobmatch.

Provides centralized logging with console and file outputs, keyword
context rendered as JSON, and session metrics for monitoring how often
matching had to lean on the AI collaborator or its fallbacks.
"""

import json
import logging
import os
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring matching runs.
    """

    def __init__(
        self,
        name: str = "jobmatch",
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
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.handlers.clear()
        self.logger.propagate = False

        # Pool threads record metrics concurrently when MATCH_WORKERS > 1.
        self._metrics_lock = threading.Lock()
        self.metrics = self._empty_metrics()

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
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

            log_file = log_dir / f"jobmatch_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    @staticmethod
    def _empty_metrics() -> dict:
        return {
            "ai_calls": 0,
            "ai_failures": 0,
            "semantic_escalations": 0,
            "fallbacks": {},
            "jobs_processed": 0,
            "jobs_failed": 0,
            "errors_by_type": {},
        }

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
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def _increment(self, key: str):
        with self._metrics_lock:
            self.metrics[key] += 1

    def record_ai_call(self):
        """Increment AI collaborator call counter."""
        self._increment("ai_calls")

    def record_ai_failure(self, error_type: str):
        """Record a failed AI collaborator call."""
        with self._metrics_lock:
            self.metrics["ai_failures"] += 1
            self._count_error(error_type)

    def record_escalation(self):
        """Record a deterministic score too weak to stand on its own."""
        self._increment("semantic_escalations")

    def record_fallback(self, kind: str):
        """Record a fallback value being used in place of an AI result."""
        with self._metrics_lock:
            fallbacks = self.metrics["fallbacks"]
            fallbacks[kind] = fallbacks.get(kind, 0) + 1

    def record_job_processed(self):
        self._increment("jobs_processed")

    def record_job_failure(self, error_type: str):
        """Record a job that produced no match record."""
        with self._metrics_lock:
            self.metrics["jobs_failed"] += 1
            self._count_error(error_type)

    def _count_error(self, error_type: str):
        # caller holds _metrics_lock
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return current metrics, including the AI success rate."""
        with self._metrics_lock:
            metrics_copy = dict(self.metrics)
            metrics_copy["fallbacks"] = dict(self.metrics["fallbacks"])
            metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        calls = metrics_copy["ai_calls"]
        if calls > 0:
            metrics_copy["ai_success_rate"] = round(
                (calls - metrics_copy["ai_failures"]) / calls, 3
            )
        return metrics_copy

    def reset_metrics(self):
        with self._metrics_lock:
            self.metrics = self._empty_metrics()

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        processed = metrics["jobs_processed"]
        failed = metrics["jobs_failed"]
        attempted = processed + failed

        self.info("=== Matching Session Metrics ===")
        self.info(f"Jobs: {processed}/{attempted} matched, {failed} failed")
        self.info(f"Semantic escalations: {metrics['semantic_escalations']}")
        if metrics["ai_calls"]:
            rate = metrics.get("ai_success_rate", 0) * 100
            self.info(f"AI calls: {metrics['ai_calls']} ({rate:.1f}% success)")

        if metrics["fallbacks"]:
            self.info("Fallbacks used:")
            for kind, count in metrics["fallbacks"].items():
                self.info(f"  {kind}: {count}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "jobmatch",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Level, log directory and file output default to LOG_LEVEL,
    JOBMATCH_LOG_DIR and JOBMATCH_LOG_TO_FILE.

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        level = level or os.getenv("LOG_LEVEL", "INFO")
        if "log_dir" not in kwargs and os.getenv("JOBMATCH_LOG_DIR"):
            kwargs["log_dir"] = Path(os.environ["JOBMATCH_LOG_DIR"])
        kwargs.setdefault("enable_file", _env_flag("JOBMATCH_LOG_TO_FILE", True))
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
