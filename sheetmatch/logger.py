"""
Structured logging system for SheetMatch.

Provides centralized logging with console and file outputs, plus metrics
tracking for reconciliation runs (comparisons, hits, misses, cache use).
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring match quality.
    """

    def __init__(
        self,
        name: str = "sheetmatch",
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

        self.metrics = {
            "comparisons": 0,
            "titles_processed": 0,
            "matches_found": 0,
            "matches_missed": 0,
            "cache_hits": 0,
            "match_types": {},
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

            log_file = log_dir / f"sheetmatch_{datetime.now().strftime('%Y%m%d')}.log"
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
            message = f"{message} | Context: {json.dumps(context, ensure_ascii=False, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_comparisons(self, count: int = 1):
        """Increment the pairwise comparison counter."""
        self.metrics["comparisons"] += count

    def record_match(self, match_type: str):
        """Record an accepted match of the given type."""
        self.metrics["titles_processed"] += 1
        self.metrics["matches_found"] += 1
        types = self.metrics["match_types"]
        types[match_type] = types.get(match_type, 0) + 1

    def record_miss(self):
        """Record a title that found no acceptable candidate."""
        self.metrics["titles_processed"] += 1
        self.metrics["matches_missed"] += 1

    def record_cache_hit(self):
        self.metrics["cache_hits"] += 1

    def get_metrics(self) -> dict:
        """Return current metrics with the match rate filled in."""
        metrics_copy = dict(self.metrics)
        metrics_copy["match_types"] = dict(self.metrics["match_types"])
        processed = metrics_copy["titles_processed"]
        metrics_copy["match_rate"] = (
            round(metrics_copy["matches_found"] / processed, 3) if processed else 0.0
        )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Reconciliation Metrics ===")
        self.info(f"Comparisons: {metrics['comparisons']}")
        self.info(
            f"Matched: {metrics['matches_found']}/{metrics['titles_processed']} "
            f"({metrics['match_rate'] * 100:.1f}%)"
        )
        self.info(f"Cache hits: {metrics['cache_hits']}")

        if metrics["match_types"]:
            self.info("Match Types:")
            for match_type, count in metrics["match_types"].items():
                self.info(f"  {match_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "sheetmatch",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
