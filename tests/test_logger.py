"""
Tests for logger functionality.
"""

import pytest
from sheetmatch.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["comparisons"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context is appended to the message as JSON."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.info("Matched title", title="محاضرة 1", score=92)

        content = next(tmp_path.glob("*.log")).read_text(encoding="utf-8")
        assert 'Context: {"title": "محاضرة 1", "score": 92}' in content

    def test_metrics_tracking(self, tmp_path):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.record_comparisons(3)
        logger.record_comparisons()
        logger.record_match("exact")
        logger.record_match("fuzzy")
        logger.record_match("exact")
        logger.record_miss()
        logger.record_cache_hit()

        metrics = logger.get_metrics()

        assert metrics["comparisons"] == 4
        assert metrics["titles_processed"] == 4
        assert metrics["matches_found"] == 3
        assert metrics["matches_missed"] == 1
        assert metrics["cache_hits"] == 1
        assert metrics["match_types"] == {"exact": 2, "fuzzy": 1}
        assert metrics["match_rate"] == pytest.approx(0.75)

    def test_match_rate_without_titles(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        assert logger.get_metrics()["match_rate"] == 0.0

    def test_get_metrics_returns_copy(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_match("exact")

        metrics = logger.get_metrics()
        metrics["match_types"]["exact"] = 99

        assert logger.metrics["match_types"]["exact"] == 1

    def test_metrics_summary_logged(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_match("contains")
        logger.log_metrics_summary()

        content = next(tmp_path.glob("*.log")).read_text(encoding="utf-8")
        assert "Matched: 1/1 (100.0%)" in content
        assert "contains: 1" in content

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.info("Test message")

        log_files = list(tmp_path.glob("*.log"))
        assert len(log_files) == 1
        assert log_files[0].name.startswith("sheetmatch_")
        assert "Test message" in log_files[0].read_text(encoding="utf-8")


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_comparisons()

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)
        assert logger2.metrics["comparisons"] == 0
        reset_logger()
