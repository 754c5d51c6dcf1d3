"""
Pytest configuration and shared fixtures.
"""

import pytest
from pathlib import Path
from typing import List

from sheetmatch.cache import MatchCache
from sheetmatch.logger import StructuredLogger, reset_logger


@pytest.fixture
def candidate_names() -> List[str]:
    """Sheet row names as they appear in a lesson catalogue."""
    return [
        "Algebra Lesson One",
        "Geometry Basics Q1",
        "Physics Intro",
    ]


@pytest.fixture
def quiet_logger(tmp_path) -> StructuredLogger:
    """Logger writing only to a temporary log directory."""
    reset_logger()
    return StructuredLogger(
        name="sheetmatch-test",
        level="DEBUG",
        log_dir=tmp_path / "logs",
        enable_console=False,
    )


@pytest.fixture
def match_cache(tmp_path, quiet_logger) -> MatchCache:
    """Empty match cache in a temporary database."""
    return MatchCache(tmp_path / "matches.db", logger=quiet_logger)


@pytest.fixture
def candidates_file(tmp_path, candidate_names) -> Path:
    """Candidate list file with a comment and a blank line."""
    path = tmp_path / "candidates.txt"
    path.write_text("# sheet rows\n" + "\n".join(candidate_names) + "\n\n", encoding="utf-8")
    return path
