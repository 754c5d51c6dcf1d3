"""
Runtime configuration read from environment variables.

Values come from the process environment, optionally seeded from a .env
file via load_env().
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .similarity import MAX_INPUT_LENGTH

SCORERS = ("similarity", "name")

DEFAULT_THRESHOLD = 80
DEFAULT_SCORER = "similarity"
DEFAULT_MAX_INPUT_LENGTH = 500
DEFAULT_DB_PATH = "data/matches.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIR = "logs"


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""
    pass


@dataclass(frozen=True)
class Settings:
    threshold: int = DEFAULT_THRESHOLD
    scorer: str = DEFAULT_SCORER
    max_input_length: int = DEFAULT_MAX_INPUT_LENGTH
    db_path: Path = Path(DEFAULT_DB_PATH)
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: Path = Path(DEFAULT_LOG_DIR)


def _int_var(env: Mapping[str, str], key: str, default: int, low: int, high: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}")
    if not low <= value <= high:
        raise ConfigError(f"{key} must be between {low} and {high}, got {value}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from (default: os.environ)

    Returns:
        Settings instance

    Raises:
        ConfigError: If a variable is set to an invalid value
    """
    if env is None:
        env = os.environ

    scorer = env.get("SHEETMATCH_SCORER", DEFAULT_SCORER).strip().lower()
    if scorer not in SCORERS:
        raise ConfigError(f"SHEETMATCH_SCORER must be one of {', '.join(SCORERS)}, got {scorer!r}")

    log_level = env.get("SHEETMATCH_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"SHEETMATCH_LOG_LEVEL is not a log level: {log_level!r}")

    return Settings(
        threshold=_int_var(env, "SHEETMATCH_THRESHOLD", DEFAULT_THRESHOLD, 0, 100),
        scorer=scorer,
        max_input_length=_int_var(
            env, "SHEETMATCH_MAX_INPUT_LENGTH", DEFAULT_MAX_INPUT_LENGTH, 1, MAX_INPUT_LENGTH
        ),
        db_path=Path(env.get("SHEETMATCH_DB_PATH") or DEFAULT_DB_PATH),
        log_level=log_level,
        log_dir=Path(env.get("SHEETMATCH_LOG_DIR") or DEFAULT_LOG_DIR),
    )
