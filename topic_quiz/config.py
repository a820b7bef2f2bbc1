"""Environment-driven settings for the quiz service."""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

from topic_quiz.services.session_registry import DEFAULT_MAX_SESSIONS

# Load environment variables from a .env file if present
load_dotenv()


@dataclass(frozen=True)
class Settings:
    data_file: Optional[str]
    cors_allow_origins: List[str]
    max_sessions: int
    log_level: str


def _parse_origins(value: Optional[str]) -> List[str]:
    if not value:
        return ["*"]
    origins = [origin.strip() for origin in value.split(",") if origin.strip()]
    return origins or ["*"]


def _parse_positive_int(name: str, value: Optional[str], default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < 1:
        raise ValueError(f"{name} must be at least 1, got {parsed}")
    return parsed


# PUBLIC_INTERFACE
def load_settings() -> Settings:
    """
    Read settings from the environment.

    Variables:
        QUIZ_DATA_FILE: path to the catalog JSON file (packaged catalog if unset).
        CORS_ALLOW_ORIGINS: comma separated list of allowed origins, '*' if unset.
        QUIZ_MAX_SESSIONS: maximum number of live sessions kept in memory.
        LOG_LEVEL: logging level name, INFO if unset.
    """
    return Settings(
        data_file=os.getenv("QUIZ_DATA_FILE") or None,
        cors_allow_origins=_parse_origins(os.getenv("CORS_ALLOW_ORIGINS")),
        max_sessions=_parse_positive_int(
            "QUIZ_MAX_SESSIONS", os.getenv("QUIZ_MAX_SESSIONS"), DEFAULT_MAX_SESSIONS
        ),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the settings, read once per process."""
    return load_settings()
