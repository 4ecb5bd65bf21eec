"""Runtime settings for matching, read from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .logger import get_logger

logger = get_logger()

DEFAULT_GEMINI_API_URL = (
    "https://generativelanguage.googleapis.com/v1/models/gemini-pro:generateContent"
)
DEFAULT_JOB_LISTING_URL = "http://localhost:8080/api/jobs"
DEFAULT_DB_PATH = Path("data") / "jobmatch.db"

# A deterministic skill overlap at or above this percentage is final; below
# it the semantic scorer is consulted.
ACCEPTANCE_THRESHOLD = 40.0

# Column limit for stored explanation text.
EXPLANATION_MAX_CHARS = 2000


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = ""
    gemini_api_url: str = DEFAULT_GEMINI_API_URL
    ai_timeout: float = 30.0
    ai_max_retries: int = 0
    acceptance_threshold: float = ACCEPTANCE_THRESHOLD
    explanation_max_chars: int = EXPLANATION_MAX_CHARS
    job_listing_url: str = DEFAULT_JOB_LISTING_URL
    job_listing_timeout: float = 15.0
    db_path: Path = DEFAULT_DB_PATH
    match_workers: int = 1

    @property
    def has_api_key(self) -> bool:
        return bool(self.gemini_api_key.strip())


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _number(key: str, default, cast):
    raw = get_env(key)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Invalid {key} value, using default", value=raw, default=default)
        return default


def load_settings() -> Settings:
    """Build Settings from environment variables (call load_env() first)."""
    threshold = _number("MATCH_ACCEPTANCE_THRESHOLD", ACCEPTANCE_THRESHOLD, float)
    if not 0 <= threshold <= 100:
        logger.warning("MATCH_ACCEPTANCE_THRESHOLD out of range, using default", value=threshold)
        threshold = ACCEPTANCE_THRESHOLD

    max_chars = _number("EXPLANATION_MAX_CHARS", EXPLANATION_MAX_CHARS, int)
    if not 4 <= max_chars <= EXPLANATION_MAX_CHARS:
        logger.warning("EXPLANATION_MAX_CHARS out of range, using default", value=max_chars)
        max_chars = EXPLANATION_MAX_CHARS

    return Settings(
        gemini_api_key=get_env("GEMINI_API_KEY"),
        gemini_api_url=get_env("GEMINI_API_URL") or DEFAULT_GEMINI_API_URL,
        ai_timeout=_number("AI_TIMEOUT", 30.0, float),
        ai_max_retries=max(0, _number("AI_MAX_RETRIES", 0, int)),
        acceptance_threshold=threshold,
        explanation_max_chars=max_chars,
        job_listing_url=get_env("JOB_LISTING_URL") or DEFAULT_JOB_LISTING_URL,
        job_listing_timeout=_number("JOB_LISTING_TIMEOUT", 15.0, float),
        db_path=Path(get_env("JOBMATCH_DB") or DEFAULT_DB_PATH),
        match_workers=max(1, _number("MATCH_WORKERS", 1, int)),
    )
