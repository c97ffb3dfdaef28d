"""
Environment configuration for the scoring pipeline.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

AVERAGING_MODES = ("sequential", "mean")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


@dataclass
class Settings:
    gemini_model: str = "gemini-2.0-flash"
    pass_threshold: float = 70.0
    max_issues: int = 5
    missing_penalty: float = 30.0
    stale_penalty: float = 10.0
    max_document_age_days: int = 365
    averaging: str = "sequential"
    pending_ttl_hours: int = 72
    data_dir: str = "./data"
    gemini_api_key: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        if self.averaging not in AVERAGING_MODES:
            raise ConfigurationError(
                f"SCORE_AVERAGING must be one of {', '.join(AVERAGING_MODES)}, got {self.averaging!r}"
            )

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
            pass_threshold=_env_float("PASS_THRESHOLD", 70.0),
            max_issues=_env_int("MAX_ISSUES", 5),
            missing_penalty=_env_float("MISSING_DOCUMENT_PENALTY", 30.0),
            stale_penalty=_env_float("STALE_DOCUMENT_PENALTY", 10.0),
            max_document_age_days=_env_int("MAX_DOCUMENT_AGE_DAYS", 365),
            averaging=os.getenv("SCORE_AVERAGING", "sequential").strip().lower(),
            pending_ttl_hours=_env_int("PENDING_TTL_HOURS", 72),
            data_dir=os.getenv("DATA_DIR", "./data"),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        )

    def require_api_key(self) -> str:
        """Return the model API key, read from the environment on first use."""
        if not self.gemini_api_key:
            self.gemini_api_key = os.getenv("GEMINI_API_KEY") or None
        if not self.gemini_api_key:
            raise ConfigurationError(
                "Gemini API key not found. Please set GEMINI_API_KEY in the environment"
            )
        return self.gemini_api_key


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them from the environment once."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.debug("Loaded settings: %r", _settings)
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
