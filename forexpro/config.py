"""ForexPro — application configuration.

Loads .env variables into a typed config object.
Validates values on startup.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    alpha_vantage_api_key: str
    default_pair: str
    default_timeframe: str
    db_path: str
    log_level: str
    api_port: int
    cache_ttl_seconds: int
    notify_min_confidence: int
    session_utc_offset: int  # local trading-window offset from UTC, hours

    @property
    def alpha_vantage_base_url(self) -> str:
        """Return the Alpha Vantage query endpoint."""
        return "https://www.alphavantage.co/query"


def _int_var(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            f"Environment variable {name} must be an integer, got '{raw}'"
        ) from None


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the offending variable when
    a value cannot be parsed.
    """
    load_dotenv(dotenv_path=env_path)

    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"Environment variable LOG_LEVEL is invalid: '{log_level}'")

    notify_min_confidence = _int_var("NOTIFY_MIN_CONFIDENCE", "70")
    if not 0 <= notify_min_confidence <= 100:
        raise ValueError(
            "Environment variable NOTIFY_MIN_CONFIDENCE must be within 0-100, "
            f"got {notify_min_confidence}"
        )

    return Config(
        alpha_vantage_api_key=os.environ.get("ALPHA_VANTAGE_API_KEY", "demo"),
        default_pair=os.environ.get("DEFAULT_PAIR", "EUR_USD"),
        default_timeframe=os.environ.get("DEFAULT_TIMEFRAME", "60min"),
        db_path=os.environ.get("DB_PATH", "data/forexpro.db"),
        log_level=log_level,
        api_port=_int_var("API_PORT", "8080"),
        cache_ttl_seconds=_int_var("CACHE_TTL_SECONDS", "300"),
        notify_min_confidence=notify_min_confidence,
        session_utc_offset=_int_var("SESSION_UTC_OFFSET", "1"),
    )
