"""
Runtime configuration, read from the environment once.
Every value has a default so tests and the demo script run with no env set.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

DEFAULT_FEE_PERCENTAGE = Decimal("2.36")  # payment processor's published payout rate


def _default_db_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "fantasy.db"


@dataclass(frozen=True)
class Settings:
    db_path: Path
    db_timeout_seconds: float = 5.0
    db_retry_attempts: int = 3
    payment_fee_percentage: Decimal = DEFAULT_FEE_PERCENTAGE
    local_timezone: str = "UTC"
    performance_schema: str = "points"  # "points" | "detailed"
    knockout_multiplier: Decimal = Decimal("1")  # off by default; the legacy scorer boosted knockout rounds by 1.5
    log_level: str = "INFO"
    jwt_secret_key: str = "fantasy-dev-secret-change-in-production"


def load_settings() -> Settings:
    env = os.environ
    db_path = env.get("FANTASY_DB_PATH")
    return Settings(
        db_path=Path(db_path) if db_path else _default_db_path(),
        db_timeout_seconds=float(env.get("FANTASY_DB_TIMEOUT_SECONDS", "5.0")),
        db_retry_attempts=int(env.get("FANTASY_DB_RETRY_ATTEMPTS", "3")),
        payment_fee_percentage=Decimal(env.get("FANTASY_PAYMENT_FEE_PERCENTAGE", str(DEFAULT_FEE_PERCENTAGE))),
        local_timezone=env.get("FANTASY_LOCAL_TIMEZONE", "UTC"),
        performance_schema=env.get("FANTASY_PERFORMANCE_SCHEMA", "points"),
        knockout_multiplier=Decimal(env.get("FANTASY_KNOCKOUT_MULTIPLIER", "1")),
        log_level=env.get("FANTASY_LOG_LEVEL", "INFO"),
        jwt_secret_key=env.get("JWT_SECRET_KEY", "fantasy-dev-secret-change-in-production"),
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
