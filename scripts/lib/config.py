"""
Revenue Pulse — Configuration
===============================
Analytics thresholds and runtime settings.

Every threshold used by the analytics core lives on ``AnalyticsConfig`` so
callers can override it per call (tests, what-if runs) or per deployment
through ``PULSE_*`` environment variables.

Usage:
    from scripts.lib.config import AnalyticsConfig
    config = AnalyticsConfig.from_env()
    config = AnalyticsConfig(stale_days=45)
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path

from dotenv import load_dotenv

from scripts.lib.errors import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")

DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
PROCESSED_DIR = Path(os.getenv("PROCESSED_DIR", str(PROJECT_ROOT / "data" / "processed")))

ENV_PREFIX = "PULSE_"


@dataclass(frozen=True)
class AnalyticsConfig:
    """Named, overridable analytics thresholds."""

    # Risk detection
    stale_days: int = 30
    low_activity_days: int = 30
    high_value_threshold: float = 50_000.0
    enterprise_segment: str = "Enterprise"
    min_rep_closed_deals: int = 5
    max_stale_deals: int = 10
    max_underperforming_reps: int = 5
    max_low_activity_accounts: int = 15

    # Recommendations
    recovery_rate: float = 0.3
    industry_win_rate_min: float = 25.0
    max_recommendations: int = 5

    # Driver sparkline length (needs a current and a previous month)
    trend_months: int = 6

    def __post_init__(self):
        for name in (
            "stale_days", "low_activity_days", "min_rep_closed_deals",
            "max_stale_deals", "max_underperforming_reps",
            "max_low_activity_accounts", "max_recommendations",
        ):
            if getattr(self, name) < 1:
                _invalid(name, getattr(self, name), "must be at least 1")
        if self.trend_months < 2:
            _invalid("trend_months", self.trend_months, "must be at least 2")
        if not self.high_value_threshold >= 0:
            _invalid("high_value_threshold", self.high_value_threshold, "must not be negative")
        if not 0 <= self.recovery_rate <= 1:
            _invalid("recovery_rate", self.recovery_rate, "must be between 0 and 1")
        if not 0 <= self.industry_win_rate_min <= 100:
            _invalid("industry_win_rate_min", self.industry_win_rate_min, "must be between 0 and 100")

    @classmethod
    def from_env(cls, environ=None) -> "AnalyticsConfig":
        """
        Build a config from PULSE_* environment variables.

        ``PULSE_STALE_DAYS=45`` overrides ``stale_days`` and so on. Unset
        variables keep their defaults.

        Raises:
            ConfigError: if a variable can't be converted to the field type
                or the resulting value is out of range.
        """
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            overrides[f.name] = _coerce(f.name, raw, type(f.default))
        return cls(**overrides)


def _coerce(name: str, raw: str, kind: type):
    if kind is str:
        return raw
    try:
        return kind(float(raw)) if kind is int else kind(raw)
    except (TypeError, ValueError, OverflowError):
        raise ConfigError(
            f"{ENV_PREFIX}{name.upper()} must be {kind.__name__}, got {raw!r}",
            setting=name,
        )


def _invalid(name: str, value, reason: str):
    raise ConfigError(f"{name} {reason}, got {value!r}", setting=name)
