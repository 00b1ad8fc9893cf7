"""Tests for shared library helpers: config, utils, results."""
import json
from datetime import date, datetime

import pytest

from scripts.lib.config import AnalyticsConfig
from scripts.lib.errors import ConfigError, MetricComputationError, PulseError
from scripts.lib.result import Result, capture
from scripts.lib.utils import (
    atomic_write_json,
    build_map,
    days_between,
    group_by,
    parse_ts,
    round_half_up,
    safe_div,
)


class TestAnalyticsConfig:
    def test_defaults(self):
        config = AnalyticsConfig()
        assert config.stale_days == 30
        assert config.recovery_rate == 0.3
        assert config.industry_win_rate_min == 25
        assert config.max_recommendations == 5

    def test_from_env(self):
        config = AnalyticsConfig.from_env({
            "PULSE_STALE_DAYS": "45",
            "PULSE_RECOVERY_RATE": "0.5",
            "PULSE_ENTERPRISE_SEGMENT": "Strategic",
            "PULSE_MAX_RECOMMENDATIONS": "",
        })
        assert config.stale_days == 45
        assert config.recovery_rate == 0.5
        assert config.enterprise_segment == "Strategic"
        assert config.max_recommendations == 5

    def test_bad_env_value(self):
        with pytest.raises(ConfigError) as exc:
            AnalyticsConfig.from_env({"PULSE_STALE_DAYS": "soon"})
        assert exc.value.details["setting"] == "stale_days"

    def test_non_finite_int_is_config_error(self):
        with pytest.raises(ConfigError) as exc:
            AnalyticsConfig.from_env({"PULSE_STALE_DAYS": "inf"})
        assert exc.value.details["setting"] == "stale_days"

    @pytest.mark.parametrize("env, setting", [
        ({"PULSE_TREND_MONTHS": "0"}, "trend_months"),
        ({"PULSE_TREND_MONTHS": "1"}, "trend_months"),
        ({"PULSE_STALE_DAYS": "-5"}, "stale_days"),
        ({"PULSE_MAX_RECOMMENDATIONS": "0"}, "max_recommendations"),
        ({"PULSE_RECOVERY_RATE": "1.5"}, "recovery_rate"),
        ({"PULSE_RECOVERY_RATE": "nan"}, "recovery_rate"),
        ({"PULSE_HIGH_VALUE_THRESHOLD": "nan"}, "high_value_threshold"),
        ({"PULSE_INDUSTRY_WIN_RATE_MIN": "120"}, "industry_win_rate_min"),
    ])
    def test_out_of_range_env_value(self, env, setting):
        with pytest.raises(ConfigError) as exc:
            AnalyticsConfig.from_env(env)
        assert exc.value.details["setting"] == setting

    def test_direct_construction_is_validated(self):
        with pytest.raises(ConfigError):
            AnalyticsConfig(trend_months=0)
        assert AnalyticsConfig(trend_months=2).trend_months == 2


class TestParseTs:
    def test_formats(self):
        assert parse_ts("2025-06") == datetime(2025, 6, 1)
        assert parse_ts("2025-06-15") == datetime(2025, 6, 15)
        assert parse_ts("2025-06-15T10:00:00Z") == datetime(2025, 6, 15, 10)
        assert parse_ts("2025-06-15T10:00:00+02:00") == datetime(2025, 6, 15, 8)
        assert parse_ts(date(2025, 6, 15)) == datetime(2025, 6, 15)

    def test_blank(self):
        assert parse_ts(None) is None
        assert parse_ts("") is None
        assert parse_ts("   ") is None

    def test_garbage(self):
        with pytest.raises(ValueError):
            parse_ts("last tuesday")


class TestMathHelpers:
    def test_days_between_truncates(self):
        assert days_between(datetime(2025, 6, 1), datetime(2025, 6, 3, 23)) == 2
        assert days_between(datetime(2025, 6, 3), datetime(2025, 6, 1, 1)) == -1

    def test_safe_div(self):
        assert safe_div(1, 0) == 0
        assert safe_div(1, 4) == 0.25

    def test_round_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(11.15, 1) == 11.2
        assert round_half_up(-60.78, 1) == -60.8
        assert isinstance(round_half_up(3.2), int)

    def test_negative_ties_round_toward_positive_infinity(self):
        assert round_half_up(-10.5) == -10
        assert round_half_up(-0.5) == 0
        assert round_half_up(-10.6) == -11
        assert round_half_up(-11.15, 1) == -11.1


class TestCollections:
    def test_build_map_last_wins(self):
        items = [("a", 1), ("b", 2), ("a", 3)]
        assert build_map(items, lambda i: i[0]) == {"a": ("a", 3), "b": ("b", 2)}

    def test_group_by_skips_none(self):
        groups = group_by([1, 2, 3, 4, None], lambda n: None if n is None else n % 2)
        assert groups == {1: [1, 3], 0: [2, 4]}
        assert list(groups) == [1, 0]


class TestAtomicWriteJson:
    def test_writes_file(self, tmp_path):
        target = tmp_path / "nested" / "out.json"
        assert atomic_write_json({"when": datetime(2025, 1, 1)}, target)
        assert json.loads(target.read_text(encoding="utf-8")) == {"when": "2025-01-01 00:00:00"}
        assert not target.with_suffix(".json.tmp").exists()


class TestResult:
    def test_success(self):
        result = capture("double", lambda x: x * 2, 21)
        assert result.ok and result.unwrap() == 42

    def test_failure_wraps_exception(self):
        result = capture("explode", lambda: 1 / 0)
        assert not result.ok
        assert isinstance(result.error, MetricComputationError)
        assert str(result.error).startswith("[METRIC_FAILED]")

    def test_pulse_errors_pass_through(self):
        error = ConfigError("nope", setting="x")

        def fail():
            raise error

        assert capture("config", fail).error is error

    def test_failure_unwrap_raises(self):
        failed = Result.failure(PulseError("x"))
        with pytest.raises(PulseError):
            failed.unwrap()
