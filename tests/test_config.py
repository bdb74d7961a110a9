"""Unit tests for settings loading."""

import pytest

from cadet_analytics.config import AnalyticsSettings, load_settings


def test_defaults():
    settings = load_settings(env={})
    assert settings == AnalyticsSettings()
    assert settings.hours_per_shift == 2.0
    assert settings.full_workweek_hours == 40.0
    assert settings.soon_days == 14
    assert settings.high_risk_display_limit == 3
    assert settings.overtime_hours == 45.0
    assert settings.critical_utilization_above == 95.0
    assert settings.projection_days == 30


def test_env_overrides():
    settings = load_settings(env={
        "CADET_ANALYTICS_HOURS_PER_SHIFT": "8",
        "CADET_ANALYTICS_SOON_DAYS": " 7 ",
        "CADET_ANALYTICS_HIGH_RISK_DISPLAY_LIMIT": "",
        "UNRELATED": "x",
    })
    assert settings.hours_per_shift == 8.0
    assert settings.soon_days == 7
    assert settings.high_risk_display_limit == 3


def test_invalid_env_value():
    with pytest.raises(ValueError):
        load_settings(env={"CADET_ANALYTICS_HOURS_PER_SHIFT": "zero"})
    with pytest.raises(ValueError):
        load_settings(env={"CADET_ANALYTICS_HOURS_PER_SHIFT": "-2"})


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("CADET_ANALYTICS_EXPERIENCED_STAFF_YEARS", "3")
    assert load_settings().experienced_staff_years == 3.0


def test_burnout_thresholds_from_env():
    settings = load_settings(env={
        "CADET_ANALYTICS_OVERTIME_HOURS": "50",
        "CADET_ANALYTICS_CRITICAL_UTILIZATION_ABOVE": "98",
    })
    assert settings.overtime_hours == 50.0
    assert settings.critical_utilization_above == 98.0
