"""Policy constants for the analytics engine, overridable from the environment."""

import os
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

ENV_PREFIX = "CADET_ANALYTICS_"


class AnalyticsSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Workload
    hours_per_shift: float = Field(default=2.0, gt=0)
    full_workweek_hours: float = Field(default=40.0, gt=0)
    reduce_load_above: float = Field(default=90.0, ge=0, le=100)
    can_take_more_below: float = Field(default=30.0, ge=0, le=100)
    utilization_advisory_above: float = Field(default=80.0, ge=0, le=100)
    overtime_hours: float = Field(default=45.0, gt=0)
    critical_utilization_above: float = Field(default=95.0, ge=0, le=100)

    # Coverage
    experienced_staff_years: float = Field(default=2.0, ge=0)

    # Cadets
    high_risk_behavior_max: int = Field(default=2, ge=1, le=5)
    scoring_behavior_max: int = Field(default=3, ge=1, le=5)
    high_risk_display_limit: int = Field(default=3, ge=1)
    new_enrollment_days: int = Field(default=30, ge=0)

    # Inventory
    soon_days: int = Field(default=14, ge=0)
    full_confidence_history_days: int = Field(default=30, ge=1)
    projection_days: int = Field(default=30, ge=0)


def load_settings(env: Optional[Dict[str, str]] = None) -> AnalyticsSettings:
    """
    Build settings from CADET_ANALYTICS_* environment variables.

    Args:
        env: Mapping to read instead of os.environ (a .env file is only
            loaded when reading the real environment)

    Returns:
        AnalyticsSettings with defaults for anything not set

    Raises:
        ValueError: if a variable is set to an unusable value
    """
    if env is None:
        load_dotenv()
        env = dict(os.environ)

    overrides = {}
    for name in AnalyticsSettings.model_fields:
        raw = env.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw.strip():
            overrides[name] = raw.strip()

    try:
        return AnalyticsSettings(**overrides)
    except ValidationError as e:
        raise ValueError(f"Invalid analytics settings: {e}") from e
