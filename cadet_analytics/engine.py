"""One analytics pass over a point-in-time snapshot."""

import logging
from datetime import date
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cadet_analytics.config import AnalyticsSettings
from cadet_analytics.coverage import analyze_coverage
from cadet_analytics.errors import ErrorKind, RecordError
from cadet_analytics.forecasting import forecast_inventory, restock_plan
from cadet_analytics.insights import generate_insights, high_risk_alert
from cadet_analytics.models import (
    BurnoutRisk,
    CoverageReport,
    Forecast,
    ForecastResult,
    HighRiskAlert,
    Insight,
    InsufficientData,
    RiskAssessment,
    Snapshot,
    WorkloadRecord,
)
from cadet_analytics.normalizer import RawRows, normalize_snapshot
from cadet_analytics.risk import score_population
from cadet_analytics.summary import behavior_distribution, summarize_snapshot
from cadet_analytics.workload import analyze_workload, identify_burnout_risk, workload_distribution_score

logger = logging.getLogger(__name__)


class AnalyticsReport(BaseModel):
    """Everything derived from one snapshot, plus every record that could not be used."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    taken_at: date
    summary: Dict[str, int] = Field(default_factory=dict)
    behavior_distribution: Dict[int, int] = Field(default_factory=dict)
    risk_assessments: List[RiskAssessment] = Field(default_factory=list)
    insights: List[Insight] = Field(default_factory=list)
    high_risk_alert: Optional[HighRiskAlert] = None
    forecasts: List[Forecast] = Field(default_factory=list)
    restock_plan: List[ForecastResult] = Field(default_factory=list)
    workload: List[WorkloadRecord] = Field(default_factory=list)
    burnout_risk: List[BurnoutRisk] = Field(default_factory=list)
    workload_distribution_score: float = 100.0
    coverage: CoverageReport
    errors: List[RecordError] = Field(default_factory=list)


def empty_population_errors(snapshot: Snapshot) -> List[RecordError]:
    errors = []
    if not snapshot.active_cadets():
        errors.append(RecordError(
            kind=ErrorKind.EMPTY_POPULATION, record_type="cadet",
            message="no active cadets in snapshot",
        ))
    if not snapshot.staff:
        errors.append(RecordError(
            kind=ErrorKind.EMPTY_POPULATION, record_type="staff",
            message="no staff in snapshot",
        ))
    return errors


def insufficient_data_errors(forecasts: List[Forecast]) -> List[RecordError]:
    """One insufficient_data error per item that could not be forecast."""
    errors = []
    for forecast in forecasts:
        if isinstance(forecast, InsufficientData):
            logger.warning("Skipping forecast for inventory item %s: %s", forecast.item_id, forecast.reason)
            errors.append(RecordError(
                kind=ErrorKind.INSUFFICIENT_DATA,
                record_type="inventory",
                record_id=forecast.item_id,
                message=forecast.reason,
            ))
    return errors


def analyze_snapshot(
    snapshot: Snapshot,
    settings: Optional[AnalyticsSettings] = None,
) -> AnalyticsReport:
    """
    Run every analytic over one normalized snapshot.

    The snapshot is immutable, so insights and coverage see the same
    population the per-cadet scores were computed from.

    Args:
        snapshot: Normalized, frozen collections
        settings: Policy constants (defaults to AnalyticsSettings())

    Returns:
        AnalyticsReport with results and collected errors
    """
    settings = settings or AnalyticsSettings()
    active = snapshot.active_cadets()

    risk = score_population(active, snapshot.taken_at, settings)
    forecasts = forecast_inventory(snapshot.inventory, settings)
    workload = analyze_workload(snapshot.staff, snapshot.schedule, settings)
    coverage = analyze_coverage(active, snapshot.staff, workload.results, snapshot.schedule, settings)

    errors = (
        risk.errors
        + forecasts.errors
        + insufficient_data_errors(forecasts.results)
        + workload.errors
        + empty_population_errors(snapshot)
    )
    logger.info(
        "Analytics pass for %s: %d assessments, %d forecasts, %d workload records, %d errors",
        snapshot.taken_at, len(risk.results), len(forecasts.results),
        len(workload.results), len(errors),
    )

    return AnalyticsReport(
        taken_at=snapshot.taken_at,
        summary=summarize_snapshot(snapshot, settings),
        behavior_distribution=behavior_distribution(active),
        risk_assessments=risk.results,
        insights=generate_insights(active, settings),
        high_risk_alert=high_risk_alert(active, settings),
        forecasts=forecasts.results,
        restock_plan=restock_plan(forecasts.results),
        workload=workload.results,
        burnout_risk=identify_burnout_risk(workload.results, settings),
        workload_distribution_score=workload_distribution_score(workload.results),
        coverage=coverage,
        errors=errors,
    )


def run_analytics(
    raw: Mapping[str, RawRows],
    today: Optional[date] = None,
    settings: Optional[AnalyticsSettings] = None,
) -> AnalyticsReport:
    """
    Normalize a raw snapshot and analyze it.

    Args:
        raw: Mapping of 'cadets', 'staff', 'schedule', 'inventory' to a
            DataFrame or a list of dicts, read in one consistent fetch
        today: Snapshot date (defaults to date.today())
        settings: Policy constants (defaults to AnalyticsSettings())

    Returns:
        AnalyticsReport; normalization errors come first in report.errors
    """
    snapshot, normalization_errors = normalize_snapshot(raw, today)
    report = analyze_snapshot(snapshot, settings)
    return report.model_copy(update={"errors": normalization_errors + report.errors})
