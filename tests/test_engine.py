"""End-to-end tests for a full analytics pass."""

import logging
from datetime import date, timedelta

import pandas as pd
import pytest

from cadet_analytics.engine import analyze_snapshot, run_analytics
from cadet_analytics.errors import ErrorKind
from cadet_analytics.models import (
    ApplicableRisk,
    ForecastBucket,
    InsightType,
    InsufficientData,
    InventoryItem,
    NotApplicableRisk,
    Snapshot,
)

TODAY = date(2026, 3, 15)


@pytest.fixture
def raw_snapshot():
    return {
        "cadets": [
            {"id": "c1", "behavior_score": 1, "age": 15, "academic_status": "not_started",
             "enrollment_date": (TODAY - timedelta(days=10)).isoformat()},
            {"id": "c2", "behavior_score": 2, "academic_status": "in_progress"},
            {"id": "c3", "behavior_score": 4, "academic_status": "completed"},
            {"id": "c4", "behavior_score": 5, "status": "graduated"},
            {"id": "bad", "behavior_score": 7},
        ],
        "staff": [
            {"id": "s1", "experience_years": 4},
            {"id": "s2", "experience_years": 1},
        ],
        "schedule": pd.DataFrame([
            {"id": f"e{n}", "staff_id": "s1", "date": "2026-03-10",
             "start_time": "06:00", "end_time": "08:00", "task_type": "supervision"}
            for n in range(20)
        ]),
        "inventory": [
            {"id": "soap", "quantity": 5, "threshold": 10, "usage_rate": 1},
            {"id": "rice", "quantity": 40, "threshold": 10, "usage_rate": 4},
            {"id": "pens", "quantity": 400, "threshold": 10},
        ],
    }


def test_run_analytics(raw_snapshot):
    report = run_analytics(raw_snapshot, today=TODAY)

    # Graduated cadet c4 is not part of the active population
    assert [a.individual_id for a in report.risk_assessments] == ["c1", "c2", "c3"]
    assert isinstance(report.risk_assessments[0], ApplicableRisk)
    assert report.risk_assessments[0].score == 100
    assert isinstance(report.risk_assessments[2], NotApplicableRisk)

    assert [i.type for i in report.insights] == [
        InsightType.PEER_PAIRING,
        InsightType.ACADEMIC_INTERVENTION,
    ]
    assert report.high_risk_alert.individual_ids == ["c1", "c2"]

    buckets = {f.item_id: f for f in report.forecasts}
    assert buckets["soap"].forecast_bucket == ForecastBucket.IMMEDIATE
    assert buckets["rice"].forecast_bucket == ForecastBucket.SOON
    assert isinstance(buckets["pens"], InsufficientData)
    assert [f.item_id for f in report.restock_plan] == ["soap", "rice"]

    workload = {w.staff_id: w for w in report.workload}
    assert workload["s1"].utilization_percent == 100.0
    assert workload["s2"].utilization_percent == 0.0
    assert [b.staff_id for b in report.burnout_risk] == ["s1"]

    assert report.coverage.high_risk_count == 2
    assert report.coverage.experienced_staff_count == 1
    assert not report.coverage.coverage_adequate
    assert report.coverage.average_utilization == 50.0
    assert 6 not in {g.hour for g in report.coverage.supervision_gaps}

    assert [(e.kind, e.record_id) for e in report.errors] == [
        (ErrorKind.INVALID_INPUT, "bad"),
        (ErrorKind.INSUFFICIENT_DATA, "pens"),
    ]


def test_run_analytics_is_idempotent(raw_snapshot):
    assert run_analytics(raw_snapshot, today=TODAY) == run_analytics(raw_snapshot, today=TODAY)


def test_empty_snapshot_reports_empty_population():
    report = analyze_snapshot(Snapshot(taken_at=TODAY))

    assert report.risk_assessments == []
    assert report.insights == []
    assert report.high_risk_alert is None
    assert report.coverage.staff_to_individual_ratio == 0.0
    assert report.coverage.average_utilization == 0.0
    assert {(e.kind, e.record_type) for e in report.errors} == {
        (ErrorKind.EMPTY_POPULATION, "cadet"),
        (ErrorKind.EMPTY_POPULATION, "staff"),
    }


def test_report_serializes_with_camel_case(raw_snapshot):
    dumped = run_analytics(raw_snapshot, today=TODAY).model_dump(by_alias=True, mode="json")

    assert dumped["takenAt"] == "2026-03-15"
    assert dumped["riskAssessments"][0] == {
        "kind": "applicable",
        "individualId": "c1",
        "score": 100,
        "riskLevel": "high",
        "behaviorTrend": "concerning",
        "color": "error",
    }
    assert dumped["coverage"]["staffToIndividualRatio"] == 0.67
    assert dumped["workload"][0]["balanceLabel"] == "reduce_load"


def test_unforecastable_items_are_reported_as_insufficient_data(caplog):
    """An item with no usage signal is kept in forecasts and also listed in errors."""
    snapshot = Snapshot(
        taken_at=TODAY,
        inventory=(
            InventoryItem(id="pens", quantity=400, threshold=10),
            InventoryItem(id="rice", quantity=40, threshold=10, usage_rate=4),
        ),
    )
    with caplog.at_level(logging.WARNING, logger="cadet_analytics.engine"):
        report = analyze_snapshot(snapshot)

    insufficient = [e for e in report.errors if e.kind == ErrorKind.INSUFFICIENT_DATA]
    assert [(e.record_type, e.record_id) for e in insufficient] == [("inventory", "pens")]
    assert insufficient[0].message == "no usage rate recorded"
    assert "pens" in caplog.text
    assert isinstance(report.forecasts[0], InsufficientData)


def test_report_summary(raw_snapshot):
    report = run_analytics(raw_snapshot, today=TODAY)

    assert report.summary == {
        "totalCadets": 3,
        "hisetCompletionRate": 25,
        "highRiskCadets": 2,
        "lowStockItems": 1,
        "totalStaff": 2,
        "totalShifts": 20,
    }
    assert report.behavior_distribution == {1: 1, 2: 1, 3: 0, 4: 1, 5: 0}

    buckets = {f.item_id: f for f in report.forecasts}
    assert buckets["rice"].projected_quantity == 0.0

    dumped = report.model_dump(by_alias=True, mode="json")
    assert dumped["summary"]["hisetCompletionRate"] == 25
    assert dumped["behaviorDistribution"]["1"] == 1
