"""Unit tests for record normalization."""

from datetime import date, time

import numpy as np
import pandas as pd
import pytest

from cadet_analytics.errors import ErrorKind, InvalidRecordError
from cadet_analytics.models import AcademicStatus, CadetStatus
from cadet_analytics.normalizer import (
    normalize_cadets,
    normalize_individual,
    normalize_inventory,
    normalize_inventory_item,
    normalize_key,
    normalize_schedule,
    normalize_schedule_entry,
    normalize_snapshot,
    normalize_staff_member,
)


def test_normalize_key():
    """Column spellings collapse to one key."""
    assert normalize_key("behaviorScore") == "behaviorscore"
    assert normalize_key("behavior_score") == "behaviorscore"
    assert normalize_key(" Behavior Score ") == "behaviorscore"
    assert normalize_key(None) == ""


def test_individual_defaults():
    cadet = normalize_individual({"id": 7, "behavior_score": "2"})
    assert cadet.id == "7"
    assert cadet.behavior_score == 2
    assert cadet.academic_status == AcademicStatus.NOT_STARTED
    assert cadet.status == CadetStatus.ACTIVE
    assert cadet.age is None
    assert cadet.enrollment_date is None


def test_individual_aliases_and_enums():
    cadet = normalize_individual({
        "cadetId": "c-1",
        "behaviorScore": 3,
        "hiset_status": "Not Started",
        "status": "Graduated",
        "age": 16.0,
        "enrollmentDate": "2026-01-05",
    })
    assert cadet.id == "c-1"
    assert cadet.academic_status == AcademicStatus.NOT_STARTED
    assert cadet.status == CadetStatus.GRADUATED
    assert cadet.age == 16
    assert cadet.enrollment_date == date(2026, 1, 5)

    assert normalize_individual({"id": 1, "behavior_score": 1, "academicStatus": "InProgress"}).academic_status \
        == AcademicStatus.IN_PROGRESS


@pytest.mark.parametrize("row, message", [
    ({"behavior_score": 3}, "id is required"),
    ({"id": "c"}, "behavior_score is required"),
    ({"id": "c", "behavior_score": 0}, "outside 1-5"),
    ({"id": "c", "behavior_score": 6}, "outside 1-5"),
    ({"id": "c", "behavior_score": 2.5}, "must be an integer"),
    ({"id": "c", "behavior_score": 2, "age": -1}, "age"),
    ({"id": "c", "behavior_score": 2, "academic_status": "dropped"}, "not one of"),
    ({"id": "c", "behavior_score": 2, "enrollment_date": "not a date"}, "not a date"),
])
def test_invalid_individual(row, message):
    with pytest.raises(InvalidRecordError) as exc_info:
        normalize_individual(row)
    assert message in str(exc_info.value)


def test_batch_skips_and_reports():
    """Bad rows are reported; good rows still come through."""
    result = normalize_cadets([
        {"id": "a", "behavior_score": 2},
        {"id": "b", "behavior_score": 9},
        {"id": "a", "behavior_score": 4},
        {"name": "no id", "behavior_score": 3},
    ])
    assert [c.id for c in result.results] == ["a"]
    assert len(result.errors) == 3
    assert all(e.kind == ErrorKind.INVALID_INPUT for e in result.errors)
    assert result.errors[0].record_id == "b"
    assert result.errors[1].message == "duplicate id"
    assert not result.ok


def test_dataframe_input_with_missing_values():
    """NaN cells count as missing, and float ids from spreadsheets are cleaned."""
    df = pd.DataFrame({
        "Cadet ID": [1.0, 2.0, 3.0],
        "Behavior Score": [1, 3, np.nan],
        "Age": [15, np.nan, 17],
    })
    result = normalize_cadets(df)

    assert [c.id for c in result.results] == ["1", "2"]
    assert result.results[1].age is None
    assert result.errors[0].record_id == "3"


def test_staff_member():
    member = normalize_staff_member({"staffId": "s-1", "experience": "3.5", "assignments": "e1; e2"})
    assert member.experience_years == 3.5
    assert member.schedule_entry_ids == ("e1", "e2")
    assert member.role == "staff"

    with pytest.raises(InvalidRecordError):
        normalize_staff_member({"id": "s-2", "experience_years": -1})


def test_schedule_entry():
    entry = normalize_schedule_entry({
        "id": "e1", "staffId": "s-1", "date": "2026-03-02",
        "startTime": "08:00", "endTime": "10:30", "category": "Supervision",
    })
    assert entry.shift_date == date(2026, 3, 2)
    assert entry.start_time == time(8, 0)
    assert entry.end_time == time(10, 30)
    assert entry.task_type == "supervision"


def test_schedule_entry_errors():
    result = normalize_schedule([
        {"id": "e1", "staff_id": "s", "date": "2026-03-02", "start_time": "10:00", "end_time": "08:00"},
        {"id": "e2", "date": "2026-03-02", "start_time": "08:00", "end_time": "09:00"},
    ])
    assert result.results == []
    assert "before start_time" in result.errors[0].message
    assert result.errors[1].message == "staff_id is required"


def test_inventory_item():
    item = normalize_inventory_item({
        "sku": "tp", "qty": "12", "reorder point": 4,
        "adjustedUsageRate": 1.5, "usage_history": "1;2;1.5",
    })
    assert item.quantity == 12.0
    assert item.threshold == 4.0
    assert item.usage_rate == 1.5
    assert item.usage_history == (1.0, 2.0, 1.5)

    bare = normalize_inventory_item({"id": "x", "quantity": 3})
    assert bare.usage_rate is None
    assert bare.threshold == 0.0


def test_inventory_errors():
    result = normalize_inventory([
        {"id": "a", "quantity": -1},
        {"id": "b"},
        {"id": "c", "quantity": 1, "usage_rate": -2},
        {"id": "d", "quantity": 1, "usage_history": [1, -1]},
    ])
    assert result.results == []
    assert [e.record_id for e in result.errors] == ["a", "b", "c", "d"]


def test_normalize_snapshot():
    snapshot, errors = normalize_snapshot(
        {
            "cadets": [{"id": "a", "behavior_score": 2}, {"id": "b"}],
            "staff": pd.DataFrame({"id": ["s1"], "experience_years": [4]}),
        },
        taken_at=date(2026, 3, 15),
    )
    assert snapshot.taken_at == date(2026, 3, 15)
    assert len(snapshot.cadets) == 1
    assert len(snapshot.staff) == 1
    assert snapshot.schedule == ()
    assert snapshot.inventory == ()
    assert [e.record_id for e in errors] == ["b"]
