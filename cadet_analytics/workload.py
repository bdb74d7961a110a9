"""Staff workload: utilization against a full workweek and balance labels."""

import logging
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from cadet_analytics.config import AnalyticsSettings
from cadet_analytics.errors import BatchResult, ErrorKind, RecordError
from cadet_analytics.models import (
    BALANCE_COLORS,
    BalanceLabel,
    BurnoutLevel,
    BurnoutRisk,
    ScheduleEntry,
    StaffMember,
    WorkloadRecord,
)

logger = logging.getLogger(__name__)


def balance_label(utilization_percent: float, settings: AnalyticsSettings) -> BalanceLabel:
    """ReduceLoad above 90, CanTakeMore below 30; the boundaries themselves are WellBalanced."""
    if utilization_percent > settings.reduce_load_above:
        return BalanceLabel.REDUCE_LOAD
    if utilization_percent < settings.can_take_more_below:
        return BalanceLabel.CAN_TAKE_MORE
    return BalanceLabel.WELL_BALANCED


def workload_from_shifts(
    staff_id: str,
    shift_count: int,
    settings: Optional[AnalyticsSettings] = None,
) -> WorkloadRecord:
    settings = settings or AnalyticsSettings()
    weekly_hours = shift_count * settings.hours_per_shift
    utilization = min(weekly_hours / settings.full_workweek_hours * 100.0, 100.0)
    utilization = round(utilization, 1)
    label = balance_label(utilization, settings)
    return WorkloadRecord(
        staff_id=staff_id,
        weekly_hours=weekly_hours,
        utilization_percent=utilization,
        shift_count=shift_count,
        balance_label=label,
        color=BALANCE_COLORS[label],
    )


def is_assigned(staff: StaffMember, entry: ScheduleEntry) -> bool:
    """An entry belongs to a staff member by staff_id or by being listed on their record."""
    if entry.staff_id == staff.id:
        return True
    return entry.entry_id is not None and entry.entry_id in staff.schedule_entry_ids


def analyze_staff_workload(
    staff: StaffMember,
    entries: Iterable[ScheduleEntry],
    settings: Optional[AnalyticsSettings] = None,
) -> WorkloadRecord:
    """
    Workload for one staff member from the schedule entries assigned to them.

    Entries for other staff members are ignored.
    """
    shift_count = sum(1 for e in entries if is_assigned(staff, e))
    return workload_from_shifts(staff.id, shift_count, settings)


def assign_entries(staff: List[StaffMember], schedule: Iterable[ScheduleEntry]):
    """
    Pair every schedule entry with the staff members it belongs to.

    Returns:
        Tuple of (entries frame, assignments frame of unique entry/staff_id pairs
        restricted to the roster)
    """
    entries = pd.DataFrame(
        [{"entry": n, "staff_id": e.staff_id, "entry_id": e.entry_id} for n, e in enumerate(schedule)],
        columns=["entry", "staff_id", "entry_id"],
    )
    listed = pd.DataFrame(
        [{"staff_id": m.id, "entry_id": eid} for m in staff for eid in m.schedule_entry_ids],
        columns=["staff_id", "entry_id"],
    )
    # Entries without an id cannot be listed on a staff record
    by_listing = entries.loc[entries["entry_id"].notna(), ["entry", "entry_id"]].merge(listed, on="entry_id")

    assignments = pd.concat(
        [entries[["entry", "staff_id"]], by_listing[["entry", "staff_id"]]],
        ignore_index=True,
    ).drop_duplicates()
    known = {member.id for member in staff}
    assignments = assignments[assignments["staff_id"].isin(known)]
    return entries, assignments


def analyze_workload(
    staff: Iterable[StaffMember],
    schedule: Iterable[ScheduleEntry],
    settings: Optional[AnalyticsSettings] = None,
) -> BatchResult[WorkloadRecord]:
    """
    Workload records for every staff member.

    An entry counts for a staff member when its staff_id matches them or when
    its entry_id is listed in their schedule_entry_ids.

    Args:
        staff: Normalized staff roster
        schedule: Schedule entries for the period being analyzed
        settings: Policy constants (defaults to AnalyticsSettings())

    Returns:
        BatchResult with one WorkloadRecord per staff member (roster order) and
        an invalid_input error for each entry no roster member claims
    """
    settings = settings or AnalyticsSettings()
    staff = list(staff)
    entries, assignments = assign_entries(staff, schedule)
    counts = assignments.groupby("staff_id").size()

    errors = []
    orphans = entries[~entries["entry"].isin(assignments["entry"])]
    for row in orphans.itertuples(index=False):
        logger.warning("Schedule entry %s references unknown staff %s", row.entry_id, row.staff_id)
        errors.append(RecordError(
            kind=ErrorKind.INVALID_INPUT,
            record_type="schedule",
            record_id=row.entry_id,
            message=f"staff_id {row.staff_id} is not on the staff roster",
        ))

    records = [
        workload_from_shifts(member.id, int(counts.get(member.id, 0)), settings)
        for member in staff
    ]
    return BatchResult[WorkloadRecord](results=records, errors=errors)


def identify_burnout_risk(
    records: Iterable[WorkloadRecord],
    settings: Optional[AnalyticsSettings] = None,
) -> List[BurnoutRisk]:
    """Staff over the reduce-load utilization or working overtime hours."""
    settings = settings or AnalyticsSettings()
    at_risk = []
    for record in records:
        over_utilized = record.utilization_percent > settings.reduce_load_above
        overtime = record.weekly_hours > settings.overtime_hours
        if not (over_utilized or overtime):
            continue

        recommendations = []
        if overtime:
            recommendations.append(f"Reduce weekly hours to below {settings.full_workweek_hours:g}")
        if over_utilized:
            recommendations.append("Redistribute high-priority tasks")
        recommendations.append("Schedule mandatory rest periods")

        critical = record.utilization_percent > settings.critical_utilization_above
        at_risk.append(BurnoutRisk(
            staff_id=record.staff_id,
            level=BurnoutLevel.CRITICAL if critical else BurnoutLevel.HIGH,
            weekly_hours=record.weekly_hours,
            utilization_percent=record.utilization_percent,
            recommendations=recommendations,
        ))
    return at_risk


def workload_distribution_score(records: Iterable[WorkloadRecord]) -> float:
    """100 minus the variance of utilization across staff, floored at 0."""
    utilization = np.array([r.utilization_percent for r in records], dtype=float)
    if utilization.size == 0:
        return 100.0
    return round(max(0.0, 100.0 - float(np.var(utilization))), 1)
