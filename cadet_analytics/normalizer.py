"""Validation and defaulting of raw cadet, staff, schedule and inventory records."""

import logging
import re
from datetime import date, datetime, time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar, Union

import pandas as pd
from pydantic import ValidationError

from cadet_analytics.errors import BatchResult, InvalidRecordError, RecordError
from cadet_analytics.models import (
    AcademicStatus,
    CadetStatus,
    Individual,
    InventoryItem,
    ScheduleEntry,
    Snapshot,
    StaffMember,
)

logger = logging.getLogger(__name__)

RawRows = Union[pd.DataFrame, Iterable[Mapping[str, Any]], None]
E = TypeVar("E")

# Target field -> accepted column names (compared after normalize_key)
CADET_FIELDS = {
    "id": ["id", "cadet id", "cadetid", "individual id"],
    "name": ["name", "cadet name", "full name"],
    "behavior_score": ["behavior score", "behaviour score", "behavior"],
    "academic_status": ["academic status", "hiset status", "hiset"],
    "age": ["age"],
    "enrollment_date": ["enrollment date", "enrolled on", "enrolled at", "start date"],
    "status": ["status", "enrollment status"],
}

STAFF_FIELDS = {
    "id": ["id", "staff id", "staffid"],
    "name": ["name", "staff name"],
    "experience_years": ["experience years", "years experience", "experience"],
    "role": ["role", "position", "title"],
    "schedule_entry_ids": ["schedule entry ids", "schedule ids", "assignments"],
}

SCHEDULE_FIELDS = {
    "entry_id": ["entry id", "id", "schedule id"],
    "staff_id": ["staff id", "staff", "assigned to"],
    "shift_date": ["shift date", "date", "day"],
    "start_time": ["start time", "start"],
    "end_time": ["end time", "end"],
    "task_type": ["task type", "category", "task"],
}

INVENTORY_FIELDS = {
    "id": ["id", "item id", "itemid", "sku"],
    "name": ["name", "item name"],
    "quantity": ["quantity", "qty", "on hand", "stock"],
    "threshold": ["threshold", "reorder point", "minimum"],
    "usage_rate": ["usage rate", "adjusted usage rate", "daily usage"],
    "usage_history": ["usage history", "history"],
    "confidence_score": ["confidence score", "confidence"],
}


def normalize_key(name: Any) -> str:
    """Normalize a column name for matching: lowercase, no separators, camelCase split."""
    if name is None:
        return ""
    text = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", str(name).strip())
    return re.sub(r"[\s_\-.#%]+", "", text.lower())


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def pick_fields(row: Mapping[str, Any], aliases: Dict[str, List[str]]) -> Dict[str, Any]:
    """Map a raw row onto target field names, dropping missing values."""
    by_key = {normalize_key(k): v for k, v in row.items()}
    picked = {}
    for target, names in aliases.items():
        for candidate in [target] + names:
            value = by_key.get(normalize_key(candidate))
            if not is_missing(value):
                picked[target] = value
                break
    return picked


def to_int(value: Any, field: str, record_type: str, record_id: Optional[str]) -> int:
    if isinstance(value, bool):
        raise InvalidRecordError(record_type, f"{field} must be an integer, got {value!r}", record_id)
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise InvalidRecordError(record_type, f"{field} must be an integer, got {value!r}", record_id)
    if not number.is_integer():
        raise InvalidRecordError(record_type, f"{field} must be an integer, got {value!r}", record_id)
    return int(number)


def to_float(value: Any, field: str, record_type: str, record_id: Optional[str]) -> float:
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise InvalidRecordError(record_type, f"{field} must be a number, got {value!r}", record_id)
    if pd.isna(number):
        raise InvalidRecordError(record_type, f"{field} must be a number, got {value!r}", record_id)
    return number


def to_date(value: Any, field: str, record_type: str, record_id: Optional[str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return pd.Timestamp(value).date()
    except (TypeError, ValueError):
        raise InvalidRecordError(record_type, f"{field} is not a date: {value!r}", record_id)


def to_time(value: Any, field: str, record_type: str, record_id: Optional[str]) -> time:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    try:
        return pd.Timestamp(str(value).strip()).time()
    except (TypeError, ValueError):
        raise InvalidRecordError(record_type, f"{field} is not a time: {value!r}", record_id)


def to_enum(enum_cls: Type[E], value: Any, field: str, record_type: str, record_id: Optional[str]) -> E:
    """Parse 'Not Started', 'NotStarted', 'not-started' and 'not_started' alike."""
    if isinstance(value, enum_cls):
        return value
    text = re.sub(r"(?<=[a-z])(?=[A-Z])", "_", str(value).strip())
    text = re.sub(r"[\s\-]+", "_", text.lower())
    try:
        return enum_cls(text)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidRecordError(
            record_type, f"{field} {value!r} is not one of: {allowed}", record_id
        )


def to_number_list(value: Any, field: str, record_type: str, record_id: Optional[str]) -> Tuple[float, ...]:
    if isinstance(value, str):
        parts = [p for p in re.split(r"[;,\s]+", value) if p.strip()]
    else:
        parts = list(value)
    numbers = tuple(to_float(p, field, record_type, record_id) for p in parts)
    if any(n < 0 for n in numbers):
        raise InvalidRecordError(record_type, f"{field} contains negative usage", record_id)
    return numbers


def clean_id(value: Any) -> Optional[str]:
    if is_missing(value):
        return None
    # 12.0 from a spreadsheet column should match "12"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def build_record(model: type, record_type: str, fields: Dict[str, Any], record_id: Optional[str]):
    try:
        return model(**fields)
    except ValidationError as e:
        raise InvalidRecordError.from_validation(record_type, e, record_id) from e


def normalize_individual(row: Mapping[str, Any]) -> Individual:
    """
    Validate one raw cadet row.

    Missing academic status defaults to not_started and missing status to
    active. Age and enrollment date stay None when absent.

    Raises:
        InvalidRecordError: missing id or behavior score, or values out of range
    """
    fields = pick_fields(row, CADET_FIELDS)
    record_id = clean_id(fields.get("id"))
    if record_id is None:
        raise InvalidRecordError("cadet", "id is required")
    if "behavior_score" not in fields:
        raise InvalidRecordError("cadet", "behavior_score is required", record_id)

    behavior = to_int(fields["behavior_score"], "behavior_score", "cadet", record_id)
    if not 1 <= behavior <= 5:
        raise InvalidRecordError("cadet", f"behavior_score {behavior} outside 1-5", record_id)

    data: Dict[str, Any] = {"id": record_id, "behavior_score": behavior}
    if "name" in fields:
        data["name"] = str(fields["name"]).strip()
    if "academic_status" in fields:
        data["academic_status"] = to_enum(AcademicStatus, fields["academic_status"], "academic_status", "cadet", record_id)
    if "status" in fields:
        data["status"] = to_enum(CadetStatus, fields["status"], "status", "cadet", record_id)
    if "age" in fields:
        data["age"] = to_int(fields["age"], "age", "cadet", record_id)
    if "enrollment_date" in fields:
        data["enrollment_date"] = to_date(fields["enrollment_date"], "enrollment_date", "cadet", record_id)
    return build_record(Individual, "cadet", data, record_id)


def normalize_staff_member(row: Mapping[str, Any]) -> StaffMember:
    fields = pick_fields(row, STAFF_FIELDS)
    record_id = clean_id(fields.get("id"))
    if record_id is None:
        raise InvalidRecordError("staff", "id is required")

    data: Dict[str, Any] = {"id": record_id}
    if "name" in fields:
        data["name"] = str(fields["name"]).strip()
    if "role" in fields:
        data["role"] = str(fields["role"]).strip()
    if "experience_years" in fields:
        data["experience_years"] = to_float(fields["experience_years"], "experience_years", "staff", record_id)
    if "schedule_entry_ids" in fields:
        raw_ids = fields["schedule_entry_ids"]
        if isinstance(raw_ids, str):
            raw_ids = re.split(r"[;,]", raw_ids)
        data["schedule_entry_ids"] = tuple(i for i in (clean_id(v) for v in raw_ids) if i)
    return build_record(StaffMember, "staff", data, record_id)


def normalize_schedule_entry(row: Mapping[str, Any]) -> ScheduleEntry:
    fields = pick_fields(row, SCHEDULE_FIELDS)
    record_id = clean_id(fields.get("entry_id"))
    for required in ("staff_id", "shift_date", "start_time", "end_time"):
        if required not in fields:
            raise InvalidRecordError("schedule", f"{required} is required", record_id)

    start = to_time(fields["start_time"], "start_time", "schedule", record_id)
    end = to_time(fields["end_time"], "end_time", "schedule", record_id)
    if end < start:
        raise InvalidRecordError("schedule", f"end_time {end} is before start_time {start}", record_id)

    data = {
        "entry_id": record_id,
        "staff_id": clean_id(fields["staff_id"]),
        "shift_date": to_date(fields["shift_date"], "shift_date", "schedule", record_id),
        "start_time": start,
        "end_time": end,
    }
    if "task_type" in fields:
        data["task_type"] = str(fields["task_type"]).strip().lower()
    return build_record(ScheduleEntry, "schedule", data, record_id)


def normalize_inventory_item(row: Mapping[str, Any]) -> InventoryItem:
    """
    Validate one raw stock row.

    A missing usage rate is kept as None so the forecaster can report
    insufficient data instead of treating the item as unused.
    """
    fields = pick_fields(row, INVENTORY_FIELDS)
    record_id = clean_id(fields.get("id"))
    if record_id is None:
        raise InvalidRecordError("inventory", "id is required")
    if "quantity" not in fields:
        raise InvalidRecordError("inventory", "quantity is required", record_id)

    data: Dict[str, Any] = {
        "id": record_id,
        "quantity": to_float(fields["quantity"], "quantity", "inventory", record_id),
    }
    if "name" in fields:
        data["name"] = str(fields["name"]).strip()
    for numeric in ("threshold", "usage_rate", "confidence_score"):
        if numeric in fields:
            data[numeric] = to_float(fields[numeric], numeric, "inventory", record_id)
    if "usage_history" in fields:
        data["usage_history"] = to_number_list(fields["usage_history"], "usage_history", "inventory", record_id)
    return build_record(InventoryItem, "inventory", data, record_id)


def iter_rows(source: RawRows) -> List[Mapping[str, Any]]:
    """Accept a DataFrame or any iterable of mappings."""
    if source is None:
        return []
    if isinstance(source, pd.DataFrame):
        return source.to_dict(orient="records")
    return list(source)


def normalize_batch(
    source: RawRows,
    normalize_row: Callable[[Mapping[str, Any]], Any],
    record_type: str,
    unique_ids: bool = True,
) -> BatchResult:
    """Run normalize_row over every row, collecting failures instead of raising."""
    results = []
    errors: List[RecordError] = []
    seen = set()
    for row in iter_rows(source):
        try:
            record = normalize_row(row)
        except InvalidRecordError as e:
            logger.warning("Skipping %s record %s: %s", e.record_type, e.record_id or "<no id>", e.message)
            errors.append(RecordError.from_exception(e))
            continue

        record_id = getattr(record, "id", None)
        if unique_ids and record_id is not None:
            if record_id in seen:
                logger.warning("Skipping duplicate %s record %s", record_type, record_id)
                errors.append(RecordError.from_exception(
                    InvalidRecordError(record_type, "duplicate id", record_id)
                ))
                continue
            seen.add(record_id)
        results.append(record)
    return BatchResult(results=results, errors=errors)


def normalize_cadets(source: RawRows) -> BatchResult:
    return normalize_batch(source, normalize_individual, "cadet")


def normalize_staff(source: RawRows) -> BatchResult:
    return normalize_batch(source, normalize_staff_member, "staff")


def normalize_schedule(source: RawRows) -> BatchResult:
    return normalize_batch(source, normalize_schedule_entry, "schedule", unique_ids=False)


def normalize_inventory(source: RawRows) -> BatchResult:
    return normalize_batch(source, normalize_inventory_item, "inventory")


def normalize_snapshot(
    raw: Mapping[str, RawRows],
    taken_at: Optional[date] = None,
) -> Tuple[Snapshot, List[RecordError]]:
    """
    Normalize every collection of a raw snapshot in one go.

    Args:
        raw: Mapping with optional 'cadets', 'staff', 'schedule' and 'inventory'
            keys, each a DataFrame or a list of dicts
        taken_at: Date the snapshot was read (defaults to today)

    Returns:
        Tuple of (Snapshot, errors from every collection)
    """
    cadets = normalize_cadets(raw.get("cadets"))
    staff = normalize_staff(raw.get("staff"))
    schedule = normalize_schedule(raw.get("schedule"))
    inventory = normalize_inventory(raw.get("inventory"))

    snapshot = Snapshot(
        taken_at=taken_at or date.today(),
        cadets=tuple(cadets.results),
        staff=tuple(staff.results),
        schedule=tuple(schedule.results),
        inventory=tuple(inventory.results),
    )
    errors = cadets.errors + staff.errors + schedule.errors + inventory.errors
    logger.info(
        "Normalized snapshot: %d cadets, %d staff, %d schedule entries, %d items, %d skipped",
        len(snapshot.cadets), len(snapshot.staff), len(snapshot.schedule),
        len(snapshot.inventory), len(errors),
    )
    return snapshot, errors
