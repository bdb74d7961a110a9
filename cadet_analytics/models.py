"""Data models for the cadet analytics engine."""

from datetime import date, time
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    """Base for every record: immutable, camelCase on the wire."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class AcademicStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class CadetStatus(str, Enum):
    ACTIVE = "active"
    GRADUATED = "graduated"
    WITHDRAWN = "withdrawn"


class InsightType(str, Enum):
    PEER_PAIRING = "peer_pairing"
    ACADEMIC_INTERVENTION = "academic_intervention"
    HIGH_RISK_ALERT = "high_risk_alert"


class ForecastBucket(str, Enum):
    IMMEDIATE = "immediate"
    SOON = "soon"
    STABLE = "stable"


class BalanceLabel(str, Enum):
    REDUCE_LOAD = "reduce_load"
    WELL_BALANCED = "well_balanced"
    CAN_TAKE_MORE = "can_take_more"


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class BehaviorTrend(str, Enum):
    POSITIVE = "positive"
    STABLE = "stable"
    CONCERNING = "concerning"


class BurnoutLevel(str, Enum):
    HIGH = "high"
    CRITICAL = "critical"


# Display colours used by the dashboard; one entry per member.
FORECAST_COLORS: Dict[ForecastBucket, str] = {
    ForecastBucket.IMMEDIATE: "error",
    ForecastBucket.SOON: "warning",
    ForecastBucket.STABLE: "success",
}

RISK_LEVEL_COLORS: Dict[RiskLevel, str] = {
    RiskLevel.LOW: "success",
    RiskLevel.MODERATE: "warning",
    RiskLevel.HIGH: "error",
}

BALANCE_COLORS: Dict[BalanceLabel, str] = {
    BalanceLabel.REDUCE_LOAD: "error",
    BalanceLabel.WELL_BALANCED: "success",
    BalanceLabel.CAN_TAKE_MORE: "info",
}

for _table, _enum in ((FORECAST_COLORS, ForecastBucket), (RISK_LEVEL_COLORS, RiskLevel),
                      (BALANCE_COLORS, BalanceLabel)):
    _missing = set(_enum) - set(_table)
    if _missing:
        raise RuntimeError(f"No colour defined for {sorted(m.value for m in _missing)}")


# Source records

class Individual(Record):
    """A cadet enrolled in the program."""
    id: str
    behavior_score: int = Field(ge=1, le=5)
    name: Optional[str] = None
    academic_status: AcademicStatus = AcademicStatus.NOT_STARTED
    age: Optional[int] = Field(default=None, ge=0)
    enrollment_date: Optional[date] = None
    status: CadetStatus = CadetStatus.ACTIVE


class ScheduleEntry(Record):
    staff_id: str
    shift_date: date
    start_time: time
    end_time: time
    task_type: str = "general"
    entry_id: Optional[str] = None


class StaffMember(Record):
    id: str
    experience_years: float = Field(default=0.0, ge=0)
    role: str = "staff"
    name: Optional[str] = None
    schedule_entry_ids: Tuple[str, ...] = ()


class InventoryItem(Record):
    """
    A stock item.

    usage_rate is units/day, already adjusted for seasonality upstream.
    None means there is no usage signal at all.
    """
    id: str
    quantity: float = Field(ge=0)
    threshold: float = Field(default=0.0, ge=0)
    name: Optional[str] = None
    usage_rate: Optional[float] = Field(default=None, ge=0)
    usage_history: Tuple[float, ...] = ()
    confidence_score: Optional[float] = None


class Snapshot(Record):
    """Point-in-time collections every analytic of one pass reads."""
    taken_at: date
    cadets: Tuple[Individual, ...] = ()
    staff: Tuple[StaffMember, ...] = ()
    schedule: Tuple[ScheduleEntry, ...] = ()
    inventory: Tuple[InventoryItem, ...] = ()

    def active_cadets(self) -> List[Individual]:
        return [c for c in self.cadets if c.status == CadetStatus.ACTIVE]


# Derived records

class ApplicableRisk(Record):
    kind: Literal["applicable"] = "applicable"
    individual_id: str
    score: int = Field(ge=0, le=100)
    risk_level: RiskLevel
    behavior_trend: BehaviorTrend
    color: str


class NotApplicableRisk(Record):
    kind: Literal["not_applicable"] = "not_applicable"
    individual_id: str
    reason: str


RiskAssessment = Annotated[Union[ApplicableRisk, NotApplicableRisk], Field(discriminator="kind")]


class Insight(Record):
    type: InsightType
    title: str
    description: str
    rationale: str
    counts: Dict[str, int] = Field(default_factory=dict)


class HighRiskAlert(Record):
    """High-risk cadets, trimmed to the display limit."""
    individual_ids: List[str]
    total: int
    more_count: int = 0

    @property
    def more_label(self) -> Optional[str]:
        return f"+{self.more_count} more" if self.more_count else None

    def to_insight(self) -> Insight:
        shown = ", ".join(self.individual_ids)
        if self.more_label:
            shown = f"{shown} {self.more_label}"
        return Insight(
            type=InsightType.HIGH_RISK_ALERT,
            title="High-Risk Cadets",
            description=f"{self.total} active cadet(s) need immediate attention: {shown}",
            rationale="Behavior score of 2 or lower",
            counts={"highRisk": self.total},
        )


class ForecastResult(Record):
    kind: Literal["forecast"] = "forecast"
    item_id: str
    # None means the item is not being consumed: stable, never a number
    days_until_empty: Optional[float] = None
    forecast_bucket: ForecastBucket
    confidence_score: int = Field(ge=0, le=100)
    stock_level_percent: float = Field(ge=0, le=100)
    # Stock left after 30 more days at the current rate; None without a usage rate
    projected_quantity: Optional[float] = None
    color: str
    recommendations: List[str] = Field(default_factory=list)


class InsufficientData(Record):
    kind: Literal["insufficient_data"] = "insufficient_data"
    item_id: str
    reason: str


Forecast = Annotated[Union[ForecastResult, InsufficientData], Field(discriminator="kind")]


class WorkloadRecord(Record):
    staff_id: str
    weekly_hours: float
    utilization_percent: float = Field(ge=0, le=100)
    shift_count: int
    balance_label: BalanceLabel
    color: str


class BurnoutRisk(Record):
    staff_id: str
    level: BurnoutLevel
    weekly_hours: float
    utilization_percent: float
    recommendations: List[str]


class SupervisionGap(Record):
    hour: int
    severity: Literal["high", "medium"]
    staff_needed: int


class CoverageReport(Record):
    high_risk_count: int
    experienced_staff_count: int
    staff_count: int
    individual_count: int
    staff_to_individual_ratio: float
    coverage_adequate: bool
    average_utilization: float
    utilization_advisory: bool
    recommendations: List[str] = Field(default_factory=list)
    supervision_gaps: List[SupervisionGap] = Field(default_factory=list)


class InterventionPlan(Record):
    risk_level: RiskLevel
    immediate_actions: List[str]
    short_term_strategies: List[str]
    timeframe: str
