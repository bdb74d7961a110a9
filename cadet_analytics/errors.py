"""Error kinds reported alongside analytics results."""

from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    INSUFFICIENT_DATA = "insufficient_data"
    EMPTY_POPULATION = "empty_population"


class InvalidRecordError(ValueError):
    """A source record is missing a required field or holds an out-of-range value."""

    def __init__(self, record_type: str, message: str, record_id: Optional[str] = None):
        super().__init__(f"{record_type} {record_id or '<no id>'}: {message}")
        self.record_type = record_type
        self.record_id = record_id
        self.message = message

    @classmethod
    def from_validation(
        cls, record_type: str, exc: ValidationError, record_id: Optional[str] = None
    ) -> "InvalidRecordError":
        """Collapse a pydantic ValidationError into a single readable message."""
        parts = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
        return cls(record_type, "; ".join(parts), record_id)


class RecordError(BaseModel):
    """One skipped or unscored record, returned to the caller instead of raised."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    kind: ErrorKind
    record_type: str
    message: str
    record_id: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: InvalidRecordError) -> "RecordError":
        return cls(
            kind=ErrorKind.INVALID_INPUT,
            record_type=exc.record_type,
            record_id=exc.record_id,
            message=exc.message,
        )


class BatchResult(BaseModel, Generic[T]):
    """Partial-success output: whatever could be computed plus what could not."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    results: List[T] = Field(default_factory=list)
    errors: List[RecordError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
