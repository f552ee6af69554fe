"""Result envelopes and error taxonomy for selection operations."""

from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Failure reasons reported by selection and population operations."""

    MISSING_REQUIRED_OPTION = "missing_required_option"
    INVALID_OPTION = "invalid_option"
    INVALID_COUNT = "invalid_count"
    COUNT_EXCEEDS_POPULATION = "count_exceeds_population"
    INVALID_TARGET_SIZE = "invalid_target_size"
    TARGET_EXCEEDS_POPULATION = "target_exceeds_population"
    INVALID_TOURNAMENT_SIZE = "invalid_tournament_size"
    INVALID_MIN_TOURNAMENT_SIZE = "invalid_min_tournament_size"
    INVALID_MAX_TOURNAMENT_SIZE = "invalid_max_tournament_size"
    MIN_GREATER_THAN_MAX = "min_greater_than_max"
    INVALID_STRATEGY = "invalid_strategy"
    MISSING_PARETO_RANK = "missing_pareto_rank"
    MISSING_CROWDING_DISTANCE = "missing_crowding_distance"
    MISSING_OBJECTIVES = "missing_objectives"
    EMPTY_POPULATION = "empty_population"
    DUPLICATE_ID = "duplicate_id"
    CANDIDATE_NOT_FOUND = "candidate_not_found"
    POPULATION_FULL = "population_full"
    FILE_NOT_FOUND = "file_not_found"
    INVALID_FORMAT = "invalid_format"
    UNSUPPORTED_VERSION = "unsupported_version"


class SelectionError(BaseModel):
    """Structured failure reason."""

    code: ErrorCode
    message: str
    candidate_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    def __str__(self) -> str:
        if self.candidate_id:
            return f"{self.code.value}: {self.message} (candidate={self.candidate_id})"
        return f"{self.code.value}: {self.message}"


class SelectionFailure(Exception):
    """Raised when a failed result is unwrapped or a comparator contract is broken."""

    def __init__(self, error: SelectionError):
        super().__init__(str(error))
        self.error = error


class MissingObjectivesError(SelectionFailure):
    """Candidate reached the dominance comparator without normalized objectives."""

    def __init__(self, candidate_id: str):
        super().__init__(
            SelectionError(
                code=ErrorCode.MISSING_OBJECTIVES,
                message="Candidate has no normalized_objectives",
                candidate_id=candidate_id,
            )
        )
        self.candidate_id = candidate_id


class Result(BaseModel, Generic[T]):
    """Success/failure envelope returned by every public operation.

    A successful result carries ``value``; a failed one carries ``error``.
    ``skipped`` marks a success where the operation deliberately left the
    input unchanged (adaptive fitness sharing on an already diverse population).
    """

    value: Optional[T] = None
    error: Optional[SelectionError] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise ``SelectionFailure``."""
        if self.error is not None:
            raise SelectionFailure(self.error)
        return self.value  # type: ignore[return-value]

    @classmethod
    def success(cls, value: T, skipped: bool = False) -> "Result[T]":
        return cls(value=value, skipped=skipped)

    @classmethod
    def failure(
        cls,
        code: ErrorCode,
        message: str,
        candidate_id: Optional[str] = None,
        **details: Any,
    ) -> "Result[T]":
        return cls(
            error=SelectionError(
                code=code,
                message=message,
                candidate_id=candidate_id,
                details=details,
            )
        )

    @classmethod
    def from_error(cls, error: SelectionError) -> "Result[T]":
        return cls(error=error)
