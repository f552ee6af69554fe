"""Shared precondition checks for selection operations."""

from typing import Any, List, Optional, Type, TypeVar, Union

from loguru import logger
from pydantic import BaseModel, ValidationError

from ..models import Candidate, ErrorCode, SelectionError

OptionsT = TypeVar("OptionsT", bound=BaseModel)


def resolve_options(
    model: Type[OptionsT], operation: str, **opts: Any
) -> Union[OptionsT, SelectionError]:
    """Validate keyword options into ``model``; the single defaulting step of an operation."""
    supplied = {key: value for key, value in opts.items() if value is not None}
    missing = [
        name
        for name, field in model.model_fields.items()
        if field.is_required() and name not in supplied
    ]
    if missing:
        logger.warning(f"{operation}: missing required option '{missing[0]}'")
        return SelectionError(
            code=ErrorCode.MISSING_REQUIRED_OPTION,
            message=f"Option '{missing[0]}' is required",
            details={"option": missing[0]},
        )
    try:
        return model(**supplied)
    except ValidationError as e:
        first = e.errors()[0]
        option = ".".join(str(part) for part in first["loc"]) or "options"
        logger.warning(f"{operation}: invalid option '{option}': {first['msg']}")
        return SelectionError(
            code=_error_code_for(first),
            message=f"Invalid option '{option}': {first['msg']}",
            details={"option": option, "value": first.get("input")},
        )


def check_ranks(population: List[Candidate]) -> Optional[SelectionError]:
    missing = next((c for c in population if c.pareto_rank is None), None)
    if missing is None:
        return None
    return SelectionError(
        code=ErrorCode.MISSING_PARETO_RANK,
        message="Candidate has no pareto_rank",
        candidate_id=missing.id,
    )


def check_distances(population: List[Candidate]) -> Optional[SelectionError]:
    missing = next((c for c in population if c.crowding_distance is None), None)
    if missing is None:
        return None
    return SelectionError(
        code=ErrorCode.MISSING_CROWDING_DISTANCE,
        message="Candidate has no crowding_distance",
        candidate_id=missing.id,
    )


def check_selection_metrics(population: List[Candidate]) -> Optional[SelectionError]:
    return check_ranks(population) or check_distances(population)


def check_count(count: int, population_size: int) -> Optional[SelectionError]:
    if count < 1:
        return SelectionError(
            code=ErrorCode.INVALID_COUNT,
            message="count must be >= 1",
            details={"count": count},
        )
    if count > population_size:
        return SelectionError(
            code=ErrorCode.COUNT_EXCEEDS_POPULATION,
            message=f"count {count} exceeds population size {population_size}",
            details={"count": count, "population_size": population_size},
        )
    return None


def check_target_size(target_size: int, population_size: int) -> Optional[SelectionError]:
    if target_size < 1:
        return SelectionError(
            code=ErrorCode.INVALID_TARGET_SIZE,
            message="target_size must be >= 1",
            details={"target_size": target_size},
        )
    if target_size > population_size:
        return SelectionError(
            code=ErrorCode.TARGET_EXCEEDS_POPULATION,
            message=f"target_size {target_size} exceeds population size {population_size}",
            details={"target_size": target_size, "population_size": population_size},
        )
    return None


def _error_code_for(error: Any) -> ErrorCode:
    if error["loc"] and error["loc"][0] == "strategy":
        return ErrorCode.INVALID_STRATEGY
    return ErrorCode.INVALID_OPTION
