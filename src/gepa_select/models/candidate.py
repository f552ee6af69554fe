"""Prompt candidate model for multi-objective selection."""

import math
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

BOUNDARY_DISTANCE = math.inf


class Candidate(BaseModel):
    """Prompt variant scored along several objectives.

    ``normalized_objectives`` are in [0, 1] with minimization objectives
    already inverted, so higher is always better. ``pareto_rank`` starts at 1
    for the non-dominated front. ``crowding_distance`` is ``BOUNDARY_DISTANCE``
    for boundary solutions of their front.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    prompt: Optional[str] = Field(default=None, description="Prompt text")
    generation: int = Field(default=0, ge=0, description="Generation number")
    fitness: Optional[float] = None
    objectives: Optional[Dict[str, float]] = None
    normalized_objectives: Optional[Dict[str, float]] = None
    pareto_rank: Optional[int] = Field(default=None, ge=1)
    crowding_distance: Optional[float] = Field(default=None, ge=0.0)
    parent_ids: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("normalized_objectives")
    @classmethod
    def _check_normalized_range(
        cls, value: Optional[Dict[str, float]]
    ) -> Optional[Dict[str, float]]:
        if value is None:
            return value
        for name, score in value.items():
            if math.isnan(score) or score < 0.0 or score > 1.0:
                raise ValueError(
                    f"normalized objective '{name}' must be in [0, 1], got {score}"
                )
        return value

    @model_validator(mode="after")
    def _distance_requires_rank(self) -> "Candidate":
        if self.crowding_distance is not None and self.pareto_rank is None:
            raise ValueError("crowding_distance is only meaningful with a pareto_rank")
        return self

    @property
    def has_objectives(self) -> bool:
        return self.normalized_objectives is not None

    @property
    def has_selection_metrics(self) -> bool:
        return self.pareto_rank is not None and self.crowding_distance is not None

    @property
    def is_boundary(self) -> bool:
        return self.crowding_distance is not None and math.isinf(self.crowding_distance)

    def objective_names(self) -> List[str]:
        return list(self.normalized_objectives or {})

    def objective(self, name: str) -> float:
        """Normalized value for ``name``; absent axes count as 0.0."""
        return (self.normalized_objectives or {}).get(name, 0.0)

    def with_updates(self, **fields: Any) -> "Candidate":
        """Return a validated copy with ``fields`` replaced."""
        data = self.model_dump()
        data.update(fields)
        return Candidate.model_validate(data)

    def __str__(self) -> str:
        objectives = ", ".join(
            f"{name}={score:.3f}"
            for name, score in sorted((self.normalized_objectives or {}).items())
        )
        return (
            f"Candidate({self.id}, gen={self.generation}, rank={self.pareto_rank}, "
            f"dist={format_distance(self.crowding_distance)}, {objectives})"
        )


def distance_sort_key(distance: Optional[float]) -> Tuple[int, float]:
    """Sort key placing boundary first, then larger finite distances, then missing."""
    if distance is None:
        return (2, 0.0)
    if math.isinf(distance):
        return (0, 0.0)
    return (1, -distance)


def selection_sort_key(candidate: Candidate) -> Tuple[float, Tuple[int, float]]:
    """Order by rank ascending, then crowding distance descending."""
    rank = candidate.pareto_rank if candidate.pareto_rank is not None else math.inf
    return (rank, distance_sort_key(candidate.crowding_distance))


def format_distance(distance: Optional[float]) -> str:
    if distance is None:
        return "-"
    if math.isinf(distance):
        return "inf"
    return f"{distance:.4f}"
