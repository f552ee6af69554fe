"""Bounded population of prompt candidates."""

from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from .candidate import Candidate
from .result import ErrorCode, Result

DEFAULT_BEST_LIMIT = 10


class Population(BaseModel):
    """Collection of candidates with capacity and generation tracking.

    Aggregate statistics are computed from the members on access, so they
    never drift from membership or fitness.
    """

    model_config = ConfigDict(frozen=True)

    capacity: int = Field(ge=1, description="Maximum number of candidates")
    generation: int = Field(default=0, ge=0)
    candidates: List[Candidate] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_membership(self) -> "Population":
        if len(self.candidates) > self.capacity:
            raise ValueError(
                f"population holds {len(self.candidates)} candidates, capacity is {self.capacity}"
            )
        seen = set()
        for candidate in self.candidates:
            if candidate.id in seen:
                raise ValueError(f"duplicate candidate id '{candidate.id}'")
            seen.add(candidate.id)
        return self

    @classmethod
    def new(cls, capacity: int, generation: int = 0) -> "Result[Population]":
        """Create an empty population."""
        if capacity < 1:
            return Result.failure(
                ErrorCode.INVALID_OPTION, "capacity must be >= 1", capacity=capacity
            )
        return Result.success(cls(capacity=capacity, generation=generation))

    @computed_field
    @property
    def size(self) -> int:
        return len(self.candidates)

    @computed_field
    @property
    def best_fitness(self) -> float:
        scores = self._fitness_values()
        return max(scores) if scores else 0.0

    @computed_field
    @property
    def avg_fitness(self) -> float:
        scores = self._fitness_values()
        return sum(scores) / len(scores) if scores else 0.0

    @computed_field
    @property
    def diversity(self) -> float:
        """Ratio of unique prompts to population size."""
        if not self.candidates:
            return 1.0
        unique_prompts = {c.prompt if c.prompt is not None else c.id for c in self.candidates}
        return len(unique_prompts) / len(self.candidates)

    def get_all(self) -> List[Candidate]:
        return list(self.candidates)

    def ids(self) -> List[str]:
        return [c.id for c in self.candidates]

    def get_candidate(self, candidate_id: str) -> "Result[Candidate]":
        for candidate in self.candidates:
            if candidate.id == candidate_id:
                return Result.success(candidate)
        return Result.failure(
            ErrorCode.CANDIDATE_NOT_FOUND, "No such candidate", candidate_id=candidate_id
        )

    def get_best(
        self, limit: int = DEFAULT_BEST_LIMIT, min_fitness: Optional[float] = None
    ) -> List[Candidate]:
        """Best evaluated candidates by fitness, highest first."""
        evaluated = self._evaluated()
        if min_fitness is not None:
            evaluated = [c for c in evaluated if c.fitness >= min_fitness]
        return sorted(evaluated, key=_fitness_of, reverse=True)[:limit]

    def add_candidate(self, candidate: Candidate) -> "Result[Population]":
        """Add a candidate; at capacity the worst evaluated member may be replaced."""
        if any(c.id == candidate.id for c in self.candidates):
            return Result.failure(
                ErrorCode.DUPLICATE_ID, "Candidate id already present", candidate_id=candidate.id
            )
        if len(self.candidates) < self.capacity:
            return Result.success(self._with(self.candidates + [candidate]))
        return self._replace_worst(candidate)

    def remove_candidate(self, candidate_id: str) -> "Result[Population]":
        remaining = [c for c in self.candidates if c.id != candidate_id]
        if len(remaining) == len(self.candidates):
            return Result.failure(
                ErrorCode.CANDIDATE_NOT_FOUND, "No such candidate", candidate_id=candidate_id
            )
        return Result.success(self._with(remaining))

    def replace_candidate(self, old_id: str, candidate: Candidate) -> "Result[Population]":
        removed = self.remove_candidate(old_id)
        if not removed.ok:
            return removed
        return removed.unwrap().add_candidate(candidate)

    def update_fitness(self, candidate_id: str, fitness: float) -> "Result[Population]":
        updated: List[Candidate] = []
        found = False
        for candidate in self.candidates:
            if candidate.id == candidate_id:
                candidate = candidate.model_copy(update={"fitness": float(fitness)})
                found = True
            updated.append(candidate)
        if not found:
            return Result.failure(
                ErrorCode.CANDIDATE_NOT_FOUND, "No such candidate", candidate_id=candidate_id
            )
        return Result.success(self._with(updated))

    def with_candidates(self, candidates: List[Candidate]) -> "Result[Population]":
        """Rebuild the population around a new member list (e.g. after selection)."""
        if len(candidates) > self.capacity:
            return Result.failure(
                ErrorCode.POPULATION_FULL,
                "Candidate list exceeds population capacity",
                size=len(candidates),
                capacity=self.capacity,
            )
        ids = [c.id for c in candidates]
        if len(set(ids)) != len(ids):
            duplicate = next(i for i in ids if ids.count(i) > 1)
            return Result.failure(
                ErrorCode.DUPLICATE_ID, "Candidate id repeated", candidate_id=duplicate
            )
        return Result.success(self._with(list(candidates)))

    def next_generation(self) -> "Population":
        return self.model_copy(update={"generation": self.generation + 1})

    def statistics(self) -> Dict[str, Any]:
        evaluated = len(self._evaluated())
        return {
            "size": self.size,
            "capacity": self.capacity,
            "evaluated": evaluated,
            "unevaluated": self.size - evaluated,
            "generation": self.generation,
            "best_fitness": self.best_fitness,
            "avg_fitness": self.avg_fitness,
            "diversity": self.diversity,
        }

    def _evaluated(self) -> List[Candidate]:
        return [c for c in self.candidates if c.fitness is not None]

    def _fitness_values(self) -> List[float]:
        return [c.fitness for c in self.candidates if c.fitness is not None]

    def _with(self, candidates: List[Candidate]) -> "Population":
        return Population(
            capacity=self.capacity, generation=self.generation, candidates=candidates
        )

    def _replace_worst(self, candidate: Candidate) -> "Result[Population]":
        evaluated = self._evaluated()
        worst = min(evaluated, key=_fitness_of) if evaluated else None
        if candidate.fitness is None or worst is None or candidate.fitness <= _fitness_of(worst):
            return Result.failure(
                ErrorCode.POPULATION_FULL,
                "Population at capacity and candidate does not beat the worst member",
                candidate_id=candidate.id,
                capacity=self.capacity,
            )
        logger.debug(f"Replacing {worst.id} (fitness={worst.fitness}) with {candidate.id}")
        remaining = [c for c in self.candidates if c.id != worst.id]
        return Result.success(self._with(remaining + [candidate]))


def _fitness_of(candidate: Candidate) -> float:
    return candidate.fitness if candidate.fitness is not None else 0.0
