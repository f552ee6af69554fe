"""Outcome of one generation's selection step."""

from typing import Dict, List

from pydantic import BaseModel, Field

from .candidate import Candidate


class GenerationSelection(BaseModel):
    """Survivors, elites and mating pool chosen for the next generation."""

    survivors: List[Candidate]
    elites: List[Candidate]
    mating_pool: List[Candidate]
    front_sizes: Dict[int, int] = Field(default_factory=dict)
    boundary_ids: List[str] = Field(default_factory=list)
    diversity: float = 0.0
    sharing_applied: bool = False

    @property
    def frontier(self) -> List[Candidate]:
        return [c for c in self.survivors if c.pareto_rank == 1]
