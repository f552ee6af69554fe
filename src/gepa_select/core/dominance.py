"""Pareto dominance, non-dominated sorting and crowding distance."""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from ..models import BOUNDARY_DISTANCE, Candidate, MissingObjectivesError
from ..models.config import DEFAULT_EPSILON

Fronts = Dict[int, List[Candidate]]


class DominanceRelation(str, Enum):
    DOMINATES = "dominates"
    DOMINATED_BY = "dominated_by"
    NON_DOMINATED = "non_dominated"


class DominanceComparator:
    """Dominance relationships over normalized objectives (higher is better).

    Fronts are derived data: they are rebuilt from ``normalized_objectives``
    on every call and never cached between calls.
    """

    def compare(self, a: Candidate, b: Candidate) -> DominanceRelation:
        """Return the dominance relation of ``a`` with respect to ``b``."""
        _require_objectives(a)
        _require_objectives(b)
        names = _objective_union([a, b])
        if not names:
            return DominanceRelation.NON_DOMINATED

        better = worse = False
        for name in names:
            a_val = a.objective(name)
            b_val = b.objective(name)
            if a_val > b_val:
                better = True
            elif a_val < b_val:
                worse = True
            if better and worse:
                return DominanceRelation.NON_DOMINATED

        if better:
            return DominanceRelation.DOMINATES
        if worse:
            return DominanceRelation.DOMINATED_BY
        return DominanceRelation.NON_DOMINATED

    def dominates(self, a: Candidate, b: Candidate) -> bool:
        """Check if ``a`` Pareto-dominates ``b``."""
        return self.compare(a, b) is DominanceRelation.DOMINATES

    def epsilon_dominates(
        self, a: Candidate, b: Candidate, epsilon: float = DEFAULT_EPSILON
    ) -> bool:
        """Relaxed dominance for noisy objectives.

        ``a`` must be within ``epsilon`` of ``b`` on every objective and ahead
        by more than ``epsilon`` on at least one.
        """
        _require_objectives(a)
        _require_objectives(b)
        names = _objective_union([a, b])
        if not names:
            return False
        within = all(a.objective(n) >= b.objective(n) - epsilon for n in names)
        ahead = any(a.objective(n) > b.objective(n) + epsilon for n in names)
        return within and ahead

    def fast_non_dominated_sort(self, candidates: List[Candidate]) -> Fronts:
        """Partition candidates into Pareto fronts numbered from 1.

        Every input candidate appears in exactly one front. Members keep
        their input order within a front. O(M*N^2) for M objectives.
        """
        if not candidates:
            return {}
        for candidate in candidates:
            _require_objectives(candidate)

        size = len(candidates)
        domination_count = [0] * size
        dominated_sets: List[List[int]] = [[] for _ in range(size)]

        for i in range(size):
            for j in range(i + 1, size):
                relation = self.compare(candidates[i], candidates[j])
                if relation is DominanceRelation.DOMINATES:
                    dominated_sets[i].append(j)
                    domination_count[j] += 1
                elif relation is DominanceRelation.DOMINATED_BY:
                    dominated_sets[j].append(i)
                    domination_count[i] += 1

        fronts: Fronts = {}
        current = [i for i in range(size) if domination_count[i] == 0]
        rank = 1
        while current:
            fronts[rank] = [candidates[i] for i in current]
            upcoming: List[int] = []
            for i in current:
                for j in dominated_sets[i]:
                    domination_count[j] -= 1
                    if domination_count[j] == 0:
                        upcoming.append(j)
            current = sorted(upcoming)
            rank += 1

        logger.debug(
            f"Non-dominated sort: {size} candidates -> "
            f"{len(fronts)} fronts (front 1 size={len(fronts[1])})"
        )
        return fronts

    def crowding_distance(self, front: List[Candidate]) -> Dict[str, float]:
        """Crowding distance per candidate id for one front.

        Boundary solutions of every objective with a non-zero range get
        ``BOUNDARY_DISTANCE``. Interior solutions accumulate the normalized
        gap between their neighbours. Fronts of two or fewer are all boundary.
        """
        if not front:
            return {}
        for candidate in front:
            _require_objectives(candidate)
        if len(front) <= 2:
            return {c.id: BOUNDARY_DISTANCE for c in front}

        distances: Dict[str, float] = {c.id: 0.0 for c in front}
        for name in _objective_union(front):
            extremes = objective_extremes(front, name)
            if extremes is None:
                continue
            ordered, value_range = extremes
            distances[ordered[0].id] = BOUNDARY_DISTANCE
            distances[ordered[-1].id] = BOUNDARY_DISTANCE
            for idx in range(1, len(ordered) - 1):
                current_id = ordered[idx].id
                if distances[current_id] == BOUNDARY_DISTANCE:
                    continue
                gap = ordered[idx + 1].objective(name) - ordered[idx - 1].objective(name)
                distances[current_id] += gap / value_range
        return distances

    def assign_ranks(self, fronts: Fronts) -> List[Candidate]:
        """Copies of every front member annotated with its front number."""
        ranked: List[Candidate] = []
        for rank in sorted(fronts):
            ranked.extend(
                c.model_copy(update={"pareto_rank": rank, "crowding_distance": None})
                for c in fronts[rank]
            )
        return ranked


def objective_extremes(
    candidates: List[Candidate], name: str
) -> Optional[Tuple[List[Candidate], float]]:
    """Candidates stably sorted by ``name`` plus the value range, or None when the range is zero."""
    ordered = sorted(candidates, key=lambda c: c.objective(name))
    value_range = ordered[-1].objective(name) - ordered[0].objective(name)
    if value_range == 0.0:
        return None
    return ordered, value_range


def _objective_union(candidates: Iterable[Candidate]) -> List[str]:
    names: List[str] = []
    for candidate in candidates:
        for name in candidate.objective_names():
            if name not in names:
                names.append(name)
    return names


def _require_objectives(candidate: Candidate) -> None:
    if candidate.normalized_objectives is None:
        raise MissingObjectivesError(candidate.id)
