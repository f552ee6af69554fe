"""Crowding-distance based survivor selection."""

from itertools import groupby
from typing import Dict, List, Optional

from loguru import logger

from ..models import (
    Candidate,
    MissingObjectivesError,
    Result,
    SelectionError,
    distance_sort_key,
    selection_sort_key,
)
from ..models.config import CountOptions, EnvironmentalOptions
from .dominance import DominanceComparator, objective_extremes
from .validation import (
    check_count,
    check_distances,
    check_ranks,
    check_target_size,
    resolve_options,
)


class CrowdingDistanceSelector:
    """Apply crowding distance to survivor selection.

    The distance itself is computed by ``DominanceComparator``; this class
    groups candidates into fronts, writes distances back and trims
    populations by ``(rank asc, distance desc)``.
    """

    def __init__(self, comparator: Optional[DominanceComparator] = None):
        """Initialize selector with a dominance comparator."""
        self.comparator = comparator or DominanceComparator()

    def assign_crowding_distances(self, population: List[Candidate]) -> "Result[List[Candidate]]":
        """Compute crowding distance within each rank and return annotated copies."""
        if not population:
            return Result.success([])
        error = check_ranks(population)
        if error:
            logger.warning(f"Cannot assign crowding distances: {error}")
            return Result.from_error(error)

        distances: Dict[str, float] = {}
        try:
            for _, members in groupby(
                sorted(population, key=lambda c: c.pareto_rank), key=lambda c: c.pareto_rank
            ):
                distances.update(self.comparator.crowding_distance(list(members)))
        except MissingObjectivesError as e:
            return Result.from_error(e.error)

        return Result.success(
            [c.model_copy(update={"crowding_distance": distances[c.id]}) for c in population]
        )

    def rank_population(self, candidates: List[Candidate]) -> "Result[List[Candidate]]":
        """Non-dominated sort plus crowding distance in one step, ordered by front."""
        try:
            fronts = self.comparator.fast_non_dominated_sort(candidates)
        except MissingObjectivesError as e:
            logger.warning(f"Cannot rank population: {e}")
            return Result.from_error(e.error)
        return self.assign_crowding_distances(self.comparator.assign_ranks(fronts))

    def select_by_crowding_distance(
        self, population: List[Candidate], count: Optional[int] = None
    ) -> "Result[List[Candidate]]":
        """Keep the best ``count`` candidates by (rank asc, distance desc)."""
        options = resolve_options(CountOptions, "select_by_crowding_distance", count=count)
        if isinstance(options, SelectionError):
            return Result.from_error(options)
        error = (
            check_count(options.count, len(population))
            or check_ranks(population)
            or check_distances(population)
        )
        if error:
            logger.warning(f"Crowding-distance selection rejected: {error}")
            return Result.from_error(error)

        survivors = sorted(population, key=selection_sort_key)[: options.count]
        logger.debug(f"Crowding-distance selection: kept {len(survivors)} / {len(population)}")
        return Result.success(survivors)

    def environmental_selection(
        self, combined_population: List[Candidate], target_size: Optional[int] = None
    ) -> "Result[List[Candidate]]":
        """NSGA-II survivor selection over parents plus offspring.

        Whole fronts are accepted in rank order while they fit. The first
        front that does not fit is trimmed to the remaining slots by
        crowding distance, boundary solutions first.
        """
        options = resolve_options(
            EnvironmentalOptions, "environmental_selection", target_size=target_size
        )
        if isinstance(options, SelectionError):
            return Result.from_error(options)
        error = check_target_size(options.target_size, len(combined_population))
        if error:
            logger.warning(f"Environmental selection rejected: {error}")
            return Result.from_error(error)

        ranked = self.rank_population(combined_population)
        if not ranked.ok:
            return ranked

        survivors: List[Candidate] = []
        remaining = options.target_size
        for _, members in groupby(ranked.unwrap(), key=lambda c: c.pareto_rank):
            front = list(members)
            if len(front) <= remaining:
                survivors.extend(front)
                remaining -= len(front)
            else:
                ordered = sorted(front, key=lambda c: distance_sort_key(c.crowding_distance))
                survivors.extend(ordered[:remaining])
                remaining = 0
            if remaining == 0:
                break

        logger.debug(
            f"Environmental selection: {len(combined_population)} -> {len(survivors)} survivors"
        )
        return Result.success(survivors)

    def identify_boundary_solutions(self, population: List[Candidate]) -> List[str]:
        """Ids holding the minimum or maximum of any objective, deduplicated.

        Uses the same stable ordering as crowding distance, so on a single
        front the result matches the candidates given boundary distance.
        Objectives with zero range have no boundary.
        """
        if not population:
            return []
        names: List[str] = []
        for candidate in population:
            for name in candidate.objective_names():
                if name not in names:
                    names.append(name)

        boundary_ids: List[str] = []
        for name in names:
            extremes = objective_extremes(population, name)
            if extremes is None:
                continue
            ordered, _ = extremes
            for candidate in (ordered[0], ordered[-1]):
                if candidate.id not in boundary_ids:
                    boundary_ids.append(candidate.id)
        return boundary_ids

    def front_sizes(self, population: List[Candidate]) -> Dict[int, int]:
        """Number of ranked candidates per front."""
        sizes: Dict[int, int] = {}
        for candidate in population:
            if candidate.pareto_rank is not None:
                sizes[candidate.pareto_rank] = sizes.get(candidate.pareto_rank, 0) + 1
        return dict(sorted(sizes.items()))
