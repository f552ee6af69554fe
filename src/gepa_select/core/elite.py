"""Elite preservation across generations."""

from typing import List, Optional

from loguru import logger

from ..models import (
    Candidate,
    MissingObjectivesError,
    Result,
    SelectionError,
    distance_sort_key,
    selection_sort_key,
)
from ..models.config import DiverseEliteOptions, EliteOptions, FrontierEliteOptions
from .crowding import CrowdingDistanceSelector
from .distance import objective_distance
from .dominance import DominanceComparator
from .validation import check_selection_metrics, resolve_options


class EliteSelector:
    """Choose the candidates guaranteed to survive into the next generation.

    Three strategies are offered:

    * ``select_elites``: top K by (rank asc, distance desc).
    * ``select_elites_preserve_frontier``: all of Front 1 always survives;
      the only strategy that cannot regress the frontier.
    * ``select_diverse_elites``: top candidates with near-duplicates in
      objective space skipped.
    """

    def __init__(
        self,
        comparator: Optional[DominanceComparator] = None,
        crowding_selector: Optional[CrowdingDistanceSelector] = None,
    ):
        """Initialize elite selector."""
        self.comparator = comparator or DominanceComparator()
        self.crowding_selector = crowding_selector or CrowdingDistanceSelector(self.comparator)

    def select_elites(
        self,
        population: List[Candidate],
        elite_ratio: Optional[float] = None,
        elite_count: Optional[int] = None,
        min_elites: Optional[int] = None,
    ) -> "Result[List[Candidate]]":
        """Select the top candidates by rank then crowding distance.

        The count is ``elite_count`` when given, otherwise
        ``round(len(population) * elite_ratio)``; floored at ``min_elites``
        and capped at the population size.
        """
        options = resolve_options(
            EliteOptions,
            "select_elites",
            elite_ratio=elite_ratio,
            elite_count=elite_count,
            min_elites=min_elites,
        )
        if isinstance(options, SelectionError):
            return Result.from_error(options)
        if not population:
            return Result.success([])
        error = check_selection_metrics(population)
        if error:
            logger.warning(f"Elite selection rejected: {error}")
            return Result.from_error(error)

        count = options.resolve_count(len(population))
        elites = sorted(population, key=selection_sort_key)[:count]
        logger.debug(f"Selected {len(elites)} elites from {len(population)} candidates")
        return Result.success(elites)

    def select_pareto_front_1(self, population: List[Candidate]) -> "Result[List[Candidate]]":
        """All non-dominated candidates, annotated with rank 1."""
        if not population:
            return Result.success([])
        try:
            fronts = self.comparator.fast_non_dominated_sort(population)
        except MissingObjectivesError as e:
            return Result.from_error(e.error)
        return Result.success(self.comparator.assign_ranks({1: fronts[1]}))

    def select_elites_preserve_frontier(
        self, population: List[Candidate], elite_count: Optional[int] = None
    ) -> "Result[List[Candidate]]":
        """Select elites so that Front 1 is never lost.

        Front 1 larger than the quota is shrunk by crowding distance without
        spilling into worse fronts; a smaller Front 1 is topped up from lower
        fronts ordered by (rank, distance). Ranks and distances are
        recomputed from ``normalized_objectives``.
        """
        options = resolve_options(
            FrontierEliteOptions, "select_elites_preserve_frontier", elite_count=elite_count
        )
        if isinstance(options, SelectionError):
            return Result.from_error(options)
        if not population:
            return Result.success([])

        ranked = self.crowding_selector.rank_population(population)
        if not ranked.ok:
            return ranked
        ranked_population = ranked.unwrap()

        front_1 = [c for c in ranked_population if c.pareto_rank == 1]
        quota = options.elite_count
        if len(front_1) > quota:
            elites = sorted(front_1, key=lambda c: distance_sort_key(c.crowding_distance))[:quota]
            logger.debug(f"Front 1 ({len(front_1)}) exceeds quota {quota}, trimmed by crowding")
        elif len(front_1) < quota:
            lower_fronts = [c for c in ranked_population if c.pareto_rank != 1]
            shortfall = quota - len(front_1)
            elites = front_1 + sorted(lower_fronts, key=selection_sort_key)[:shortfall]
            logger.debug(
                f"Front 1 ({len(front_1)}) below quota {quota}, "
                f"filled {len(elites) - len(front_1)} from lower fronts"
            )
        else:
            elites = front_1
        return Result.success(elites)

    def select_diverse_elites(
        self,
        population: List[Candidate],
        elite_count: Optional[int] = None,
        similarity_threshold: Optional[float] = None,
    ) -> "Result[List[Candidate]]":
        """Greedy elites whose objective-space distance to every accepted elite exceeds the threshold.

        Candidates are visited by (rank asc, distance desc, generation asc)
        so older, more validated solutions win ties.
        """
        options = resolve_options(
            DiverseEliteOptions,
            "select_diverse_elites",
            elite_count=elite_count,
            similarity_threshold=similarity_threshold,
        )
        if isinstance(options, SelectionError):
            return Result.from_error(options)
        error = check_selection_metrics(population)
        if error:
            logger.warning(f"Diverse elite selection rejected: {error}")
            return Result.from_error(error)

        ordered = sorted(population, key=lambda c: (selection_sort_key(c), c.generation))
        elites: List[Candidate] = []
        skipped = 0
        for candidate in ordered:
            if len(elites) >= options.elite_count:
                break
            if all(
                objective_distance(candidate, elite) > options.similarity_threshold
                for elite in elites
            ):
                elites.append(candidate)
            else:
                skipped += 1

        logger.debug(f"Diverse elites: {len(elites)} selected, {skipped} near-duplicates skipped")
        return Result.success(elites)
