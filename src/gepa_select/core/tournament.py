"""Tournament selection of parents for breeding."""

import math
import random
from typing import Callable, List, Optional, Union

from loguru import logger

from ..models import (
    Candidate,
    ErrorCode,
    Result,
    SelectionError,
    TournamentStrategy,
    distance_sort_key,
)
from ..models.config import TournamentOptions
from .validation import check_selection_metrics, resolve_options

Comparator = Callable[[Candidate, Candidate], bool]

UNRANKED = math.inf


def pareto_compare(a: Candidate, b: Candidate) -> bool:
    """True if ``a`` beats ``b``: lower rank, then higher crowding distance."""
    rank_a = a.pareto_rank if a.pareto_rank is not None else UNRANKED
    rank_b = b.pareto_rank if b.pareto_rank is not None else UNRANKED
    if rank_a != rank_b:
        return rank_a < rank_b
    return distance_sort_key(a.crowding_distance) < distance_sort_key(b.crowding_distance)


def diversity_compare(a: Candidate, b: Candidate) -> bool:
    """True if ``a`` beats ``b``: higher crowding distance, then lower rank."""
    key_a = distance_sort_key(a.crowding_distance)
    key_b = distance_sort_key(b.crowding_distance)
    if key_a != key_b:
        return key_a < key_b
    rank_a = a.pareto_rank if a.pareto_rank is not None else UNRANKED
    rank_b = b.pareto_rank if b.pareto_rank is not None else UNRANKED
    return rank_a < rank_b


def population_diversity(population: List[Candidate]) -> float:
    """Diversity in [0, 1): tanh of the coefficient of variation of finite crowding distances."""
    if len(population) < 2:
        return 0.0
    distances = [
        c.crowding_distance
        for c in population
        if c.crowding_distance is not None and math.isfinite(c.crowding_distance)
    ]
    if len(distances) < 2:
        return 0.0
    mean = sum(distances) / len(distances)
    if mean == 0.0:
        return 0.0
    variance = sum((d - mean) ** 2 for d in distances) / len(distances)
    return math.tanh(math.sqrt(variance) / mean)


def adaptive_tournament_size(
    diversity: float, min_size: int, max_size: int, diversity_threshold: float
) -> int:
    """Smallest tournament below the threshold, scaling linearly to ``max_size`` as diversity nears 1."""
    if diversity < diversity_threshold:
        return min_size
    if diversity_threshold >= 1.0:
        return max_size
    scale = (diversity - diversity_threshold) / (1.0 - diversity_threshold)
    return min(min_size + int((max_size - min_size) * scale), max_size)


class TournamentSelector:
    """Stochastic parent selection by repeated k-way tournaments."""

    def __init__(self, rng: Optional[random.Random] = None):
        """Initialize selector with an injectable random source."""
        self.rng = rng or random.Random()

    def select(
        self,
        population: List[Candidate],
        count: Optional[int] = None,
        tournament_size: Optional[int] = None,
        strategy: Optional[str] = None,
        min_tournament_size: Optional[int] = None,
        max_tournament_size: Optional[int] = None,
        diversity_threshold: Optional[float] = None,
    ) -> "Result[List[Candidate]]":
        """Select ``count`` parents, one tournament each.

        Candidates must carry ``pareto_rank`` and ``crowding_distance``.
        Winners are drawn with replacement across tournaments, so ``count``
        may exceed the population size.
        """
        options = resolve_options(
            TournamentOptions,
            "tournament select",
            count=count,
            tournament_size=tournament_size,
            strategy=strategy,
            min_tournament_size=min_tournament_size,
            max_tournament_size=max_tournament_size,
            diversity_threshold=diversity_threshold,
        )
        if isinstance(options, SelectionError):
            return Result.from_error(options)
        if not population:
            return Result.failure(ErrorCode.EMPTY_POPULATION, "Population is empty")
        error = check_selection_metrics(population)
        if error:
            logger.warning(f"Tournament selection rejected: {error}")
            return Result.from_error(error)
        if options.count < 1:
            return Result.failure(
                ErrorCode.INVALID_COUNT, "count must be >= 1", count=options.count
            )

        if options.strategy is TournamentStrategy.ADAPTIVE:
            size = self._adaptive_size(population, options)
            if isinstance(size, SelectionError):
                return Result.from_error(size)
            comparator: Comparator = pareto_compare
        else:
            size = options.tournament_size
            if size < 2 or size > len(population):
                return Result.failure(
                    ErrorCode.INVALID_TOURNAMENT_SIZE,
                    f"tournament_size must be in [2, {len(population)}]",
                    tournament_size=size,
                    population_size=len(population),
                )
            if options.strategy is TournamentStrategy.DIVERSITY:
                comparator = diversity_compare
            else:
                comparator = pareto_compare

        parents = [
            self.run_tournament(population, size, comparator) for _ in range(options.count)
        ]
        return Result.success(parents)

    def run_tournament(
        self, population: List[Candidate], tournament_size: int, comparator: Comparator
    ) -> Candidate:
        """Draw ``tournament_size`` distinct candidates and return the winner."""
        entrants = self.rng.sample(population, tournament_size)
        winner = entrants[0]
        for challenger in entrants[1:]:
            if comparator(challenger, winner):
                winner = challenger
        return winner

    def _adaptive_size(
        self, population: List[Candidate], options: TournamentOptions
    ) -> Union[int, SelectionError]:
        min_size = options.min_tournament_size
        max_size = options.max_tournament_size
        if min_size < 2:
            return SelectionError(
                code=ErrorCode.INVALID_MIN_TOURNAMENT_SIZE,
                message="min_tournament_size must be >= 2",
                details={"min_tournament_size": min_size},
            )
        if max_size > len(population):
            return SelectionError(
                code=ErrorCode.INVALID_MAX_TOURNAMENT_SIZE,
                message=f"max_tournament_size exceeds population size {len(population)}",
                details={"max_tournament_size": max_size, "population_size": len(population)},
            )
        if min_size > max_size:
            return SelectionError(
                code=ErrorCode.MIN_GREATER_THAN_MAX,
                message="min_tournament_size exceeds max_tournament_size",
                details={"min_tournament_size": min_size, "max_tournament_size": max_size},
            )

        diversity = population_diversity(population)
        size = adaptive_tournament_size(
            diversity, min_size, max_size, options.diversity_threshold
        )
        logger.debug(f"Adaptive tournament: diversity={diversity:.3f}, size={size}")
        return size
