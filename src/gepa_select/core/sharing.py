"""Fitness sharing: penalize fitness by niche density in objective space."""

import math
import random
from typing import List, Optional

from loguru import logger

from ..models import Candidate, DiversityMetric, NicheRadiusStrategy, Result, SelectionError
from ..models.config import (
    DEFAULT_NICHE_RADIUS,
    DEFAULT_SHARING_ALPHA,
    AdaptiveSharingOptions,
    NicheRadiusOptions,
    SharingOptions,
)
from .distance import objective_distance
from .validation import resolve_options

PAIRWISE_SAMPLE_SIZE = 50
VERY_LOW_DIVERSITY_FACTOR = 0.5
SPREAD_RADIUS_FACTOR = 2.0
LOW_DIVERSITY_RADIUS_FACTOR = 1.5
MAINTAIN_RADIUS_FACTOR = 0.5


def sharing_function(distance: float, niche_radius: float, alpha: float) -> float:
    """``1 - (d / r) ** alpha`` inside the niche, 0 outside."""
    if distance < niche_radius:
        return 1.0 - (distance / niche_radius) ** alpha
    return 0.0


class FitnessSharing:
    """Divide raw fitness by niche count so crowded regions lose selection pressure.

    Shared fitness is ``raw / niche_count`` where the niche count sums the
    sharing function over the whole population, the candidate included.
    An isolated candidate has a niche count of 1.0.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """Initialize with a random source used when sampling large populations."""
        self.rng = rng or random.Random()

    def niche_count(
        self,
        candidate: Candidate,
        population: List[Candidate],
        niche_radius: float = DEFAULT_NICHE_RADIUS,
        sharing_alpha: float = DEFAULT_SHARING_ALPHA,
    ) -> float:
        """Sum of the sharing function over the population.

        The candidate always shares its own niche at distance 0, so the
        count is at least 1.0.
        """
        count = sum(
            sharing_function(objective_distance(candidate, other), niche_radius, sharing_alpha)
            for other in population
            if other.id != candidate.id
        )
        return count + 1.0

    def apply_sharing(
        self,
        population: List[Candidate],
        niche_radius: Optional[float] = None,
        sharing_alpha: Optional[float] = None,
        preserve_raw_fitness: Optional[bool] = None,
    ) -> "Result[List[Candidate]]":
        """Replace every candidate's fitness by its shared fitness.

        With ``preserve_raw_fitness`` the original fitness and niche count
        are stored in ``metadata`` under ``raw_fitness`` and ``niche_count``.
        Unevaluated candidates count as raw fitness 0.0.
        """
        options = resolve_options(
            SharingOptions,
            "apply_sharing",
            niche_radius=niche_radius,
            sharing_alpha=sharing_alpha,
            preserve_raw_fitness=preserve_raw_fitness,
        )
        if isinstance(options, SelectionError):
            return Result.from_error(options)
        return Result.success(self._share(population, options))

    def calculate_niche_radius(
        self,
        population: List[Candidate],
        strategy: Optional[str] = None,
        radius: Optional[float] = None,
        fraction: Optional[float] = None,
        base_radius: Optional[float] = None,
        target_diversity: Optional[float] = None,
    ) -> "Result[float]":
        """Niche radius by strategy.

        * ``fixed``: ``radius``.
        * ``population_based``: ``base_radius / sqrt(N)``.
        * ``objective_range``: ``fraction`` of the normalized-space diagonal.
        * ``adaptive``: from the sampled average pairwise distance relative
          to ``target_diversity``.
        """
        options = resolve_options(
            NicheRadiusOptions,
            "calculate_niche_radius",
            strategy=strategy,
            radius=radius,
            fraction=fraction,
            base_radius=base_radius,
            target_diversity=target_diversity,
        )
        if isinstance(options, SelectionError):
            return Result.from_error(options)
        if not population:
            return Result.success(DEFAULT_NICHE_RADIUS)

        if options.strategy is NicheRadiusStrategy.FIXED:
            value = options.radius
        elif options.strategy is NicheRadiusStrategy.POPULATION_BASED:
            value = options.base_radius / math.sqrt(len(population))
        elif options.strategy is NicheRadiusStrategy.OBJECTIVE_RANGE:
            value = options.fraction * self._objective_space_diagonal(population)
        else:
            value = self._adaptive_radius(population, options.target_diversity)
        logger.debug(f"Niche radius ({options.strategy.value}): {value:.4f}")
        return Result.success(value)

    def adaptive_apply_sharing(
        self,
        population: List[Candidate],
        diversity_threshold: Optional[float] = None,
        diversity_metric: Optional[str] = None,
        niche_radius: Optional[float] = None,
        sharing_alpha: Optional[float] = None,
        preserve_raw_fitness: Optional[bool] = None,
    ) -> "Result[List[Candidate]]":
        """Apply sharing only when measured diversity is below the threshold.

        Otherwise the population is returned unchanged with ``skipped=True``.
        """
        options = resolve_options(
            AdaptiveSharingOptions,
            "adaptive_apply_sharing",
            diversity_threshold=diversity_threshold,
            diversity_metric=diversity_metric,
            niche_radius=niche_radius,
            sharing_alpha=sharing_alpha,
            preserve_raw_fitness=preserve_raw_fitness,
        )
        if isinstance(options, SelectionError):
            return Result.from_error(options)
        if not population:
            return Result.success([], skipped=True)

        diversity = self.measure_diversity(population, options.diversity_metric)
        if diversity >= options.diversity_threshold:
            logger.debug(
                f"Skipping fitness sharing (diversity: {diversity:.3f} >= "
                f"{options.diversity_threshold})"
            )
            return Result.success(list(population), skipped=True)

        logger.debug(
            f"Applying fitness sharing (diversity: {diversity:.3f} < {options.diversity_threshold})"
        )
        return Result.success(self._share(population, options))

    def measure_diversity(
        self, population: List[Candidate], metric: DiversityMetric = DiversityMetric.CROWDING
    ) -> float:
        """Average finite crowding distance, or average pairwise objective distance.

        Candidates without a crowding distance count as 0.0.
        """
        if DiversityMetric(metric) is DiversityMetric.PAIRWISE_DISTANCE:
            return self.average_pairwise_distance(population)
        distances = [
            c.crowding_distance if c.crowding_distance is not None else 0.0
            for c in population
        ]
        finite = [d for d in distances if math.isfinite(d)]
        if not finite:
            return 0.0
        return sum(finite) / len(finite)

    def average_pairwise_distance(self, population: List[Candidate]) -> float:
        """Mean objective distance over a sample of at most 50 candidates."""
        if len(population) < 2:
            return 0.0
        sampled = population
        if len(population) > PAIRWISE_SAMPLE_SIZE:
            sampled = self.rng.sample(population, PAIRWISE_SAMPLE_SIZE)
        distances = [
            objective_distance(a, b)
            for i, a in enumerate(sampled)
            for b in sampled[i + 1:]
        ]
        return sum(distances) / len(distances)

    def _share(self, population: List[Candidate], options: SharingOptions) -> List[Candidate]:
        shared: List[Candidate] = []
        for candidate in population:
            count = self.niche_count(
                candidate, population, options.niche_radius, options.sharing_alpha
            )
            raw_fitness = candidate.fitness if candidate.fitness is not None else 0.0
            shared_fitness = raw_fitness / count if count > 0 else raw_fitness
            metadata = dict(candidate.metadata)
            if options.preserve_raw_fitness:
                metadata["raw_fitness"] = raw_fitness
                metadata["niche_count"] = count
            shared.append(
                candidate.model_copy(update={"fitness": shared_fitness, "metadata": metadata})
            )
        logger.debug(f"Fitness sharing applied to {len(shared)} candidates")
        return shared

    def _objective_space_diagonal(self, population: List[Candidate]) -> float:
        names = set()
        for candidate in population:
            names.update(candidate.objective_names())
        if not names:
            return 1.0
        return math.sqrt(len(names))

    def _adaptive_radius(self, population: List[Candidate], target_diversity: float) -> float:
        avg_distance = self.average_pairwise_distance(population)
        if avg_distance < target_diversity * VERY_LOW_DIVERSITY_FACTOR:
            return max(avg_distance * SPREAD_RADIUS_FACTOR, DEFAULT_NICHE_RADIUS)
        if avg_distance < target_diversity:
            return avg_distance * LOW_DIVERSITY_RADIUS_FACTOR
        return avg_distance * MAINTAIN_RADIUS_FACTOR
