"""Pareto selection for one generation of prompt candidates."""

import random
from typing import Dict, List, Optional, Tuple

from loguru import logger

from ..models import (
    Candidate,
    EliteStrategy,
    ErrorCode,
    GenerationSelection,
    Result,
    SelectionConfig,
)
from .crowding import CrowdingDistanceSelector
from .dominance import DominanceComparator
from .elite import EliteSelector
from .sharing import FitnessSharing
from .tournament import TournamentSelector, population_diversity

DEFAULT_OBJECTIVE_WEIGHT = 1.0


class ParetoSelector:
    """Run the per-generation selection flow with a ``SelectionConfig``.

    Survivors come from NSGA-II environmental selection over parents plus
    offspring, elites from the configured elitism strategy and the mating
    pool from tournament selection, optionally after fitness sharing.
    """

    def __init__(self, config: SelectionConfig, rng: Optional[random.Random] = None):
        """Initialize Pareto selector with selection config and random source."""
        self.config = config
        self.rng = rng or random.Random()
        self.comparator = DominanceComparator()
        self.crowding = CrowdingDistanceSelector(self.comparator)
        self.elite_selector = EliteSelector(self.comparator, self.crowding)
        self.tournament = TournamentSelector(self.rng)
        self.sharing = FitnessSharing(self.rng)

    def get_pareto_frontier(self, candidates: List[Candidate]) -> "Result[List[Candidate]]":
        """Extract non-dominated candidates from population."""
        frontier = self.elite_selector.select_pareto_front_1(candidates)
        if frontier.ok:
            logger.debug(
                f"Pareto frontier: {len(frontier.unwrap())} / {len(candidates)} candidates"
            )
        return frontier

    def select_population(
        self, parents: List[Candidate], offspring: List[Candidate]
    ) -> "Result[List[Candidate]]":
        """Select next generation survivors from parents and offspring."""
        combined = list(parents) + list(offspring)
        if not combined:
            return Result.success([])
        target_size = min(self.config.population_size, len(combined))
        return self.crowding.environmental_selection(combined, target_size=target_size)

    def select_elites(self, population: List[Candidate]) -> "Result[List[Candidate]]":
        """Elites of a ranked population using the configured strategy."""
        count = self.config.elite_count_for(len(population))
        strategy = self.config.elite_strategy
        if strategy is EliteStrategy.PRESERVE_FRONTIER:
            return self.elite_selector.select_elites_preserve_frontier(
                population, elite_count=count
            )
        if strategy is EliteStrategy.DIVERSE:
            return self.elite_selector.select_diverse_elites(
                population,
                elite_count=count,
                similarity_threshold=self.config.similarity_threshold,
            )
        return self.elite_selector.select_elites(population, elite_count=count)

    def select_parents(
        self, population: List[Candidate], count: Optional[int] = None
    ) -> "Result[List[Candidate]]":
        """Mating pool by tournament, with fitness sharing first when enabled.

        Tournaments compare rank and crowding distance only, so sharing
        rewrites the pool's fitness without changing which parents win.
        """
        mating_pool, _ = self._mating_pool(population, count)
        return mating_pool

    def _mating_pool(
        self, population: List[Candidate], count: Optional[int]
    ) -> Tuple["Result[List[Candidate]]", bool]:
        pool = list(population)
        sharing_applied = False
        if self.config.sharing_enabled and pool:
            shared = self._apply_sharing(pool)
            if not shared.ok:
                return shared, False
            pool = shared.unwrap()
            sharing_applied = not shared.skipped

        count = count if count is not None else self.config.population_size
        if len(pool) < 2:
            return Result.success([pool[0]] * count if pool else []), sharing_applied

        max_size = min(self.config.max_tournament_size, len(pool))
        selected = self.tournament.select(
            pool,
            count=count,
            tournament_size=min(self.config.tournament_size, len(pool)),
            strategy=self.config.tournament_strategy.value,
            min_tournament_size=min(self.config.min_tournament_size, max_size),
            max_tournament_size=max_size,
            diversity_threshold=self.config.tournament_diversity_threshold,
        )
        return selected, sharing_applied

    def step(
        self,
        parents: List[Candidate],
        offspring: List[Candidate],
        mating_pool_size: Optional[int] = None,
    ) -> "Result[GenerationSelection]":
        """Full selection step for one generation."""
        survivors = self.select_population(parents, offspring)
        if not survivors.ok:
            return Result.from_error(survivors.error)
        ranked = survivors.unwrap()

        elites = self.select_elites(ranked)
        if not elites.ok:
            return Result.from_error(elites.error)

        mating_pool, sharing_applied = self._mating_pool(ranked, mating_pool_size)
        if not mating_pool.ok:
            return Result.from_error(mating_pool.error)

        selection = GenerationSelection(
            survivors=ranked,
            elites=elites.unwrap(),
            mating_pool=mating_pool.unwrap(),
            front_sizes=self.crowding.front_sizes(ranked),
            boundary_ids=self.crowding.identify_boundary_solutions(
                [c for c in ranked if c.pareto_rank == 1]
            ),
            diversity=population_diversity(ranked),
            sharing_applied=sharing_applied,
        )
        logger.info(
            f"Selection step: {len(parents)} parents + {len(offspring)} offspring -> "
            f"{len(selection.survivors)} survivors, {len(selection.elites)} elites, "
            f"frontier={len(selection.frontier)}, diversity={selection.diversity:.3f}"
        )
        return Result.success(selection)

    def get_recommended_candidate(
        self,
        frontier: List[Candidate],
        weights: Optional[Dict[str, float]] = None,
    ) -> "Result[Candidate]":
        """Select best-balanced candidate from Pareto frontier by weighted objectives."""
        if not frontier:
            return Result.failure(
                ErrorCode.EMPTY_POPULATION, "Cannot recommend from empty frontier"
            )
        missing = next((c for c in frontier if c.normalized_objectives is None), None)
        if missing is not None:
            return Result.failure(
                ErrorCode.MISSING_OBJECTIVES,
                "Candidate has no normalized_objectives",
                candidate_id=missing.id,
            )
        weights = weights if weights is not None else self.config.objective_weights

        def score(c: Candidate) -> float:
            return sum(
                weights.get(name, DEFAULT_OBJECTIVE_WEIGHT) * value
                for name, value in (c.normalized_objectives or {}).items()
            )

        best = max(frontier, key=score)
        logger.info(f"Recommended candidate: {best.id} with score={score(best):.3f}")
        return Result.success(best)

    def _apply_sharing(self, population: List[Candidate]) -> "Result[List[Candidate]]":
        radius = self.sharing.calculate_niche_radius(
            population,
            strategy=self.config.niche_radius_strategy.value,
            radius=self.config.niche_radius,
        )
        if not radius.ok:
            return Result.from_error(radius.error)
        return self.sharing.adaptive_apply_sharing(
            population,
            diversity_threshold=self.config.sharing_diversity_threshold,
            diversity_metric=self.config.sharing_diversity_metric.value,
            niche_radius=radius.unwrap(),
            sharing_alpha=self.config.sharing_alpha,
        )
