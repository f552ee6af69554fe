"""Multi-objective selection engine."""

from .crowding import CrowdingDistanceSelector
from .distance import objective_distance
from .dominance import DominanceComparator, DominanceRelation
from .elite import EliteSelector
from .pareto import ParetoSelector
from .sharing import FitnessSharing
from .tournament import (
    TournamentSelector,
    diversity_compare,
    pareto_compare,
    population_diversity,
)

__all__ = [
    "CrowdingDistanceSelector",
    "DominanceComparator",
    "DominanceRelation",
    "EliteSelector",
    "FitnessSharing",
    "ParetoSelector",
    "TournamentSelector",
    "diversity_compare",
    "objective_distance",
    "pareto_compare",
    "population_diversity",
]
