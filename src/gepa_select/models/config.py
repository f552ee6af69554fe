"""Selection option models and profile configuration."""

from enum import Enum
from typing import Any, Dict, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_ELITE_RATIO = 0.15
DEFAULT_MIN_ELITES = 1
DEFAULT_SIMILARITY_THRESHOLD = 0.01
DEFAULT_TOURNAMENT_SIZE = 3
DEFAULT_MIN_TOURNAMENT_SIZE = 2
DEFAULT_MAX_TOURNAMENT_SIZE = 7
DEFAULT_TOURNAMENT_DIVERSITY_THRESHOLD = 0.5
DEFAULT_NICHE_RADIUS = 0.1
DEFAULT_SHARING_ALPHA = 1.0
DEFAULT_SHARING_DIVERSITY_THRESHOLD = 0.3
DEFAULT_RADIUS_FRACTION = 0.1
DEFAULT_BASE_RADIUS = 0.3
DEFAULT_TARGET_DIVERSITY = 0.3
DEFAULT_EPSILON = 0.01


class TournamentStrategy(str, Enum):
    PARETO = "pareto"
    DIVERSITY = "diversity"
    ADAPTIVE = "adaptive"


class EliteStrategy(str, Enum):
    STANDARD = "standard"
    PRESERVE_FRONTIER = "preserve_frontier"
    DIVERSE = "diverse"


class NicheRadiusStrategy(str, Enum):
    FIXED = "fixed"
    POPULATION_BASED = "population_based"
    OBJECTIVE_RANGE = "objective_range"
    ADAPTIVE = "adaptive"


class DiversityMetric(str, Enum):
    CROWDING = "crowding"
    PAIRWISE_DISTANCE = "pairwise_distance"


class _Options(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class CountOptions(_Options):
    count: int


class EnvironmentalOptions(_Options):
    target_size: int


class EliteOptions(_Options):
    elite_ratio: float = Field(default=DEFAULT_ELITE_RATIO, ge=0.0, le=1.0)
    elite_count: Optional[int] = Field(default=None, ge=0)
    min_elites: int = Field(default=DEFAULT_MIN_ELITES, ge=0)

    def resolve_count(self, population_size: int) -> int:
        """Elite count: explicit count or rounded ratio, floored at min_elites, capped at size."""
        if self.elite_count is not None:
            count = self.elite_count
        else:
            count = _round_half_up(population_size * self.elite_ratio)
        return min(max(self.min_elites, count), population_size)


class FrontierEliteOptions(_Options):
    elite_count: int = Field(ge=0)


class DiverseEliteOptions(_Options):
    elite_count: int = Field(ge=0)
    similarity_threshold: float = Field(default=DEFAULT_SIMILARITY_THRESHOLD, ge=0.0)


class TournamentOptions(_Options):
    count: int
    tournament_size: int = DEFAULT_TOURNAMENT_SIZE
    strategy: TournamentStrategy = TournamentStrategy.PARETO
    min_tournament_size: int = DEFAULT_MIN_TOURNAMENT_SIZE
    max_tournament_size: int = DEFAULT_MAX_TOURNAMENT_SIZE
    diversity_threshold: float = Field(
        default=DEFAULT_TOURNAMENT_DIVERSITY_THRESHOLD, ge=0.0, le=1.0
    )


class SharingOptions(_Options):
    niche_radius: float = Field(default=DEFAULT_NICHE_RADIUS, gt=0.0)
    sharing_alpha: float = Field(default=DEFAULT_SHARING_ALPHA, gt=0.0)
    preserve_raw_fitness: bool = True


class NicheRadiusOptions(_Options):
    strategy: NicheRadiusStrategy = NicheRadiusStrategy.OBJECTIVE_RANGE
    radius: float = Field(default=DEFAULT_NICHE_RADIUS, gt=0.0)
    fraction: float = Field(default=DEFAULT_RADIUS_FRACTION, gt=0.0)
    base_radius: float = Field(default=DEFAULT_BASE_RADIUS, gt=0.0)
    target_diversity: float = Field(default=DEFAULT_TARGET_DIVERSITY, gt=0.0)


class AdaptiveSharingOptions(SharingOptions):
    diversity_threshold: float = Field(default=DEFAULT_SHARING_DIVERSITY_THRESHOLD, ge=0.0)
    diversity_metric: DiversityMetric = DiversityMetric.CROWDING


SUPPORTED_PROFILES: Set[str] = {"nsga2", "frontier", "diverse", "exploratory", "advanced"}

PROFILE_PRESETS: Dict[str, Dict[str, Any]] = {
    "nsga2": {
        "elite_strategy": "standard",
        "elite_ratio": 0.15,
        "tournament_strategy": "pareto",
        "tournament_size": 2,
        "sharing_enabled": False,
    },
    "frontier": {
        "elite_strategy": "preserve_frontier",
        "elite_ratio": 0.2,
        "tournament_strategy": "pareto",
        "tournament_size": 3,
        "sharing_enabled": False,
    },
    "diverse": {
        "elite_strategy": "diverse",
        "elite_ratio": 0.2,
        "similarity_threshold": 0.02,
        "tournament_strategy": "diversity",
        "tournament_size": 3,
        "sharing_enabled": True,
        "sharing_diversity_threshold": 0.3,
    },
    "exploratory": {
        "elite_strategy": "preserve_frontier",
        "elite_ratio": 0.1,
        "tournament_strategy": "adaptive",
        "min_tournament_size": 2,
        "max_tournament_size": 5,
        "sharing_enabled": True,
        "niche_radius_strategy": "adaptive",
    },
    "advanced": {},
}


class SelectionConfig(BaseModel):
    """Per-generation selection settings for ``ParetoSelector``."""

    population_size: int = Field(default=10, ge=1)
    elite_strategy: EliteStrategy = EliteStrategy.PRESERVE_FRONTIER
    elite_ratio: float = Field(default=DEFAULT_ELITE_RATIO, ge=0.0, le=1.0)
    elite_count: Optional[int] = Field(default=None, ge=0)
    min_elites: int = Field(default=DEFAULT_MIN_ELITES, ge=0)
    similarity_threshold: float = Field(default=DEFAULT_SIMILARITY_THRESHOLD, ge=0.0)
    tournament_strategy: TournamentStrategy = TournamentStrategy.PARETO
    tournament_size: int = Field(default=DEFAULT_TOURNAMENT_SIZE, ge=2)
    min_tournament_size: int = Field(default=DEFAULT_MIN_TOURNAMENT_SIZE, ge=2)
    max_tournament_size: int = Field(default=DEFAULT_MAX_TOURNAMENT_SIZE, ge=2)
    tournament_diversity_threshold: float = Field(
        default=DEFAULT_TOURNAMENT_DIVERSITY_THRESHOLD, ge=0.0, le=1.0
    )
    sharing_enabled: bool = False
    niche_radius_strategy: NicheRadiusStrategy = NicheRadiusStrategy.OBJECTIVE_RANGE
    niche_radius: float = Field(default=DEFAULT_NICHE_RADIUS, gt=0.0)
    sharing_alpha: float = Field(default=DEFAULT_SHARING_ALPHA, gt=0.0)
    sharing_diversity_threshold: float = Field(
        default=DEFAULT_SHARING_DIVERSITY_THRESHOLD, ge=0.0
    )
    sharing_diversity_metric: DiversityMetric = DiversityMetric.CROWDING
    objective_weights: Dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_tournament_range(self) -> "SelectionConfig":
        if self.min_tournament_size > self.max_tournament_size:
            raise ValueError(
                f"min_tournament_size ({self.min_tournament_size}) exceeds "
                f"max_tournament_size ({self.max_tournament_size})"
            )
        return self

    def elite_count_for(self, population_size: int) -> int:
        return EliteOptions(
            elite_ratio=self.elite_ratio,
            elite_count=self.elite_count,
            min_elites=self.min_elites,
        ).resolve_count(population_size)

    @classmethod
    def from_profile(cls, profile: str, **overrides: Any) -> "SelectionConfig":
        """Create config from a named profile with optional overrides."""
        if profile not in SUPPORTED_PROFILES:
            raise ValueError(
                f"Unknown profile '{profile}'. "
                f"Supported: {', '.join(sorted(SUPPORTED_PROFILES))}"
            )
        defaults = dict(PROFILE_PRESETS.get(profile, {}))
        defaults.update(overrides)
        return cls(**defaults)


def _round_half_up(value: float) -> int:
    return int(value + 0.5)
