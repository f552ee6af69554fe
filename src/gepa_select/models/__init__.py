"""Data models for multi-objective selection."""

from .candidate import (
    BOUNDARY_DISTANCE,
    Candidate,
    distance_sort_key,
    format_distance,
    selection_sort_key,
)
from .config import (
    PROFILE_PRESETS,
    SUPPORTED_PROFILES,
    DiversityMetric,
    EliteStrategy,
    NicheRadiusStrategy,
    SelectionConfig,
    TournamentStrategy,
)
from .generation import GenerationSelection
from .population import Population
from .result import (
    ErrorCode,
    MissingObjectivesError,
    Result,
    SelectionError,
    SelectionFailure,
)

__all__ = [
    "BOUNDARY_DISTANCE",
    "Candidate",
    "DiversityMetric",
    "EliteStrategy",
    "ErrorCode",
    "GenerationSelection",
    "MissingObjectivesError",
    "NicheRadiusStrategy",
    "PROFILE_PRESETS",
    "Population",
    "Result",
    "SUPPORTED_PROFILES",
    "SelectionConfig",
    "SelectionError",
    "SelectionFailure",
    "TournamentStrategy",
    "distance_sort_key",
    "format_distance",
    "selection_sort_key",
]
