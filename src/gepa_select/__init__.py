"""GEPA Select - multi-objective selection for prompt evolution."""

from .config import Settings, get_settings
from .core import (
    CrowdingDistanceSelector,
    DominanceComparator,
    DominanceRelation,
    EliteSelector,
    FitnessSharing,
    ParetoSelector,
    TournamentSelector,
)
from .core.state import PopulationStore
from .models import (
    Candidate,
    ErrorCode,
    GenerationSelection,
    Population,
    Result,
    SelectionConfig,
    SelectionError,
    SelectionFailure,
)

__version__ = "0.1.0"

__all__ = [
    "ParetoSelector",
    "DominanceComparator",
    "DominanceRelation",
    "CrowdingDistanceSelector",
    "EliteSelector",
    "TournamentSelector",
    "FitnessSharing",
    "PopulationStore",
    "Settings",
    "get_settings",
    "Candidate",
    "Population",
    "GenerationSelection",
    "SelectionConfig",
    "Result",
    "ErrorCode",
    "SelectionError",
    "SelectionFailure",
]
