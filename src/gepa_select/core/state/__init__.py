"""Population checkpoint persistence."""

from .state_manager import POPULATION_FORMAT_VERSION, PopulationStore

__all__ = ["POPULATION_FORMAT_VERSION", "PopulationStore"]
