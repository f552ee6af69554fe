"""Population checkpoint save/load."""

import json
from pathlib import Path
from typing import List, Union

from loguru import logger
from pydantic import ValidationError

from ...models import Candidate, ErrorCode, Population, Result

POPULATION_FORMAT_VERSION = 1
STATE_FILENAME = "population.json"


class PopulationStore:
    """Persist and restore populations as versioned JSON.

    Boundary crowding distances are written as the JSON ``Infinity`` literal.
    """

    def resolve_path(self, path: Union[str, Path]) -> Path:
        """Resolve a population file path, accepting run directories."""
        resolved = Path(path)
        if resolved.is_dir():
            return resolved / STATE_FILENAME
        return resolved

    def save(self, population: Population, path: Union[str, Path]) -> "Result[Path]":
        """Save population state."""
        target = self.resolve_path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        state = {
            "version": POPULATION_FORMAT_VERSION,
            "population": population.model_dump(),
        }
        target.write_text(json.dumps(state, indent=2), encoding="utf-8")
        logger.info(f"Population saved (path: {target}, size: {population.size})")
        return Result.success(target)

    def load(self, path: Union[str, Path]) -> "Result[Population]":
        """Load population state."""
        source = self.resolve_path(path)
        if not source.exists():
            return Result.failure(
                ErrorCode.FILE_NOT_FOUND, f"Population file not found: {source}"
            )
        try:
            state = json.loads(source.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse population file (path: {source}, error: {e})")
            return Result.failure(ErrorCode.INVALID_FORMAT, f"Invalid JSON: {e}")

        if not isinstance(state, dict) or "population" not in state:
            return Result.failure(ErrorCode.INVALID_FORMAT, "Missing 'population' section")
        version = state.get("version")
        if version != POPULATION_FORMAT_VERSION:
            return Result.failure(
                ErrorCode.UNSUPPORTED_VERSION,
                f"Unsupported population format version: {version}",
                version=version,
            )
        try:
            population = Population.model_validate(state["population"])
        except ValidationError as e:
            logger.error(f"Invalid population data (path: {source}): {e.errors()[0]['msg']}")
            return Result.failure(ErrorCode.INVALID_FORMAT, str(e.errors()[0]["msg"]))

        logger.info(f"Population loaded (path: {source}, size: {population.size})")
        return Result.success(population)

    def load_candidates(self, path: Union[str, Path]) -> "Result[List[Candidate]]":
        """Load a population file or a bare JSON list of candidates."""
        source = self.resolve_path(path)
        if not source.exists():
            return Result.failure(
                ErrorCode.FILE_NOT_FOUND, f"Population file not found: {source}"
            )
        try:
            data = json.loads(source.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            return Result.failure(ErrorCode.INVALID_FORMAT, f"Invalid JSON: {e}")
        if not isinstance(data, list):
            loaded = self.load(source)
            if not loaded.ok:
                return Result.from_error(loaded.error)
            return Result.success(loaded.unwrap().get_all())
        try:
            return Result.success([Candidate.model_validate(item) for item in data])
        except ValidationError as e:
            return Result.failure(ErrorCode.INVALID_FORMAT, str(e.errors()[0]["msg"]))

    def save_candidates(
        self, candidates: List[Candidate], path: Union[str, Path]
    ) -> "Result[Path]":
        """Save a bare candidate list, which may repeat ids (mating pools)."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        data = [candidate.model_dump() for candidate in candidates]
        target.write_text(json.dumps(data, indent=2), encoding="utf-8")
        logger.info(f"Candidates saved (path: {target}, count: {len(candidates)})")
        return Result.success(target)
