"""Shared fixtures for selection tests."""

import random
from typing import Any, Dict, Optional

import pytest

from gepa_select import Candidate


@pytest.fixture
def make_candidate():
    """Factory for candidates with normalized objectives."""

    def _make(
        cid: str,
        objectives: Optional[Dict[str, float]] = None,
        rank: Optional[int] = None,
        distance: Optional[float] = None,
        fitness: Optional[float] = None,
        generation: int = 0,
        prompt: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Candidate:
        return Candidate(
            id=cid,
            prompt=prompt if prompt is not None else f"prompt {cid}",
            generation=generation,
            fitness=fitness,
            objectives=dict(objectives) if objectives is not None else None,
            normalized_objectives=objectives,
            pareto_rank=rank,
            crowding_distance=distance,
            metadata=metadata or {},
        )

    return _make


@pytest.fixture
def four_candidates(make_candidate):
    """A and B trade off, C sits between them, D is dominated by C."""
    return [
        make_candidate("A", {"x": 0.9, "y": 0.1}, fitness=0.5),
        make_candidate("B", {"x": 0.1, "y": 0.9}, fitness=0.5),
        make_candidate("C", {"x": 0.5, "y": 0.5}, fitness=0.5),
        make_candidate("D", {"x": 0.4, "y": 0.4}, fitness=0.4),
    ]


@pytest.fixture
def rng():
    return random.Random(42)
