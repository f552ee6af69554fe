"""Tests for tournament parent selection."""

import math
import random

import pytest

from gepa_select import ErrorCode, TournamentSelector
from gepa_select.core.tournament import (
    adaptive_tournament_size,
    diversity_compare,
    pareto_compare,
    population_diversity,
)


@pytest.fixture
def ranked_population(make_candidate):
    return [
        make_candidate("best", {"x": 0.9, "y": 0.9}, rank=1, distance=math.inf),
        make_candidate("mid-1", {"x": 0.6, "y": 0.3}, rank=2, distance=math.inf),
        make_candidate("mid-2", {"x": 0.3, "y": 0.6}, rank=2, distance=math.inf),
        make_candidate("low-1", {"x": 0.2, "y": 0.2}, rank=3, distance=0.4),
        make_candidate("low-2", {"x": 0.1, "y": 0.1}, rank=4, distance=1.2),
    ]


def test_pareto_compare(make_candidate):
    r1 = make_candidate("r1", {"x": 0.5}, rank=1, distance=0.1)
    r2 = make_candidate("r2", {"x": 0.5}, rank=2, distance=math.inf)
    r1_boundary = make_candidate("r1b", {"x": 0.5}, rank=1, distance=math.inf)
    r1_boundary_2 = make_candidate("r1b2", {"x": 0.5}, rank=1, distance=math.inf)

    assert pareto_compare(r1, r2)
    assert not pareto_compare(r2, r1)
    assert pareto_compare(r1_boundary, r1)
    assert not pareto_compare(r1_boundary, r1_boundary_2)
    assert not pareto_compare(r1_boundary_2, r1_boundary)


def test_diversity_compare(make_candidate):
    spread = make_candidate("spread", {"x": 0.5}, rank=2, distance=math.inf)
    crowded = make_candidate("crowded", {"x": 0.5}, rank=1, distance=0.3)
    assert diversity_compare(spread, crowded)
    assert not diversity_compare(crowded, spread)


def test_full_size_tournament_always_picks_dominant(ranked_population, rng):
    selector = TournamentSelector(rng)
    parents = selector.select(ranked_population, count=10, tournament_size=5).unwrap()
    assert len(parents) == 10
    assert all(p.id == "best" for p in parents)


def test_seeded_selection_is_reproducible(ranked_population):
    first = TournamentSelector(random.Random(7)).select(
        ranked_population, count=8, tournament_size=2
    )
    second = TournamentSelector(random.Random(7)).select(
        ranked_population, count=8, tournament_size=2
    )
    assert [c.id for c in first.unwrap()] == [c.id for c in second.unwrap()]


def test_count_may_exceed_population(ranked_population, rng):
    parents = TournamentSelector(rng).select(ranked_population, count=12, tournament_size=2)
    assert len(parents.unwrap()) == 12


def test_select_errors(ranked_population, four_candidates, rng):
    selector = TournamentSelector(rng)
    assert selector.select(ranked_population).error.code is ErrorCode.MISSING_REQUIRED_OPTION
    assert selector.select([], count=2).error.code is ErrorCode.EMPTY_POPULATION
    assert selector.select(four_candidates, count=2).error.code is ErrorCode.MISSING_PARETO_RANK
    assert selector.select(ranked_population, count=0).error.code is ErrorCode.INVALID_COUNT
    assert (
        selector.select(ranked_population, count=2, tournament_size=1).error.code
        is ErrorCode.INVALID_TOURNAMENT_SIZE
    )
    assert (
        selector.select(ranked_population, count=2, tournament_size=6).error.code
        is ErrorCode.INVALID_TOURNAMENT_SIZE
    )
    assert (
        selector.select(ranked_population, count=2, strategy="roulette").error.code
        is ErrorCode.INVALID_STRATEGY
    )


def test_adaptive_size_errors(ranked_population, rng):
    selector = TournamentSelector(rng)

    def adaptive(**kwargs):
        return selector.select(ranked_population, count=2, strategy="adaptive", **kwargs)

    assert adaptive(min_tournament_size=1, max_tournament_size=3).error.code is (
        ErrorCode.INVALID_MIN_TOURNAMENT_SIZE
    )
    assert adaptive(min_tournament_size=2, max_tournament_size=6).error.code is (
        ErrorCode.INVALID_MAX_TOURNAMENT_SIZE
    )
    assert adaptive(min_tournament_size=4, max_tournament_size=3).error.code is (
        ErrorCode.MIN_GREATER_THAN_MAX
    )


def test_adaptive_tournament_ignores_tournament_size(ranked_population, rng):
    result = TournamentSelector(rng).select(
        ranked_population,
        count=4,
        strategy="adaptive",
        tournament_size=99,
        min_tournament_size=2,
        max_tournament_size=5,
    )
    assert len(result.unwrap()) == 4


def test_population_diversity(make_candidate):
    uniform = [
        make_candidate(f"u{i}", {"x": 0.5}, rank=1, distance=0.5) for i in range(3)
    ]
    assert population_diversity(uniform) == 0.0
    assert population_diversity(uniform[:1]) == 0.0

    spread = [
        make_candidate("s1", {"x": 0.5}, rank=1, distance=1.0),
        make_candidate("s2", {"x": 0.5}, rank=1, distance=3.0),
        make_candidate("s3", {"x": 0.5}, rank=1, distance=math.inf),
    ]
    assert population_diversity(spread) == pytest.approx(math.tanh(0.5))


def test_adaptive_tournament_size():
    assert adaptive_tournament_size(0.2, 2, 6, 0.5) == 2
    assert adaptive_tournament_size(0.75, 2, 6, 0.5) == 4
    assert adaptive_tournament_size(1.0, 2, 6, 1.0) == 6


def test_small_tournaments_replay_from_seed(ranked_population):
    parents = TournamentSelector(random.Random(11)).select(
        ranked_population, count=6, tournament_size=3
    ).unwrap()

    replay = random.Random(11)
    expected = []
    for _ in range(6):
        entrants = replay.sample(ranked_population, 3)
        winner = entrants[0]
        for challenger in entrants[1:]:
            if pareto_compare(challenger, winner):
                winner = challenger
        expected.append(winner.id)
    assert [c.id for c in parents] == expected
