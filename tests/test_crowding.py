"""Tests for crowding-distance survivor selection."""

import math

import pytest

from gepa_select import CrowdingDistanceSelector, ErrorCode


@pytest.fixture
def selector():
    return CrowdingDistanceSelector()


def test_rank_population(selector, four_candidates):
    ranked = {c.id: c for c in selector.rank_population(four_candidates).unwrap()}
    assert ranked["A"].pareto_rank == 1
    assert ranked["D"].pareto_rank == 2
    assert ranked["A"].crowding_distance == math.inf
    assert ranked["C"].crowding_distance == pytest.approx(2.0)
    assert ranked["D"].crowding_distance == math.inf


def test_assign_distances_requires_ranks(selector, four_candidates):
    result = selector.assign_crowding_distances(four_candidates)
    assert result.error.code is ErrorCode.MISSING_PARETO_RANK
    assert result.error.candidate_id == "A"


@pytest.mark.parametrize("target_size", [1, 2, 3, 4])
def test_environmental_selection_returns_target_size(selector, four_candidates, target_size):
    survivors = selector.environmental_selection(four_candidates, target_size=target_size).unwrap()
    assert len(survivors) == target_size
    assert len({c.id for c in survivors}) == target_size


def test_environmental_selection_keeps_whole_first_front(selector, four_candidates):
    survivors = selector.environmental_selection(four_candidates, target_size=3).unwrap()
    assert {c.id for c in survivors} == {"A", "B", "C"}
    assert all(c.pareto_rank == 1 for c in survivors)


def test_environmental_selection_trims_by_crowding(selector, four_candidates):
    survivors = selector.environmental_selection(four_candidates, target_size=2).unwrap()
    assert {c.id for c in survivors} == {"A", "B"}


def test_environmental_selection_errors(selector, four_candidates, make_candidate):
    assert (
        selector.environmental_selection(four_candidates).error.code
        is ErrorCode.MISSING_REQUIRED_OPTION
    )
    assert (
        selector.environmental_selection(four_candidates, target_size=0).error.code
        is ErrorCode.INVALID_TARGET_SIZE
    )
    assert (
        selector.environmental_selection(four_candidates, target_size=5).error.code
        is ErrorCode.TARGET_EXCEEDS_POPULATION
    )
    unevaluated = four_candidates + [make_candidate("E")]
    result = selector.environmental_selection(unevaluated, target_size=2)
    assert result.error.code is ErrorCode.MISSING_OBJECTIVES
    assert result.error.candidate_id == "E"


def test_select_by_crowding_distance(selector, four_candidates):
    ranked = selector.rank_population(four_candidates).unwrap()
    kept = selector.select_by_crowding_distance(ranked, count=3).unwrap()
    assert [c.id for c in kept] == ["A", "B", "C"]

    assert (
        selector.select_by_crowding_distance(ranked, count=5).error.code
        is ErrorCode.COUNT_EXCEEDS_POPULATION
    )
    assert (
        selector.select_by_crowding_distance(ranked, count=0).error.code
        is ErrorCode.INVALID_COUNT
    )
    assert (
        selector.select_by_crowding_distance(four_candidates, count=2).error.code
        is ErrorCode.MISSING_PARETO_RANK
    )


def test_boundary_solutions_match_infinite_distance(selector, four_candidates):
    front = four_candidates[:3]
    boundary = selector.identify_boundary_solutions(front)
    assert set(boundary) == {"A", "B"}

    distances = selector.comparator.crowding_distance(front)
    assert set(boundary) == {cid for cid, d in distances.items() if math.isinf(d)}


def test_front_sizes(selector, four_candidates):
    ranked = selector.rank_population(four_candidates).unwrap()
    assert selector.front_sizes(ranked) == {1: 3, 2: 1}


def test_accuracy_latency_survivors(selector, make_candidate):
    candidates = [
        make_candidate("c1", {"acc": 0.9, "lat": 0.9}),
        make_candidate("c2", {"acc": 0.8, "lat": 0.8}),
        make_candidate("c3", {"acc": 0.85, "lat": 0.7}),
        make_candidate("c4", {"acc": 0.7, "lat": 0.85}),
    ]
    survivors = selector.environmental_selection(candidates, target_size=3).unwrap()

    assert [c.id for c in survivors] == ["c1", "c3", "c4"]
    assert all(c.crowding_distance == math.inf for c in survivors)


def test_tied_extremes_yield_single_boundary(selector, make_candidate):
    front = [
        make_candidate("p", {"x": 0.0, "y": 1.0}),
        make_candidate("s", {"x": 0.5, "y": 0.5}),
        make_candidate("q", {"x": 1.0, "y": 0.2}),
        make_candidate("r", {"x": 1.0, "y": 0.1}),
    ]
    assert selector.identify_boundary_solutions(front) == ["p", "r"]
