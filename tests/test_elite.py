"""Tests for elite preservation strategies."""

import math

import pytest

from gepa_select import CrowdingDistanceSelector, EliteSelector, ErrorCode


@pytest.fixture
def elite_selector():
    return EliteSelector()


@pytest.fixture
def ranked(four_candidates):
    return CrowdingDistanceSelector().rank_population(four_candidates).unwrap()


def test_select_elites_by_ratio_and_count(elite_selector, ranked):
    assert [c.id for c in elite_selector.select_elites(ranked).unwrap()] == ["A"]
    assert [c.id for c in elite_selector.select_elites(ranked, elite_count=2).unwrap()] == [
        "A",
        "B",
    ]
    assert len(elite_selector.select_elites(ranked, elite_count=10).unwrap()) == 4
    assert len(elite_selector.select_elites(ranked, elite_ratio=0.5).unwrap()) == 2


def test_select_elites_edge_cases(elite_selector, ranked, four_candidates):
    assert elite_selector.select_elites([]).unwrap() == []
    assert elite_selector.select_elites(ranked, elite_ratio=1.5).error.code is ErrorCode.INVALID_OPTION
    assert elite_selector.select_elites(four_candidates).error.code is ErrorCode.MISSING_PARETO_RANK


def test_pareto_front_1(elite_selector, four_candidates):
    front = elite_selector.select_pareto_front_1(four_candidates).unwrap()
    assert [c.id for c in front] == ["A", "B", "C"]
    assert all(c.pareto_rank == 1 for c in front)


def test_preserve_frontier_trims_large_front(elite_selector, four_candidates):
    elites = elite_selector.select_elites_preserve_frontier(four_candidates, elite_count=2).unwrap()
    assert {c.id for c in elites} == {"A", "B"}


def test_preserve_frontier_fills_from_lower_fronts(elite_selector, four_candidates):
    elites = elite_selector.select_elites_preserve_frontier(four_candidates, elite_count=4).unwrap()
    assert [c.id for c in elites] == ["A", "B", "C", "D"]

    exact = elite_selector.select_elites_preserve_frontier(four_candidates, elite_count=3).unwrap()
    assert {c.id for c in exact} == {"A", "B", "C"}


def test_preserve_frontier_requires_count(elite_selector, four_candidates):
    result = elite_selector.select_elites_preserve_frontier(four_candidates)
    assert result.error.code is ErrorCode.MISSING_REQUIRED_OPTION


def test_frontier_never_regresses_across_generations(make_candidate):
    selector = EliteSelector()
    comparator = selector.comparator
    crowding = selector.crowding_selector

    generation_0 = [
        make_candidate("g0-a", {"x": 0.8, "y": 0.2}),
        make_candidate("g0-b", {"x": 0.2, "y": 0.8}),
        make_candidate("g0-c", {"x": 0.3, "y": 0.3}),
    ]
    elites_0 = selector.select_elites_preserve_frontier(generation_0, elite_count=2).unwrap()

    offspring = [
        make_candidate("g1-a", {"x": 0.85, "y": 0.25}, generation=1),
        make_candidate("g1-b", {"x": 0.1, "y": 0.1}, generation=1),
        make_candidate("g1-c", {"x": 0.5, "y": 0.5}, generation=1),
    ]
    survivors = crowding.environmental_selection(elites_0 + offspring, target_size=3).unwrap()
    elites_1 = selector.select_elites_preserve_frontier(survivors, elite_count=3).unwrap()

    for elite in elites_0:
        assert any(
            c.id == elite.id or comparator.dominates(c, elite) for c in elites_1
        )


def test_diverse_elites_skip_near_duplicates(elite_selector, make_candidate):
    population = [
        make_candidate("A", {"x": 0.9, "y": 0.1}, rank=1, distance=math.inf),
        make_candidate("B", {"x": 0.1, "y": 0.9}, rank=1, distance=math.inf),
        make_candidate("A2", {"x": 0.9, "y": 0.105}, rank=1, distance=0.5),
        make_candidate("C", {"x": 0.5, "y": 0.5}, rank=2, distance=math.inf),
    ]
    elites = elite_selector.select_diverse_elites(
        population, elite_count=3, similarity_threshold=0.01
    ).unwrap()
    assert [c.id for c in elites] == ["A", "B", "C"]


def test_diverse_elites_prefer_older_on_ties(elite_selector, make_candidate):
    population = [
        make_candidate("young", {"x": 0.2}, rank=1, distance=0.5, generation=3),
        make_candidate("old", {"x": 0.8}, rank=1, distance=0.5, generation=1),
    ]
    elites = elite_selector.select_diverse_elites(population, elite_count=1).unwrap()
    assert [c.id for c in elites] == ["old"]
