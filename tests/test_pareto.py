"""Tests for the per-generation Pareto selector."""

import math

import pytest

from gepa_select import ErrorCode, ParetoSelector, SelectionConfig


def make_selector(profile="nsga2", rng=None, **overrides):
    return ParetoSelector(SelectionConfig.from_profile(profile, **overrides), rng=rng)


def test_step_selects_survivors_elites_and_mating_pool(four_candidates, rng):
    selector = make_selector("nsga2", rng, population_size=3)
    selection = selector.step(four_candidates[:2], four_candidates[2:]).unwrap()

    assert {c.id for c in selection.survivors} == {"A", "B", "C"}
    assert [c.id for c in selection.elites] == ["A"]
    assert len(selection.mating_pool) == 3
    assert selection.front_sizes == {1: 3}
    assert set(selection.boundary_ids) == {"A", "B"}
    assert len(selection.frontier) == 3
    assert selection.diversity == 0.0
    assert not selection.sharing_applied


def test_step_mating_pool_size_override(four_candidates, rng):
    selector = make_selector("frontier", rng, population_size=4)
    selection = selector.step(four_candidates, [], mating_pool_size=7).unwrap()
    assert len(selection.mating_pool) == 7
    assert all(c.pareto_rank is not None for c in selection.mating_pool)


def test_step_reports_missing_objectives(four_candidates, make_candidate, rng):
    selector = make_selector("nsga2", rng, population_size=3)
    result = selector.step(four_candidates, [make_candidate("E")])
    assert result.error.code is ErrorCode.MISSING_OBJECTIVES


def test_select_population_empty(rng):
    assert make_selector(rng=rng).select_population([], []).unwrap() == []


def test_select_parents_single_candidate(make_candidate, rng):
    only = make_candidate("only", {"x": 0.5}, rank=1, distance=math.inf)
    parents = make_selector(rng=rng).select_parents([only], count=3).unwrap()
    assert [c.id for c in parents] == ["only", "only", "only"]


def test_select_parents_with_sharing(four_candidates, rng):
    selector = make_selector("diverse", rng, population_size=4)
    ranked = selector.crowding.rank_population(four_candidates).unwrap()
    parents = selector.select_parents(ranked, count=5).unwrap()
    assert len(parents) == 5


def test_select_elites_diverse_strategy(four_candidates, rng):
    selector = make_selector("diverse", rng, population_size=4, elite_count=3)
    ranked = selector.crowding.rank_population(four_candidates).unwrap()
    elites = selector.select_elites(ranked).unwrap()
    assert [c.id for c in elites] == ["A", "B", "C"]


def test_pareto_frontier(four_candidates, rng):
    frontier = make_selector(rng=rng).get_pareto_frontier(four_candidates).unwrap()
    assert [c.id for c in frontier] == ["A", "B", "C"]


def test_recommended_candidate_uses_weights(four_candidates, rng):
    selector = make_selector(rng=rng)
    frontier = four_candidates[:3]

    weighted = selector.get_recommended_candidate(frontier, weights={"x": 1.0, "y": 0.5})
    assert weighted.unwrap().id == "A"
    favour_y = selector.get_recommended_candidate(frontier, weights={"x": 0.1})
    assert favour_y.unwrap().id == "B"


def test_recommended_candidate_errors(make_candidate, rng):
    selector = make_selector(rng=rng)
    assert selector.get_recommended_candidate([]).error.code is ErrorCode.EMPTY_POPULATION
    result = selector.get_recommended_candidate([make_candidate("raw")])
    assert result.error.code is ErrorCode.MISSING_OBJECTIVES
    assert result.error.candidate_id == "raw"


def test_unknown_profile():
    with pytest.raises(ValueError):
        SelectionConfig.from_profile("greedy")


def test_config_rejects_inverted_tournament_range():
    with pytest.raises(ValueError):
        SelectionConfig(min_tournament_size=5, max_tournament_size=3)


def test_sharing_flag_ignores_stale_metadata(make_candidate, rng):
    population = [
        make_candidate(cid, objectives, metadata={"niche_count": 2.0})
        for cid, objectives in (
            ("A", {"x": 0.9, "y": 0.1}),
            ("B", {"x": 0.1, "y": 0.9}),
            ("C", {"x": 0.5, "y": 0.5}),
            ("D", {"x": 0.4, "y": 0.4}),
        )
    ]
    selection = make_selector("nsga2", rng, population_size=4).step(population, []).unwrap()
    assert not selection.sharing_applied


def test_sharing_flag_reports_skipped_sharing(four_candidates, rng):
    selector = make_selector("diverse", rng, population_size=4, sharing_diversity_threshold=0.0)
    selection = selector.step(four_candidates, []).unwrap()
    assert not selection.sharing_applied
    assert all("niche_count" not in c.metadata for c in selection.mating_pool)


def test_sharing_flag_reports_applied_sharing(four_candidates, rng):
    selector = make_selector(
        "diverse", rng, population_size=4, sharing_diversity_threshold=100.0
    )
    selection = selector.step(four_candidates, []).unwrap()
    assert selection.sharing_applied
    assert all("niche_count" in c.metadata for c in selection.mating_pool)
