"""Minimal GEPA Select example: three generations of Pareto selection on synthetic scores."""

import random

from gepa_select import Candidate, ParetoSelector, SelectionConfig

rng = random.Random(7)
config = SelectionConfig.from_profile("frontier", population_size=8)
selector = ParetoSelector(config, rng=rng)


def make_offspring(generation: int, count: int) -> list:
    offspring = []
    for i in range(count):
        accuracy = round(rng.uniform(0.4, 1.0), 3)
        brevity = round(rng.uniform(0.2, 1.0), 3)
        scores = {"accuracy": accuracy, "brevity": brevity}
        offspring.append(
            Candidate(
                id=f"g{generation}-{i}",
                prompt=f"Prompt variant {generation}.{i}",
                generation=generation,
                fitness=(accuracy + brevity) / 2,
                objectives=scores,
                normalized_objectives=scores,
            )
        )
    return offspring


population = make_offspring(0, 8)
for generation in range(1, 4):
    selection = selector.step(population, make_offspring(generation, 8)).unwrap()
    population = selection.survivors
    print(
        f"Generation {generation}: frontier={len(selection.frontier)}, "
        f"elites={len(selection.elites)}, diversity={selection.diversity:.3f}"
    )

recommended = selector.get_recommended_candidate(
    [c for c in population if c.pareto_rank == 1],
    weights={"accuracy": 1.0, "brevity": 0.5},
).unwrap()
print(f"\nRecommended: {recommended}")
