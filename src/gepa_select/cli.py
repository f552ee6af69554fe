"""Command-line interface for GEPA Select."""

import argparse
import json
import os
import random
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")
    os.environ["PYTHONIOENCODING"] = "utf-8"

import yaml
from loguru import logger
from pydantic import ValidationError

from .config import get_settings
from .core import ParetoSelector
from .core.io import ReportPrinter
from .core.state import POPULATION_FORMAT_VERSION, PopulationStore
from .models import Candidate, Result, SelectionConfig
from .models.config import SUPPORTED_PROFILES

GEPA_SELECT_YAML = "gepa_select.yaml"
EXAMPLE_POPULATION_FILE = "population.json"
COMMANDS = ("rank", "survive", "elites", "parents", "share", "step")

EXAMPLE_CONFIG = """\
# GEPA Select Configuration

# Profile: nsga2 | frontier | diverse | exploratory | advanced
#   nsga2       - standard elitism, binary Pareto tournaments
#   frontier    - keep the whole Pareto front as elites (default)
#   diverse     - spread-out elites, diversity tournaments, fitness sharing
#   exploratory - adaptive tournaments and adaptive niche radius
#   advanced    - no presets, you control every parameter
profile: frontier

# Optional overrides (any value below overrides the profile default)
# population_size: 10
# elite_ratio: 0.15
# tournament_size: 3
# sharing_enabled: false
# objective_weights:
#   accuracy: 1.0
#   brevity: 0.5
"""

EXAMPLE_CANDIDATES = [
    {
        "id": "c1",
        "prompt": "Classify the sentiment of the text as positive, negative, or neutral.",
        "fitness": 0.82,
        "objectives": {"accuracy": 0.9, "brevity": 0.4},
        "normalized_objectives": {"accuracy": 0.9, "brevity": 0.4},
    },
    {
        "id": "c2",
        "prompt": "Sentiment (positive/negative/neutral):",
        "fitness": 0.74,
        "objectives": {"accuracy": 0.7, "brevity": 0.9},
        "normalized_objectives": {"accuracy": 0.7, "brevity": 0.9},
    },
    {
        "id": "c3",
        "prompt": "Read the text carefully and answer with one sentiment label.",
        "fitness": 0.78,
        "objectives": {"accuracy": 0.8, "brevity": 0.6},
        "normalized_objectives": {"accuracy": 0.8, "brevity": 0.6},
    },
    {
        "id": "c4",
        "prompt": "What is the sentiment? Explain your reasoning, then give the label.",
        "fitness": 0.55,
        "objectives": {"accuracy": 0.6, "brevity": 0.3},
        "normalized_objectives": {"accuracy": 0.6, "brevity": 0.3},
    },
]


def main(argv: Optional[List[str]] = None) -> None:
    """GEPA Select CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="gepa-select",
        description="GEPA Select - multi-objective selection for prompt evolution",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init", help="Create example config and population files")

    for command, help_text in (
        ("rank", "Assign Pareto ranks and crowding distances"),
        ("survive", "Environmental selection over parents and offspring"),
        ("elites", "Select elites with the configured strategy"),
        ("parents", "Select a mating pool by tournament"),
        ("share", "Apply fitness sharing"),
        ("step", "Run a full selection step for one generation"),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        _add_selection_arguments(sub)

    args = parser.parse_args(argv)
    settings = get_settings()
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level.upper())

    if args.command == "init":
        cmd_init()
    elif args.command in COMMANDS:
        cmd_select(args, settings.profile, settings.seed)
    else:
        parser.print_help()


def _add_selection_arguments(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--population", type=str, required=True, help="Population JSON file")
    sub.add_argument("--offspring", type=str, help="Offspring JSON file (survive, step)")
    sub.add_argument("--config", type=str, default=GEPA_SELECT_YAML, help="Config file path")
    sub.add_argument(
        "--profile",
        type=str,
        choices=sorted(SUPPORTED_PROFILES),
        help="Selection profile: nsga2|frontier|diverse|exploratory|advanced",
    )
    sub.add_argument("--count", type=int, help="Number of candidates to select")
    sub.add_argument("--seed", type=int, help="Random seed for tournaments and sampling")
    sub.add_argument("--output", type=str, help="Write selected candidates to this JSON file")


def cmd_init() -> None:
    """Create example GEPA Select project files."""
    cwd = Path.cwd()

    population = {
        "version": POPULATION_FORMAT_VERSION,
        "population": {
            "capacity": 10,
            "generation": 0,
            "candidates": EXAMPLE_CANDIDATES,
        },
    }
    files = {
        GEPA_SELECT_YAML: EXAMPLE_CONFIG,
        EXAMPLE_POPULATION_FILE: json.dumps(population, indent=2, ensure_ascii=False) + "\n",
    }

    for filename, content in files.items():
        filepath = cwd / filename
        if filepath.exists():
            logger.warning(f"Skipped (already exists): {filename}")
            continue
        filepath.write_text(content, encoding="utf-8")
        logger.success(f"Created: {filename}")

    print("\nProject initialized! Next steps:")
    print(f"  1. Edit {GEPA_SELECT_YAML} to choose a profile")
    print(f"  2. Replace {EXAMPLE_POPULATION_FILE} with your evaluated candidates")
    print(f"  3. Run: gepa-select step --population {EXAMPLE_POPULATION_FILE}")


def cmd_select(
    args: argparse.Namespace,
    env_profile: Optional[str] = None,
    env_seed: Optional[int] = None,
) -> None:
    """Run one selection command and print the outcome."""
    try:
        effective = _merge_config(_load_yaml_config(args.config), args, env_profile)
        config = _build_selection_config(effective)
    except (ValueError, ValidationError) as e:
        logger.error(str(e))
        sys.exit(1)

    store = PopulationStore()
    population = _exit_on_failure(store.load_candidates(args.population))
    offspring: List[Candidate] = []
    if args.offspring:
        offspring = _exit_on_failure(store.load_candidates(args.offspring))

    seed = args.seed if args.seed is not None else env_seed
    selector = ParetoSelector(config, rng=random.Random(seed))
    printer = ReportPrinter()

    if args.command == "step":
        selection = _exit_on_failure(selector.step(population, offspring, args.count))
        printer.print_selection(selection)
        frontier = selection.frontier
        if frontier and all(c.normalized_objectives is not None for c in frontier):
            printer.print_recommended(_exit_on_failure(selector.get_recommended_candidate(frontier)))
        selected = selection.survivors
    else:
        selected = _run_command(args.command, selector, population, offspring, args.count)
        printer.print_candidates(selected, args.command.capitalize())

    if args.output:
        _exit_on_failure(store.save_candidates(selected, args.output))


def _run_command(
    command: str,
    selector: ParetoSelector,
    population: List[Candidate],
    offspring: List[Candidate],
    count: Optional[int],
) -> List[Candidate]:
    """Dispatch a single selection command."""
    if command == "survive":
        return _exit_on_failure(selector.select_population(population, offspring))

    ranked = _exit_on_failure(selector.crowding.rank_population(population + offspring))
    if command == "rank":
        return ranked
    if command == "elites":
        if count is not None:
            return _exit_on_failure(
                selector.elite_selector.select_elites(ranked, elite_count=count)
            )
        return _exit_on_failure(selector.select_elites(ranked))
    if command == "parents":
        return _exit_on_failure(selector.select_parents(ranked, count))
    return _exit_on_failure(
        selector.sharing.apply_sharing(
            ranked,
            niche_radius=selector.config.niche_radius,
            sharing_alpha=selector.config.sharing_alpha,
            preserve_raw_fitness=True,
        )
    )


def _exit_on_failure(result: Result) -> Any:
    if not result.ok:
        logger.error(f"Selection failed: {result.error}")
        sys.exit(1)
    return result.value


def _load_yaml_config(config_path: str) -> Dict[str, Any]:
    """Load YAML config file if it exists."""
    path = Path(config_path)
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _merge_config(
    yaml_data: Dict[str, Any],
    args: argparse.Namespace,
    env_profile: Optional[str] = None,
) -> Dict[str, Any]:
    """Merge config layers: profile < YAML < CLI."""
    result = dict(yaml_data)
    if args.profile is not None:
        result["profile"] = args.profile

    profile = (result.get("profile") or env_profile or "frontier").strip().lower()
    if profile not in SUPPORTED_PROFILES:
        raise ValueError(
            f"Unsupported profile '{profile}'. "
            f"Supported: {', '.join(sorted(SUPPORTED_PROFILES))}"
        )
    result["profile"] = profile
    return result


def _build_selection_config(effective: Dict[str, Any]) -> SelectionConfig:
    """Build SelectionConfig from effective config dict."""
    config_fields = SelectionConfig.model_fields
    overrides = {
        key: value
        for key, value in effective.items()
        if key in config_fields and value is not None
    }
    return SelectionConfig.from_profile(effective["profile"], **overrides)


if __name__ == "__main__":
    main()
