"""Rich console output for ranked candidates and selection steps."""

from typing import List, Optional

from rich.console import Console
from rich.table import Table

from ...models import Candidate, GenerationSelection, format_distance

PROMPT_PREVIEW_CHARS = 48


class ReportPrinter:
    """Print candidate tables and selection summaries."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_candidates(self, candidates: List[Candidate], title: str) -> None:
        """Print candidates with rank, crowding distance and objectives."""
        objective_names = sorted({n for c in candidates for n in c.objective_names()})
        table = Table(title=f"{title} ({len(candidates)})")
        table.add_column("#", justify="right", style="dim")
        table.add_column("ID", style="cyan")
        table.add_column("Gen", justify="right")
        table.add_column("Rank", justify="right")
        table.add_column("Crowding", justify="right")
        table.add_column("Fitness", justify="right")
        for name in objective_names:
            table.add_column(name, justify="right")
        table.add_column("Prompt")

        for i, candidate in enumerate(candidates, 1):
            row = [
                str(i),
                candidate.id,
                str(candidate.generation),
                str(candidate.pareto_rank) if candidate.pareto_rank is not None else "-",
                format_distance(candidate.crowding_distance),
                f"{candidate.fitness:.4f}" if candidate.fitness is not None else "-",
            ]
            row.extend(f"{candidate.objective(name):.4f}" for name in objective_names)
            row.append(_preview(candidate.prompt))
            table.add_row(*row)
        self.console.print(table)

    def print_selection(self, selection: GenerationSelection) -> None:
        """Print a generation selection summary."""
        self.console.print("\n[bold green]Selection step[/bold green]")
        fronts = ", ".join(f"F{rank}={size}" for rank, size in sorted(selection.front_sizes.items()))
        self.console.print(f"Fronts: [cyan]{fronts or '-'}[/cyan]")
        self.console.print(f"Diversity: [cyan]{selection.diversity:.3f}[/cyan]")
        self.console.print(f"Boundary: [cyan]{', '.join(selection.boundary_ids) or '-'}[/cyan]")
        if selection.sharing_applied:
            self.console.print("[yellow]Fitness sharing applied[/yellow]")
        self.print_candidates(selection.survivors, "Survivors")
        self.print_candidates(selection.elites, "Elites")

    def print_recommended(self, candidate: Candidate) -> None:
        self.console.print(f"\n[green]Recommended:[/green] [bold cyan]{candidate.id}[/bold cyan]")
        self.console.print(f"  {candidate.prompt if candidate.prompt is not None else '-'}")


def _preview(prompt: Optional[str]) -> str:
    if prompt is None:
        return "-"
    text = " ".join(prompt.split())
    if len(text) <= PROMPT_PREVIEW_CHARS:
        return text
    return text[: PROMPT_PREVIEW_CHARS - 3] + "..."
