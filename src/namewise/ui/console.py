"""Rich-powered console output for Namewise."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from namewise.lm.ngram import UNK_SYMBOL
from namewise.renaming.models import Renaming
from namewise.snippets.models import SnippetSuggestions
from namewise.snippets.ranking import ReviewStats


def _display_name(name: str) -> str:
    return "[dim]<unknown>[/dim]" if name == UNK_SYMBOL else name


class Console:
    """Terminal output for Namewise using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole()

    def banner(self) -> None:
        self.console.print(
            Panel(
                "[bold cyan]Namewise[/bold cyan] [dim]v0.1.0[/dim]\n"
                "[dim]Spot identifier names that read unnaturally[/dim]",
                border_style="cyan",
                padding=(1, 2),
            )
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def progress(self) -> Progress:
        """Create a progress bar for training and review."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=self.console,
        )

    def show_stats(self, stats: dict) -> None:
        """Display model statistics in a table."""
        table = Table(title="Model Statistics", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right", style="cyan")

        table.add_row("Files", str(stats.get("files", 0)))
        table.add_row("Failed files", str(stats.get("failed", 0)))
        table.add_row("Vocabulary", str(stats.get("vocabulary", 0)))
        table.add_row("N-grams", str(stats.get("ngrams", 0)))
        if stats.get("pruned"):
            table.add_row("Pruned n-grams", str(stats["pruned"]))
        if stats.get("order"):
            table.add_section()
            table.add_row("Order", str(stats["order"]))
            table.add_row("Backoff factor", str(stats.get("backoff_factor", "")))

        self.console.print(table)

    def show_ranking(self, name: str, renamings: list[Renaming], limit: int = 10) -> None:
        """Display the ranked candidates for one identifier."""
        table = Table(title=f"Candidates for [bold]{name}[/bold]", border_style="cyan")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Score", justify="right", style="cyan")
        table.add_column("Contexts", justify="right", style="dim")

        for i, renaming in enumerate(renamings[:limit], 1):
            label = _display_name(renaming.name)
            if renaming.name == name:
                label = f"[green]{label}[/green] [dim](current)[/dim]"
            table.add_row(str(i), label, f"{renaming.score:.3f}", str(renaming.n_contexts))

        self.console.print(table)

    def show_suggestions(self, result: SnippetSuggestions) -> None:
        """Display the reported suggestions for one unit."""
        if not result.suggestions:
            self.success(f"{result.unit or 'snippet'}: no naming issues found")
            return

        table = Table(
            title=f"{result.unit or 'snippet'} [dim](score {result.score:.2f})[/dim]",
            border_style="yellow",
        )
        table.add_column("Line", justify="right", style="dim")
        table.add_column("Kind", style="dim")
        table.add_column("Identifier", style="bold")
        table.add_column("Suggestions")
        table.add_column("Gap", justify="right", style="yellow")

        for s in result.suggestions:
            alternatives = ", ".join(
                _display_name(r.name) for r in s.renamings if r.name != s.name
            )
            table.add_row(
                str(s.scope.line if s.scope else ""),
                s.kind.value,
                s.name,
                alternatives,
                f"{s.confidence_gap:.2f}",
            )

        self.console.print(table)

    def show_triage(self, ranked: list[SnippetSuggestions], stats: ReviewStats) -> None:
        """Display units ordered from least to most natural."""
        table = Table(title="Least Natural Files", border_style="red")
        table.add_column("#", justify="right", style="dim")
        table.add_column("File", style="cyan")
        table.add_column("Score", justify="right", style="bold")
        table.add_column("Suggestions", justify="right")

        for i, result in enumerate(ranked, 1):
            table.add_row(str(i), result.unit, f"{result.score:.2f}", str(len(result.suggestions)))

        self.console.print(table)
        self.console.print(
            f"[dim]{stats.units_scored} files scored, "
            f"{stats.identifiers_scored} identifiers, "
            f"{stats.units_failed} failed[/dim]"
        )
