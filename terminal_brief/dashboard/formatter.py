"""
Rich formatter for the terminal-brief dashboard.

Renders the composed markup to the terminal and, on request, a table of
module timings.
"""

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich import box

from terminal_brief.core.timing import Timings
from terminal_brief.dashboard.aggregator import WelcomeResult


class DashboardFormatter:
    """Prints dashboard output with Rich."""

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize formatter.

        Args:
            console: Rich Console instance (creates default if not provided)
        """
        self.console = console or Console(highlight=False, emoji=False)

    def format_metrics(self, timings: Timings) -> Table:
        """
        Create a table of per-module setup and display times.

        Args:
            timings: Durations recorded by the aggregator

        Returns:
            Rich Table with one row per module
        """
        table = Table(
            title="[dim]Module timings[/dim]",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Module")
        table.add_column("Setup", justify="right")
        table.add_column("Display", justify="right")

        modules = []
        for name, _ in timings.items():
            phase, _, module = name.partition("_")
            if phase in ("setup", "display") and module != "welcome" and module not in modules:
                modules.append(module)

        total = 0.0
        for module in modules:
            setup = timings.get(f"setup_{module}")
            display = timings.get(f"display_{module}")
            total += setup + display
            table.add_row(module, f"{setup:.3f}s", f"{display:.3f}s")
        table.add_row("[bold]total[/bold]", "", f"[bold]{total:.3f}s[/bold]")
        return table

    def render(self, result: WelcomeResult, show_metrics: bool = False) -> None:
        """
        Render the dashboard to the console.

        Args:
            result: Output of WelcomeAggregator.aggregate()
            show_metrics: Also print the timing table
        """
        self.console.print(result.text, highlight=False, emoji=False)
        if show_metrics:
            self.console.print(self.format_metrics(result.timings))
