"""Rich-powered console output for SnipThread."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from snipthread import __version__
from snipthread.graph.models import Snippet
from snipthread.thread.models import ThreadContext

_AXIS_STYLES = {
    "upstream": "blue",
    "downstream": "green",
    "lateral": "magenta",
}


class Console:
    """Terminal output for SnipThread using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole()

    def banner(self) -> None:
        """Show the SnipThread banner."""
        self.console.print(
            Panel(
                f"[bold cyan]SnipThread[/bold cyan] [dim]v{__version__}[/dim]\n"
                "[dim]Every thought, with what led to it and what followed[/dim]",
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

    def show_stats(self, stats: dict) -> None:
        """Display store statistics in a table."""
        table = Table(title="Snippet Graph Statistics", border_style="cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Count", justify="right", style="cyan")

        table.add_row("Snippets", str(stats.get("snippets", 0)))
        table.add_row("Edges", str(stats.get("edges", 0)))

        types = stats.get("types", {})
        if types:
            table.add_section()
            for kind, count in sorted(types.items(), key=lambda x: -x[1]):
                table.add_row(f"  {kind}", str(count))

        self.console.print(table)

    @staticmethod
    def _label(snippet: Snippet) -> str:
        content = snippet.content
        if len(content) > 80:
            content = content[:80] + "..."
        return f"[bold]#{snippet.id}[/bold] {content} [dim]({snippet.type}, t={snippet.timestamp})[/dim]"

    def show_thread(self, context: ThreadContext) -> None:
        """Display a thread context as a tree around its focus."""
        tree = Tree(f"[bold cyan]{self._label(context.focus)}[/bold cyan]")
        meta = context.meta
        spokes = [
            ("upstream", context.upstream, context.upstream.relation.value, meta.has_more_upstream),
            ("downstream", context.downstream, context.downstream.relation.value, meta.has_more_downstream),
            ("lateral", context.lateral, f"similarity {context.lateral.similarity:.1f}", meta.has_more_lateral),
        ]
        for axis, group, tag, has_more in spokes:
            style = _AXIS_STYLES[axis]
            branch = tree.add(f"[{style}]{axis}[/{style}] [dim]{tag}[/dim]")
            if group.error:
                branch.add(f"[red]failed: {group.error}[/red]")
                continue
            if not group.nodes:
                branch.add("[dim]nothing found[/dim]")
            for node in group.nodes:
                branch.add(self._label(node))
            if has_more:
                branch.add("[dim]... more available[/dim]")

        self.console.print(tree)
