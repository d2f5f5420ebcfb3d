# src/fxcuro/cli/formatter.py
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

# Initialize the Rich console for high-quality terminal output
console = Console()


class FxFormatter:
    """
    FxFormatter: The visual heart of the CLI.
    Responsible for rendering change logs, result tables, reports and summaries.
    """

    def __init__(self, out: Optional[Console] = None):
        self.console = out or console

    def show_change_log(self, entries: List[str]):
        """Lists every transformation applied to a script, in order."""
        for entry in entries:
            self.console.print(f"[bold cyan]🔧 Applied:[/bold cyan] {entry}")

    def print_final_table(self, reports: List[Dict[str, Any]]):
        """Builds the summary table shown at the very end of a run."""
        table = Table(title="FxCuro Execution Report", show_lines=True, header_style="bold magenta")
        table.add_column("File Path", style="cyan")
        table.add_column("Category", style="white")
        table.add_column("Status", style="bold")
        table.add_column("Result", justify="center")

        for r in reports:
            if r.get('status') == "ENGINE_ERROR":
                self.console.print(f"[bold red]Error in {r['file_path']}:[/bold red] {r.get('error')}")

            success = r.get('success', False)
            color = "green" if success else "yellow" if r.get('status') == "FALLBACK" else "red"
            icon = "✅" if success else "⚠️" if r.get('status') == "FALLBACK" else "❌"
            table.add_row(
                str(r.get('file_path')), str(r.get('category', 'Unknown')),
                f"[{color}]{r.get('status', 'FAILED')}[/{color}]", icon
            )

        self.console.print(table)

    def print_summary(self, summary: Dict[str, Any]):
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Total Files:     {summary['total_files']}\n"
            f"Normalized:      [green]{summary['successful']}[/green]\n"
            f"Fallbacks:       [yellow]{summary['fallbacks']}[/yellow]\n"
            f"System Errors:   [red]{summary['system_errors']}[/red]\n"
            f"Written:         {summary['written_to_disk']}",
            border_style="dim"
        ))

    def render_report(self, markdown: str):
        self.console.print(Markdown(markdown))
