#!/usr/bin/env python3
"""
FXCURO CLI - Side-by-Side UI
----------------------------
Terminal interface of the normalization pipeline: dry-run scans, guarded
batch fixes and human-readable effect reports.

Author: FxCuro Team
Date: 2026-01-16
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Dict, Any, Optional

# Rich library components for high-fidelity terminal UI
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    BarColumn,
    TaskProgressColumn
)
from rich.syntax import Syntax

from fxcuro.cli.formatter import FxFormatter
from fxcuro.core.config import load_config
from fxcuro.core.engine import EffectEngine
from fxcuro.core.errors import FxCuroError
from fxcuro.core.models import SourceUnit
from fxcuro.enhance.offline import LEVELS, build_enhancement_prompt

VERSION = "1.0.0"

# Global console for consistent styling across the application
console = Console()


def setup_logging(verbose: bool = False):
    """Routes library loggers through rich; libraries never add handlers themselves."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


class FxCuroCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    Provides visual feedback, safety confirmations and side-by-side diffs.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="fxcuro",
            description="FxCuro - Visual Effect Script Normalizer",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = FxFormatter(console)
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("-V", "--version", action="version", version=f"fxcuro v{VERSION}")
        self.parser.add_argument("--config", help="YAML file overriding pipeline thresholds")
        self.parser.add_argument("--catalog", help="Alternative utility catalog (YAML)")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        # 'scan' subcommand - Read-only audit mode
        scan_parser = subparsers.add_parser("scan", help="🔍 Dry-run the pipeline over scripts")
        scan_parser.add_argument("path", help="Path to a script or directory")
        scan_parser.add_argument("--ext", default=".js", help="File extension filter (default: .js)")
        scan_parser.add_argument("--diff", action="store_true", help="Display vertical split comparison")
        scan_parser.add_argument("--workers", type=int, default=1, help="Parallel workers for directories")

        # 'fix' subcommand - Writes normalized artifacts
        fix_parser = subparsers.add_parser("fix", help="❤️ Write normalized effect files")
        fix_parser.add_argument("path", help="Path to a script or directory")
        fix_parser.add_argument("--ext", default=".js", help="File extension filter (default: .js)")
        fix_parser.add_argument("--out", help="Output directory (default: next to each source)")
        fix_parser.add_argument("--diff", action="store_true", help="Display vertical split comparison")
        fix_parser.add_argument("--workers", type=int, default=1, help="Parallel workers for directories")
        fix_parser.add_argument("-y", "--yes", action="store_true", help="Auto-confirm single file")
        fix_parser.add_argument("--yes-all", action="store_true", help="Auto-confirm batch operations")

        # 'report' subcommand - Description miner summary
        report_parser = subparsers.add_parser("report", help="📄 Show the mined effect documentation")
        report_parser.add_argument("path", help="Path to a script")
        report_parser.add_argument("--markdown", action="store_true", help="Print raw Markdown")

        # 'enhance' subcommand - Pipeline, then the offline enhancer
        enhance_parser = subparsers.add_parser("enhance", help="✨ Normalize, then enhance one script offline")
        enhance_parser.add_argument("path", help="Path to a script")
        enhance_parser.add_argument("--level", type=int, choices=sorted(LEVELS), default=1,
                                    help="1 Standard, 2 Professional, 3 Premium")
        enhance_parser.add_argument("--prompt", action="store_true",
                                    help="Print the remote enhancement prompt instead")
        enhance_parser.add_argument("--write", action="store_true", help="Write <name>.fx.js")
        enhance_parser.add_argument("--out", help="Output directory (default: next to the source)")

    def print_header(self, subtitle: str):
        """Renders the FxCuro splash header with themed styling."""
        console.print(Panel.fit(
            f"[bold cyan]FxCuro v{VERSION}[/bold cyan]\n"
            "══════════════════════════════════════════════════════════════════",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _show_side_by_side_diff(self, file_path: str, old_content: str, new_content: str):
        """
        Renders side-by-side comparison without a fixed height so large
        scripts scroll naturally.
        """
        old_syntax = Syntax(old_content.strip(), "javascript", theme="ansi_dark", line_numbers=True)
        new_syntax = Syntax(new_content.strip(), "javascript", theme="monokai", line_numbers=True)

        layout_table = Table.grid(expand=True, padding=1)
        layout_table.add_column(ratio=1)
        layout_table.add_column(ratio=1)

        layout_table.add_row(
            Panel(old_syntax, title=f"[bold red]ORIGINAL: {file_path}[/bold red]", border_style="red"),
            Panel(new_syntax, title=f"[bold green]NORMALIZED: {file_path}[/bold green]", border_style="green")
        )
        console.print(layout_table)

    def _confirm_action(self, target_count: int, args: argparse.Namespace) -> bool:
        """Safety gate: ensures the user wants to proceed with writes."""
        if target_count == 1:
            if args.yes or args.yes_all:
                return True
            choice = console.input("\n[bold yellow]Write normalized file? (y/N): [/bold yellow]").lower()
            return choice == 'y'

        if target_count > 1:
            if args.yes_all:
                return True

            console.print(Panel(
                f"[bold red]⚠️  CRITICAL: BATCH MODIFICATION DETECTED[/bold red]\n\n"
                f"Target Path: [white]{args.path}[/white]\n"
                f"File Count:  [bold cyan]{target_count} files[/bold cyan]\n",
                expand=False, border_style="red"
            ))
            user_input = console.input("[bold yellow]Type 'CONFIRM' to execute fixes: [/bold yellow]")
            return user_input == "CONFIRM"

        return False

    def _build_engine(self, args: argparse.Namespace, workspace: Path) -> EffectEngine:
        config = load_config(args.config)
        return EffectEngine(str(workspace), catalog_path=args.catalog, config=config)

    def _run_engine(self, args: argparse.Namespace, is_fix_mode: bool) -> int:
        """Main processing loop orchestration."""
        input_path = Path(args.path).resolve()
        if not input_path.exists():
            console.print(f"[bold red]Error:[/bold red] Path '{args.path}' not found.")
            return 1

        workspace = input_path if input_path.is_dir() else input_path.parent
        engine = self._build_engine(args, workspace)

        target_files = [input_path] if input_path.is_file() else engine.discover(args.ext)
        if not target_files:
            console.print(f"\n[bold yellow]⚠️  No {args.ext} files found.[/bold yellow]")
            return 0

        if is_fix_mode and not self._confirm_action(len(target_files), args):
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            return 1

        out_dir = getattr(args, "out", None)
        reports: List[Dict[str, Any]] = []
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console
        ) as progress:
            task_id = progress.add_task("Normalizing effects...", total=len(target_files))

            if input_path.is_file():
                reports.append(engine.process_file(input_path.name, dry_run=not is_fix_mode, out_dir=out_dir))
                progress.update(task_id, advance=1, description=f"Checked: {input_path.name}")
            else:
                def _advance(done: int, total: int):
                    progress.update(task_id, completed=done, description=f"Checked: {done}/{total}")

                reports = engine.scan_directory(
                    extension=args.ext, dry_run=not is_fix_mode, out_dir=out_dir,
                    workers=args.workers, progress_callback=_advance
                )

        if args.diff:
            for report in reports:
                if not report.get("healed_content"):
                    continue
                console.print(f"\n[bold cyan]Analysis for: {report['file_path']}[/bold cyan]")
                self.formatter.show_change_log(report.get("change_log", []))
                old_content = (workspace / report["file_path"]).read_text(encoding='utf-8-sig')
                self._show_side_by_side_diff(report["file_path"], old_content, report["healed_content"])
                console.print("─" * console.width)

        self.formatter.print_final_table(reports)
        self.formatter.print_summary(engine.generate_summary(reports))
        return 0 if all(r.get("success") for r in reports) else 2

    def _run_report(self, args: argparse.Namespace) -> int:
        input_path = Path(args.path).resolve()
        if not input_path.is_file():
            console.print(f"[bold red]Error:[/bold red] '{args.path}' is not a file.")
            return 1

        engine = self._build_engine(args, input_path.parent)
        text = input_path.read_text(encoding='utf-8-sig')
        result = engine.pipeline.run(SourceUnit(text, input_path.name))
        if not result.valid:
            console.print(f"[bold yellow]⚠️  Pipeline fell back:[/bold yellow] {result.error}")
            report = engine.pipeline.miner.mine(text, input_path.name, result.metadata)
        else:
            report = result.report

        markdown = report.to_markdown()
        if args.markdown:
            console.print(markdown, markup=False, highlight=False)
        else:
            self.formatter.render_report(markdown)
        return 0

    def _run_enhance(self, args: argparse.Namespace) -> int:
        input_path = Path(args.path).resolve()
        if not input_path.is_file():
            console.print(f"[bold red]Error:[/bold red] '{args.path}' is not a file.")
            return 1

        engine = self._build_engine(args, input_path.parent)
        if args.prompt:
            text = input_path.read_text(encoding='utf-8-sig')
            result = engine.pipeline.run(SourceUnit(text, input_path.name))
            if not result.valid:
                console.print(f"[bold yellow]⚠️  Pipeline fell back:[/bold yellow] {result.error}")
                return 2
            console.print(build_enhancement_prompt(result.code, args.level),
                          markup=False, highlight=False, soft_wrap=True)
            return 0

        report = engine.process_file(input_path.name, dry_run=not args.write,
                                     out_dir=args.out, enhance_level=args.level)
        if not report["success"]:
            console.print(f"[bold yellow]⚠️  Not enhanced:[/bold yellow] {report.get('error')}")
            return 2

        self.formatter.show_change_log(report["change_log"])
        if report["written"]:
            console.print(f"[bold green]Written:[/bold green] {report['output_path']}")
        else:
            console.print(Syntax(report["healed_content"] or report["result"].code, "javascript",
                                 theme="monokai", line_numbers=True))
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        argv = sys.argv[1:] if argv is None else argv
        if not argv:
            self.print_header("Effect Normalizer")
            self.parser.print_help()
            return 0

        args = self.parser.parse_args(argv)
        setup_logging(args.verbose)
        try:
            if args.command == "scan":
                self.print_header("Normalization Scan")
                return self._run_engine(args, is_fix_mode=False)
            if args.command == "fix":
                self.print_header("Effect Auto-Heal Engine")
                return self._run_engine(args, is_fix_mode=True)
            if args.command == "report":
                return self._run_report(args)
            if args.command == "enhance":
                self.print_header("Offline Enhancement")
                return self._run_enhance(args)
        except FxCuroError as e:
            console.print(f"[bold red]CRITICAL ERROR:[/bold red] {e}")
            return 1

        self.parser.print_help()
        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(FxCuroCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
