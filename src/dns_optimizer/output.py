"""
Output formatting for DNS optimization runs.

Provides multiple output formats:
- JSON: Machine-readable full report
- CSV: Spreadsheet-compatible probe results
- Human-readable: plain results table or a rich terminal table
"""

import csv
import json
from io import StringIO
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .models import ProbeOutcome, ResolverState, RunReport
from .ranking import improvement_over


SEPARATOR = "-" * 50


def format_latency(outcome: ProbeOutcome) -> str:
    """Latency with two decimals, or the failure status."""
    if outcome.is_success:
        return f"{outcome.latency_ms:.2f}ms"
    return outcome.status.value


def format_state(state: Optional[ResolverState]) -> str:
    if state is None:
        return "unknown"
    if state.is_automatic:
        return "Automatic (DHCP)"
    return ", ".join(state)


def _state_list(state: Optional[ResolverState]) -> Optional[list[str]]:
    return list(state) if state is not None else None


class JSONOutput:
    """JSON output formatter."""

    @staticmethod
    def format(report: RunReport, indent: int = 2) -> str:
        """
        Format a run report as JSON.

        Args:
            report: RunReport to format
            indent: JSON indentation level

        Returns:
            JSON string
        """
        data = {
            "metadata": {
                "interface": report.interface,
                "started_at": report.started_at.isoformat(),
                "completed_at": report.completed_at.isoformat() if report.completed_at else None,
                "duration_seconds": round(report.duration_seconds, 3),
                "stage": report.stage.value,
                "stages": [stage.value for stage in report.stages],
            },
            "initial_state": _state_list(report.initial_state),
            "final_state": _state_list(report.final_state),
            "results": [],
            "winner": None,
            "error": None,
        }

        for rank_index, outcome in enumerate(report.ranked, start=1):
            data["results"].append({
                "rank": rank_index,
                "name": outcome.candidate.name,
                "address": outcome.candidate.address,
                "status": outcome.status.value,
                "latency_ms": round(outcome.latency_ms, 3) if outcome.is_success else None,
                "samples_ms": [round(s, 3) for s in outcome.samples],
                "jitter_ms": round(outcome.jitter_ms, 3),
                "error": outcome.error_message,
                "probed_at": outcome.timestamp.isoformat(),
            })

        if report.winner:
            data["winner"] = {
                "name": report.winner.candidate.name,
                "address": report.winner.candidate.address,
                "latency_ms": round(report.winner.latency_ms, 3),
                "improvements_pct": {
                    k: round(v, 2) for k, v in improvement_over(report.winner, report.ranked).items()
                },
            }

        if report.error is not None:
            data["error"] = {
                "kind": type(report.error).__name__,
                "stage": report.failed_stage.value if report.failed_stage else None,
                "message": str(report.error),
            }

        return json.dumps(data, indent=indent)

    @staticmethod
    def save(report: RunReport, path: Path) -> None:
        """Save run report to JSON file."""
        with open(path, "w") as f:
            f.write(JSONOutput.format(report))


class CSVOutput:
    """CSV output formatter."""

    @staticmethod
    def format(report: RunReport) -> str:
        """
        Format ranked probe results as CSV.

        Args:
            report: RunReport to format

        Returns:
            CSV string
        """
        output = StringIO()
        writer = csv.writer(output)

        writer.writerow([
            "rank",
            "name",
            "address",
            "status",
            "latency_ms",
            "min_ms",
            "max_ms",
            "jitter_ms",
            "samples",
        ])

        for rank_index, outcome in enumerate(report.ranked, start=1):
            writer.writerow([
                rank_index,
                outcome.candidate.name,
                outcome.candidate.address,
                outcome.status.value,
                round(outcome.latency_ms, 3) if outcome.is_success else "",
                round(outcome.min_ms, 3) if outcome.min_ms is not None else "",
                round(outcome.max_ms, 3) if outcome.max_ms is not None else "",
                round(outcome.jitter_ms, 3),
                len(outcome.samples),
            ])

        return output.getvalue()

    @staticmethod
    def save(report: RunReport, path: Path) -> None:
        """Save ranked results to CSV file."""
        with open(path, "w", newline="") as f:
            f.write(CSVOutput.format(report))


class ConsoleOutput:
    """Plain text output formatter."""

    @staticmethod
    def format_results(ranked: list[ProbeOutcome]) -> str:
        """
        Format the ranked results table.

        One line per candidate, fastest first, between two separator rules.
        """
        lines = ["Latency Test Results:", SEPARATOR]
        for outcome in ranked:
            lines.append(
                f"{outcome.candidate.name:24} ({outcome.candidate.address:15}) : {format_latency(outcome)}"
            )
        lines.append(SEPARATOR)
        return "\n".join(lines)

    @staticmethod
    def format(report: RunReport) -> str:
        """Format a full run report for console display."""
        lines = [""]

        if report.ranked:
            lines.append(ConsoleOutput.format_results(report.ranked))
            lines.append("")

        lines.append(f"  Interface: {report.interface}")
        lines.append(f"  Initial DNS: {format_state(report.initial_state)}")
        lines.append(f"  Final DNS: {format_state(report.final_state)}")
        lines.append(f"  Duration: {report.duration_seconds:.1f}s")

        if report.winner:
            lines.append(
                f"  Fastest: {report.winner.candidate.name} "
                f"({report.winner.candidate.address}) {format_latency(report.winner)}"
            )
        elif report.ranked:
            lines.append("  No reachable resolver - DNS left in automatic mode")

        if report.error is not None:
            stage = report.failed_stage.value if report.failed_stage else "unknown"
            lines.append(f"  Failed during {stage}: {report.error}")

        lines.append("")
        return "\n".join(lines)

    @staticmethod
    def print(report: RunReport) -> None:
        """Print run report to console."""
        print(ConsoleOutput.format(report))


class RichConsoleOutput:
    """Rich library console output with colors and tables."""

    @staticmethod
    def print(report: RunReport, console: Optional[Console] = None) -> None:
        """Print run report using rich."""
        console = console or Console()

        console.print()
        if report.ranked:
            table = Table(
                title="Latency Test Results",
                box=box.ROUNDED,
                header_style="bold magenta",
            )

            table.add_column("#", justify="right", style="dim")
            table.add_column("Resolver", style="cyan")
            table.add_column("Address")
            table.add_column("Latency", justify="right", style="green")
            table.add_column("Jitter (ms)", justify="right")

            for rank_index, outcome in enumerate(report.ranked, start=1):
                latency = format_latency(outcome)
                if not outcome.is_success:
                    latency = f"[red]{latency}[/red]"
                table.add_row(
                    str(rank_index),
                    outcome.candidate.name,
                    outcome.candidate.address,
                    latency,
                    f"{outcome.jitter_ms:.2f}" if outcome.is_success else "-",
                )

            console.print(table)
            console.print()

        console.print(f"  [dim]Interface:[/dim] {report.interface}")
        console.print(f"  [dim]Initial DNS:[/dim] {format_state(report.initial_state)}")
        console.print(f"  [dim]Final DNS:[/dim] {format_state(report.final_state)}")
        console.print(f"  [dim]Duration:[/dim] {report.duration_seconds:.1f}s")
        console.print()

        if report.winner:
            console.print(
                f"[bold green]Fastest: {report.winner.candidate.name} "
                f"({report.winner.candidate.address}) {format_latency(report.winner)}[/bold green]"
            )
        elif report.error is None:
            console.print("[bold yellow]No reachable resolver - DNS left in automatic mode[/bold yellow]")

        if report.error is not None:
            stage = report.failed_stage.value if report.failed_stage else "unknown"
            console.print(f"[bold red]Failed during {stage}: {report.error}[/bold red]")

        console.print()
