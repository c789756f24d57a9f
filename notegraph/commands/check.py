"""Check command - report link integrity problems without opening the view."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import Config, resolve_config
from ..models import Severity
from ..vault.graph import DiagnosticReport, NoteGraph
from ..vault.loader import load_graph

LEVEL_STYLES = {
    "error": "bold red",
    "warning": "yellow",
    "info": "dim",
}


def build_from_config(root: Path, config: Config) -> tuple[NoteGraph, DiagnosticReport]:
    return load_graph(
        root,
        extensions=config.discovery.extensions,
        ignore_file=config.discovery.ignore_file,
    )


def print_report(
    graph: NoteGraph,
    report: DiagnosticReport,
    *,
    console: Console,
) -> None:
    """Print a diagnostics table followed by a one-line summary."""
    if len(report):
        table = Table(show_header=True, header_style="bold")
        table.add_column("Level")
        table.add_column("Kind", style="cyan", no_wrap=True)
        table.add_column("Note")
        table.add_column("Detail")
        for d in report:
            level = d.severity.value
            table.add_row(f"[{LEVEL_STYLES[level]}]{level}[/]", d.kind.value, escape(d.source), escape(d.message))
        console.print(table)

    counts = report.counts()
    console.print(
        f"{len(graph)} notes, {len(graph.edges)} links - "
        f"{counts['error']} errors, {counts['warning']} warnings, {counts['info']} info"
    )


def exit_code_for(report: DiagnosticReport, fail_on: str) -> int:
    if fail_on == "never":
        return 0
    return 1 if report.has_at_least(Severity(fail_on)) else 0


def run_check(
    root: Path,
    *,
    config: Config | None = None,
    output_json: bool = False,
    fail_on: str = "error",
) -> int:
    """Build the graph and report diagnostics.

    Args:
        root: Notes directory
        config: Loaded configuration (defaults to the one found in root)
        output_json: Print the report as JSON on stdout
        fail_on: "error", "warning" or "never"

    Returns:
        Exit code (0 = clean at the requested level, 1 = findings)
    """
    config = config or resolve_config(root)
    graph, report = build_from_config(root, config)

    if output_json:
        payload = {
            "root": str(root),
            "node_count": len(graph),
            "edge_count": len(graph.edges),
            **report.to_dict(),
        }
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        print_report(graph, report, console=Console())

    return exit_code_for(report, fail_on)
