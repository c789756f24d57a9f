"""View command - open the interactive graph window."""

from __future__ import annotations

import logging
import queue
from contextlib import nullcontext
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import Config, ViewConfig, resolve_config
from ..vault.graph import DiagnosticReport
from ..view.controller import InteractionController, SelectionChanged, ViewSettings
from ..view.viewport import Rect, Viewport
from .check import build_from_config, print_report

logger = logging.getLogger(__name__)


def make_viewport(view: ViewConfig) -> Viewport:
    return Viewport(
        padding=view.padding,
        min_zoom=view.min_zoom,
        max_zoom=view.max_zoom,
        pick_threshold=view.pick_threshold,
        scroll_divisor=view.scroll_divisor,
    )


def make_controller(root: Path, config: Config) -> tuple[InteractionController, DiagnosticReport]:
    """Build the graph and wire a controller for it.

    Returns the controller and the initial diagnostics report. Raises
    NoteGraphError before anything interactive starts.
    """
    graph, report = build_from_config(root, config)
    view = config.view

    controller = InteractionController(
        graph,
        Rect(0, 0, view.width, view.height),
        layout_params=config.layout,
        viewport=make_viewport(view),
        settings=ViewSettings(point_radius=view.point_radius, highlight_step=view.highlight_step),
        rebuild=lambda: build_from_config(root, config),
    )

    def log_selection(change: SelectionChanged) -> None:
        if change.name is None:
            logger.debug("Not clicked on a node")
        else:
            logger.debug("Clicked: %s", change.name)

    controller.on_selection(log_selection)
    return controller, report


def run_view(
    root: Path,
    *,
    config: Config | None = None,
    watch: bool = False,
) -> int:
    """Build the graph, report diagnostics, then run the window until closed."""
    console = Console(stderr=True)
    config = config or resolve_config(root)

    console.print(f"Loading notes from {root}...", style="dim")
    controller, report = make_controller(root, config)
    print_report(controller.graph, report, console=console)

    def on_rebuild(new_report: DiagnosticReport) -> None:
        console.print("Notes changed, graph rebuilt.", style="dim")
        print_report(controller.graph, new_report, console=console)

    def on_selection(change: SelectionChanged) -> None:
        if change.name is None:
            console.print("Not clicked on a node", style="dim")
        else:
            console.print(f"Clicked: [bold]{escape(change.name)}[/bold]")

    controller.on_rebuild(on_rebuild)
    controller.on_selection(on_selection)

    from ..view.window import run_window

    changes: queue.Queue | None = queue.Queue() if watch else None
    if watch:
        from ..watcher import NoteWatcher

        watcher = NoteWatcher(root, changes, config.discovery.extensions)
        console.print(f"[bold]Watching[/bold] {root}")
    else:
        watcher = nullcontext()

    with watcher:
        run_window(
            controller,
            title=config.view.title,
            tick_ms=config.view.tick_ms,
            changes=changes,
        )
    return 0
