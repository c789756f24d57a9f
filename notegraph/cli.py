"""CLI entrypoint for notegraph."""

import logging
import sys
from dataclasses import replace
from pathlib import Path

import click
from rich.logging import RichHandler

from . import __version__
from .config import Config, resolve_config
from .models import NoteGraphError

ROOT_ARGUMENT = click.Path(exists=False, file_okay=True, dir_okay=True, path_type=Path)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, markup=False)],
        force=True,
    )


def _load_config(root: Path, config_path: Path | None) -> Config:
    try:
        return resolve_config(root, config_path)
    except NoteGraphError as e:
        raise click.ClickException(str(e)) from e


def config_option(f):
    return click.option(
        "--config",
        "config_path",
        type=click.Path(exists=False, dir_okay=False, path_type=Path),
        default=None,
        help="Path to a .notegraph.toml file (defaults to ROOT/.notegraph.toml)",
    )(f)


@click.group()
@click.version_option(__version__, prog_name="notegraph")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """notegraph - Explore the [[wiki-link]] graph of a Markdown notes folder.

    Build a graph from note links, report broken and self-referencing links,
    and browse a live force-directed layout.
    """
    ctx.ensure_object(dict)
    _setup_logging(verbose)


@cli.command()
@click.argument("root", type=ROOT_ARGUMENT, default=".")
@config_option
@click.option("--watch/--no-watch", default=False, help="Rebuild the graph when notes change on disk")
@click.option("--max-steps", type=click.IntRange(min=0), default=None, help="Layout steps before the simulation stops")
@click.option("--seed", type=int, default=None, help="Seed for initial node positions")
@click.option("--width", type=click.IntRange(min=1), default=None, help="Window width in pixels")
@click.option("--height", type=click.IntRange(min=1), default=None, help="Window height in pixels")
def view(
    root: Path,
    config_path: Path | None,
    watch: bool,
    max_steps: int | None,
    seed: int | None,
    width: int | None,
    height: int | None,
) -> None:
    """Open the interactive graph window for ROOT (defaults to the current directory).

    Left-click a note to highlight it and its links, drag to pan, and
    scroll to zoom around the cursor.

    Examples:

        notegraph view ~/notes

        notegraph view --watch --seed 7
    """
    from .commands.view_cmd import run_view

    config = _load_config(root, config_path)
    layout_overrides = {k: v for k, v in (("max_steps", max_steps), ("seed", seed)) if v is not None}
    view_overrides = {k: v for k, v in (("width", width), ("height", height)) if v is not None}
    config = replace(
        config,
        layout=replace(config.layout, **layout_overrides),
        view=replace(config.view, **view_overrides),
    )

    try:
        exit_code = run_view(root, config=config, watch=watch)
    except NoteGraphError as e:
        raise click.ClickException(str(e)) from e
    except ImportError as e:
        raise click.ClickException(f"{e}. Install the GUI extra: pip install 'notegraph[gui]'") from e
    sys.exit(exit_code)


@cli.command()
@click.argument("root", type=ROOT_ARGUMENT, default=".")
@config_option
@click.option(
    "--fail-on",
    type=click.Choice(["error", "warning", "never"]),
    default="error",
    show_default=True,
    help="Exit with error if this level or higher found",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output results as JSON",
)
def check(root: Path, config_path: Path | None, fail_on: str, output_json: bool) -> None:
    """Report unreadable notes, bad links, self references and orphans.

    Examples:

        notegraph check ~/notes

        notegraph check --fail-on warning --json
    """
    from .commands.check import run_check

    config = _load_config(root, config_path)
    try:
        exit_code = run_check(root, config=config, output_json=output_json, fail_on=fail_on)
    except NoteGraphError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


@cli.command()
@click.argument("root", type=ROOT_ARGUMENT, default=".")
@config_option
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["md", "json", "dot", "svg", "html"]),
    default="md",
    show_default=True,
    help="Output format",
)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write to a file instead of stdout")
@click.option("--top", type=click.IntRange(min=0), default=25, show_default=True, help="Rows in the degree tables")
@click.option("--steps", type=click.IntRange(min=0), default=None, help="Layout steps for svg/html output")
def graph(
    root: Path,
    config_path: Path | None,
    fmt: str,
    out: Path | None,
    top: int,
    steps: int | None,
) -> None:
    """Summarize the link graph or draw its settled layout.

    Examples:

        notegraph graph ~/notes --format dot --out notes.dot

        notegraph graph --format html --out notes.html
    """
    from .commands.graph_cmd import run_graph

    config = _load_config(root, config_path)
    try:
        exit_code = run_graph(root, config=config, fmt=fmt, out=out, top=top, steps=steps)
    except NoteGraphError as e:
        raise click.ClickException(str(e)) from e
    sys.exit(exit_code)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
