"""CLI for epitrace."""

from dataclasses import asdict
import json
import logging
from pathlib import Path
from typing import Any, Callable

import click

from .config import DEFAULT_TRACE_CONFIG, TraceConfig, load_config
from .errors import TraceError
from .parser.movements import Movements, load_movements_csv
from .tracing import network_summary, shortest_paths, summarise_rows, trace


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr")
def cli(verbose: bool):
    """epitrace - Contact tracing over livestock movement networks."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _query_options(command: Callable) -> Callable:
    """Options shared by every analysis command."""
    options = [
        click.argument("movements_csv", type=click.Path(exists=True, path_type=Path)),
        click.option(
            "--root", "-r", "roots", multiple=True, required=True, help="Root identifier"
        ),
        click.option("--t-end", required=True, help="End of the tracing window"),
        click.option("--days", type=int, default=None, help="Window length in days"),
        click.option(
            "--workers", type=int, default=None, help="Worker processes for the roots"
        ),
        click.option(
            "--config",
            "config_path",
            type=click.Path(exists=True, path_type=Path),
            default=None,
            help="YAML config file",
        ),
        click.option(
            "--format",
            "-f",
            type=click.Choice(["table", "json"]),
            default="table",
            help="Output format: table (human) or json",
        ),
    ]
    for option in reversed(options):
        command = option(command)
    return command


def _load(movements_csv: Path, config_path: Path | None) -> tuple[Movements, TraceConfig]:
    try:
        config = load_config(config_path) if config_path else DEFAULT_TRACE_CONFIG
        movements = load_movements_csv(movements_csv, date_format=config.date_format)
    except TraceError as exc:
        raise SystemExit(str(exc)) from exc
    return movements, config


def _echo_json(rows: list[Any]) -> None:
    click.echo(json.dumps(summarise_rows(rows), indent=2, default=str))


@cli.command()
@_query_options
def summary(
    movements_csv: Path,
    roots: tuple[str, ...],
    t_end: str,
    days: int | None,
    workers: int | None,
    config_path: Path | None,
    format: str,
):
    """Degree and contact chain size of each root."""
    movements, config = _load(movements_csv, config_path)
    try:
        rows = network_summary(
            movements, list(roots), t_end=t_end, days=days, workers=workers, config=config
        )
    except TraceError as exc:
        raise SystemExit(str(exc)) from exc

    if format == "json":
        _echo_json(rows)
        return

    for row in rows:
        click.echo(
            f"{row.root}  [{row.in_begin} .. {row.in_end}]  "
            f"in_degree={row.in_degree} out_degree={row.out_degree} "
            f"ingoing_chain={row.ingoing_contact_chain} "
            f"outgoing_chain={row.outgoing_contact_chain}"
        )


@cli.command("trace")
@_query_options
@click.option("--max-distance", type=int, default=None, help="Maximum hops to trace")
def trace_command(
    movements_csv: Path,
    roots: tuple[str, ...],
    t_end: str,
    days: int | None,
    workers: int | None,
    config_path: Path | None,
    format: str,
    max_distance: int | None,
):
    """Trace every ingoing and outgoing contact of each root."""
    movements, config = _load(movements_csv, config_path)
    try:
        result = trace(
            movements,
            list(roots),
            t_end=t_end,
            days=days,
            max_distance=max_distance,
            workers=workers,
            config=config,
        )
    except TraceError as exc:
        raise SystemExit(str(exc)) from exc

    if format == "json":
        _echo_json(list(result))
        return

    click.echo(
        f"Contacts: {len(result)}  Ingoing: {len(result.ingoing())}  "
        f"Outgoing: {len(result.outgoing())}"
    )
    for row in result:
        arrow = "<-" if row.direction == "in" else "->"
        click.echo(
            f"  {row.root} {arrow} [{row.distance}] {row.source} -> "
            f"{row.destination} at {row.t} (record {row.record})"
        )


@cli.command()
@_query_options
def paths(
    movements_csv: Path,
    roots: tuple[str, ...],
    t_end: str,
    days: int | None,
    workers: int | None,
    config_path: Path | None,
    format: str,
):
    """Shortest temporal path from each root to every reachable identifier."""
    movements, config = _load(movements_csv, config_path)
    try:
        rows = shortest_paths(
            movements, list(roots), t_end=t_end, days=days, workers=workers, config=config
        )
    except TraceError as exc:
        raise SystemExit(str(exc)) from exc

    if format == "json":
        _echo_json(rows)
        return

    if not rows:
        click.echo("No reachable identifiers.")
        return
    for row in rows:
        reached = row.source if row.direction == "in" else row.destination
        click.echo(
            f"{row.root}  {row.direction:<3} {reached}  distance={row.distance} "
            f"record={row.record} t={row.t}"
        )


@cli.command("export-graph")
@_query_options
@click.option("--max-distance", type=int, default=None, help="Maximum hops to trace")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default="output/trace.json",
    help="Where to write the node-link JSON",
)
@click.option("--html", is_flag=True, help="Also write an interactive HTML view")
def export_graph(
    movements_csv: Path,
    roots: tuple[str, ...],
    t_end: str,
    days: int | None,
    workers: int | None,
    config_path: Path | None,
    format: str,
    max_distance: int | None,
    output: Path,
    html: bool,
):
    """Export traced contacts as a graph."""
    from .graph.builder import TraceGraph

    movements, config = _load(movements_csv, config_path)
    try:
        result = trace(
            movements,
            list(roots),
            t_end=t_end,
            days=days,
            max_distance=max_distance,
            workers=workers,
            config=config,
        )
    except TraceError as exc:
        raise SystemExit(str(exc)) from exc

    graph = TraceGraph.from_trace(result)
    graph.save(output)
    stats = graph.get_stats()
    if format == "json":
        click.echo(json.dumps(asdict(stats), indent=2))
    else:
        click.echo(str(stats))
    click.echo(f"Graph: {output}")

    if html:
        from .graph.visualize import create_web_visualization

        html_path = create_web_visualization(graph, output.with_suffix(".html"))
        click.echo(f"HTML: {html_path}")


if __name__ == "__main__":
    cli()
