"""Command Line Interface for Backing Planner.

This module provides a simple CLI for checking a drawing for clashes,
listing its door openings, dimensioning its backings to walls, grouping
its backings into zones, and running the whole analysis through the
orchestrator.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from .config import (
    DEFAULT_GROUPING_DISTANCE,
    DOOR_CLEARANCE,
    DOOR_MAX_WIDTH,
    DOOR_MIN_WIDTH,
    MIN_SPACING,
    ClashSettings,
    DoorSettings,
    OptimizationSettings,
)
from .engine.clashes import detect_clashes, is_ready_for_install, summarize_clashes
from .engine.dimensions import generate_dimensions
from .engine.doors import detect_doors
from .engine.optimizer import optimize_backings, summarize_optimization
from .engine.orchestrator import DetectionOrchestrator
from .engine.validators import InvalidInput
from .io.parser import (
    clash_to_dict,
    dimension_to_dict,
    door_to_dict,
    load_drawing,
    save_results,
    zone_to_dict,
)

app = typer.Typer(
    name="backing-planner",
    help="Clash detection and placement optimization for wall backing",
    no_args_is_help=True,
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(drawing: Path):
    try:
        return load_drawing(drawing)
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: Invalid JSON - {e}[/red]")
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
    raise typer.Exit(1)


def _write_json(data, output: Optional[Path]) -> None:
    if output is None:
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    console.print(f"[green]✓[/green] Wrote {output}")


@app.command()
def clashes(
    drawing: Path = typer.Option(..., "--drawing", "-d", help="Path to drawing JSON file"),
    clearance: float = typer.Option(DOOR_CLEARANCE, "--clearance", help="Door clearance in inches"),
    min_spacing: float = typer.Option(MIN_SPACING, "--min-spacing", help="Minimum gap between backings of one type"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Write clashes to this JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Detect clashes between backings, door openings and other backings."""
    _configure_logging(verbose)
    drawing_obj = _load(drawing)
    console.print(
        f"[green]✓[/green] Loaded {len(drawing_obj.backings)} backing(s) and "
        f"{len(drawing_obj.walls)} wall(s) from {drawing}"
    )

    try:
        settings = ClashSettings(door_clearance=clearance, min_spacing=min_spacing)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    found = detect_clashes(drawing_obj.backings, drawing_obj.walls, settings)

    if found:
        table = Table(title="Clashes")
        table.add_column("Type", style="cyan")
        table.add_column("Severity", justify="center")
        table.add_column("Items")
        table.add_column("Resolution")
        for clash in found:
            severity = "[red]error[/red]" if clash.blocks_signoff else "[yellow]warning[/yellow]"
            table.add_row(clash.type, severity, ", ".join(clash.items), clash.resolution or "")
        console.print(table)

    counts = summarize_clashes(found)["severity"]
    console.print(
        f"{counts.get('error', 0)} error(s), {counts.get('warning', 0)} warning(s)"
    )
    _write_json([clash_to_dict(c) for c in found], output)

    if is_ready_for_install(found):
        console.print("\n[bold green]✓ Ready for install[/bold green]")
        raise typer.Exit(0)
    console.print("\n[bold red]✗ Errors must be resolved before install[/bold red]")
    raise typer.Exit(1)


@app.command()
def doors(
    drawing: Path = typer.Option(..., "--drawing", "-d", help="Path to drawing JSON file"),
    min_width: float = typer.Option(DOOR_MIN_WIDTH, "--min-width", help="Smallest door width in inches"),
    max_width: float = typer.Option(DOOR_MAX_WIDTH, "--max-width", help="Largest door width in inches"),
    include_windows: bool = typer.Option(False, "--include-windows", help="Report windows too"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Write doors to this JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """List the door openings found on the drawing's walls."""
    _configure_logging(verbose)
    drawing_obj = _load(drawing)

    try:
        settings = DoorSettings(
            min_width=min_width, max_width=max_width, include_windows=include_windows
        )
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    found = detect_doors(drawing_obj.walls, settings)

    table = Table(title="Openings")
    table.add_column("ID", style="cyan")
    table.add_column("Wall")
    table.add_column("Type")
    table.add_column("Width", justify="right")
    table.add_column("Swing", justify="center")
    for door in found:
        table.add_row(door.id, door.wall_id, door.type, f"{door.width:.1f}\"", door.swing_direction or "-")
    console.print(table)
    _write_json([door_to_dict(d) for d in found], output)


@app.command()
def dimensions(
    drawing: Path = typer.Option(..., "--drawing", "-d", help="Path to drawing JSON file"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Write dimensions to this JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Dimension every backing to its nearest wall."""
    _configure_logging(verbose)
    drawing_obj = _load(drawing)

    found = generate_dimensions(drawing_obj.backings, drawing_obj.walls)
    if not found:
        console.print("[yellow]No dimensions generated[/yellow]")

    table = Table(title="Dimensions")
    table.add_column("ID", style="cyan")
    table.add_column("Backing")
    table.add_column("Wall")
    table.add_column("Distance", justify="right")
    for dim in found:
        table.add_row(dim.id, dim.backing_id, dim.wall_id, dim.label)
    console.print(table)
    _write_json([dimension_to_dict(d) for d in found], output)


@app.command()
def optimize(
    drawing: Path = typer.Option(..., "--drawing", "-d", help="Path to drawing JSON file"),
    distance: float = typer.Option(DEFAULT_GROUPING_DISTANCE, "--distance", help="Grouping distance in inches"),
    allow_combining: bool = typer.Option(False, "--allow-combining", help="Allow mixed backing types in a zone"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Write zones to this JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Group backings into installation zones."""
    _configure_logging(verbose)
    drawing_obj = _load(drawing)

    settings = OptimizationSettings(grouping_distance=distance, allow_combining=allow_combining)
    try:
        zones = optimize_backings(drawing_obj.backings, settings=settings)
    except InvalidInput as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Zones")
    table.add_column("Zone", style="cyan")
    table.add_column("Material")
    table.add_column("Backings")
    table.add_column("Area", justify="right")
    table.add_column("Waste", justify="right")
    for zone in zones:
        table.add_row(
            zone.id,
            zone.material_type,
            ", ".join(zone.backing_ids),
            f"{zone.total_area:.1f}",
            f"{zone.waste:.1f}",
        )
    console.print(table)

    summary = summarize_optimization(drawing_obj.backings, zones)
    console.print(
        f"{summary.zones_created} zone(s), {summary.backings_grouped} backing(s) grouped, "
        f"labor reduced {summary.labor_reduced_pct}%"
    )
    _write_json([zone_to_dict(z) for z in zones], output)


@app.command()
def analyze(
    drawing: Path = typer.Option(..., "--drawing", "-d", help="Path to drawing JSON file"),
    output: Path = typer.Option(..., "--out", "-o", help="Path to output results JSON file"),
    distance: float = typer.Option(DEFAULT_GROUPING_DISTANCE, "--distance", help="Grouping distance in inches"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Run door detection, clash detection and optimization in sequence."""
    _configure_logging(verbose)
    drawing_obj = _load(drawing)

    with Progress(
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        TextColumn("{task.fields[note]}"),
        console=console,
    ) as progress:
        tasks = {}

        def on_progress(stage: str, percent: int, message: str) -> None:
            if stage not in tasks:
                tasks[stage] = progress.add_task(stage, total=100, note="")
            progress.update(tasks[stage], completed=percent, note=message)

        orchestrator = DetectionOrchestrator(on_progress=on_progress)
        results, outcomes = asyncio.run(
            orchestrator.run_all(
                drawing_obj.backings,
                drawing_obj.walls,
                optimization_settings=OptimizationSettings(grouping_distance=distance),
            )
        )

    save_results(results, output)
    console.print(f"[green]✓[/green] Wrote {output}")

    failed = [o for o in outcomes if not o.ok]
    for outcome in failed:
        console.print(f"[red]✗ {outcome.stage}: {outcome.message}[/red]")

    conflicts = results.conflicts.conflicts if results.conflicts else ()
    if failed or not is_ready_for_install(conflicts):
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
