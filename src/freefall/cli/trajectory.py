"""
Compute the configured trajectories and write them as CSV polylines.
"""
from pathlib import Path
from typing import List, Optional

import numpy as np
import typer
from rich.console import Console
from rich.table import Table

from freefall.cli.common import resolve_config_path, resolve_output_path
from freefall.config import SceneConfig, load_scene_config
from freefall.core.accelerating_frame import acceleration_transform
from freefall.core.enums import GravityModel
from freefall.core.errors import FreefallError
from freefall.core.logging import logger, setup_json_logfile, setup_logfile

console = Console()


def trajectory(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Scene config file or name (default: default_scene.yml)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory (default: timestamped under ./outputs)"),
    override: Optional[List[str]] = typer.Option(None, "--override", "-O", help="Config override, key.sub=value"),
    json_log: bool = typer.Option(False, "--json-log", help="Also write a JSON-lines log next to the outputs"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be done without executing"),
):
    """Compute every trajectory of a scene and save the polylines."""
    config_path = resolve_config_path(config, "scene")
    try:
        scene_config = load_scene_config(config_path, override)
    except ValueError as e:
        console.print(f"[red]Invalid config {config_path}:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[bold green]Scene[/bold green] {config_path} ({scene_config.gravity.value} gravity, "
                  f"{len(scene_config.trajectories)} trajectories)")
    if dry_run:
        console.print("[yellow]DRY RUN - not executing[/yellow]")
        return

    output_path = resolve_output_path(output, "trajectory")
    handlers = [setup_logfile(str(output_path / "trajectory.log"), level="DEBUG")]
    if json_log:
        handlers.append(setup_json_logfile(str(output_path / "trajectory.jsonl"), level="DEBUG"))
    try:
        table = _write_trajectories(scene_config, output_path)
    finally:
        for handler_id in handlers:
            logger.remove(handler_id)

    console.print(table)
    console.print(f"Output: {output_path}")


def _write_trajectories(scene_config: SceneConfig, output_path: Path) -> Table:
    scene = scene_config.build_scene()
    frame = None
    if scene.gravity is GravityModel.CONSTANT:
        frame = acceleration_transform(scene_config.frame_acceleration, scene.reference_acceleration, scene.t_zero)

    table = Table(title="Trajectories")
    table.add_column("#", style="cyan")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Orbit", style="green")
    table.add_column("Points")

    for i, traj in enumerate(scene.trajectories):
        start, end = traj.ends
        if not scene.update_trajectory(traj):
            table.add_row(str(i), _fmt(start), _fmt(end), "[red]skipped[/red]", "0")
            continue
        pts = [frame.forwards(p) for p in traj.points] if frame is not None else list(traj.points)
        data = np.array([[p.x, p.y, p.z, p.w] for p in pts])
        np.savetxt(output_path / f"trajectory_{i}.csv", data, delimiter=",", header="t,y,z,w", comments="")
        if scene.embedding is not None:
            try:
                embedded = [scene.embedding.embed_point(p) for p in traj.points]
            except FreefallError as e:
                logger.warning(f"Trajectory {i} leaves the embedding: {e}")
            else:
                np.savetxt(output_path / f"embedding_{i}.csv", np.array([[p.x, p.y, p.z] for p in embedded]),
                           delimiter=",", header="x,y,z", comments="")
        orbit = traj.orbit.value if traj.orbit is not None else "geodesic"
        table.add_row(str(i), _fmt(start), _fmt(end), orbit, str(len(pts)))
    logger.info(f"Wrote {len(scene.trajectories)} trajectories to {output_path}")
    return table


def _fmt(p) -> str:
    return f"({p.x:.4g}, {p.y:.6g})"
