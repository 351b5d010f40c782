"""
One-shot radial solver commands.
"""
import typer
from rich.console import Console
from rich.table import Table

from freefall.core.constants import EARTH
from freefall.core.errors import FreefallError
from freefall.core.radial import classify_orbit, collision_times, find_launch_velocity, free_fall_time

console = Console()


def fall_time(
    h0: float = typer.Argument(..., help="Release radius (m from the center)"),
    h1: float = typer.Argument(..., help="Final radius (m from the center)"),
    mass: float = typer.Option(EARTH.mass, "--mass", "-m", help="Central mass (kg)"),
):
    """Time to fall from rest at H0 down to H1."""
    try:
        t = free_fall_time(h0, h1, mass, EARTH.G)
    except FreefallError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[bold]{t:.6f}[/bold] s")


def classify(
    h0: float = typer.Argument(..., help="Radius of the first event (m)"),
    t0: float = typer.Argument(..., help="Time of the first event (s)"),
    h1: float = typer.Argument(..., help="Radius of the second event (m)"),
    t1: float = typer.Argument(..., help="Time of the second event (s)"),
    mass: float = typer.Option(EARTH.mass, "--mass", "-m", help="Central mass (kg)"),
):
    """Classify the free-fall orbit through two events and find its launch velocity."""
    try:
        info = classify_orbit(h0, t0, h1, t1, mass, EARTH.G)
        v, _ = find_launch_velocity(h0, t0, h1, t1, mass, EARTH.G)
        orbit = collision_times(h0, v, t0, h0, mass, EARTH.G)
    except FreefallError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Orbit through both events")
    table.add_column("Quantity", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("orbit", info.orbit.value)
    table.add_row("launch velocity sign", info.v0.value)
    table.add_row("second event", info.peakness.value)
    table.add_row("launch velocity (m/s)", f"{v:.6f}")
    if orbit.peak is not None:
        table.add_row("peak time (s)", f"{orbit.peak.x:.6f}")
        table.add_row("peak radius (m)", f"{orbit.peak.y:.6f}")
    console.print(table)
