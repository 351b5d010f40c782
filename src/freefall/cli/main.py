# src/freefall/cli/main.py
import sys

import typer

from freefall.cli.constants import constants_app
from freefall.cli.solve import classify, fall_time
from freefall.cli.trajectory import trajectory
from freefall.core.logging import logger

app = typer.Typer(
    help="freefall: radial free-fall orbits and their spacetime embeddings",
    context_settings={"help_option_names": ["-h", "--help"]}
)

app.add_typer(constants_app, name="constants")
app.command("fall-time")(fall_time)
app.command("classify")(classify)
app.command("trajectory")(trajectory)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    version: bool = typer.Option(False, "--version", help="Show version and exit")
):
    """
    freefall: free-fall trajectories in flat and curved spacetime.

    Use 'freefall COMMAND --help' to see options for specific commands.
    """
    if version:
        from freefall import __version__
        typer.echo(f"freefall version {__version__}")
        raise typer.Exit()

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")
    logger.enable("freefall")
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


if __name__ == "__main__":
    app()
