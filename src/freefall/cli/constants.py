# freefall/cli/constants.py
import json

import typer
from rich import print

from freefall.core.constants import CONSTANTS_DICT, validate_relations
from freefall.core.validators import asdict

constants_app = typer.Typer(help="View the physical constants used by the solvers.")


@constants_app.command("list")
def list_constants():
    """List all constants (names and descriptions)."""
    for name, const in CONSTANTS_DICT.items():
        print(f"[bold cyan]{name}[/bold cyan]: {const.description}")


@constants_app.command("show")
def show_constant(
    name: str = typer.Argument(..., help="Constant name"),
    format: str = typer.Option("plain", help="Output format: plain|json|md")
):
    """Show all metadata for a constant."""
    const = CONSTANTS_DICT.get(name)
    if not const:
        print(f"[red]Constant not found:[/red] {name}")
        raise typer.Exit(1)
    if format == "json":
        data = asdict(const)
        data["symbol"] = str(const.symbol) if const.symbol is not None else None
        data["eval_expr"] = str(const.eval_expr) if const.eval_expr is not None else None
        print(json.dumps(data, indent=2, default=str))
    elif format == "md":
        print(
            f"## {const.name}\n\n"
            f"{const.description}\n\n"
            f"- **Symbol:** `{const.symbol}`\n"
            f"- **Units:** {const.units}\n"
            f"- **Category:** {const.category.value}\n"
            f"- **Value:** {const.value}\n"
            f"- **Relation:** {const.relation or '-'}\n"
        )
    else:
        print(str(const))


@constants_app.command("check")
def check_relations(
    rel_tol: float = typer.Option(2e-2, help="Relative tolerance for derived values")
):
    """Check derived constants against their symbolic relations."""
    errors = validate_relations(rel_tol)
    if errors:
        for name, msg in errors.items():
            print(f"[red]{name}[/red]: {msg}")
        raise typer.Exit(1)
    print("[green]All relations consistent[/green]")
