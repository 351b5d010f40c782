"""
CLI helpers shared by the freefall commands: config lookup and output folders.
"""
from pathlib import Path
from typing import List, Optional

import typer

from freefall.core.utils import make_output_dir


def resolve_config_path(config: Optional[Path], script_name: str, search_dirs: Optional[List[Path]] = None) -> Path:
    """
    Resolve configuration file path with smart defaults.

    Args:
        config: Explicit config path, or a bare name to look up in the search dirs
        script_name: Name of the calling command
        search_dirs: Directories to search (default: ./configs and the project configs)

    Returns:
        Path to configuration file

    Raises:
        typer.BadParameter: If config file not found
    """
    if config and config.exists():
        return config.resolve()

    if search_dirs is None:
        search_dirs = [
            Path.cwd() / "configs",
            Path(__file__).parent.parent.parent.parent / "configs",  # project root configs
        ]

    if config:
        names = [config.name, f"{config.name}.yml", f"{config.name}.yaml"]
    else:
        names = [f"default_{script_name}.yml", f"default_{script_name}.yaml"]

    for search_dir in search_dirs:
        if not search_dir.exists():
            continue
        for name in names:
            candidate = search_dir / name
            if candidate.exists():
                return candidate.resolve()

    if config:
        raise typer.BadParameter(f"Configuration file not found: {config}")
    raise typer.BadParameter(
        f"No configuration file found for '{script_name}'. "
        f"Searched: {[str(d) for d in search_dirs]} for files like: {names}"
    )


def resolve_output_path(output: Optional[Path], script_name: str) -> Path:
    """
    Resolve output directory, creating a timestamped one under ./outputs
    when none is given.
    """
    if output:
        output.mkdir(parents=True, exist_ok=True)
        return output.resolve()
    return make_output_dir(script_name, base_output_dir=Path.cwd() / "outputs")
