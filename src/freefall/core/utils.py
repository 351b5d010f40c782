# freefall/core/utils.py
import datetime
import uuid
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import yaml


def apply_overrides(config: Dict[str, Any], cli_overrides: Optional[Iterable[str]]) -> Dict[str, Any]:
    """
    Merge dotted ``key1.key2=value`` overrides into a config dict in place.

    Values go through ``yaml.safe_load`` so numbers, booleans and lists come
    out typed; anything unparsable stays a string.
    """
    for override in cli_overrides or ():
        if "=" not in override:
            raise ValueError(f"Override must look like key.sub=value, got: {override!r}")
        key, val = override.split("=", 1)
        keys = key.strip().split(".")
        d = config
        for k in keys[:-1]:
            d = d.setdefault(k, {})
        try:
            d[keys[-1]] = yaml.safe_load(val)
        except yaml.YAMLError:
            d[keys[-1]] = val
    return config


def load_config(config_file: Path, cli_overrides: Optional[Iterable[str]] = None) -> Tuple[Dict[str, Any], str]:
    """
    Load a YAML config and merge CLI overrides.
    Returns the config dict and the full config path used.
    """
    config_file = Path(config_file)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    with open(config_file, "r") as f:
        config = yaml.safe_load(f) or {}

    return apply_overrides(config, cli_overrides), str(config_file)


def make_output_dir(script_name: str, base_output_dir: Optional[Path] = None) -> Path:
    """
    Creates a timestamped output directory for the script run.
    Returns the path to the created output directory.
    """
    timestamp = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
    run_id = uuid.uuid4().hex[:6]
    out_base = Path(base_output_dir or "outputs") / script_name
    out_dir = out_base / f"{timestamp}-{run_id}"
    out_dir.mkdir(parents=True, exist_ok=False)
    return out_dir
