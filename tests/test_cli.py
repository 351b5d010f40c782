from pathlib import Path

import numpy as np
import pytest
from typer.testing import CliRunner

from freefall import __version__
from freefall.cli.common import resolve_config_path, resolve_output_path
from freefall.cli.main import app
from freefall.core.constants import EARTH

runner = CliRunner()
CONFIGS = Path(__file__).resolve().parent.parent / "configs"
R = EARTH.radius


def test_version_and_help():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output

    result = runner.invoke(app, [])
    assert result.exit_code == 0
    assert "trajectory" in result.output


def test_constants_commands():
    result = runner.invoke(app, ["constants", "list"])
    assert result.exit_code == 0
    assert "earth_mass" in result.output

    result = runner.invoke(app, ["constants", "show", "earth_radius", "--format", "json"])
    assert result.exit_code == 0
    assert '"name": "earth_radius"' in result.output

    result = runner.invoke(app, ["constants", "show", "earth_radius", "--format", "md"])
    assert "## earth_radius" in result.output

    result = runner.invoke(app, ["constants", "show", "not_a_constant"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["constants", "check"])
    assert result.exit_code == 0
    assert "consistent" in result.output


def test_fall_time_command():
    result = runner.invoke(app, ["fall-time", str(R + 44.1), str(R)])
    assert result.exit_code == 0
    assert float(result.output.split()[0]) == pytest.approx(3.0, rel=1e-2)

    result = runner.invoke(app, ["fall-time", str(R), str(2 * R)])
    assert result.exit_code == 1


def test_classify_command():
    result = runner.invoke(app, ["classify", str(R), "0", str(R + 5e6), "1200"])
    assert result.exit_code == 0
    assert "elliptic" in result.output
    assert "before peak" in result.output

    result = runner.invoke(app, ["classify", str(R), "0", str(R + 5e6), "0"])
    assert result.exit_code == 1


def test_trajectory_constant_gravity(tmp_path):
    result = runner.invoke(app, [
        "trajectory", "-c", str(CONFIGS / "constant_gravity.yml"), "-o", str(tmp_path), "-O", "samples=20",
    ])
    assert result.exit_code == 0, result.output
    for i in range(3):
        data = np.loadtxt(tmp_path / f"trajectory_{i}.csv", delimiter=",", skiprows=1)
        assert data.shape == (21, 4)
    assert (tmp_path / "trajectory.log").exists()
    assert not (tmp_path / "embedding_0.csv").exists()


def test_trajectory_variable_gravity_with_embedding(tmp_path):
    result = runner.invoke(app, [
        "trajectory", "-c", str(CONFIGS / "default_scene.yml"), "-o", str(tmp_path),
        "-O", "samples=10", "-O", "embedding.table_size=100", "--json-log",
    ])
    assert result.exit_code == 0, result.output
    data = np.loadtxt(tmp_path / "trajectory_0.csv", delimiter=",", skiprows=1)
    assert data.shape == (20, 4)
    assert np.all(data[:, 1] >= R)
    embedded = np.loadtxt(tmp_path / "embedding_0.csv", delimiter=",", skiprows=1)
    assert embedded.shape == (20, 3)
    assert (tmp_path / "trajectory.jsonl").exists()


def test_trajectory_dry_run_and_bad_config(tmp_path):
    out = tmp_path / "out"
    result = runner.invoke(app, ["trajectory", "-c", str(CONFIGS / "default_scene.yml"), "-o", str(out), "--dry-run"])
    assert result.exit_code == 0
    assert "DRY RUN" in result.output
    assert not out.exists()

    result = runner.invoke(app, ["trajectory", "-c", str(CONFIGS / "default_scene.yml"), "-O", "samples=1"])
    assert result.exit_code == 1


def test_resolve_config_path_by_name(tmp_path):
    (tmp_path / "default_scene.yml").write_text("samples: 10\n")
    (tmp_path / "other.yml").write_text("samples: 10\n")
    assert resolve_config_path(None, "scene", [tmp_path]) == (tmp_path / "default_scene.yml").resolve()
    assert resolve_config_path(Path("other"), "scene", [tmp_path]) == (tmp_path / "other.yml").resolve()


def test_default_output_dir_is_timestamped(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out = resolve_output_path(None, "trajectory")
    assert out.is_dir()
    assert out.parent == tmp_path / "outputs" / "trajectory"
    assert resolve_output_path(tmp_path / "explicit", "trajectory") == (tmp_path / "explicit").resolve()
