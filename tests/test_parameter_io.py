import json
import os
import sys

import pytest
import yaml

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.exceptions import InvalidParameterError
from parameters.parameter_io import load_data, load_parameters, parse_parameters


def test_load_json_with_nested_parameters(tmp_path):
    path = tmp_path / "cloth.json"
    path.write_text(
        json.dumps(
            {
                "width": 8,
                "height": 6,
                "global_parameters": {"stretch_stiffness": 2.5, "integrator": "implicit"},
            }
        )
    )
    params, grid = load_parameters(path)
    assert grid == {"width": 8, "height": 6}
    assert params.stretch_stiffness == 2.5
    assert params.integrator == "implicit"


def test_load_flat_yaml(tmp_path):
    path = tmp_path / "cloth.yaml"
    path.write_text(
        yaml.safe_dump(
            {"width": 5, "bend_stiffness": "1e-4", "gravity": [0, 0, -1], "seed": 3}
        )
    )
    params, grid = load_parameters(path)
    assert grid == {"width": 5}
    assert params.bend_stiffness == pytest.approx(1e-4)
    assert params.gravity == [0.0, 0.0, -1.0]
    assert params.seed == 3


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("")
    params, grid = load_parameters(path)
    assert grid == {}
    assert params.time_step == 1.0


def test_unknown_keys_warn(caplog):
    with caplog.at_level("WARNING", logger="cloth_solver"):
        params = parse_parameters({"global_parameters": {"wind": 3.0}})
    assert "Unknown parameter 'wind'" in caplog.text
    assert params.get("wind") == 3.0


def test_invalid_values_raise():
    with pytest.raises(InvalidParameterError):
        parse_parameters({"time_step": -1.0})


def test_unsupported_extension_raises(tmp_path):
    path = tmp_path / "cloth.txt"
    path.write_text("{}")
    with pytest.raises(ValueError, match="Unsupported file format"):
        load_data(path)


def test_non_mapping_root_raises(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ValueError, match="mapping"):
        load_data(path)
