# parameter_io.py
import json
import logging

import yaml

from parameters.global_parameters import GlobalParameters

logger = logging.getLogger("cloth_solver")


def load_data(filename):
    """Load a simulation configuration from a JSON or YAML file.

    Expected format:
    {
        "width": 20,
        "height": 20,
        "global_parameters": {"stretch_stiffness": 1.0, "lock_top_row": true}
    }

    A file without a ``global_parameters`` key is read as a flat mapping of
    parameters.
    """
    filename_str = str(filename)
    with open(filename_str, "r") as f:
        if filename_str.endswith((".yaml", ".yml")):
            data = yaml.safe_load(f)
        elif filename_str.endswith(".json"):
            data = json.load(f)
        else:
            logger.error(f"Unsupported file format for: {filename_str}")
            raise ValueError(f"Unsupported file format for: {filename_str}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        logger.error(f"Configuration root must be a mapping: {filename_str}")
        raise ValueError(f"Configuration root must be a mapping: {filename_str}")
    return data


def parse_parameters(data: dict) -> GlobalParameters:
    """Build validated :class:`GlobalParameters` from loaded config data."""
    if "global_parameters" in data:
        raw = data.get("global_parameters") or {}
    else:
        raw = {k: v for k, v in data.items() if k not in ("width", "height")}

    params = GlobalParameters()
    unknown = sorted(k for k in raw if k not in params)
    for key in unknown:
        logger.warning("Unknown parameter '%s' in configuration; keeping it.", key)
    params.update(raw)
    return params.validate()


def load_parameters(filename) -> tuple[GlobalParameters, dict]:
    """Return ``(parameters, grid)`` read from ``filename``.

    ``grid`` holds the optional ``width``/``height`` entries of the file.
    """
    data = load_data(filename)
    grid = {k: data[k] for k in ("width", "height") if k in data}
    return parse_parameters(data), grid
