"""Package utilities for cloth-solver.

The solver core lives in top-level packages like `geometry/`, `modules/` and
`runtime/`. This package provides the installed version string and the
`Simulation` entry point.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from runtime.simulation import Simulation

try:
    __version__ = version("cloth-solver")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = ["Simulation", "__version__"]
