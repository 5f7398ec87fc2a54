# runtime/steppers/base.py
"""Abstract base class for time integrators."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from geometry.cloth_mesh import ClothMesh
from runtime.force_assembler import ForceAssembly


class BaseIntegrator(ABC):
    """Base interface for classes advancing a cloth mesh by one time step."""

    name: str = ""

    @abstractmethod
    def step(
        self,
        mesh: ClothMesh,
        assembly: ForceAssembly,
        time_step: float,
        locked: np.ndarray | None = None,
    ) -> None:
        """Advance ``mesh`` velocities and positions in place.

        Parameters
        ----------
        mesh : ClothMesh
            The mesh being simulated.
        assembly : ForceAssembly
            Forces (and Jacobians) assembled at the current state, including
            any external forces.
        time_step : float
            Step length ``h``.
        locked : np.ndarray | None
            Optional vertex indices excluded from the position update.
        """

    @staticmethod
    def _free_mask(n_verts: int, locked: np.ndarray | None) -> np.ndarray:
        free = np.ones(n_verts, dtype=bool)
        if locked is not None and len(locked):
            free[np.asarray(locked, dtype=np.int64)] = False
        return free

    def __repr__(self) -> str:  # pragma: no cover - simple utility
        params = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{self.__class__.__name__}({params})"
