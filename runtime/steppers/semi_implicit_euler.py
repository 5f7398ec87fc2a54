"""Semi-implicit (symplectic) Euler integrator."""

from __future__ import annotations

import logging

import numpy as np

from geometry.cloth_mesh import ClothMesh
from runtime.force_assembler import ForceAssembly

from .base import BaseIntegrator

logger = logging.getLogger("cloth_solver")


class SemiImplicitEuler(BaseIntegrator):
    """``v += f h / m`` for every vertex, then ``x += v h`` for free vertices.

    Locked vertices still gather velocity but their positions never move.
    A step that would leave non-finite state raises ``FloatingPointError``
    and leaves the mesh untouched.
    """

    name = "semi_implicit"

    def step(
        self,
        mesh: ClothMesh,
        assembly: ForceAssembly,
        time_step: float,
        locked: np.ndarray | None = None,
    ) -> None:
        velocities = mesh.velocities + assembly.forces * (time_step / mesh.vertex_mass)
        free = self._free_mask(mesh.num_vertices, locked)
        positions = mesh.positions.copy()
        positions[free] += velocities[free] * time_step

        if not (np.all(np.isfinite(velocities)) and np.all(np.isfinite(positions))):
            logger.error(
                "Explicit step diverged; reduce stiffness or time_step, or use "
                "integrator 'implicit'."
            )
            raise FloatingPointError("Semi-implicit Euler step produced non-finite state.")

        mesh.velocities[:] = velocities
        mesh.positions[:] = positions
