"""Implicit (backward) Euler integrator built on the assembled force Jacobians."""

from __future__ import annotations

import logging

import numpy as np
import scipy.sparse as sp
from scipy.sparse.linalg import spsolve

from geometry.cloth_mesh import ClothMesh
from runtime.force_assembler import ForceAssembly

from .base import BaseIntegrator

logger = logging.getLogger("cloth_solver")


class ImplicitEuler(BaseIntegrator):
    """Linearised backward Euler step (Baraff & Witkin 1998).

    Solves

        (M - h df/dv - h^2 df/dx) dv = h (f + h df/dx v)

    then applies ``v += dv`` and ``x += h v``. Locked vertices are filtered
    out of the system so their velocity change is zero.
    """

    name = "implicit"

    def step(
        self,
        mesh: ClothMesh,
        assembly: ForceAssembly,
        time_step: float,
        locked: np.ndarray | None = None,
    ) -> None:
        h = float(time_step)
        n_dof = 3 * mesh.num_vertices
        dfdx = assembly.dfdx.to_sparse()
        dfdv = assembly.dfdv.to_sparse()

        system = (
            sp.identity(n_dof, format="csr") * mesh.vertex_mass
            - h * dfdv
            - (h * h) * dfdx
        )
        rhs = h * (assembly.forces.ravel() + h * (dfdx @ mesh.velocities.ravel()))

        free = self._free_mask(mesh.num_vertices, locked)
        free_dof = np.repeat(free, 3).astype(float)
        keep = sp.diags(free_dof)
        system = keep @ system @ keep + sp.diags(1.0 - free_dof)
        rhs = rhs * free_dof

        dv = spsolve(system.tocsc(), rhs)
        if not np.all(np.isfinite(dv)):
            logger.error("Implicit solve produced non-finite velocities.")
            raise FloatingPointError("Implicit Euler solve did not produce a finite result.")

        mesh.velocities += dv.reshape(-1, 3)
        mesh.positions[free] += mesh.velocities[free] * h
