# runtime/force_assembler.py

import logging
from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple

import numpy as np

from modules.conditions.base import BaseCondition
from runtime.jacobian import BlockJacobian

logger = logging.getLogger("cloth_solver")


@dataclass
class ForceAssembly:
    """Result of one force assembly; owned by the caller that requested it."""

    forces: np.ndarray
    dfdx: BlockJacobian
    dfdv: BlockJacobian
    energy: float = 0.0
    skipped: Dict[str, int] = field(default_factory=dict)

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())


class ForceAssembler:
    """Accumulate internal forces and force Jacobians over condition evaluators.

    For a condition ``C`` with stiffness ``k`` and damping ``kd`` every stencil
    vertex ``i`` receives

        f_i = -k * sum_m dC_m/dx_i C_m - kd * sum_m dC_m/dx_i dC_m/dt

    with Jacobian blocks

        df_i/dx_j = -k  * sum_m (dC_m/dx_i dC_m/dx_j^T + C_m d2C_m/dx_i dx_j)
        df_i/dv_j = -kd * sum_m dC_m/dx_i dC_m/dx_j^T

    Conditions that supply no Hessian (bend) contribute only the first term
    to ``df/dx``. Their block is then a symmetric Gauss-Newton approximation,
    exact only where ``C = 0``. Stencils flagged invalid, including those with
    non-finite corners, add nothing and are counted in ``skipped``.
    """

    def __init__(
        self,
        conditions: Sequence[BaseCondition],
        coefficients: Dict[str, Tuple[float, float]],
    ) -> None:
        self.conditions = list(conditions)
        self.coefficients = {}
        for cond in self.conditions:
            if cond.name not in coefficients:
                raise KeyError(f"No stiffness/damping given for condition '{cond.name}'.")
            k, kd = coefficients[cond.name]
            self.coefficients[cond.name] = (float(k), float(kd))

    def assemble(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        *,
        with_jacobian: bool = True,
    ) -> ForceAssembly:
        """Return freshly allocated forces and Jacobians for the given state."""
        n_verts = len(positions)
        assembly = ForceAssembly(
            forces=np.zeros((n_verts, 3), dtype=float),
            dfdx=BlockJacobian(n_verts),
            dfdv=BlockJacobian(n_verts),
        )

        for cond in self.conditions:
            k, kd = self.coefficients[cond.name]
            batch = cond.evaluate(positions)
            stencils = cond.stencils

            n_bad = int(np.count_nonzero(~batch.valid))
            assembly.skipped[cond.name] = n_bad
            if n_bad:
                logger.warning(
                    "%s: skipped %d degenerate stencil(s) out of %d.",
                    cond.name,
                    n_bad,
                    len(stencils),
                )

            values = batch.values
            grads = batch.gradients
            c_dot = batch.time_derivative(velocities, stencils)
            c_dot[~batch.valid] = 0.0
            assembly.energy += 0.5 * k * float(np.sum(values * values))

            per_vertex = -np.einsum("smnd,sm->snd", grads, k * values + kd * c_dot)
            np.add.at(assembly.forces, stencils, per_vertex)

            if not with_jacobian:
                continue

            outer = np.einsum("smid,smje->sijde", grads, grads)
            dfdx = -k * outer
            if batch.hessians is not None:
                dfdx -= k * np.einsum("sm,smijde->sijde", values, batch.hessians)
            assembly.dfdx.add_stencil_blocks(stencils, dfdx)
            assembly.dfdv.add_stencil_blocks(stencils, -kd * outer)

        logger.debug(
            "Assembled forces: energy=%.6e max|f|=%.6e",
            assembly.energy,
            float(np.max(np.linalg.norm(assembly.forces, axis=1))) if n_verts else 0.0,
        )
        return assembly
