"""Shear condition: C = a * (w_u . w_v), zero while the material axes stay orthogonal."""

from __future__ import annotations

import logging

import numpy as np

from geometry.triangle_ops import deformation_axes, rest_basis_coefficients

from .base import BaseCondition, ConditionBatch

logger = logging.getLogger("cloth_solver")


class ShearCondition(BaseCondition):
    name = "shear"
    stencil_size = 3
    n_components = 1

    def __init__(self, stencils: np.ndarray, rest_uv: np.ndarray) -> None:
        super().__init__(stencils)
        self.cu, self.cv, self.rest_area, self.rest_valid = rest_basis_coefficients(
            np.asarray(rest_uv, dtype=float), self.stencils
        )
        n_bad = int(np.count_nonzero(~self.rest_valid))
        if n_bad:
            logger.warning(
                "Shear: %d triangle(s) have a singular rest basis and are skipped.",
                n_bad,
            )

    def evaluate(self, positions: np.ndarray) -> ConditionBatch:
        batch = self._empty_batch(with_hessian=True)
        corners = positions[self.stencils]
        valid = self.rest_valid & np.all(np.isfinite(corners), axis=(1, 2))
        batch.valid = valid
        if not np.any(valid):
            return batch

        stencils = self.stencils[valid]
        cu = self.cu[valid]
        cv = self.cv[valid]
        area = self.rest_area[valid]
        w_u, w_v = deformation_axes(positions, stencils, cu, cv)

        batch.values[valid, 0] = area * np.einsum("sd,sd->s", w_u, w_v)
        # dC/dx_k = a * (cu_k * w_v + cv_k * w_u)
        batch.gradients[valid, 0] = area[:, None, None] * (
            cu[:, :, None] * w_v[:, None, :] + cv[:, :, None] * w_u[:, None, :]
        )
        # d2C/dx_i dx_j = a * (cu_i cv_j + cv_i cu_j) * I
        mix = cu[:, :, None] * cv[:, None, :] + cv[:, :, None] * cu[:, None, :]
        batch.hessians[valid, 0] = (area[:, None, None] * mix)[..., None, None] * np.eye(3)
        return batch


def build_condition(mesh, global_params) -> ShearCondition:
    return ShearCondition(mesh.triangles, mesh.rest_uv)
