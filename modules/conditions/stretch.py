"""Stretch condition.

Each triangle contributes two scalar conditions measuring elongation of its
material axes relative to the rest parametrization:

    C_u = a * (|w_u| - b_u)
    C_v = a * (|w_v| - b_v)

where ``a`` is the rest area and ``w_u``/``w_v`` are the deformed images of
the rest-space ``u``/``v`` directions. Since ``w = sum_k c_k x_k`` is linear
in the corner positions,

    dC/dx_i       = a * c_i * w_hat
    d2C/dx_i dx_j = a * c_i * c_j / |w| * (I - w_hat w_hat^T)
"""

from __future__ import annotations

import logging

import numpy as np

from geometry.triangle_ops import deformation_axes, rest_basis_coefficients

from .base import BaseCondition, ConditionBatch

logger = logging.getLogger("cloth_solver")


class StretchCondition(BaseCondition):
    name = "stretch"
    stencil_size = 3
    n_components = 2

    def __init__(
        self,
        stencils: np.ndarray,
        rest_uv: np.ndarray,
        stretch_u: float = 1.0,
        stretch_v: float = 1.0,
        eps: float = 1e-12,
    ) -> None:
        super().__init__(stencils)
        self.cu, self.cv, self.rest_area, self.rest_valid = rest_basis_coefficients(
            np.asarray(rest_uv, dtype=float), self.stencils
        )
        self.targets = np.array([stretch_u, stretch_v], dtype=float)
        self.eps = eps
        n_bad = int(np.count_nonzero(~self.rest_valid))
        if n_bad:
            logger.warning(
                "Stretch: %d triangle(s) have a singular rest basis and are skipped.",
                n_bad,
            )

    def evaluate(self, positions: np.ndarray) -> ConditionBatch:
        batch = self._empty_batch(with_hessian=True)
        finite = np.all(np.isfinite(positions[self.stencils]), axis=(1, 2))
        candidates = self.rest_valid & finite
        axes = np.zeros((len(self.stencils), 2, 3))
        w_u, w_v = deformation_axes(
            positions,
            self.stencils[candidates],
            self.cu[candidates],
            self.cv[candidates],
        )
        axes[candidates] = np.stack([w_u, w_v], axis=1)
        lengths = np.linalg.norm(axes, axis=2)
        valid = candidates & np.all(lengths > self.eps, axis=1)
        batch.valid = valid
        if not np.any(valid):
            return batch

        area = self.rest_area[valid]
        coeffs = np.stack([self.cu[valid], self.cv[valid]], axis=1)
        length = lengths[valid]
        unit = axes[valid] / length[..., None]

        batch.values[valid] = area[:, None] * (length - self.targets)
        batch.gradients[valid] = (
            area[:, None, None, None] * coeffs[..., None] * unit[:, :, None, :]
        )

        proj = np.eye(3) - unit[..., :, None] * unit[..., None, :]
        scale = (
            area[:, None, None, None]
            * coeffs[:, :, :, None]
            * coeffs[:, :, None, :]
            / length[:, :, None, None]
        )
        batch.hessians[valid] = scale[..., None, None] * proj[:, :, None, None, :, :]
        return batch


def build_condition(mesh, global_params) -> StretchCondition:
    return StretchCondition(
        mesh.triangles,
        mesh.rest_uv,
        stretch_u=float(global_params.get("stretch_u", 1.0)),
        stretch_v=float(global_params.get("stretch_v", 1.0)),
    )
