"""Bend condition on pairs of triangles sharing an edge.

Quads are ordered ``(wing_a, edge_0, edge_1, wing_b)``. With ``e`` the shared
edge and ``h_a``, ``h_b`` the parts of the wing offsets perpendicular to it,
the condition is the signed dihedral angle

    theta = atan2(e_hat . (h_b x h_a), -h_a . h_b)

which vanishes for a flat pair. Gradients (Bridson et al. 2003 bending modes):

    dtheta/dx_b  =  (e_hat x h_b) / |h_b|^2
    dtheta/dx_a  = -(e_hat x h_a) / |h_a|^2
    dtheta/dx_e0 = -((1 - s_a) g_a + (1 - s_b) g_b)
    dtheta/dx_e1 = -(s_a g_a + s_b g_b)

where ``s`` is the projection parameter of a wing onto the edge. No Hessian
is supplied; the force Jacobian keeps the Gauss-Newton term only.
"""

from __future__ import annotations

import numpy as np

from geometry.triangle_ops import _fast_cross, _row_dot

from .base import BaseCondition, ConditionBatch


class BendCondition(BaseCondition):
    name = "bend"
    stencil_size = 4
    n_components = 1

    def __init__(self, stencils: np.ndarray, eps: float = 1e-12) -> None:
        super().__init__(stencils)
        self.eps = eps

    def evaluate(self, positions: np.ndarray) -> ConditionBatch:
        batch = self._empty_batch(with_hessian=False)
        if len(self.stencils) == 0:
            return batch

        corners = positions[self.stencils]
        finite = np.all(np.isfinite(corners), axis=(1, 2))
        # Non-finite quads are zeroed so they drop out through the length test.
        corners = np.where(finite[:, None, None], corners, 0.0)
        wing_a, e0, e1, wing_b = (corners[:, k] for k in range(4))

        edge = e1 - e0
        length = np.linalg.norm(edge, axis=1)
        valid = length > self.eps
        e_hat = np.zeros_like(edge)
        e_hat[valid] = edge[valid] / length[valid, None]

        r_a = wing_a - e0
        r_b = wing_b - e0
        along_a = _row_dot(r_a, e_hat)
        along_b = _row_dot(r_b, e_hat)
        h_a = r_a - along_a[:, None] * e_hat
        h_b = r_b - along_b[:, None] * e_hat
        ha2 = _row_dot(h_a, h_a)
        hb2 = _row_dot(h_b, h_b)
        eps2 = self.eps * self.eps
        valid &= (ha2 > eps2) & (hb2 > eps2)
        batch.valid = valid
        if not np.any(valid):
            return batch

        e_hat = e_hat[valid]
        h_a, h_b = h_a[valid], h_b[valid]
        ha2, hb2 = ha2[valid], hb2[valid]
        s_a = along_a[valid] / length[valid]
        s_b = along_b[valid] / length[valid]

        theta = np.arctan2(_row_dot(e_hat, _fast_cross(h_b, h_a)), -_row_dot(h_a, h_b))
        g_a = -_fast_cross(e_hat, h_a) / ha2[:, None]
        g_b = _fast_cross(e_hat, h_b) / hb2[:, None]
        g_e0 = -((1.0 - s_a)[:, None] * g_a + (1.0 - s_b)[:, None] * g_b)
        g_e1 = -(s_a[:, None] * g_a + s_b[:, None] * g_b)

        batch.values[valid, 0] = theta
        batch.gradients[valid, 0] = np.stack([g_a, g_e0, g_e1, g_b], axis=1)
        return batch


def build_condition(mesh, global_params) -> BendCondition:
    return BendCondition(mesh.bend_quads)
