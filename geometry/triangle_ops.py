"""Vectorized triangle geometry helpers used by the condition modules."""

from __future__ import annotations

import numpy as np


def _fast_cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Compute cross products for arrays of 3D vectors."""
    x = a[..., 1] * b[..., 2] - a[..., 2] * b[..., 1]
    y = a[..., 2] * b[..., 0] - a[..., 0] * b[..., 2]
    z = a[..., 0] * b[..., 1] - a[..., 1] * b[..., 0]
    out = np.empty(x.shape + (3,), dtype=x.dtype)
    out[..., 0] = x
    out[..., 1] = y
    out[..., 2] = z
    return out


def _row_dot(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Dot products of matching rows."""
    return np.einsum("...i,...i->...", a, b)


def triangle_normals_and_areas(
    positions: np.ndarray, tri_rows: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    """Return unnormalized triangle normals and triangle areas."""
    v0 = positions[tri_rows[:, 0]]
    v1 = positions[tri_rows[:, 1]]
    v2 = positions[tri_rows[:, 2]]
    normals = _fast_cross(v1 - v0, v2 - v0)
    areas = 0.5 * np.linalg.norm(normals, axis=1)
    return normals, areas


def rest_basis_coefficients(
    rest_uv: np.ndarray, tri_rows: np.ndarray, eps: float = 1e-14
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Return the rest-space basis of each triangle.

    For a triangle with rest coordinates ``(u_k, v_k)`` the deformation map
    ``[w_u w_v] = [dx1 dx2] [[du1 du2], [dv1 dv2]]^-1`` is linear in the
    corner positions, ``w_u = sum_k cu[k] * x_k`` and likewise for ``w_v``.

    Returns
    -------
    tuple
        ``(cu, cv, rest_area, valid)`` with ``cu``/``cv`` of shape ``(T, 3)``,
        ``rest_area`` of shape ``(T,)`` and ``valid`` flagging triangles whose
        rest determinant is not singular.
    """
    uv0 = rest_uv[tri_rows[:, 0]]
    uv1 = rest_uv[tri_rows[:, 1]]
    uv2 = rest_uv[tri_rows[:, 2]]
    du1 = uv1[:, 0] - uv0[:, 0]
    dv1 = uv1[:, 1] - uv0[:, 1]
    du2 = uv2[:, 0] - uv0[:, 0]
    dv2 = uv2[:, 1] - uv0[:, 1]

    det = du1 * dv2 - du2 * dv1
    valid = np.abs(det) > eps
    inv_det = np.zeros_like(det)
    inv_det[valid] = 1.0 / det[valid]

    cu = np.empty((len(tri_rows), 3), dtype=float)
    cv = np.empty((len(tri_rows), 3), dtype=float)
    cu[:, 1] = dv2 * inv_det
    cu[:, 2] = -dv1 * inv_det
    cu[:, 0] = -(cu[:, 1] + cu[:, 2])
    cv[:, 1] = -du2 * inv_det
    cv[:, 2] = du1 * inv_det
    cv[:, 0] = -(cv[:, 1] + cv[:, 2])

    rest_area = 0.5 * np.abs(det)
    return cu, cv, rest_area, valid


def deformation_axes(
    positions: np.ndarray, tri_rows: np.ndarray, cu: np.ndarray, cv: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    """Return the deformed material axes ``(w_u, w_v)`` for each triangle."""
    corners = positions[tri_rows]
    w_u = np.einsum("tk,tkd->td", cu, corners)
    w_v = np.einsum("tk,tkd->td", cv, corners)
    return w_u, w_v
