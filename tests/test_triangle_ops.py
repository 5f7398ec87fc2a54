import os
import sys

import numpy as np

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from geometry.cloth_mesh import ClothMesh
from geometry.triangle_ops import (
    deformation_axes,
    rest_basis_coefficients,
    triangle_normals_and_areas,
)


def test_normals_and_areas_of_unit_right_triangle():
    positions = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    normals, areas = triangle_normals_and_areas(positions, np.array([[0, 1, 2]]))
    assert np.allclose(normals, [[0.0, 0.0, 1.0]])
    assert np.allclose(areas, [0.5])


def test_rest_basis_reproduces_material_axes():
    mesh = ClothMesh(4, 3, spacing=0.25)
    cu, cv, area, valid = rest_basis_coefficients(mesh.rest_uv, mesh.triangles)
    assert valid.all()
    assert np.allclose(area, 0.5 * 0.25**2)
    assert np.allclose(cu.sum(axis=1), 0.0)
    assert np.allclose(cv.sum(axis=1), 0.0)

    w_u, w_v = deformation_axes(mesh.positions, mesh.triangles, cu, cv)
    assert np.allclose(w_u, [1.0, 0.0, 0.0])
    assert np.allclose(w_v, [0.0, 1.0, 0.0])

    # A uniform stretch of the world positions scales the axes.
    w_u, w_v = deformation_axes(2.0 * mesh.positions, mesh.triangles, cu, cv)
    assert np.allclose(np.linalg.norm(w_u, axis=1), 2.0)


def test_singular_rest_triangle_is_invalid():
    rest_uv = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])
    cu, cv, area, valid = rest_basis_coefficients(rest_uv, np.array([[0, 1, 2]]))
    assert not valid[0]
    assert np.all(np.isfinite(cu)) and np.all(np.isfinite(cv))
