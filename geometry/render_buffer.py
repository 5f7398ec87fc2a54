"""Flatten a cloth mesh into a triangle-corner vertex buffer for drawing."""

from __future__ import annotations

import numpy as np

from geometry.cloth_mesh import ClothMesh


def triangle_vertex_buffer(mesh: ClothMesh, dtype=np.float32) -> np.ndarray:
    """Return ``9 * num_triangles`` corner coordinates of ``mesh``.

    Triangles follow ``mesh.triangles``: row-major cell order, bottom-left
    triangle first, three corners of three coordinates each.
    """
    return mesh.positions[mesh.triangles].astype(dtype).reshape(-1)


def read_only_buffer(mesh: ClothMesh, dtype=np.float32) -> np.ndarray:
    """Like :func:`triangle_vertex_buffer` but with writes disabled."""
    buf = triangle_vertex_buffer(mesh, dtype=dtype)
    buf.flags.writeable = False
    return buf
