# cloth_mesh.py

import logging
from numbers import Integral

import numpy as np

from core.exceptions import InvalidGridError
from geometry.triangle_ops import triangle_normals_and_areas

logger = logging.getLogger("cloth_solver")


def _check_grid(width, height) -> None:
    for value in (width, height):
        if isinstance(value, bool) or not isinstance(value, Integral) or value < 2:
            raise InvalidGridError(width, height)


def build_grid_triangles(width: int, height: int) -> np.ndarray:
    """Return the ``(T, 3)`` triangle table in row-major cell order.

    Each cell emits its bottom-left triangle ``(p00, p01, p10)`` followed by
    its top-right triangle ``(p10, p01, p11)``.
    """
    _check_grid(width, height)
    rows, cols = np.meshgrid(
        np.arange(height - 1), np.arange(width - 1), indexing="ij"
    )
    p00 = (rows * width + cols).ravel()
    p10 = p00 + 1
    p01 = p00 + width
    p11 = p01 + 1

    tris = np.empty((2 * p00.size, 3), dtype=np.int64)
    tris[0::2] = np.stack([p00, p01, p10], axis=1)
    tris[1::2] = np.stack([p10, p01, p11], axis=1)
    return tris


def build_bend_quads(width: int, height: int) -> np.ndarray:
    """Return the ``(Q, 4)`` bend quads as ``(wing_a, edge_0, edge_1, wing_b)``.

    Per cell the diagonal quad is always emitted; the quad across the right
    edge and the quad across the top edge only when a neighbouring cell
    exists on that side.
    """
    _check_grid(width, height)
    quads = []
    for row in range(height - 1):
        for col in range(width - 1):
            p00 = row * width + col
            p10 = p00 + 1
            p01 = p00 + width
            p11 = p01 + 1
            quads.append((p00, p01, p10, p11))
            if col + 1 < width - 1:
                quads.append((p01, p10, p11, p10 + 1))
            if row + 1 < height - 1:
                quads.append((p10, p01, p11, p01 + width))
    return np.asarray(quads, dtype=np.int64).reshape(-1, 4)


class ClothMesh:
    """Rectangular grid of point masses with fixed two-triangle-per-cell topology.

    Vertex ``(col, row)`` has linear index ``row * width + col``. The rest
    layout lies in the ``z = 0`` plane with ``x = col * spacing`` and
    ``y = row * spacing``; the rest-space ``(u, v)`` coordinates are the rest
    ``(x, y)`` and never change for the lifetime of the mesh.
    """

    def __init__(self, width, height, spacing: float = 0.1, total_mass: float = 1.0):
        _check_grid(width, height)
        if spacing <= 0.0:
            raise ValueError(f"spacing must be positive; got {spacing!r}")
        if total_mass <= 0.0:
            raise ValueError(f"total_mass must be positive; got {total_mass!r}")

        self.width = int(width)
        self.height = int(height)
        self.spacing = float(spacing)
        self.total_mass = float(total_mass)

        rows, cols = np.meshgrid(
            np.arange(self.height), np.arange(self.width), indexing="ij"
        )
        self.rest_uv = np.column_stack(
            [cols.ravel() * self.spacing, rows.ravel() * self.spacing]
        ).astype(float)
        self.positions = np.column_stack(
            [self.rest_uv, np.zeros(self.num_vertices)]
        )
        self.velocities = np.zeros((self.num_vertices, 3), dtype=float)
        self.vertex_mass = self.total_mass / self.num_vertices

        self.triangles = build_grid_triangles(self.width, self.height)
        self.bend_quads = build_bend_quads(self.width, self.height)

        logger.debug(
            "Built %dx%d cloth mesh: %d vertices, %d triangles, %d bend quads",
            self.width,
            self.height,
            self.num_vertices,
            self.num_triangles,
            len(self.bend_quads),
        )

    @property
    def num_vertices(self) -> int:
        return self.width * self.height

    @property
    def num_triangles(self) -> int:
        return 2 * (self.width - 1) * (self.height - 1)

    def index(self, col: int, row: int) -> int:
        """Linear index of grid coordinate ``(col, row)``."""
        if not (0 <= col < self.width and 0 <= row < self.height):
            raise IndexError(
                f"Grid coordinate ({col}, {row}) outside {self.width}x{self.height} mesh"
            )
        return row * self.width + col

    def coord(self, index: int) -> tuple[int, int]:
        """Grid coordinate ``(col, row)`` of linear ``index``."""
        if not 0 <= index < self.num_vertices:
            raise IndexError(f"Vertex index {index} outside mesh")
        row, col = divmod(int(index), self.width)
        return col, row

    def get_world_point(self, col: int, row: int) -> np.ndarray:
        return self.positions[self.index(col, row)]

    def get_velocity(self, col: int, row: int) -> np.ndarray:
        return self.velocities[self.index(col, row)]

    def top_row_indices(self) -> np.ndarray:
        """Indices of the last grid row, the row pinned by boundary locking."""
        start = (self.height - 1) * self.width
        return np.arange(start, start + self.width)

    def surface_area(self) -> float:
        """Current total area of the triangulated cloth."""
        _, areas = triangle_normals_and_areas(self.positions, self.triangles)
        return float(areas.sum())

    def perturb(self, amplitude: float, rng: np.random.Generator) -> None:
        """Offset every vertex by Gaussian noise of standard deviation ``amplitude``."""
        if amplitude <= 0.0:
            return
        self.positions += rng.normal(0.0, amplitude, size=self.positions.shape)

