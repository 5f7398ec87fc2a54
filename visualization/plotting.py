import logging
from typing import Any

import matplotlib.pyplot as plt
import numpy as np
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

logger = logging.getLogger("cloth_solver")


def plot_cloth(
    triangle_vertices: np.ndarray,
    ax=None,
    facet_color: Any = None,
    edge_color: Any = "k",
    transparent: bool = False,
    no_axes: bool = False,
    title: str | None = None,
    show: bool = True,
):
    """
    Draw a flat triangle-corner buffer in 3D using Matplotlib.

    Parameters
    ----------
    triangle_vertices : np.ndarray
        Flat buffer of ``9 * num_triangles`` coordinates, as produced by
        :func:`geometry.render_buffer.triangle_vertex_buffer`.
    ax : mpl_toolkits.mplot3d.Axes3D, optional
        Optional Matplotlib 3D axis. If omitted, a new figure and axis
        are created.
    facet_color :
        Fill colour of the triangles. If ``None``, a light blue is used.
    edge_color :
        Colour of triangle outlines; ``None`` disables them.
    transparent : bool, optional
        If ``True``, draw triangles semi-transparent.
    no_axes : bool, optional
        If ``True``, hide the axes.
    title : str, optional
        Axis title.
    show : bool, optional
        If ``True`` (default), call :func:`matplotlib.pyplot.show` after
        drawing.

    Returns
    -------
    The axis that was drawn on, or ``None`` for an empty buffer.
    """
    triangles = np.asarray(triangle_vertices, dtype=float).reshape(-1, 3, 3)
    if len(triangles) == 0:
        logger.warning("Render buffer has no triangles to visualize.")
        return None

    if ax is None:
        fig = plt.figure()
        ax = fig.add_subplot(111, projection="3d")

    collection = Poly3DCollection(
        triangles,
        facecolors=facet_color if facet_color is not None else (0.6, 0.8, 1.0),
        edgecolors=edge_color if edge_color is not None else "none",
        linewidths=0.5,
        alpha=0.4 if transparent else 1.0,
    )
    ax.add_collection3d(collection)

    points = triangles.reshape(-1, 3)
    lo = points.min(axis=0)
    hi = points.max(axis=0)
    center = 0.5 * (lo + hi)
    half = 0.5 * float(np.max(hi - lo)) or 1.0
    ax.set_xlim(center[0] - half, center[0] + half)
    ax.set_ylim(center[1] - half, center[1] + half)
    ax.set_zlim(center[2] - half, center[2] + half)

    if no_axes:
        ax.set_axis_off()
    else:
        ax.set_xlabel("X")
        ax.set_ylabel("Y")
        ax.set_zlabel("Z")
    if title:
        ax.set_title(title)

    if show:
        plt.show()
    return ax
