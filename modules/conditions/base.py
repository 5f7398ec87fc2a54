# modules/conditions/base.py
"""Common interface shared by the stretch, shear and bend conditions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np


@dataclass
class ConditionBatch:
    """Condition values and derivatives for every stencil of one evaluator.

    Shapes use ``S`` stencils, ``m`` condition components and ``n`` stencil
    vertices.

    Attributes
    ----------
    values : np.ndarray
        ``(S, m)`` condition values.
    gradients : np.ndarray
        ``(S, m, n, 3)`` derivative of each component w.r.t. each vertex.
    hessians : np.ndarray | None
        ``(S, m, n, n, 3, 3)`` second derivatives, or ``None`` when the
        condition only supplies a Gauss-Newton Jacobian.
    valid : np.ndarray
        ``(S,)`` mask of stencils whose values are numerically meaningful.
        Invalid rows are zero-filled.
    """

    values: np.ndarray
    gradients: np.ndarray
    hessians: np.ndarray | None
    valid: np.ndarray

    def time_derivative(self, velocities: np.ndarray, stencils: np.ndarray) -> np.ndarray:
        """Return ``dC/dt = sum_j dC/dx_j . v_j`` with shape ``(S, m)``."""
        return np.einsum("smnd,snd->sm", self.gradients, velocities[stencils])


class BaseCondition(ABC):
    """A deformation condition evaluated over a batch of vertex stencils.

    Subclasses bake any rest-state data in at construction and evaluate as a
    pure function of the current vertex positions.
    """

    name: str = ""
    stencil_size: int = 0
    n_components: int = 1

    def __init__(self, stencils: np.ndarray) -> None:
        stencils = np.asarray(stencils, dtype=np.int64)
        if stencils.ndim != 2 or stencils.shape[1] != self.stencil_size:
            raise ValueError(
                f"{type(self).__name__} expects stencils of shape (S, {self.stencil_size}); "
                f"got {stencils.shape}"
            )
        self.stencils = stencils

    def __len__(self) -> int:
        return len(self.stencils)

    @abstractmethod
    def evaluate(self, positions: np.ndarray) -> ConditionBatch:
        """Evaluate values and derivatives for every stencil at ``positions``."""

    def _empty_batch(self, with_hessian: bool) -> ConditionBatch:
        s, m, n = len(self.stencils), self.n_components, self.stencil_size
        return ConditionBatch(
            values=np.zeros((s, m)),
            gradients=np.zeros((s, m, n, 3)),
            hessians=np.zeros((s, m, n, n, 3, 3)) if with_hessian else None,
            valid=np.zeros(s, dtype=bool),
        )

    def __repr__(self) -> str:  # pragma: no cover - simple utility
        return f"{self.__class__.__name__}(stencils={len(self.stencils)})"
