# runtime/jacobian.py
"""Block-sparse force Jacobian with 3x3 blocks keyed by ordered vertex pairs."""

from __future__ import annotations

from typing import Iterator

import numpy as np
import scipy.sparse as sp


class BlockJacobian:
    """Additive accumulator of 3x3 blocks ``J[i][j]``.

    Blocks are appended per stencil batch and collapsed by vertex-pair key on
    first read, so accumulation order never matters.
    """

    def __init__(self, n_verts: int) -> None:
        self.n_verts = int(n_verts)
        self._rows: list[np.ndarray] = []
        self._cols: list[np.ndarray] = []
        self._blocks: list[np.ndarray] = []
        self._compact: tuple[np.ndarray, np.ndarray, np.ndarray] | None = None
        self._lookup: dict[tuple[int, int], int] | None = None

    def add_stencil_blocks(self, stencils: np.ndarray, blocks: np.ndarray) -> None:
        """Accumulate ``blocks[s, a, b]`` into ``J[stencils[s, a]][stencils[s, b]]``.

        ``stencils`` has shape ``(S, n)`` and ``blocks`` shape ``(S, n, n, 3, 3)``.
        """
        if len(stencils) == 0:
            return
        n = stencils.shape[1]
        self._rows.append(np.repeat(stencils, n, axis=1).ravel())
        self._cols.append(np.tile(stencils, (1, n)).ravel())
        self._blocks.append(np.asarray(blocks, dtype=float).reshape(-1, 3, 3))
        self._compact = None
        self._lookup = None

    def _compacted(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        if self._compact is None:
            if not self._rows:
                empty = np.zeros(0, dtype=np.int64)
                self._compact = (empty, empty, np.zeros((0, 3, 3)))
            else:
                rows = np.concatenate(self._rows)
                cols = np.concatenate(self._cols)
                keys = rows * self.n_verts + cols
                unique_keys, inverse = np.unique(keys, return_inverse=True)
                data = np.zeros((len(unique_keys), 3, 3))
                np.add.at(data, inverse.ravel(), np.concatenate(self._blocks))
                self._compact = (
                    unique_keys // self.n_verts,
                    unique_keys % self.n_verts,
                    data,
                )
        return self._compact

    def __len__(self) -> int:
        return len(self._compacted()[0])

    def __contains__(self, pair) -> bool:
        return self._index().get((int(pair[0]), int(pair[1]))) is not None

    def _index(self) -> dict[tuple[int, int], int]:
        if self._lookup is None:
            rows, cols, _ = self._compacted()
            self._lookup = {
                (int(i), int(j)): k for k, (i, j) in enumerate(zip(rows, cols))
            }
        return self._lookup

    def block(self, i: int, j: int) -> np.ndarray:
        """Return a copy of ``J[i][j]``; zero when the pair never co-occurs."""
        k = self._index().get((int(i), int(j)))
        if k is None:
            return np.zeros((3, 3))
        return self._compacted()[2][k].copy()

    def items(self) -> Iterator[tuple[tuple[int, int], np.ndarray]]:
        rows, cols, data = self._compacted()
        for i, j, blk in zip(rows, cols, data):
            yield (int(i), int(j)), blk

    def is_symmetric(self, atol: float = 1e-10) -> bool:
        """Check ``J[i][j] == J[j][i]^T`` for every stored pair."""
        for (i, j), blk in self.items():
            if not np.allclose(blk, self.block(j, i).T, atol=atol, rtol=0.0):
                return False
        return True

    def to_sparse(self) -> sp.csr_matrix:
        """Return the ``(3N, 3N)`` matrix in CSR form."""
        rows, cols, data = self._compacted()
        a, b = np.meshgrid(np.arange(3), np.arange(3), indexing="ij")
        r = 3 * rows[:, None, None] + a
        c = 3 * cols[:, None, None] + b
        size = 3 * self.n_verts
        return sp.coo_matrix(
            (data.ravel(), (r.ravel(), c.ravel())), shape=(size, size)
        ).tocsr()

    def matvec(self, x: np.ndarray) -> np.ndarray:
        """Apply the Jacobian to a per-vertex ``(N, 3)`` array."""
        return (self.to_sparse() @ np.asarray(x, dtype=float).ravel()).reshape(-1, 3)
