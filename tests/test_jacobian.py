import os
import sys

import numpy as np

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from runtime.jacobian import BlockJacobian


def _pair_blocks(value_ab, value_ba, diag=0.0):
    blocks = np.zeros((1, 2, 2, 3, 3))
    blocks[0, 0, 0] = diag * np.eye(3)
    blocks[0, 1, 1] = diag * np.eye(3)
    blocks[0, 0, 1] = value_ab
    blocks[0, 1, 0] = value_ba
    return blocks


def test_empty_jacobian():
    jac = BlockJacobian(4)
    assert len(jac) == 0
    assert (0, 0) not in jac
    assert np.array_equal(jac.block(1, 2), np.zeros((3, 3)))
    assert jac.to_sparse().shape == (12, 12)
    assert jac.to_sparse().nnz == 0
    assert np.array_equal(jac.matvec(np.ones((4, 3))), np.zeros((4, 3)))


def test_blocks_accumulate_across_stencils():
    jac = BlockJacobian(3)
    a = np.arange(9.0).reshape(3, 3)
    jac.add_stencil_blocks(np.array([[0, 2]]), _pair_blocks(a, a.T, diag=1.0))
    jac.add_stencil_blocks(np.array([[2, 0]]), _pair_blocks(np.eye(3), np.eye(3)))

    assert len(jac) == 4
    assert (0, 2) in jac and (2, 0) in jac
    assert (0, 1) not in jac
    assert np.allclose(jac.block(0, 2), a + np.eye(3))
    assert np.allclose(jac.block(2, 0), a.T + np.eye(3))
    assert np.allclose(jac.block(0, 0), np.eye(3))
    assert jac.is_symmetric()


def test_block_returns_a_copy():
    jac = BlockJacobian(2)
    jac.add_stencil_blocks(np.array([[0, 1]]), _pair_blocks(np.eye(3), np.eye(3)))
    blk = jac.block(0, 1)
    blk[:] = 99.0
    assert np.allclose(jac.block(0, 1), np.eye(3))


def test_asymmetric_blocks_are_detected():
    jac = BlockJacobian(2)
    a = np.arange(9.0).reshape(3, 3)
    jac.add_stencil_blocks(np.array([[0, 1]]), _pair_blocks(a, a))
    assert not jac.is_symmetric()


def test_sparse_layout_and_matvec_agree():
    jac = BlockJacobian(3)
    a = np.arange(1.0, 10.0).reshape(3, 3)
    jac.add_stencil_blocks(np.array([[1, 2]]), _pair_blocks(a, a.T, diag=2.0))

    dense = jac.to_sparse().toarray()
    assert np.allclose(dense[3:6, 6:9], a)
    assert np.allclose(dense[6:9, 3:6], a.T)
    assert np.allclose(dense[0:3, :], 0.0)

    x = np.arange(9.0).reshape(3, 3)
    assert np.allclose(jac.matvec(x), (dense @ x.ravel()).reshape(3, 3))
    items = dict(jac.items())
    assert set(items) == {(1, 1), (1, 2), (2, 1), (2, 2)}
