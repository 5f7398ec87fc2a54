import os
import sys

import numpy as np
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from geometry.cloth_mesh import ClothMesh
from parameters.global_parameters import GlobalParameters
from runtime.force_assembler import ForceAssembly
from runtime.jacobian import BlockJacobian
from runtime.simulation import Simulation
from runtime.steppers import (
    ImplicitEuler,
    SemiImplicitEuler,
    get_integrator,
)


def _assembly(mesh, forces):
    n = mesh.num_vertices
    return ForceAssembly(forces=forces, dfdx=BlockJacobian(n), dfdv=BlockJacobian(n))


def test_semi_implicit_updates_velocity_then_position(rng):
    mesh = ClothMesh(3, 3, total_mass=9.0)
    mesh.velocities = rng.normal(size=mesh.velocities.shape)
    forces = rng.normal(size=mesh.positions.shape)
    x0 = mesh.positions.copy()
    v0 = mesh.velocities.copy()

    SemiImplicitEuler().step(mesh, _assembly(mesh, forces), 0.5)

    v1 = v0 + forces * 0.5 / mesh.vertex_mass
    assert np.allclose(mesh.velocities, v1)
    assert np.allclose(mesh.positions, x0 + 0.5 * v1)


def test_semi_implicit_locked_vertices_keep_position_but_gather_velocity(rng):
    mesh = ClothMesh(3, 3)
    forces = rng.normal(size=mesh.positions.shape)
    locked = mesh.top_row_indices()
    x0 = mesh.positions.copy()

    SemiImplicitEuler().step(mesh, _assembly(mesh, forces), 1.0, locked=locked)

    assert np.array_equal(mesh.positions[locked], x0[locked])
    assert np.allclose(mesh.velocities[locked], forces[locked] / mesh.vertex_mass)
    assert not np.allclose(mesh.positions[:6], x0[:6])


def test_implicit_matches_explicit_without_jacobian_terms(rng):
    a = ClothMesh(4, 3)
    b = ClothMesh(4, 3)
    forces = rng.normal(size=a.positions.shape)

    SemiImplicitEuler().step(a, _assembly(a, forces), 0.25)
    ImplicitEuler().step(b, _assembly(b, forces), 0.25)

    assert np.allclose(a.velocities, b.velocities)
    assert np.allclose(a.positions, b.positions)


def test_implicit_locked_vertices_do_not_move(rng):
    mesh = ClothMesh(3, 3)
    mesh.velocities = rng.normal(size=mesh.velocities.shape)
    forces = rng.normal(size=mesh.positions.shape)
    locked = mesh.top_row_indices()
    x0 = mesh.positions.copy()
    v0 = mesh.velocities.copy()

    ImplicitEuler().step(mesh, _assembly(mesh, forces), 1.0, locked=locked)

    assert np.array_equal(mesh.positions[locked], x0[locked])
    assert np.allclose(mesh.velocities[locked], v0[locked], atol=0.0)


def test_implicit_simulation_stays_finite():
    params = GlobalParameters(
        {
            "integrator": "implicit",
            "stretch_stiffness": 1.0,
            "stretch_damping": 0.1,
            "perturbation_amplitude": 0.005,
        }
    )
    sim = Simulation(5, 5, params)
    sim.reset(seed=7)
    top = sim.mesh.top_row_indices()
    top_before = sim.mesh.positions[top].copy()
    for _ in range(20):
        sim.update()
    assert np.all(np.isfinite(sim.mesh.positions))
    assert np.all(np.isfinite(sim.mesh.velocities))
    assert np.array_equal(sim.mesh.positions[top], top_before)


def test_get_integrator_lookup():
    assert isinstance(get_integrator("semi_implicit"), SemiImplicitEuler)
    assert isinstance(get_integrator("implicit"), ImplicitEuler)
    with pytest.raises(KeyError):
        get_integrator("rk4")


def test_semi_implicit_non_finite_step_raises_and_keeps_state(rng, caplog):
    mesh = ClothMesh(3, 3)
    forces = rng.normal(size=mesh.positions.shape)
    forces[2] = np.nan
    x0 = mesh.positions.copy()
    v0 = mesh.velocities.copy()

    with caplog.at_level("ERROR", logger="cloth_solver"):
        with pytest.raises(FloatingPointError):
            SemiImplicitEuler().step(mesh, _assembly(mesh, forces), 1.0)
    assert "diverged" in caplog.text
    assert np.array_equal(mesh.positions, x0)
    assert np.array_equal(mesh.velocities, v0)
