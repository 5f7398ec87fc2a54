# runtime/simulation.py

import logging
from typing import Optional

import numpy as np

from core.exceptions import InvalidParameterError
from geometry.cloth_mesh import ClothMesh, _check_grid
from geometry.render_buffer import read_only_buffer
from parameters.global_parameters import GlobalParameters
from runtime.condition_manager import ConditionModuleManager
from runtime.force_assembler import ForceAssembler, ForceAssembly
from runtime.steppers import BaseIntegrator, get_integrator

logger = logging.getLogger("cloth_solver")


class Simulation:
    """Own a cloth mesh and advance it one fixed step per :meth:`update`.

    Parameters
    ----------
    width, height : int
        Grid resolution in vertices; both must be at least 2.
    global_params : GlobalParameters, optional
        Coefficients and run options. Defaults are used when omitted.
    integrator : BaseIntegrator, optional
        Overrides the integrator named by ``global_params.integrator``.
    """

    def __init__(
        self,
        width: int,
        height: int,
        global_params: Optional[GlobalParameters] = None,
        integrator: Optional[BaseIntegrator] = None,
    ) -> None:
        _check_grid(width, height)
        params = global_params.copy() if global_params is not None else GlobalParameters()
        self.global_params = params.validate()

        self.width = int(width)
        self.height = int(height)
        self.running = True
        self.step_count = 0

        try:
            self.integrator = integrator or get_integrator(params.integrator)
        except KeyError as exc:
            raise InvalidParameterError("integrator", params.integrator, str(exc)) from None
        self.condition_manager = ConditionModuleManager(params.conditions)
        self.mesh = self._build_mesh()
        self._build_assembler()
        self.triangle_vertices = read_only_buffer(self.mesh)

        logger.info(
            "Simulation ready: %dx%d grid, conditions=%s, integrator=%s",
            self.width,
            self.height,
            list(self.condition_manager.modules),
            self.integrator.name,
        )

    @property
    def lock_top_row(self) -> bool:
        return bool(self.global_params.lock_top_row)

    @lock_top_row.setter
    def lock_top_row(self, value: bool) -> None:
        self.global_params.lock_top_row = bool(value)

    def _build_mesh(self) -> ClothMesh:
        return ClothMesh(
            self.width,
            self.height,
            spacing=self.global_params.spacing,
            total_mass=self.global_params.total_mass,
        )

    def _build_assembler(self) -> None:
        conditions = self.condition_manager.build_conditions(
            self.mesh, self.global_params
        )
        coefficients = {
            cond.name: self.global_params.coefficients(cond.name) for cond in conditions
        }
        self.assembler = ForceAssembler(conditions, coefficients)

    def _locked_indices(self) -> Optional[np.ndarray]:
        return self.mesh.top_row_indices() if self.lock_top_row else None

    def compute_forces(self, with_jacobian: bool = True) -> ForceAssembly:
        """Assemble internal and external forces at the current state."""
        assembly = self.assembler.assemble(
            self.mesh.positions, self.mesh.velocities, with_jacobian=with_jacobian
        )
        gravity = np.asarray(self.global_params.gravity, dtype=float)
        if np.any(gravity):
            assembly.forces += self.mesh.vertex_mass * gravity
        return assembly

    def update(self) -> None:
        """Advance one time step; does nothing while paused."""
        if not self.running:
            return
        assembly = self.compute_forces()
        self.integrator.step(
            self.mesh,
            assembly,
            self.global_params.time_step,
            locked=self._locked_indices(),
        )
        self.step_count += 1
        self.triangle_vertices = read_only_buffer(self.mesh)
        logger.debug(
            "Step %d: energy=%.6e skipped=%d",
            self.step_count,
            assembly.energy,
            assembly.total_skipped,
        )

    def reset(self, seed: Optional[int] = None, perturb: bool = True) -> None:
        """Rebuild the mesh at the same resolution in a perturbed configuration.

        ``seed`` falls back to ``global_params.seed``; with both ``None`` the
        perturbation is drawn from fresh entropy.
        """
        if seed is None:
            seed = self.global_params.seed
        self.mesh = self._build_mesh()
        if perturb:
            rng = np.random.default_rng(seed)
            self.mesh.perturb(self.global_params.perturbation_amplitude, rng)
        self._build_assembler()
        self.step_count = 0
        self.triangle_vertices = read_only_buffer(self.mesh)
        logger.info("Simulation reset (seed=%s, perturbed=%s)", seed, perturb)

    def toggle_running(self) -> bool:
        self.running = not self.running
        return self.running
