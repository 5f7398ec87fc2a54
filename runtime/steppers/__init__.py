"""Time integrators for the cloth simulation."""

from .base import BaseIntegrator
from .implicit_euler import ImplicitEuler
from .semi_implicit_euler import SemiImplicitEuler

INTEGRATORS = {
    SemiImplicitEuler.name: SemiImplicitEuler,
    ImplicitEuler.name: ImplicitEuler,
}


def get_integrator(name: str) -> BaseIntegrator:
    """Return a new integrator instance registered under ``name``."""
    try:
        return INTEGRATORS[name]()
    except KeyError:
        raise KeyError(
            f"Unknown integrator '{name}'; expected one of {sorted(INTEGRATORS)}."
        ) from None


__all__ = ["BaseIntegrator", "ImplicitEuler", "SemiImplicitEuler", "get_integrator"]
