# global_parameters.py

import copy

from core.exceptions import InvalidParameterError

_NON_NEGATIVE_FLOATS = (
    "stretch_stiffness",
    "stretch_damping",
    "shear_stiffness",
    "shear_damping",
    "bend_stiffness",
    "bend_damping",
    "perturbation_amplitude",
)
_POSITIVE_FLOATS = ("spacing", "total_mass", "time_step", "stretch_u", "stretch_v")
_INTEGRATORS = ("semi_implicit", "implicit")


class GlobalParameters:
    def __init__(self, initial_params=None):
        """
        all parameters are defined with underscore, _, instead of spaces
        """
        self._params = {
            # Rest distance between neighbouring grid vertices.
            "spacing": 0.1,
            # Mass of the whole cloth, shared evenly between vertices.
            "total_mass": 1.0,
            # Integration step. 1.0 keeps the unit-time scheme where step
            # scaling is folded into the stiffness constants.
            "time_step": 1.0,
            # Stiffness / damping per condition type. Explicit steps need
            # sqrt(K / m) * time_step < 2; at spacing 0.1 and 400 vertices the
            # summed per-vertex stiffness stays below 2e-3 against m = 2.5e-3.
            # Finer grids or heavier coefficients call for "implicit".
            "stretch_stiffness": 0.01,
            "stretch_damping": 0.005,
            "shear_stiffness": 0.005,
            "shear_damping": 0.0025,
            "bend_stiffness": 1e-7,
            "bend_damping": 5e-8,
            # Rest stretch factors along the two material axes.
            "stretch_u": 1.0,
            "stretch_v": 1.0,
            # Pin the last grid row in place.
            "lock_top_row": True,
            # External acceleration applied as m * g.
            "gravity": [0.0, 0.0, 0.0],
            # Standard deviation of the random offset added on reset.
            "perturbation_amplitude": 0.005,
            "seed": None,
            # Condition modules evaluated every step, see modules/conditions.
            "conditions": ["stretch", "shear", "bend"],
            #   "semi_implicit": explicit symplectic Euler.
            #   "implicit":      backward Euler using the force Jacobian.
            "integrator": "semi_implicit",
        }
        if initial_params:
            self.update(initial_params)

    def __getattr__(self, name):
        """Attribute access for known parameter keys."""
        params = self.__dict__.get("_params")
        if params is not None and name in params:
            return params[name]
        raise AttributeError(
            f"{type(self).__name__!s} object has no attribute {name!r}"
        )

    def __setattr__(self, name, value):
        if name == "_params":
            object.__setattr__(self, name, value)
            return
        params = self.__dict__.get("_params")
        if params is not None and name in params:
            params[name] = value
            return
        object.__setattr__(self, name, value)

    def get(self, key, default=None):
        """Retrieve a parameter value, or return a default if not found."""
        return self._params.get(key, default)

    def set(self, key, value):
        """Set or update a parameter."""
        self._params[key] = value

    def update(self, params):
        """Update multiple parameters at once."""
        self._params.update(params)

    def coefficients(self, condition_name):
        """Return ``(stiffness, damping)`` for a condition type."""
        return (
            float(self._params.get(f"{condition_name}_stiffness", 0.0)),
            float(self._params.get(f"{condition_name}_damping", 0.0)),
        )

    def validate(self):
        """Coerce numeric values in place and reject unusable ones.

        YAML may hand numbers back as strings (``1e-3`` without a dot), so
        every float parameter goes through ``float()`` first.
        """
        for key in _NON_NEGATIVE_FLOATS + _POSITIVE_FLOATS:
            value = self._params.get(key)
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise InvalidParameterError(key, value) from None
            if number != number or number < 0.0:
                raise InvalidParameterError(key, value)
            if key in _POSITIVE_FLOATS and number == 0.0:
                raise InvalidParameterError(
                    key, value, f"Parameter '{key}' must be positive; got {value!r}."
                )
            self._params[key] = number

        gravity = self._params.get("gravity")
        try:
            gravity = [float(g) for g in gravity]
        except (TypeError, ValueError):
            raise InvalidParameterError("gravity", gravity) from None
        if len(gravity) != 3:
            raise InvalidParameterError(
                "gravity", gravity, "Parameter 'gravity' must have 3 components."
            )
        self._params["gravity"] = gravity

        integrator = self._params.get("integrator")
        if integrator not in _INTEGRATORS:
            raise InvalidParameterError(
                "integrator",
                integrator,
                f"Unknown integrator {integrator!r}; expected one of {_INTEGRATORS}.",
            )

        conditions = self._params.get("conditions")
        if isinstance(conditions, str):
            conditions = [conditions]
        if not isinstance(conditions, (list, tuple)):
            raise InvalidParameterError("conditions", conditions)
        self._params["conditions"] = [str(c) for c in conditions]

        seed = self._params.get("seed")
        if seed is not None:
            try:
                self._params["seed"] = int(seed)
            except (TypeError, ValueError):
                raise InvalidParameterError("seed", seed) from None

        self._params["lock_top_row"] = bool(self._params.get("lock_top_row"))
        return self

    def copy(self):
        """Return an independent copy of the parameters."""
        return GlobalParameters(copy.deepcopy(self._params))

    def __contains__(self, key):
        """Check if a parameter exists."""
        return key in self._params

    def __repr__(self):
        """String representation for debugging."""
        return f"GlobalParameters({self._params})"

    def to_dict(self):
        """Convert the parameters to a dictionary for serialization."""
        return self._params
