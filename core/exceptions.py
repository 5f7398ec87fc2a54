"""Custom exception types for the cloth solver."""

from __future__ import annotations

from typing import Any


class ClothSolverError(Exception):
    """Base class for domain-specific errors."""


class InvalidGridError(ClothSolverError):
    """Raised when a cloth grid is requested with unusable dimensions."""

    def __init__(self, width: Any, height: Any, message: str | None = None) -> None:
        if message is None:
            message = (
                f"Cloth grid {width}x{height} is invalid. "
                "Width and height must be integers of at least 2 vertices."
            )
        super().__init__(message)
        self.width = width
        self.height = height


class InvalidParameterError(ClothSolverError):
    """Raised when a simulation parameter has an unusable value."""

    def __init__(self, key: str, value: Any, message: str | None = None) -> None:
        if message is None:
            message = f"Parameter '{key}' has invalid value {value!r}."
        super().__init__(message)
        self.key = key
        self.value = value


class UnknownConditionError(ClothSolverError):
    """Raised when a condition module name cannot be resolved."""

    def __init__(self, name: str, message: str | None = None) -> None:
        if message is None:
            message = f"Condition module '{name}' could not be loaded."
        super().__init__(message)
        self.name = name


__all__ = [
    "ClothSolverError",
    "InvalidGridError",
    "InvalidParameterError",
    "UnknownConditionError",
]
