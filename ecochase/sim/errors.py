# ecochase/sim/errors.py
from __future__ import annotations


class EcoChaseError(Exception):
    """Base class for simulation errors."""


class ConfigurationError(EcoChaseError, ValueError):
    """A run configuration or supplied layout cannot produce a valid world."""


class InvalidPositionError(EcoChaseError, ValueError):
    """A coordinate handed to a grid query lies outside the grid."""

    def __init__(self, pos, grid_size: int):
        super().__init__(f"position {tuple(pos)} outside {grid_size}x{grid_size} grid")
        self.pos = pos
        self.grid_size = grid_size


class CollaboratorError(EcoChaseError, RuntimeError):
    """A configuration generator or path explainer returned something unusable."""
