"""Base class for preset scenarios."""

from abc import ABC, abstractmethod
from typing import Tuple


class Preset(ABC):
    """Abstract base class for preset scenarios."""

    def __init__(self, n_bodies: int = 100, seed: int = None):
        """Initialize preset.

        Args:
            n_bodies: Number of bodies
            seed: Random seed for reproducibility
        """
        if n_bodies < 0:
            raise ValueError(f"n_bodies must be non-negative, got {n_bodies}")
        self.n_bodies = n_bodies
        self.seed = seed

    @abstractmethod
    def generate(self) -> Tuple:
        """Generate initial conditions.

        Returns:
            Tuple of (positions, velocities, masses) numpy arrays
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this preset."""
        pass
