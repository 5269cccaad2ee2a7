"""Random field preset."""

import numpy as np
from typing import Tuple
from gravsim.presets.base import Preset


class RandomField(Preset):
    """Bodies scattered uniformly over a rectangle with small random drift."""

    def __init__(
        self,
        n_bodies: int = 100,
        seed: int = None,
        width: float = 800.0,
        height: float = 600.0,
        min_mass: float = 1.0,
        max_mass: float = 1000.0,
        max_speed: float = 1.0
    ):
        """Initialize random field preset.

        Args:
            n_bodies: Number of bodies
            seed: Random seed
            width: Field width (x in [0, width))
            height: Field height (y in [0, height))
            min_mass: Smallest body mass (must be > 0)
            max_mass: Largest body mass
            max_speed: Velocity components drawn from [-max_speed, max_speed)
        """
        super().__init__(n_bodies, seed)
        if not 0 < min_mass <= max_mass:
            raise ValueError(f"Need 0 < min_mass <= max_mass, got {min_mass}, {max_mass}")
        self.width = width
        self.height = height
        self.min_mass = min_mass
        self.max_mass = max_mass
        self.max_speed = max_speed

    @property
    def name(self) -> str:
        return "random"

    def generate(self) -> Tuple:
        """Generate random field initial conditions."""
        rng = np.random.default_rng(self.seed)
        n = self.n_bodies

        positions = np.column_stack([
            rng.uniform(0.0, self.width, n),
            rng.uniform(0.0, self.height, n),
        ])
        velocities = rng.uniform(-self.max_speed, self.max_speed, (n, 2))
        masses = rng.uniform(self.min_mass, self.max_mass, n)

        return positions, velocities, masses
