"""Orbiting ring preset."""

import numpy as np
from typing import Tuple
from gravsim.presets.base import Preset


class OrbitingRing(Preset):
    """Heavy central body with light satellites on circular orbits."""

    def __init__(
        self,
        n_bodies: int = 50,
        seed: int = None,
        center: Tuple[float, float] = (400.0, 300.0),
        central_mass: float = 10000.0,
        satellite_mass: float = 1.0,
        inner_radius: float = 60.0,
        outer_radius: float = 250.0,
        G: float = 1.0
    ):
        """Initialize orbiting ring preset.

        Args:
            n_bodies: Total number of bodies including the central one
            seed: Random seed
            center: Position of the central body
            central_mass: Mass of the central body
            satellite_mass: Mass of each satellite
            inner_radius: Smallest orbit radius
            outer_radius: Largest orbit radius
            G: Gravitational constant used for the circular velocity
        """
        super().__init__(n_bodies, seed)
        if not 0 < inner_radius <= outer_radius:
            raise ValueError(
                f"Need 0 < inner_radius <= outer_radius, got {inner_radius}, {outer_radius}"
            )
        self.center = center
        self.central_mass = central_mass
        self.satellite_mass = satellite_mass
        self.inner_radius = inner_radius
        self.outer_radius = outer_radius
        self.G = G

    @property
    def name(self) -> str:
        return "ring"

    def generate(self) -> Tuple:
        """Generate ring initial conditions."""
        rng = np.random.default_rng(self.seed)
        n_sat = max(self.n_bodies - 1, 0)
        cx, cy = self.center

        r = rng.uniform(self.inner_radius, self.outer_radius, n_sat)
        theta = rng.uniform(0.0, 2.0 * np.pi, n_sat)

        # Circular motion around the central body
        v_mag = np.sqrt(self.G * self.central_mass / r)

        positions = np.zeros((n_sat + 1, 2))
        velocities = np.zeros((n_sat + 1, 2))
        masses = np.full(n_sat + 1, float(self.satellite_mass))

        positions[0] = (cx, cy)
        masses[0] = self.central_mass
        positions[1:, 0] = cx + r * np.cos(theta)
        positions[1:, 1] = cy + r * np.sin(theta)
        velocities[1:, 0] = -v_mag * np.sin(theta)
        velocities[1:, 1] = v_mag * np.cos(theta)

        if self.n_bodies == 0:
            return positions[:0], velocities[:0], masses[:0]
        return positions, velocities, masses
