"""Diagnostics for galaxy simulations."""

import numpy as np
from typing import Tuple


class Diagnostics:
    """Conserved-quantity diagnostics matching the galaxy's force law."""

    def __init__(self, gravity: float = 1.0, min_distance: float = 1e-3):
        """Initialize diagnostics.

        Args:
            gravity: Gravitational constant
            min_distance: Distance clamp (must match the galaxy's force law)
        """
        self.gravity = gravity
        self.min_distance = min_distance

    @classmethod
    def for_galaxy(cls, galaxy) -> "Diagnostics":
        return cls(gravity=galaxy.gravity, min_distance=galaxy.min_distance)

    def total_mass(self, masses) -> float:
        return float(np.sum(masses))

    def momentum(self, velocities, masses) -> np.ndarray:
        """Total linear momentum: sum(m_i * v_i)."""
        velocities = np.asarray(velocities, dtype=np.float64).reshape(-1, 2)
        masses = np.asarray(masses, dtype=np.float64).flatten()
        return np.sum(masses[:, np.newaxis] * velocities, axis=0)

    def center_of_mass(self, positions, masses) -> np.ndarray:
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
        masses = np.asarray(masses, dtype=np.float64).flatten()
        total = np.sum(masses)
        if total <= 0:
            return np.zeros(2)
        return np.sum(masses[:, np.newaxis] * positions, axis=0) / total

    def compute_energies(self, positions, velocities, masses) -> Tuple[float, float, float]:
        """Compute kinetic, potential and total energy.

        Potential uses the same distance clamp as the force law:
        U = -G * sum_{i<j} m_i * m_j / max(r_ij, min_distance)

        Returns:
            Tuple of (kinetic_energy, potential_energy, total_energy)
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
        velocities = np.asarray(velocities, dtype=np.float64).reshape(-1, 2)
        masses = np.asarray(masses, dtype=np.float64).flatten()

        K = 0.5 * float(np.sum(masses * np.sum(velocities ** 2, axis=1)))

        n = len(masses)
        if n < 2:
            return K, 0.0, K

        r_diff = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
        r = np.sqrt(np.sum(r_diff ** 2, axis=2))
        r = np.maximum(r, self.min_distance)
        i_upper, j_upper = np.triu_indices(n, k=1)
        U = -self.gravity * float(np.sum(masses[i_upper] * masses[j_upper] / r[i_upper, j_upper]))

        return K, U, K + U

    def summary(self, galaxy) -> dict:
        """Diagnostics for the simulated bodies of ``galaxy``."""
        positions, velocities, masses = galaxy.get_state()
        K, U, E = self.compute_energies(positions, velocities, masses)
        p = self.momentum(velocities, masses)
        com = self.center_of_mass(positions, masses)
        return {
            "active": int(len(masses)),
            "mass": self.total_mass(masses),
            "momentum": (float(p[0]), float(p[1])),
            "center_of_mass": (float(com[0]), float(com[1])),
            "kinetic": K,
            "potential": U,
            "energy": E,
        }
