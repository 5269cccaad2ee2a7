"""Main simulator controller."""

import logging
import time
from typing import Callable, Optional, Tuple

import numpy as np

from gravsim.physics.galaxy import Galaxy

logger = logging.getLogger(__name__)

Bounds = Tuple[float, float, float, float]


class Simulator:
    """Headless driver around a :class:`Galaxy`.

    Owns the clock, pause state and speed scale, and applies the optional
    bounded-universe reflection after every integration step.
    """

    def __init__(
        self,
        galaxy: Optional[Galaxy] = None,
        dt: float = 0.01,
        speed_scale: int = 1,
        bounds: Optional[Bounds] = None
    ):
        """Initialize simulator.

        Args:
            galaxy: Galaxy to drive (default: empty Galaxy with default settings)
            dt: Time step used by ``step`` and ``run``
            speed_scale: Integrations per ``advance`` call
            bounds: (x0, y0, x1, y1) box enforced by ``Galaxy.bounce``, or None
        """
        if speed_scale < 1:
            raise ValueError(f"speed_scale must be >= 1, got {speed_scale}")
        self.galaxy = galaxy if galaxy is not None else Galaxy()
        self.dt = dt
        self.speed_scale = int(speed_scale)
        self.bounds = bounds
        self.time = 0.0
        self.step_count = 0
        self.paused = False

        # Profiling: last step timing (ms)
        self._last_step_ms: Optional[float] = None
        self._profile: bool = False

        # Callbacks
        self.on_step_callback: Optional[Callable] = None

    @classmethod
    def from_config(cls, config) -> "Simulator":
        """Build a simulator (and its galaxy) from a Config."""
        bounds = tuple(config.bounds) if config.bounded else None
        return cls(
            Galaxy.from_config(config),
            dt=config.dt,
            speed_scale=config.speed_scale,
            bounds=bounds,
        )

    def set_profiling(self, enabled: bool = True):
        """Enable or disable step timing."""
        self._profile = enabled

    def get_timing(self) -> dict:
        """Return last step timing in ms."""
        return {"step_ms": self._last_step_ms}

    def initialize(self, positions, velocities, masses):
        """Load bodies into the galaxy.

        Args:
            positions: Array of shape (n, 2)
            velocities: Array of shape (n, 2)
            masses: Array of shape (n,)

        Returns:
            List of handles of the new bodies

        Raises:
            ValueError: If the arrays differ in length or a mass is not positive.
                No body is added in that case.
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
        velocities = np.asarray(velocities, dtype=np.float64).reshape(-1, 2)
        masses = np.asarray(masses, dtype=np.float64).flatten()
        if not (len(positions) == len(velocities) == len(masses)):
            raise ValueError(
                f"Mismatched initial conditions: {len(positions)} positions, "
                f"{len(velocities)} velocities, {len(masses)} masses"
            )
        if not np.all(masses > 0):
            raise ValueError(f"All masses must be positive, got min {masses.min()}")

        handles = []
        try:
            for p, v, m in zip(positions, velocities, masses):
                handles.append(self.galaxy.spawn(m, tuple(p), tuple(v)))
        except Exception:
            # All or nothing
            for handle in handles:
                self.galaxy.remove(handle)
            raise
        self.time = 0.0
        self.step_count = 0
        logger.info("Initialized %d bodies", len(handles))
        return handles

    def _integrate(self, dt: float):
        if self._profile:
            t0 = time.perf_counter()
        merges = self.galaxy.integrate(dt)
        if self.bounds is not None:
            self.galaxy.bounce(*self.bounds)
        if self._profile:
            self._last_step_ms = (time.perf_counter() - t0) * 1000.0
        self.time += dt
        self.step_count += 1
        if merges:
            logger.debug("step=%d merges=%d active=%d", self.step_count, merges, self.galaxy.active_count)
        if self.on_step_callback:
            self.on_step_callback(self)

    def step(self):
        """Perform one simulation step of length ``dt``."""
        if self.paused:
            return
        self._integrate(self.dt)

    def advance(self, elapsed: float):
        """Advance one frame: ``speed_scale`` integrations of ``elapsed`` each."""
        if self.paused:
            return
        for _ in range(self.speed_scale):
            self._integrate(elapsed)

    def run(self, n_steps: int):
        """Run simulation for specified number of steps.

        Args:
            n_steps: Number of steps to run
        """
        for _ in range(n_steps):
            if self.paused:
                return
            self.step()

    def pause(self):
        """Pause simulation."""
        self.paused = True

    def resume(self):
        """Resume simulation."""
        self.paused = False

    def faster(self):
        """Resume if paused, otherwise run one more integration per frame."""
        if self.paused:
            self.paused = False
        else:
            self.speed_scale += 1

    def slower(self):
        """Run one fewer integration per frame; pause when already at one."""
        if self.speed_scale > 1:
            self.speed_scale -= 1
        else:
            self.paused = True

    def set_timestep(self, dt: float):
        """Set time step.

        Args:
            dt: New time step
        """
        self.dt = dt

    def set_bounds(self, bounds: Optional[Bounds]):
        """Enable (box tuple) or disable (None) the bounded universe."""
        if bounds is not None:
            x0, y0, x1, y1 = bounds
            if not x1 > x0 or not y1 > y0:
                raise ValueError(f"Invalid bounds: {bounds}")
        self.bounds = bounds

    def get_state(self):
        """Get current simulation state.

        Returns:
            Tuple of (positions, velocities, masses, time, step_count)
        """
        pos, vel, mass = self.galaxy.get_state()
        return pos, vel, mass, self.time, self.step_count
