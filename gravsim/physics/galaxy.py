"""Galaxy: the owning collection of bodies and the integration step."""

import logging
import math
import numpy as np
from typing import Iterator, List, Optional, Tuple

from gravsim.physics.body import Body, TRAIL_MOVE_THRESHOLD
from gravsim.physics.boundary import fold, fold_direction
from gravsim.physics.errors import InvalidHandleError
from gravsim.physics.trail import Trail

logger = logging.getLogger(__name__)


class Galaxy:
    """Array-backed collection of bodies with direct-sum gravity and merging.

    Bodies are addressed by integer handles (their index in ``bodies``).
    Removing a body only clears its flags, so handles of other bodies stay
    valid and the freed slot is reused by the next ``add``. The backing list is
    never compacted.

    All calls must be serialized by the caller: ``integrate`` mutates several
    slots in place while it scans the list.
    """

    G = 1.0  # Gravitational constant (normalized units)
    COLLISION_DIVISOR = 1.75  # Bodies overlap when d < r1/div + r2/div
    MIN_DISTANCE = 1e-3  # Force-law distance clamp

    def __init__(
        self,
        gravity: float = G,
        collision_divisor: float = COLLISION_DIVISOR,
        min_distance: float = MIN_DISTANCE,
        trail_capacity: int = Trail.DEFAULT_CAPACITY,
        trail_threshold: Optional[float] = TRAIL_MOVE_THRESHOLD,
        reflect_velocity: bool = True
    ):
        """Initialize an empty galaxy.

        Args:
            gravity: Gravitational constant
            collision_divisor: Radius divisor used by the overlap test
            min_distance: Smallest distance used in the force law
            trail_capacity: Trail capacity for newly spawned bodies
            trail_threshold: Move threshold for trail recording (None records every step)
            reflect_velocity: Flip velocity components in ``bounce``
        """
        if collision_divisor <= 0:
            raise ValueError(f"collision_divisor must be positive, got {collision_divisor}")
        if min_distance <= 0:
            raise ValueError(f"min_distance must be positive, got {min_distance}")
        self.gravity = float(gravity)
        self.collision_divisor = float(collision_divisor)
        self.min_distance = float(min_distance)
        self.trail_capacity = int(trail_capacity)
        self.trail_threshold = trail_threshold
        self.reflect_velocity = reflect_velocity
        self.bodies: List[Body] = []
        self.merge_count = 0

    @classmethod
    def from_config(cls, config) -> "Galaxy":
        """Build a galaxy from a :class:`gravsim.utils.config.Config`."""
        return cls(
            gravity=config.gravity,
            collision_divisor=config.collision_divisor,
            min_distance=config.min_distance,
            trail_capacity=config.trail_capacity,
            trail_threshold=config.trail_threshold,
            reflect_velocity=config.reflect_velocity,
        )

    # ------------------------------------------------------------------
    # Slots

    def add(self) -> int:
        """Reserve a slot and return its handle.

        The lowest free slot is reused when one exists, otherwise the list
        grows by one. The caller must initialize the returned body right away.
        """
        for handle, body in enumerate(self.bodies):
            if not body.flags.allocated:
                body.flags.allocated = True
                logger.debug("Reusing slot %d", handle)
                return handle
        body = Body()
        body.flags.allocated = True
        self.bodies.append(body)
        return len(self.bodies) - 1

    def spawn(
        self,
        mass: float,
        position: Tuple[float, float],
        velocity: Tuple[float, float] = (0.0, 0.0)
    ) -> int:
        """Add and initialize a body in one call.

        If initialization fails the slot is released again before the
        exception propagates.
        """
        handle = self.add()
        body = self.bodies[handle]
        try:
            body.initialize(mass, position, velocity, trail_capacity=self.trail_capacity)
        except Exception:
            body.release()
            raise
        return handle

    def remove(self, handle: int):
        """Free a slot. Removing an already free slot does nothing."""
        body = self._slot(handle)
        if body.flags.allocated:
            body.release()
            logger.debug("Removed body %d", handle)

    def body(self, handle: int) -> Body:
        """Body at ``handle``.

        Raises:
            InvalidHandleError: If the handle is out of range or the slot is free
        """
        body = self._slot(handle)
        if not body.flags.allocated:
            raise InvalidHandleError(handle)
        return body

    def _slot(self, handle: int) -> Body:
        if not isinstance(handle, (int, np.integer)) or isinstance(handle, bool):
            raise InvalidHandleError(handle, "handle must be an integer")
        if handle < 0 or handle >= len(self.bodies):
            raise InvalidHandleError(handle, f"out of range (0..{len(self.bodies) - 1})")
        return self.bodies[handle]

    def hold(self, handle: int):
        """Suspend simulation of a body (e.g. while it is being dragged)."""
        self.body(handle).flags.simulated = False

    def release_hold(self, handle: int):
        """Resume simulation of a held body."""
        self.body(handle).flags.simulated = True

    def clear(self):
        """Destroy all bodies and release their trail buffers."""
        for body in self.bodies:
            body.trail = None
        self.bodies = []

    def __len__(self) -> int:
        return len(self.bodies)

    def handles(self, simulated_only: bool = False) -> List[int]:
        """Handles of allocated (or only simulated) bodies in index order."""
        if simulated_only:
            return [h for h, b in enumerate(self.bodies) if b.flags.simulated]
        return [h for h, b in enumerate(self.bodies) if b.flags.allocated]

    def __iter__(self) -> Iterator[Tuple[int, Body]]:
        for handle, body in enumerate(self.bodies):
            if body.flags.allocated:
                yield handle, body

    @property
    def active_count(self) -> int:
        """Number of simulated bodies."""
        return sum(1 for b in self.bodies if b.flags.simulated)

    # ------------------------------------------------------------------
    # Queries

    def find_at(self, x: float, y: float) -> Optional[int]:
        """First allocated body (lowest handle) whose disc contains (x, y)."""
        for handle, body in enumerate(self.bodies):
            if not body.flags.allocated:
                continue
            dx = x - body.x
            dy = y - body.y
            r = body.radius
            if abs(dx) > r or abs(dy) > r:
                continue
            if math.sqrt(dx * dx + dy * dy) <= r:
                return handle
        return None

    def get_state(self):
        """Positions, velocities and masses of simulated bodies.

        Returns:
            Tuple of numpy arrays: positions (n, 2), velocities (n, 2), masses (n,)
        """
        active = [b for b in self.bodies if b.flags.simulated]
        positions = np.array([[b.x, b.y] for b in active], dtype=np.float64).reshape(-1, 2)
        velocities = np.array([[b.vx, b.vy] for b in active], dtype=np.float64).reshape(-1, 2)
        masses = np.array([b.mass for b in active], dtype=np.float64)
        return positions, velocities, masses

    # ------------------------------------------------------------------
    # Dynamics

    def integrate(self, delta_time: float) -> int:
        """Advance every simulated body by one semi-implicit Euler step.

        For each body, accelerations are summed over all other simulated
        bodies. A pair closer than ``r_i/div + r_j/div`` is merged into body i
        and contributes no force; the absorbed body is released in place and
        skipped for the rest of the pass. Bodies update immediately, so later
        bodies in the pass see earlier bodies' new positions.

        Args:
            delta_time: Elapsed simulated time

        Returns:
            Number of merges performed during this step
        """
        bodies = self.bodies
        n = len(bodies)
        G = self.gravity
        div = self.collision_divisor
        min_d = self.min_distance
        merges = 0

        for i in range(n):
            b1 = bodies[i]
            if not b1.flags.simulated:
                continue

            ax = 0.0
            ay = 0.0
            for j in range(n):
                if i == j:
                    continue
                b2 = bodies[j]
                if not b2.flags.simulated:
                    continue

                dx = b2.x - b1.x
                dy = b2.y - b1.y
                d = math.sqrt(dx * dx + dy * dy)

                if d < b1.radius / div + b2.radius / div:
                    logger.debug(
                        "Merging body %d (m=%.3f) into body %d (m=%.3f)",
                        j, b2.mass, i, b1.mass
                    )
                    b1.merge_absorb(b2)
                    merges += 1
                    continue

                if d == 0.0:
                    continue
                d_safe = d if d > min_d else min_d
                a = G * b2.mass / (d_safe * d_safe)
                ax += a * dx / d
                ay += a * dy / d

            b1.vx += ax * delta_time
            b1.vy += ay * delta_time
            b1.x += b1.vx * delta_time
            b1.y += b1.vy * delta_time

            if b1.flags.trailed:
                b1.record_trail_point((b1.x, b1.y), threshold=self.trail_threshold)

        self.merge_count += merges
        return merges

    def bounce(self, x0: float, y0: float, x1: float, y1: float):
        """Fold simulated bodies back into the box ``[x0, x1) x [y0, y1)``.

        When ``reflect_velocity`` is set the matching velocity component
        changes sign for every odd number of walls crossed.
        """
        if not x1 > x0 or not y1 > y0:
            raise ValueError(f"Invalid bounds: ({x0}, {y0}) - ({x1}, {y1})")
        for handle, body in enumerate(self.bodies):
            if not body.flags.simulated:
                continue
            if self.reflect_velocity:
                body.vx *= fold_direction(body.x, x0, x1)
                body.vy *= fold_direction(body.y, y0, y1)
            new_x = fold(body.x, x0, x1)
            new_y = fold(body.y, y0, y1)
            if new_x != body.x or new_y != body.y:
                logger.debug("Body %d reflected to (%.3f, %.3f)", handle, new_x, new_y)
            body.x = new_x
            body.y = new_y
