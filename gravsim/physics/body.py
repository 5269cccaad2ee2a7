"""Point-mass body with motion state and bounded trail."""

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from gravsim.physics.trail import Trail

# Minimum displacement (either axis) before a new trail point is recorded
TRAIL_MOVE_THRESHOLD = 2.0


def radius_for_mass(mass: float) -> float:
    """Radius derived from mass: 1 + ln(e + mass/250)."""
    return 1.0 + math.log(math.e + mass / 250.0)


@dataclass
class BodyFlags:
    """Independent status axes of a body slot.

    Attributes:
        allocated: Slot is in use (clear means reusable by the next add)
        simulated: Body takes part in force accumulation and merging
        trailed: Trail recording is enabled
        exists: Slot has been initialized at least once
    """
    allocated: bool = False
    simulated: bool = False
    trailed: bool = False
    exists: bool = False


class Body:
    """A single point mass.

    A freshly constructed body is an empty slot; ``initialize`` makes it live.
    Mass is exposed through a property whose setter recomputes the derived
    radius, so radius is never stale. Setting ``position`` directly does not
    touch the trail; use ``move_to`` (or call ``reset_trail``) after a
    teleport, otherwise the trail shows a false streak.
    """

    def __init__(self):
        self.x = 0.0
        self.y = 0.0
        self.vx = 0.0
        self.vy = 0.0
        self._mass = 0.0
        self.radius = 0.0
        self.flags = BodyFlags()
        self.trail: Optional[Trail] = None

    def initialize(
        self,
        mass: float,
        position: Tuple[float, float],
        velocity: Tuple[float, float] = (0.0, 0.0),
        trail_capacity: int = Trail.DEFAULT_CAPACITY
    ):
        """Set kinematic state and make the slot live.

        Args:
            mass: Body mass (must be > 0)
            position: Initial (x, y)
            velocity: Initial (vx, vy)
            trail_capacity: Number of trail points retained

        Raises:
            ValueError: If mass or trail_capacity is not positive
            TypeError, IndexError: If position or velocity is not an (x, y) pair
            MemoryError: If the trail buffer cannot be allocated
        """
        mass = float(mass)
        if not mass > 0.0:
            raise ValueError(f"Body mass must be positive, got {mass}")
        x, y = float(position[0]), float(position[1])
        vx, vy = float(velocity[0]), float(velocity[1])

        # Everything that can fail runs before the first assignment
        trail = Trail(trail_capacity)

        self.x, self.y = x, y
        self.vx, self.vy = vx, vy
        self._mass = mass
        self.trail = trail
        self.trail.push((self.x, self.y))
        self.flags = BodyFlags(allocated=True, simulated=True, trailed=True, exists=True)
        self.recompute_derived()

    @property
    def mass(self) -> float:
        return self._mass

    @mass.setter
    def mass(self, value: float):
        value = float(value)
        if not value > 0.0:
            raise ValueError(f"Body mass must be positive, got {value}")
        self._mass = value
        self.recompute_derived()

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    @position.setter
    def position(self, value: Tuple[float, float]):
        self.x, self.y = float(value[0]), float(value[1])

    @property
    def velocity(self) -> Tuple[float, float]:
        return self.vx, self.vy

    @velocity.setter
    def velocity(self, value: Tuple[float, float]):
        self.vx, self.vy = float(value[0]), float(value[1])

    @property
    def is_allocated(self) -> bool:
        return self.flags.allocated

    @property
    def is_simulated(self) -> bool:
        return self.flags.simulated

    def recompute_derived(self):
        """Recalculate radius from mass. Required after every mass change."""
        self.radius = radius_for_mass(self._mass)

    def record_trail_point(self, point, threshold: Optional[float] = TRAIL_MOVE_THRESHOLD) -> bool:
        """Record a point into the trail.

        The point is skipped unless it is more than ``threshold`` away from the
        last recorded point along either axis. ``threshold=None`` records
        unconditionally.

        Returns:
            True if the point was recorded
        """
        if self.trail is None:
            return False
        if threshold is not None:
            last = self.trail.last()
            if last is not None:
                if abs(point[0] - last[0]) <= threshold and abs(point[1] - last[1]) <= threshold:
                    return False
        self.trail.push(point)
        return True

    def reset_trail(self):
        """Collapse the trail to the current position."""
        if self.trail is not None:
            self.trail.reset((self.x, self.y))

    def move_to(self, position: Tuple[float, float]):
        """Teleport the body and restart its trail there."""
        self.position = position
        self.reset_trail()

    def toggle_trail(self) -> bool:
        """Flip trail recording; returns the new setting."""
        self.flags.trailed = not self.flags.trailed
        return self.flags.trailed

    def trail_points(self) -> Iterator[Tuple[float, float]]:
        """Valid trail points, oldest to newest."""
        if self.trail is None:
            return iter(())
        return iter(self.trail)

    def merge_absorb(self, other: "Body"):
        """Absorb ``other`` into this body.

        Mass adds; velocity and position become mass-weighted averages. The
        absorbed body records its final position into its own trail and is
        then released.
        """
        m1 = self._mass
        m2 = other._mass
        total = m1 + m2
        self.vx = (self.vx * m1 + other.vx * m2) / total
        self.vy = (self.vy * m1 + other.vy * m2) / total
        self.x = (self.x * m1 + other.x * m2) / total
        self.y = (self.y * m1 + other.y * m2) / total
        self._mass = total

        other.record_trail_point((other.x, other.y), threshold=None)
        other.release()

        self.recompute_derived()

    def release(self):
        """Free the slot. ``exists`` stays set; the trail is kept until reuse."""
        self.flags.allocated = False
        self.flags.simulated = False
        self.flags.trailed = False

    def __repr__(self):
        return (
            f"Body(mass={self._mass}, position={self.position}, "
            f"velocity={self.velocity}, flags={self.flags})"
        )
