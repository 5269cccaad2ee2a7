"""Tests for the galaxy: slots, integration, merging, picking and bounce."""

import numpy as np
import pytest
import gravsim.physics.body as body_module
from gravsim.physics.body import BodyFlags, radius_for_mass
from gravsim.physics.errors import InvalidHandleError
from gravsim.physics.galaxy import Galaxy


def flags_snapshot(galaxy):
    return [(b.flags.allocated, b.flags.simulated, b.flags.trailed, b.flags.exists)
            for b in galaxy.bodies]


def test_add_appends_slots_in_order():
    """Without free slots, add grows the array by one."""
    galaxy = Galaxy()
    assert [galaxy.add() for _ in range(3)] == [0, 1, 2]
    assert len(galaxy) == 3


def test_slot_reuse_returns_same_handle():
    """add, remove, add hands back the same slot with only the new values."""
    galaxy = Galaxy(trail_capacity=8)
    h = galaxy.spawn(100.0, (1.0, 2.0), (3.0, 4.0))
    galaxy.remove(h)

    h2 = galaxy.spawn(50.0, (7.0, 8.0))

    assert h2 == h
    body = galaxy.body(h2)
    assert body.mass == 50.0
    assert body.position == (7.0, 8.0)
    assert body.velocity == (0.0, 0.0)
    assert body.radius == pytest.approx(radius_for_mass(50.0))
    assert list(body.trail_points()) == [(7.0, 8.0)]
    assert len(galaxy) == 1


def test_lowest_free_slot_is_reused():
    """The lowest free index wins when several slots are free."""
    galaxy = Galaxy()
    handles = [galaxy.spawn(10.0, (100.0 * i, 0.0)) for i in range(5)]
    galaxy.remove(handles[3])
    galaxy.remove(handles[1])

    assert galaxy.add() == 1
    assert galaxy.add() == 3
    assert galaxy.add() == 5


def test_reused_slot_keeps_exists_flag():
    """A reused slot is distinguishable from a brand new one before initialization."""
    galaxy = Galaxy()
    h = galaxy.spawn(10.0, (0.0, 0.0))
    galaxy.remove(h)

    assert galaxy.add() == h
    assert galaxy.bodies[h].flags.exists
    fresh = galaxy.add()
    assert not galaxy.bodies[fresh].flags.exists


def test_remove_is_idempotent():
    """Removing twice leaves the same state as removing once."""
    galaxy = Galaxy()
    galaxy.spawn(10.0, (0.0, 0.0))
    h = galaxy.spawn(20.0, (50.0, 0.0))

    galaxy.remove(h)
    once = flags_snapshot(galaxy)
    galaxy.remove(h)

    assert flags_snapshot(galaxy) == once
    assert galaxy.handles() == [0]


def test_invalid_handles_raise():
    """Out-of-range and freed handles are reported, not ignored."""
    galaxy = Galaxy()
    h = galaxy.spawn(10.0, (0.0, 0.0))

    with pytest.raises(InvalidHandleError):
        galaxy.body(5)
    with pytest.raises(InvalidHandleError):
        galaxy.remove(-1)
    with pytest.raises(InvalidHandleError):
        galaxy.body("0")

    galaxy.remove(h)
    with pytest.raises(InvalidHandleError):
        galaxy.body(h)
    with pytest.raises(InvalidHandleError):
        galaxy.hold(h)


def test_spawn_failure_frees_slot():
    """A failed initialization does not leave an allocated, uninitialized slot."""
    galaxy = Galaxy()
    with pytest.raises(ValueError):
        galaxy.spawn(-1.0, (0.0, 0.0))

    assert galaxy.handles() == []
    assert galaxy.spawn(1.0, (0.0, 0.0)) == 0


def test_spawn_with_malformed_vectors_frees_slot():
    """Bad position or velocity raises and leaves no allocated slot behind."""
    galaxy = Galaxy()
    with pytest.raises(TypeError):
        galaxy.spawn(10.0, (3.0, 4.0), velocity=None)
    with pytest.raises(IndexError):
        galaxy.spawn(10.0, (3.0,))

    assert galaxy.handles() == []
    assert galaxy.find_at(3.0, 4.0) is None
    assert galaxy.bodies[0].flags == BodyFlags()
    assert galaxy.bodies[0].position == (0.0, 0.0)
    assert galaxy.spawn(10.0, (3.0, 4.0)) == 0


def test_trail_allocation_failure_propagates(monkeypatch):
    """Running out of memory for a trail is fatal for that body."""
    def no_memory(capacity):
        raise MemoryError("trail buffer")

    galaxy = Galaxy()
    monkeypatch.setattr(body_module, "Trail", no_memory)
    with pytest.raises(MemoryError):
        galaxy.spawn(10.0, (0.0, 0.0))
    monkeypatch.undo()

    assert galaxy.bodies[0].flags == BodyFlags()
    assert galaxy.spawn(10.0, (0.0, 0.0)) == 0


def test_overlapping_pair_merges_into_one_body():
    """Two touching equal masses become one body at their midpoint, at rest."""
    galaxy = Galaxy(collision_divisor=0.4)
    a = galaxy.spawn(100.0, (0.0, 0.0))
    b = galaxy.spawn(100.0, (10.0, 0.0))
    r = radius_for_mass(100.0)
    assert 10.0 < r / 0.4 + r / 0.4

    merges = galaxy.integrate(0.1)

    assert merges == 1
    assert galaxy.handles(simulated_only=True) == [a]
    survivor = galaxy.body(a)
    assert survivor.mass == 200.0
    assert survivor.position == pytest.approx((5.0, 0.0))
    assert survivor.velocity == (0.0, 0.0)
    assert not galaxy.bodies[b].flags.simulated
    assert not galaxy.bodies[b].flags.allocated


def test_separated_pair_attracts():
    """Bodies outside the merge distance pull on each other."""
    galaxy = Galaxy()
    a = galaxy.spawn(100.0, (0.0, 0.0))
    b = galaxy.spawn(100.0, (10.0, 0.0))

    galaxy.integrate(0.01)

    assert galaxy.active_count == 2
    assert galaxy.body(a).vx == pytest.approx(1.0 * 0.01)
    assert galaxy.body(b).vx < 0.0
    assert galaxy.body(a).vy == 0.0


def test_lone_body_moves_in_straight_line():
    """With no other mass, velocity is unchanged and position advances by v*dt."""
    galaxy = Galaxy()
    h = galaxy.spawn(100.0, (1.0, 1.0), (3.0, -2.0))

    galaxy.integrate(0.5)

    body = galaxy.body(h)
    assert body.velocity == (3.0, -2.0)
    assert body.position == (2.5, 0.0)


def test_three_mutually_colliding_bodies_merge_once_each():
    """A chain of overlaps in one step merges everything exactly once."""
    galaxy = Galaxy()
    masses = [100.0, 100.0, 100.0]
    velocities = [(1.0, 0.0), (0.0, 2.0), (-3.0, 1.0)]
    positions = [(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)]
    handles = [galaxy.spawn(m, p, v) for m, p, v in zip(masses, positions, velocities)]

    momentum_before = np.sum([np.array(v) * m for m, v in zip(masses, velocities)], axis=0)

    merges = galaxy.integrate(0.01)

    assert merges == 2
    assert galaxy.handles(simulated_only=True) == [handles[0]]
    survivor = galaxy.body(handles[0])
    assert survivor.mass == pytest.approx(300.0)
    assert np.allclose(np.array(survivor.velocity) * survivor.mass, momentum_before)
    assert galaxy.merge_count == 2

    # Absorbed slots are free again
    assert galaxy.add() == handles[1]


def test_near_zero_distance_is_clamped():
    """A tiny separation gives a large but finite acceleration."""
    galaxy = Galaxy(collision_divisor=1e9, min_distance=1e-3)
    a = galaxy.spawn(100.0, (0.0, 0.0))
    galaxy.spawn(100.0, (1e-6, 0.0))

    galaxy.integrate(1e-6)

    body = galaxy.body(a)
    assert np.isfinite(body.vx) and np.isfinite(body.x)
    assert body.vx == pytest.approx(100.0 / (1e-3 ** 2) * 1e-6)


def test_trail_records_only_after_moving_past_threshold():
    """With the default threshold, slow bodies record sparse trail points."""
    galaxy = Galaxy()
    h = galaxy.spawn(10.0, (0.0, 0.0), (1.0, 0.0))
    for _ in range(9):
        galaxy.integrate(1.0)

    assert [p[0] for p in galaxy.body(h).trail_points()] == [0.0, 3.0, 6.0, 9.0]


def test_trail_records_every_step_without_threshold():
    """trail_threshold=None records every step."""
    galaxy = Galaxy(trail_threshold=None, trail_capacity=4)
    h = galaxy.spawn(10.0, (0.0, 0.0), (1.0, 0.0))
    for _ in range(9):
        galaxy.integrate(1.0)

    assert [p[0] for p in galaxy.body(h).trail_points()] == [6.0, 7.0, 8.0, 9.0]


def test_held_body_is_frozen_and_exerts_no_force():
    """A held body neither moves nor attracts."""
    galaxy = Galaxy()
    a = galaxy.spawn(100.0, (0.0, 0.0), (1.0, 0.0))
    b = galaxy.spawn(100.0, (10.0, 0.0))
    galaxy.hold(a)

    galaxy.integrate(1.0)

    assert galaxy.body(a).position == (0.0, 0.0)
    assert galaxy.body(b).velocity == (0.0, 0.0)

    galaxy.release_hold(a)
    galaxy.integrate(1.0)
    assert galaxy.body(a).x > 0.0


def test_find_at_center_returns_lone_body():
    """Picking at a body's center finds it."""
    galaxy = Galaxy()
    h = galaxy.spawn(500.0, (40.0, -12.5))

    assert galaxy.find_at(40.0, -12.5) == h
    assert galaxy.find_at(40.0 + galaxy.body(h).radius * 0.9, -12.5) == h
    assert galaxy.find_at(100.0, 100.0) is None


def test_find_at_includes_disc_edge():
    """A point exactly one radius from the center is a hit; just beyond is not."""
    galaxy = Galaxy()
    h = galaxy.spawn(300.0, (0.0, 0.0))
    r = galaxy.body(h).radius

    assert galaxy.find_at(r, 0.0) == h
    assert galaxy.find_at(0.0, -r) == h
    assert galaxy.find_at(np.nextafter(r, np.inf), 0.0) is None


def test_find_at_prefers_lowest_handle_and_skips_free_slots():
    """Overlapping bodies resolve to the lowest index; removed bodies are not found."""
    galaxy = Galaxy()
    first = galaxy.spawn(100.0, (0.0, 0.0))
    second = galaxy.spawn(100.0, (0.5, 0.0))

    assert galaxy.find_at(0.25, 0.0) == first
    galaxy.remove(first)
    assert galaxy.find_at(0.25, 0.0) == second


def test_find_at_bounding_box_corner_miss():
    """A point inside the bounding box but outside the disc is a miss."""
    galaxy = Galaxy()
    h = galaxy.spawn(100.0, (0.0, 0.0))
    r = galaxy.body(h).radius

    assert galaxy.find_at(0.9 * r, 0.9 * r) is None


def test_bounce_reflects_position_and_velocity():
    """Bodies outside the box are folded back and their velocity flips."""
    galaxy = Galaxy()
    h = galaxy.spawn(10.0, (12.0, 5.0), (1.0, -2.0))
    inside = galaxy.spawn(10.0, (500.0, 500.0), (1.0, 1.0))

    galaxy.bounce(0.0, 0.0, 10.0, 10.0)

    body = galaxy.body(h)
    assert body.position == pytest.approx((8.0, 5.0))
    assert body.velocity == (-1.0, -2.0)
    assert galaxy.body(inside).x < 10.0


def test_bounce_without_velocity_reflection():
    """With reflect_velocity off only the position is folded."""
    galaxy = Galaxy(reflect_velocity=False)
    h = galaxy.spawn(10.0, (-1.0, 3.0), (-1.0, 0.0))

    galaxy.bounce(0.0, 0.0, 10.0, 10.0)

    assert galaxy.body(h).position == pytest.approx((1.0, 3.0))
    assert galaxy.body(h).velocity == (-1.0, 0.0)


def test_bounce_rejects_empty_box():
    galaxy = Galaxy()
    with pytest.raises(ValueError):
        galaxy.bounce(0.0, 0.0, 0.0, 10.0)


def test_get_state_covers_simulated_bodies():
    """State arrays include only simulated bodies."""
    galaxy = Galaxy()
    galaxy.spawn(1.0, (0.0, 0.0), (1.0, 0.0))
    h = galaxy.spawn(2.0, (100.0, 0.0))
    galaxy.spawn(3.0, (0.0, 100.0), (0.0, -1.0))
    galaxy.remove(h)

    positions, velocities, masses = galaxy.get_state()

    assert positions.shape == (2, 2)
    assert velocities.shape == (2, 2)
    assert np.allclose(masses, [1.0, 3.0])


def test_clear_destroys_bodies():
    galaxy = Galaxy()
    bodies = [galaxy.body(galaxy.spawn(1.0, (i * 10.0, 0.0))) for i in range(3)]

    galaxy.clear()

    assert len(galaxy) == 0
    assert all(b.trail is None for b in bodies)
    assert galaxy.add() == 0


def test_galaxy_rejects_bad_parameters():
    with pytest.raises(ValueError):
        Galaxy(collision_divisor=0.0)
    with pytest.raises(ValueError):
        Galaxy(min_distance=0.0)
