"""Reflecting boundaries.

A coordinate that leaves ``[lo, hi)`` is folded back with a triangle wave:
count how many widths it has travelled past ``lo``, keep the remainder, and
mirror the remainder when that count is odd. Successive walls therefore
alternate like a ball bouncing between two parallel walls, instead of the
torus wrap-around a plain modulo would give. The wave has period ``2 * width``.

Both functions accept scalars or numpy arrays.
"""

import numpy as np


def _fits_and_remainder(value, lo, hi):
    width = hi - lo
    if not width > 0:
        raise ValueError(f"Boundary must have positive width, got [{lo}, {hi})")
    offset = np.asarray(value, dtype=np.float64) - lo
    fits = np.floor(offset / width)
    remainder = offset - fits * width
    # Rounding can push the remainder just outside [0, width)
    remainder = np.clip(remainder, 0.0, width)
    wrapped = remainder >= width
    remainder = np.where(wrapped, 0.0, remainder)
    fits = np.where(wrapped, fits + 1, fits)
    return width, fits, remainder


def fold(value, lo: float, hi: float):
    """Reflect ``value`` into ``[lo, hi)``.

    Args:
        value: Coordinate (scalar or array)
        lo: Lower wall
        hi: Upper wall (must be > lo)

    Returns:
        Folded coordinate(s), same shape as ``value``
    """
    width, fits, remainder = _fits_and_remainder(value, lo, hi)
    odd = np.mod(fits, 2) == 1
    folded = lo + np.where(odd, width - remainder, remainder)
    # Reflection lands exactly on the upper wall when the remainder is zero
    folded = np.where(folded >= hi, np.nextafter(hi, lo), folded)
    if folded.ndim == 0:
        return float(folded)
    return folded


def fold_direction(value, lo: float, hi: float):
    """Sign (+1 or -1) a velocity needs to follow the fold of ``value``."""
    _, fits, _ = _fits_and_remainder(value, lo, hi)
    direction = np.where(np.mod(fits, 2) == 1, -1.0, 1.0)
    if direction.ndim == 0:
        return float(direction)
    return direction
