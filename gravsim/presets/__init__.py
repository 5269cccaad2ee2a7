"""Preset scenario generators for galaxy simulations."""

from gravsim.presets.base import Preset
from gravsim.presets.random_field import RandomField
from gravsim.presets.orbiting_ring import OrbitingRing

PRESETS = {
    "random": RandomField,
    "ring": OrbitingRing,
}


def get_preset(name: str, n_bodies: int, seed: int = None, **kwargs) -> Preset:
    """Get preset by name."""
    preset_class = PRESETS.get(name.lower())
    if preset_class is None:
        raise ValueError(f"Unknown preset: {name}. Available: {list(PRESETS.keys())}")
    try:
        return preset_class(n_bodies=n_bodies, seed=seed, **kwargs)
    except TypeError as e:
        raise ValueError(f"Invalid parameters for preset {name}: {e}") from e


__all__ = [
    "Preset",
    "RandomField",
    "OrbitingRing",
    "PRESETS",
    "get_preset",
]
