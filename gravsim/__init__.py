"""
gravsim - A 2D N-body gravity sandbox engine.

Features:
- Direct-sum gravity with merging on close approach
- Bounded per-body position trails
- Stable body handles with slot reuse
- Point picking and reflecting boundaries
- Preset scenarios and a headless CLI
"""

__version__ = "0.1.0"

from gravsim.physics.galaxy import Galaxy
from gravsim.physics.simulator import Simulator

__all__ = [
    "Galaxy",
    "Simulator",
]
