"""Simulation engine: bodies, galaxy integration and boundaries."""

from gravsim.physics.trail import Trail
from gravsim.physics.body import Body, BodyFlags, radius_for_mass
from gravsim.physics.boundary import fold, fold_direction
from gravsim.physics.errors import InvalidHandleError
from gravsim.physics.galaxy import Galaxy
from gravsim.physics.diagnostics import Diagnostics
from gravsim.physics.simulator import Simulator

__all__ = [
    "Trail",
    "Body",
    "BodyFlags",
    "radius_for_mass",
    "fold",
    "fold_direction",
    "InvalidHandleError",
    "Galaxy",
    "Diagnostics",
    "Simulator",
]
