"""
Force simulation and forces.

- ForceSimulation: Tick loop with alpha cooling and velocity integration
- LinkForce, ManyBodyForce, CollideForce, CenterForce, PositionForce
"""

from .forces import (
    CenterForce,
    CollideForce,
    Force,
    LinkForce,
    ManyBodyForce,
    PositionForce,
)
from .simulation import ForceSimulation, lcg

__all__ = [
    "ForceSimulation",
    "lcg",
    "Force",
    "LinkForce",
    "ManyBodyForce",
    "CollideForce",
    "CenterForce",
    "PositionForce",
]
