"""
Velocity-based force simulation.

Each tick:
1. Alpha moves toward alpha_target by alpha_decay
2. Every registered force runs, in registration order, adding to velocities
3. Velocities are damped by velocity_decay and integrated into positions;
   pinned nodes are reset to their fixed coordinates

Nodes without a finite position are seeded on a phyllotaxis spiral by
index, and all jitter comes from a seeded linear congruential generator,
so a run is reproducible for a given seed and node order.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Optional, Sequence

from typing_extensions import Self

from ..base import DEFAULT_ALPHA_DECAY, IterativeLayout
from ..types import EventCallback, EventType, SimNode
from .forces import Force

# Phyllotaxis seeding: radius grows with sqrt(index), angle steps by the golden angle
INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))

# Linear congruential generator constants (Numerical Recipes)
_LCG_A = 1664525
_LCG_C = 1013904223
_LCG_M = 4294967296


def lcg(seed: Optional[int] = None) -> Callable[[], float]:
    """
    Deterministic uniform random source in [0, 1).

    Args:
        seed: Initial state; defaults to 1
    """
    state = [1 if seed is None else int(seed) % _LCG_M]

    def random() -> float:
        state[0] = (_LCG_A * state[0] + _LCG_C) % _LCG_M
        return state[0] / _LCG_M

    return random


class ForceSimulation(IterativeLayout):
    """
    Force simulation over a list of simulation nodes.

    Example:
        sim = ForceSimulation(nodes=sim_nodes, random_seed=1)
        sim.add_force("link", LinkForce(links, distance=120))
        sim.add_force("charge", ManyBodyForce())
        sim.add_force("collide", CollideForce(radius=30))
        sim.add_force("center", CenterForce())
        sim.run()
    """

    def __init__(
        self,
        *,
        nodes: Optional[Sequence[SimNode]] = None,
        random_seed: Optional[int] = None,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
        observer: Optional[EventCallback] = None,
        # IterativeLayout parameters
        alpha: float = 1.0,
        alpha_min: float = 0.001,
        alpha_decay: float = DEFAULT_ALPHA_DECAY,
        alpha_target: float = 0.0,
        iterations: int = 300,
        # ForceSimulation-specific parameters
        velocity_decay: float = 0.4,
    ) -> None:
        """
        Initialize force simulation.

        Args:
            nodes: Simulation nodes; their states are mutated in place
            random_seed: Seed for the jitter source
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event
            observer: Callback receiving every event
            alpha: Initial alpha (0 to 1)
            alpha_min: Convergence threshold
            alpha_decay: Alpha decay rate per tick (0 to 1)
            alpha_target: Alpha the simulation cools toward
            iterations: Maximum ticks per run()
            velocity_decay: Fraction of velocity lost per tick (0 to 1)
        """
        super().__init__(
            random_seed=random_seed,
            on_start=on_start,
            on_tick=on_tick,
            on_end=on_end,
            observer=observer,
            alpha=alpha,
            alpha_min=alpha_min,
            alpha_decay=alpha_decay,
            alpha_target=alpha_target,
            iterations=iterations,
        )
        self._velocity_decay: float = max(0.0, min(1.0, float(velocity_decay)))
        self._forces: dict[str, Force] = {}
        self._random: Callable[[], float] = lcg(random_seed)
        self._nodes: list[SimNode] = []
        self._iteration: int = 0

        if nodes is not None:
            self.nodes = nodes

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def nodes(self) -> list[SimNode]:
        """Get the simulation nodes."""
        return self._nodes

    @nodes.setter
    def nodes(self, value: Sequence[SimNode]) -> None:
        """Set nodes, seed unplaced ones and re-initialize every force."""
        self._nodes = list(value)
        self._initialize_nodes()
        for force in self._forces.values():
            force.initialize(self._nodes, self._random)

    @property
    def random_seed(self) -> Optional[int]:
        return self._random_seed

    @random_seed.setter
    def random_seed(self, value: Optional[int]) -> None:
        """Set the seed and restart the jitter source."""
        self._random_seed = value
        self._random = lcg(value)

    @property
    def velocity_decay(self) -> float:
        """Get fraction of velocity lost per tick."""
        return self._velocity_decay

    @velocity_decay.setter
    def velocity_decay(self, value: float) -> None:
        self._velocity_decay = max(0.0, min(1.0, float(value)))

    @property
    def iteration(self) -> int:
        """Number of ticks performed."""
        return self._iteration

    @property
    def forces(self) -> dict[str, Force]:
        """Registered forces, in application order."""
        return dict(self._forces)

    # -------------------------------------------------------------------------
    # Forces
    # -------------------------------------------------------------------------

    def add_force(self, name: str, force: Force) -> Self:
        """
        Register a force, replacing any force of the same name.

        A new name is appended to the application order; a replaced force
        keeps its slot.
        """
        force.initialize(self._nodes, self._random)
        self._forces[name] = force
        return self

    def force(self, name: str) -> Optional[Force]:
        """Get a registered force by name."""
        return self._forces.get(name)

    def remove_force(self, name: str) -> Self:
        """Unregister a force."""
        self._forces.pop(name, None)
        return self

    def clear_forces(self) -> None:
        """Release every registered force."""
        self._forces.clear()

    # -------------------------------------------------------------------------
    # Layout Implementation
    # -------------------------------------------------------------------------

    def _initialize_nodes(self) -> None:
        """Assign indices, apply pins and seed unplaced nodes on a spiral."""
        for i, sn in enumerate(self._nodes):
            sn.index = i
            s = sn.state
            if s.fx is not None:
                s.x = s.fx
            if s.fy is not None:
                s.y = s.fy
            if not s.is_placed():
                radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
                angle = i * INITIAL_ANGLE
                s.x = radius * math.cos(angle)
                s.y = radius * math.sin(angle)
            if not math.isfinite(s.vx) or not math.isfinite(s.vy):
                s.vx = 0.0
                s.vy = 0.0

    def run(self, **kwargs: Any) -> Self:
        """
        Run the simulation until it converges or hits max iterations.

        Returns:
            self for chaining
        """
        self._running = True
        self.trigger({"type": EventType.start, "alpha": self._alpha})
        self.kick()
        self._running = False
        self.trigger({"type": EventType.end, "alpha": self._alpha})
        return self

    def tick(self) -> bool:
        """
        Perform one tick.

        Returns:
            True if converged, False otherwise.
        """
        if self.converged:
            return True
        self._integrate()
        self.trigger({"type": EventType.tick, "alpha": self._alpha})
        return self.converged

    def _integrate(self) -> None:
        self._alpha += (self._alpha_target - self._alpha) * self._alpha_decay

        for force in self._forces.values():
            force(self._alpha)

        keep = 1.0 - self._velocity_decay
        for sn in self._nodes:
            s = sn.state
            if s.fx is None:
                s.vx *= keep
                s.x += s.vx
            else:
                s.x = s.fx
                s.vx = 0.0
            if s.fy is None:
                s.vy *= keep
                s.y += s.vy
            else:
                s.y = s.fy
                s.vy = 0.0

        self._iteration += 1

    def stop(self) -> Self:
        """Stop the simulation; forces stay bound."""
        self._running = False
        return self


__all__ = ["ForceSimulation", "lcg", "INITIAL_RADIUS", "INITIAL_ANGLE"]
