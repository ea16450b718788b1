"""
Team packing: the inner simulation that arranges a team's members.

Members are seeded on a ring by index, relaxed for a fixed number of
ticks under a pull toward the origin and pairwise collision, then swept
until no two collision envelopes overlap. Finally the offsets are
re-centred so the enclosing circle of the members sits on the team
origin.

Packing runs synchronously and involves no wall clock; the only
randomness is the seeded jitter of the simulation, so identical members
give bit-identical offsets on every run.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .force.forces import CollideForce, PositionForce
from .force.simulation import ForceSimulation
from .geometry.enclose import Circle, enclose
from .radius import DEFAULT_POLICY, RadiusPolicy
from .types import PersonNode, SimNode, SimState
from .validation import validate_iterations

#: Relaxation ticks for a team; enough for a visually stable cluster.
DEFAULT_TEAM_ITERATIONS = 60

# Upper bound on overlap-removal sweeps after relaxation
_MAX_SEPARATION_SWEEPS = 200


@dataclass(frozen=True)
class TeamPacking:
    """
    Packed arrangement of a team's members around the team origin.

    Attributes:
        member_ids: Member ids, in team order
        offsets: (dx, dy) per member relative to the team origin
        radii: Effective radius per member
        enclosing: Minimal circle enclosing all member circles
        padding: Gap between the enclosure and the drawn bounding ring
        label_margin: Gap between the enclosure and the collision edge
    """

    member_ids: tuple[str, ...] = ()
    offsets: tuple[tuple[float, float], ...] = ()
    radii: tuple[float, ...] = ()
    enclosing: Circle = Circle()
    padding: float = 0.0
    label_margin: float = 0.0

    def circles(self) -> list[Circle]:
        """Member circles at their packed offsets."""
        return [Circle(dx, dy, r) for (dx, dy), r in zip(self.offsets, self.radii)]

    def offset(self, member_id: str) -> tuple[float, float]:
        """Offset of one member."""
        return self.offsets[self.member_ids.index(member_id)]

    def as_dict(self) -> dict[str, tuple[float, float]]:
        """Member id -> offset."""
        return dict(zip(self.member_ids, self.offsets))

    @property
    def bound_radius(self) -> float:
        """Radius of the drawn bounding ring."""
        return self.enclosing.r + self.padding

    @property
    def collision_radius(self) -> float:
        """Radius the outer simulation collides with (before its own padding)."""
        return self.enclosing.r + self.label_margin


def pack_team(
    children: Sequence[PersonNode],
    policy: Optional[RadiusPolicy] = None,
    *,
    iterations: int = DEFAULT_TEAM_ITERATIONS,
    strength: float = 0.1,
    random_seed: Optional[int] = None,
) -> TeamPacking:
    """
    Pack team members into a non-overlapping cluster around (0, 0).

    Args:
        children: Team members, in team order
        policy: Radius policy sizing each member
        iterations: Fixed number of relaxation ticks
        strength: Pull toward the origin on each axis
        random_seed: Seed for collision jitter

    Returns:
        TeamPacking with one offset per member

    Raises:
        ValidationError: If iterations < 1
    """
    policy = policy or DEFAULT_POLICY
    validate_iterations(iterations)

    members = list(children)
    radii = [policy.effective_radius(c) for c in members]
    ids = tuple(c.id for c in members)
    n = len(members)

    if n == 0:
        return TeamPacking(padding=policy.team_padding, label_margin=policy.label_margin)

    if n == 1:
        offsets = [(0.0, 0.0)]
    else:
        envelope = [r + policy.member_padding for r in radii]
        sim_nodes = _seed_ring(members, envelope)

        # alpha_min of 0 is never reached, so run() takes exactly `iterations` ticks
        sim = ForceSimulation(
            nodes=sim_nodes,
            random_seed=random_seed,
            alpha_min=0.0,
            iterations=iterations,
        )
        sim.add_force("x", PositionForce("x", 0.0, strength=strength))
        sim.add_force("y", PositionForce("y", 0.0, strength=strength))
        sim.add_force("collide", CollideForce(lambda sn: envelope[sn.index]))
        sim.run()
        sim.clear_forces()

        offsets = [_finite_or_origin(sn.state) for sn in sim_nodes]
        offsets = _separate(offsets, envelope)

    enclosing = enclose(Circle(x, y, r) for (x, y), r in zip(offsets, radii))
    cx, cy = enclosing.x, enclosing.y
    centred = tuple((x - cx, y - cy) for x, y in offsets)

    return TeamPacking(
        member_ids=ids,
        offsets=centred,
        radii=tuple(radii),
        enclosing=Circle(0.0, 0.0, enclosing.r),
        padding=policy.team_padding,
        label_margin=policy.label_margin,
    )


def _seed_ring(members: Sequence[PersonNode], envelope: Sequence[float]) -> list[SimNode]:
    """Place members evenly on a ring large enough to hold their envelopes."""
    n = len(members)
    ring = max(envelope) * n / math.pi
    angles = -np.pi / 2 + np.arange(n) * (2 * np.pi / n)
    xs = ring * np.cos(angles)
    ys = ring * np.sin(angles)
    return [
        SimNode(node=m, state=SimState(x=float(xs[i]), y=float(ys[i])), index=i)
        for i, m in enumerate(members)
    ]


def _finite_or_origin(state: SimState) -> tuple[float, float]:
    if state.is_placed():
        return state.x, state.y
    return 0.0, 0.0


def _separate(
    offsets: Sequence[tuple[float, float]],
    envelope: Sequence[float],
) -> list[tuple[float, float]]:
    """Push overlapping envelope pairs apart until none overlap."""
    pts = [list(p) for p in offsets]
    n = len(pts)
    for _ in range(_MAX_SEPARATION_SWEEPS):
        moved = False
        for i in range(n):
            for j in range(i + 1, n):
                dx = pts[j][0] - pts[i][0]
                dy = pts[j][1] - pts[i][1]
                dist = math.hypot(dx, dy)
                need = envelope[i] + envelope[j]
                if dist >= need:
                    continue
                if dist == 0:
                    # Coincident: split along a direction fixed by the pair
                    angle = (i * 7 + j * 13) % 360 * math.pi / 180
                    dx, dy, dist = math.cos(angle), math.sin(angle), 1.0
                    overlap = need
                else:
                    overlap = need - dist
                # Small overshoot so floating point never leaves a residual overlap
                push = (overlap / 2) * (1 + 1e-9) + 1e-9
                ux, uy = dx / dist, dy / dist
                pts[i][0] -= ux * push
                pts[i][1] -= uy * push
                pts[j][0] += ux * push
                pts[j][1] += uy * push
                moved = True
        if not moved:
            break
    return [(p[0], p[1]) for p in pts]


__all__ = ["TeamPacking", "pack_team", "DEFAULT_TEAM_ITERATIONS"]
