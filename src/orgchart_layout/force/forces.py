"""
Forces for the velocity-based simulation.

Each force is bound to the simulation's nodes by ``initialize`` and then
called once per tick with the current alpha. Forces only add to node
velocities (the center force shifts positions directly); the simulation
integrates velocities into positions after all forces have run.

- LinkForce: Pulls linked nodes toward a target separation
- ManyBodyForce: Pairwise charge (negative repels), optionally Barnes-Hut
- CollideForce: Keeps circles of a given radius from overlapping
- CenterForce: Translates the graph so its mean sits at a point
- PositionForce: Pulls nodes toward a coordinate on one axis
"""

from __future__ import annotations

import math
import warnings
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence, Union

from ..spatial.quadtree import Body, QuadTree
from ..types import Link, ResolvedLink, SimNode
from ..validation import MalformedGraphWarning, validate_link_ids

NodeAccessor = Union[float, Callable[[SimNode], float]]
LinkAccessor = Union[float, Callable[[ResolvedLink], float]]


def _evaluate(accessor: Union[NodeAccessor, LinkAccessor], item: object) -> float:
    """Evaluate a constant-or-callable accessor for one item."""
    if callable(accessor):
        return float(accessor(item))  # type: ignore[arg-type]
    return float(accessor)


class Force(ABC):
    """
    Base class for simulation forces.

    Subclasses precompute per-node parameters in ``_initialize`` so that
    accessors run once per (re)initialization, not once per tick.
    """

    def __init__(self) -> None:
        self._nodes: list[SimNode] = []
        self._random: Callable[[], float] = lambda: 0.5

    def initialize(self, nodes: Sequence[SimNode], random: Callable[[], float]) -> None:
        """Bind the force to the simulation's nodes and random source."""
        self._nodes = list(nodes)
        self._random = random
        self._initialize()

    def refresh(self) -> None:
        """Re-evaluate accessors against the bound nodes."""
        self._initialize()

    def _initialize(self) -> None:
        pass

    def _jiggle(self) -> float:
        """Tiny deterministic offset separating coincident points."""
        return (self._random() - 0.5) * 1e-6

    @abstractmethod
    def __call__(self, alpha: float) -> None:
        """Apply the force for one tick."""
        pass


class LinkForce(Force):
    """
    Spring-like force pulling linked nodes toward a target distance.

    Link endpoints are resolved by node id when the force is initialized.
    Links naming an id that is not among the simulation's nodes are
    skipped with a MalformedGraphWarning.

    The default strength is ``1 / min(degree(source), degree(target))``,
    which weakens links attached to highly connected nodes.
    """

    def __init__(
        self,
        links: Sequence[Link] = (),
        *,
        distance: LinkAccessor = 30.0,
        strength: Optional[LinkAccessor] = None,
        iterations: int = 1,
    ) -> None:
        super().__init__()
        self._links: list[Link] = list(links)
        self._distance: LinkAccessor = distance
        self._strength: Optional[LinkAccessor] = strength
        self._iterations: int = max(1, int(iterations))

        self._resolved: list[ResolvedLink] = []
        self._skipped: list[Link] = []
        self._distances: list[float] = []
        self._strengths: list[float] = []
        self._bias: list[float] = []

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def links(self) -> list[Link]:
        """Get the links as supplied."""
        return self._links

    @links.setter
    def links(self, value: Sequence[Link]) -> None:
        self._links = list(value)
        self._initialize()

    @property
    def resolved(self) -> list[ResolvedLink]:
        """Links whose endpoints resolved to simulation nodes."""
        return self._resolved

    @property
    def skipped(self) -> list[Link]:
        """Links dropped because an endpoint did not resolve."""
        return self._skipped

    @property
    def distance(self) -> LinkAccessor:
        return self._distance

    @distance.setter
    def distance(self, value: LinkAccessor) -> None:
        self._distance = value
        self._initialize()

    @property
    def strength(self) -> Optional[LinkAccessor]:
        return self._strength

    @strength.setter
    def strength(self, value: Optional[LinkAccessor]) -> None:
        self._strength = value
        self._initialize()

    # -------------------------------------------------------------------------
    # Force Implementation
    # -------------------------------------------------------------------------

    def _initialize(self) -> None:
        by_id = {sn.id: sn for sn in self._nodes}
        issues = validate_link_ids(self._links, list(by_id))
        bad = {i for i, _ in issues}
        self._resolved = []
        self._skipped = []
        for i, link in enumerate(self._links):
            if i in bad:
                self._skipped.append(link)
                continue
            self._resolved.append(
                ResolvedLink(link, by_id[link.source], by_id[link.target], len(self._resolved))
            )

        if issues:
            warnings.warn(
                f"Skipping {len(self._skipped)} link(s) with unknown endpoints: "
                + "; ".join(msg for _, msg in issues),
                MalformedGraphWarning,
                stacklevel=4,
            )

        count: dict[int, int] = {}
        for rl in self._resolved:
            count[rl.source.index] = count.get(rl.source.index, 0) + 1
            count[rl.target.index] = count.get(rl.target.index, 0) + 1

        self._bias = []
        self._strengths = []
        self._distances = []
        for rl in self._resolved:
            cs = count[rl.source.index]
            ct = count[rl.target.index]
            self._bias.append(cs / (cs + ct))
            if self._strength is None:
                self._strengths.append(1.0 / min(cs, ct))
            else:
                self._strengths.append(_evaluate(self._strength, rl))
            self._distances.append(_evaluate(self._distance, rl))

    def __call__(self, alpha: float) -> None:
        for _ in range(self._iterations):
            for i, rl in enumerate(self._resolved):
                s = rl.source.state
                t = rl.target.state
                x = t.x + t.vx - s.x - s.vx
                y = t.y + t.vy - s.y - s.vy
                if x == 0:
                    x = self._jiggle()
                if y == 0:
                    y = self._jiggle()
                length = math.sqrt(x * x + y * y)
                length = (length - self._distances[i]) / length * alpha * self._strengths[i]
                x *= length
                y *= length
                b = self._bias[i]
                t.vx -= x * b
                t.vy -= y * b
                s.vx += x * (1 - b)
                s.vy += y * (1 - b)


class ManyBodyForce(Force):
    """
    Pairwise charge between all nodes.

    Negative strength repels, positive attracts. With ``use_barnes_hut``
    enabled and more than 50 nodes, distant clusters are approximated
    through a quadtree.
    """

    def __init__(
        self,
        *,
        strength: NodeAccessor = -30.0,
        theta: float = 0.9,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
        use_barnes_hut: bool = False,
    ) -> None:
        super().__init__()
        self._strength: NodeAccessor = strength
        self._theta: float = max(0.0, float(theta))
        self._distance_min: float = float(distance_min)
        self._distance_max: float = float(distance_max)
        self._use_barnes_hut: bool = bool(use_barnes_hut)
        self._strengths: list[float] = []

    @property
    def strength(self) -> NodeAccessor:
        return self._strength

    @strength.setter
    def strength(self, value: NodeAccessor) -> None:
        self._strength = value
        self._initialize()

    @property
    def theta(self) -> float:
        """Barnes-Hut accuracy (0 = exact)."""
        return self._theta

    @theta.setter
    def theta(self, value: float) -> None:
        self._theta = max(0.0, float(value))

    @property
    def use_barnes_hut(self) -> bool:
        return self._use_barnes_hut

    @use_barnes_hut.setter
    def use_barnes_hut(self, value: bool) -> None:
        self._use_barnes_hut = bool(value)

    def _initialize(self) -> None:
        self._strengths = [_evaluate(self._strength, sn) for sn in self._nodes]

    def __call__(self, alpha: float) -> None:
        n = len(self._nodes)
        if n < 2:
            return
        if self._use_barnes_hut and n > 50:
            self._apply_barnes_hut(alpha)
        else:
            self._apply_naive(alpha)

    def _apply_naive(self, alpha: float) -> None:
        """Exact O(n^2) pairwise charge."""
        min2 = self._distance_min * self._distance_min
        max2 = self._distance_max * self._distance_max
        nodes = self._nodes
        for i, a in enumerate(nodes):
            sa = a.state
            for j, b in enumerate(nodes):
                if i == j:
                    continue
                sb = b.state
                x = sb.x - sa.x
                y = sb.y - sa.y
                dist_sq = x * x + y * y
                if dist_sq >= max2:
                    continue
                if x == 0:
                    x = self._jiggle()
                    dist_sq += x * x
                if y == 0:
                    y = self._jiggle()
                    dist_sq += y * y
                if dist_sq < min2:
                    dist_sq = math.sqrt(min2 * dist_sq)
                w = self._strengths[j] * alpha / dist_sq
                sa.vx += x * w
                sa.vy += y * w

    def _apply_barnes_hut(self, alpha: float) -> None:
        """Approximate O(n log n) charge using a quadtree."""
        tree = QuadTree.from_nodes(
            self._nodes,
            self._strengths,
            theta=self._theta,
            distance_min=self._distance_min,
            distance_max=self._distance_max,
        )
        for i, sn in enumerate(self._nodes):
            body = Body(sn.state.x, sn.state.y, strength=self._strengths[i], index=i)
            dvx, dvy = tree.calculate_force(body, alpha)
            sn.state.vx += dvx
            sn.state.vy += dvy


class CollideForce(Force):
    """
    Treats nodes as circles and pushes overlapping pairs apart.

    Overlap is tested on predicted positions (position + velocity). The
    push is shared in proportion to the squared radii, so small circles
    move more than large ones.

    The radius accessor is evaluated once per (re)initialization and must
    be free of side effects.
    """

    def __init__(
        self,
        radius: NodeAccessor = 1.0,
        *,
        strength: float = 1.0,
        iterations: int = 1,
    ) -> None:
        super().__init__()
        self._radius: NodeAccessor = radius
        self._strength: float = max(0.0, min(1.0, float(strength)))
        self._iterations: int = max(1, int(iterations))
        self._radii: list[float] = []

    @property
    def radius(self) -> NodeAccessor:
        return self._radius

    @radius.setter
    def radius(self, value: NodeAccessor) -> None:
        self._radius = value
        self._initialize()

    @property
    def radii(self) -> list[float]:
        """Radius per node as last evaluated."""
        return self._radii

    @property
    def strength(self) -> float:
        return self._strength

    @strength.setter
    def strength(self, value: float) -> None:
        self._strength = max(0.0, min(1.0, float(value)))

    @property
    def iterations(self) -> int:
        return self._iterations

    @iterations.setter
    def iterations(self, value: int) -> None:
        self._iterations = max(1, int(value))

    def _initialize(self) -> None:
        self._radii = [_evaluate(self._radius, sn) for sn in self._nodes]

    def __call__(self, alpha: float) -> None:
        nodes = self._nodes
        radii = self._radii
        n = len(nodes)
        for _ in range(self._iterations):
            for i in range(n):
                sa = nodes[i].state
                ri = radii[i]
                ri2 = ri * ri
                xi = sa.x + sa.vx
                yi = sa.y + sa.vy
                for j in range(i + 1, n):
                    sb = nodes[j].state
                    rj = radii[j]
                    r = ri + rj
                    x = xi - sb.x - sb.vx
                    y = yi - sb.y - sb.vy
                    dist_sq = x * x + y * y
                    if dist_sq >= r * r:
                        continue
                    if x == 0:
                        x = self._jiggle()
                        dist_sq += x * x
                    if y == 0:
                        y = self._jiggle()
                        dist_sq += y * y
                    dist = math.sqrt(dist_sq)
                    push = (r - dist) / dist * self._strength
                    x *= push
                    y *= push
                    rj2 = rj * rj
                    share = rj2 / (ri2 + rj2)
                    sa.vx += x * share
                    sa.vy += y * share
                    sb.vx -= x * (1 - share)
                    sb.vy -= y * (1 - share)


class CenterForce(Force):
    """
    Translates all nodes so their mean position moves toward (x, y).

    Has no effect while any node is pinned; the pinned node already
    anchors the frame.
    """

    def __init__(self, x: float = 0.0, y: float = 0.0, *, strength: float = 1.0) -> None:
        super().__init__()
        self.x = float(x)
        self.y = float(y)
        self.strength = float(strength)

    def __call__(self, alpha: float) -> None:
        nodes = self._nodes
        if not nodes or any(sn.state.fixed for sn in nodes):
            return
        n = len(nodes)
        sx = (sum(sn.state.x for sn in nodes) / n - self.x) * self.strength
        sy = (sum(sn.state.y for sn in nodes) / n - self.y) * self.strength
        for sn in nodes:
            sn.state.x -= sx
            sn.state.y -= sy


class PositionForce(Force):
    """Pulls each node toward a target coordinate on one axis."""

    def __init__(
        self,
        axis: str = "x",
        target: NodeAccessor = 0.0,
        *,
        strength: NodeAccessor = 0.1,
    ) -> None:
        super().__init__()
        if axis not in ("x", "y"):
            raise ValueError(f"axis must be 'x' or 'y', got {axis!r}")
        self.axis = axis
        self._target: NodeAccessor = target
        self._strength: NodeAccessor = strength
        self._targets: list[float] = []
        self._strengths: list[float] = []

    def _initialize(self) -> None:
        self._targets = [_evaluate(self._target, sn) for sn in self._nodes]
        self._strengths = [_evaluate(self._strength, sn) for sn in self._nodes]

    def __call__(self, alpha: float) -> None:
        for i, sn in enumerate(self._nodes):
            s = sn.state
            if self.axis == "x":
                s.vx += (self._targets[i] - s.x) * self._strengths[i] * alpha
            else:
                s.vy += (self._targets[i] - s.y) * self._strengths[i] * alpha


__all__ = [
    "Force",
    "LinkForce",
    "ManyBodyForce",
    "CollideForce",
    "CenterForce",
    "PositionForce",
    "NodeAccessor",
    "LinkAccessor",
]
