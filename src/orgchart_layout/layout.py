"""
Outer graph layout: positions top-level people and teams.

Construction packs every team once (synchronously), seeds the top-level
nodes with the centre node pinned and the rest on an expanding spiral,
and binds four forces, applied in this order on every tick:

1. link: pulls linked nodes toward ``link_distance``
2. charge: mutual repulsion between all nodes
3. collide: keeps label-aware collision envelopes apart
4. center: keeps the graph near ``center`` (idle while a node is pinned)

Lifecycle::

    INITIALIZING --tick--> RUNNING --alpha < alpha_min--> QUIESCENT
         |                    |                              |
         +--------------------+------------dispose-----------+--> DISPOSED

An empty graph is QUIESCENT from the start. ``reheat`` moves a quiescent
layout back to RUNNING; only a new layout instance re-enters
INITIALIZING.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import numpy as np
from typing_extensions import Self

from .base import DEFAULT_ALPHA_DECAY, BaseLayout
from .force.forces import CenterForce, CollideForce, LinkForce, ManyBodyForce
from .force.simulation import ForceSimulation
from .radius import DEFAULT_POLICY, RadiusPolicy
from .team import DEFAULT_TEAM_ITERATIONS, TeamPacking, pack_team
from .types import (
    EventCallback,
    EventType,
    LayoutFrame,
    LayoutState,
    Link,
    LinkLike,
    Node,
    NodeLike,
    NodeType,
    ResolvedLink,
    SimNode,
    SimState,
)
from .validation import (
    check_labels,
    check_teams,
    coerce_links,
    dedupe_nodes,
    validate_graph_present,
    validate_iterations,
)


class OrgChartLayout(BaseLayout):
    """
    Two-level force layout for an organisation chart.

    The layout owns a private copy of the node and link collections; the
    caller's records are never mutated. Team members are not simulated
    here: their offsets come from ``pack_team`` and are resolved through
    the team's position.

    Example:
        layout = OrgChartLayout(
            nodes=[PersonNode("1", "Ada"), PersonNode("2", "Grace")],
            links=[Link("1", "2")],
            random_seed=1,
        )
        layout.run()
        print(layout.position("2"))
    """

    def __init__(
        self,
        *,
        nodes: Optional[Sequence[NodeLike]] = None,
        links: Optional[Sequence[LinkLike]] = None,
        random_seed: Optional[int] = None,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
        observer: Optional[EventCallback] = None,
        # Simulation parameters
        alpha: float = 1.0,
        alpha_min: float = 0.001,
        alpha_decay: float = DEFAULT_ALPHA_DECAY,
        alpha_target: float = 0.0,
        velocity_decay: float = 0.4,
        iterations: int = 300,
        # Geometry
        radius_policy: Optional[RadiusPolicy] = None,
        team_iterations: int = DEFAULT_TEAM_ITERATIONS,
        # Forces
        link_distance: float = 120.0,
        link_strength: Optional[float] = None,
        charge_strength: float = -30.0,
        theta: float = 0.9,
        use_barnes_hut: bool = False,
        collide_padding: float = 10.0,
        collide_strength: float = 1.0,
        center: tuple[float, float] = (0.0, 0.0),
        # Seeding
        center_id: Optional[str] = None,
        pin_center: bool = True,
        initial_radius: float = 100.0,
        initial_step: float = 10.0,
        initial_angle: float = 2.4,
    ) -> None:
        """
        Initialize and seed the layout.

        Args:
            nodes: Top-level people and teams
            links: Links between top-level node ids
            random_seed: Seed for simulation jitter and team packing
            on_start: Callback for start event
            on_tick: Callback for tick event (carries the new frame)
            on_end: Callback for end event
            observer: Callback receiving every event
            alpha: Initial alpha (0 to 1)
            alpha_min: Quiescence threshold
            alpha_decay: Alpha decay rate per tick (0 to 1)
            alpha_target: Alpha the simulation cools toward
            velocity_decay: Fraction of velocity lost per tick (0 to 1)
            iterations: Tick cap for run() when the layout cannot quiesce
            radius_policy: Label and team sizing rules
            team_iterations: Relaxation ticks per team packing
            link_distance: Target distance between linked nodes
            link_strength: Link stiffness; None weakens links on busy nodes
            charge_strength: Many-body strength (negative repels)
            theta: Barnes-Hut accuracy
            use_barnes_hut: Approximate charge with a quadtree on large graphs
            collide_padding: Gap added to every collision radius
            collide_strength: Collision stiffness (0 to 1)
            center: Point the graph is kept around
            center_id: Node pinned at ``center``; defaults to the first node
            pin_center: Pin the centre node
            initial_radius: Spiral radius of the first seeded node
            initial_step: Spiral radius growth per node index
            initial_angle: Spiral angle step per node index, in radians

        Raises:
            InvalidGraphError: If nodes or links is None
            ValidationError: If team_iterations < 1
        """
        validate_graph_present(nodes, links)
        validate_iterations(team_iterations)

        super().__init__(
            random_seed=random_seed,
            on_start=on_start,
            on_tick=on_tick,
            on_end=on_end,
            observer=observer,
        )

        self._policy: RadiusPolicy = radius_policy or DEFAULT_POLICY
        self._team_iterations: int = int(team_iterations)
        self._collide_padding: float = float(collide_padding)
        self._center: tuple[float, float] = (float(center[0]), float(center[1]))
        self._center_id: Optional[str] = center_id
        self._pin_center: bool = bool(pin_center)
        self._ticking: bool = False

        self._nodes: list[Node] = dedupe_nodes(list(nodes), stacklevel=3)  # type: ignore[arg-type]
        check_teams(self._nodes, stacklevel=3)
        check_labels(self._nodes, stacklevel=3)
        self._links: list[Link] = coerce_links(list(links), stacklevel=3)  # type: ignore[arg-type]

        self._packings: dict[str, TeamPacking] = {}
        self._radii: list[float] = []
        self._pack_teams()

        self._sim_nodes: list[SimNode] = [SimNode(node=n, state=SimState()) for n in self._nodes]
        self._seed_positions(initial_radius, initial_step, initial_angle)
        self._index: dict[str, SimNode] = {sn.id: sn for sn in self._sim_nodes}
        self._parents: dict[str, str] = {
            member: team_id
            for team_id, packing in self._packings.items()
            for member in packing.member_ids
        }

        self._sim = ForceSimulation(
            nodes=self._sim_nodes,
            random_seed=random_seed,
            alpha=alpha,
            alpha_min=alpha_min,
            alpha_decay=alpha_decay,
            alpha_target=alpha_target,
            iterations=iterations,
            velocity_decay=velocity_decay,
        )
        self._link_force = LinkForce(self._links, distance=link_distance, strength=link_strength)
        self._collide_force = CollideForce(self._collision_radius, strength=collide_strength)
        self._sim.add_force("link", self._link_force)
        self._sim.add_force(
            "charge",
            ManyBodyForce(strength=charge_strength, theta=theta, use_barnes_hut=use_barnes_hut),
        )
        self._sim.add_force("collide", self._collide_force)
        self._sim.add_force("center", CenterForce(*self._center))

        self._state: LayoutState = (
            LayoutState.INITIALIZING if self._sim_nodes else LayoutState.QUIESCENT
        )

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def _pack_teams(self) -> None:
        """Pack every non-empty team and size every top-level node."""
        self._packings = {}
        self._radii = []
        for node in self._nodes:
            if node.type is NodeType.TEAM and node.children:
                packing = pack_team(
                    node.children,
                    self._policy,
                    iterations=self._team_iterations,
                    random_seed=self._random_seed,
                )
                self._packings[node.id] = packing
                self._radii.append(self._policy.effective_radius(node, packing))
            else:
                self._radii.append(self._policy.effective_radius(node))

    def _seed_positions(self, initial_radius: float, step: float, angle: float) -> None:
        """Pin the centre node and spread the others on a spiral by index."""
        n = len(self._sim_nodes)
        if n == 0:
            return
        cx, cy = self._center

        pinned = -1
        if self._pin_center:
            pinned = 0
            if self._center_id is not None:
                ids = [sn.id for sn in self._sim_nodes]
                if self._center_id in ids:
                    pinned = ids.index(self._center_id)

        index = np.arange(n, dtype=float)
        radii = initial_radius + index * step
        xs = cx + radii * np.cos(index * angle)
        ys = cy + radii * np.sin(index * angle)

        for i, sn in enumerate(self._sim_nodes):
            if i == pinned:
                sn.state.x = sn.state.fx = cx
                sn.state.y = sn.state.fy = cy
            else:
                sn.state.x = float(xs[i])
                sn.state.y = float(ys[i])

    def _collision_radius(self, sn: SimNode) -> float:
        return self._radii[sn.index] + self._collide_padding

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def state(self) -> LayoutState:
        """Current lifecycle state."""
        return self._state

    @property
    def nodes(self) -> tuple[Node, ...]:
        """The layout's private copy of the top-level nodes."""
        return tuple(self._nodes)

    @property
    def sim_nodes(self) -> list[SimNode]:
        """Top-level nodes bound to their simulation state."""
        return self._sim_nodes

    @property
    def links(self) -> list[ResolvedLink]:
        """Links whose endpoints resolved to top-level nodes."""
        return self._link_force.resolved

    @property
    def skipped_links(self) -> list[Link]:
        """Links dropped because an endpoint is not a top-level node."""
        return self._link_force.skipped

    @property
    def packings(self) -> dict[str, TeamPacking]:
        """Team id -> packed member offsets."""
        return dict(self._packings)

    @property
    def simulation(self) -> ForceSimulation:
        """The underlying force simulation."""
        return self._sim

    @property
    def alpha(self) -> float:
        return self._sim.alpha

    @property
    def alpha_min(self) -> float:
        return self._sim.alpha_min

    @property
    def tick_count(self) -> int:
        """Ticks performed since construction."""
        return self._sim.iteration

    @property
    def collide_padding(self) -> float:
        return self._collide_padding

    @collide_padding.setter
    def collide_padding(self, value: float) -> None:
        self._collide_padding = float(value)
        self._collide_force.refresh()

    @property
    def radius_policy(self) -> RadiusPolicy:
        """Get the radius policy."""
        return self._policy

    @radius_policy.setter
    def radius_policy(self, value: RadiusPolicy) -> None:
        """Replace the policy, repack every team and refresh collision radii."""
        self._policy = value
        self.refresh_radii()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def packing(self, team_id: str) -> Optional[TeamPacking]:
        """Packed members of a team, or None for people and empty teams."""
        return self._packings.get(team_id)

    def parent(self, node_id: str) -> Optional[str]:
        """Team id of a team member, or None for top-level ids."""
        return self._parents.get(node_id)

    def effective_radius(self, node_id: str) -> float:
        """
        Radius Policy output for a top-level node or team member.

        Raises:
            KeyError: If the id is unknown
        """
        sn = self._index.get(node_id)
        if sn is not None:
            return self._radii[sn.index]
        team_id = self._parents[node_id]
        packing = self._packings[team_id]
        return packing.radii[packing.member_ids.index(node_id)]

    def collision_radius(self, node_id: str) -> float:
        """Radius used by the collide force: effective radius plus padding."""
        return self._radii[self._index[node_id].index] + self._collide_padding

    def position(self, node_id: str) -> Optional[tuple[float, float]]:
        """
        Current scene position of any node.

        Team members resolve to their team's position plus their packed
        offset. Returns None for unknown ids.
        """
        sn = self._index.get(node_id)
        if sn is not None:
            return sn.state.x, sn.state.y
        team_id = self._parents.get(node_id)
        if team_id is None:
            return None
        team = self._index[team_id].state
        dx, dy = self._packings[team_id].offset(node_id)
        return team.x + dx, team.y + dy

    def frame(self) -> LayoutFrame:
        """Snapshot of the current positions and member offsets."""
        offsets: dict[str, tuple[float, float]] = {}
        for packing in self._packings.values():
            offsets.update(packing.as_dict())
        return LayoutFrame(
            tick=self._sim.iteration,
            alpha=self._sim.alpha,
            positions={sn.id: (sn.state.x, sn.state.y) for sn in self._sim_nodes},
            offsets=offsets,
            parents=dict(self._parents),
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def tick(self) -> bool:
        """
        Advance the layout by one integration step.

        Returns:
            True once the layout is quiescent or disposed

        Raises:
            RuntimeError: If called while a tick is already in progress
        """
        if self._ticking:
            raise RuntimeError("OrgChartLayout.tick() is not re-entrant")
        if self._state in (LayoutState.QUIESCENT, LayoutState.DISPOSED):
            return True

        self._ticking = True
        try:
            if self._state is LayoutState.INITIALIZING:
                self._state = LayoutState.RUNNING
                self.trigger({"type": EventType.start, "alpha": self._sim.alpha})

            converged = self._sim.tick()
            self.trigger(
                {"type": EventType.tick, "alpha": self._sim.alpha, "frame": self.frame()}
            )

            if converged:
                self._state = LayoutState.QUIESCENT
                self.trigger({"type": EventType.quiescent, "alpha": self._sim.alpha})
                self.trigger({"type": EventType.end, "alpha": self._sim.alpha})
                return True
            return False
        finally:
            self._ticking = False

    def run(self, max_ticks: Optional[int] = None, **kwargs: Any) -> Self:
        """
        Tick until quiescent.

        Args:
            max_ticks: Upper bound on ticks. Defaults to unbounded, or to
                ``iterations`` when alpha_target keeps the layout from
                ever cooling below alpha_min.

        Returns:
            self for chaining
        """
        if max_ticks is None and self._sim.alpha_target >= self._sim.alpha_min:
            max_ticks = self._sim.iterations
        count = 0
        while max_ticks is None or count < max_ticks:
            if self.tick():
                break
            count += 1
        return self

    def reheat(self, alpha: float = 0.1) -> Self:
        """
        Restart a settled layout at ``alpha`` without reseeding positions.

        Has no effect on a disposed layout or an empty graph.
        """
        if self._state is LayoutState.DISPOSED or not self._sim_nodes:
            return self
        self._sim.alpha = alpha
        if self._state is LayoutState.QUIESCENT:
            self._state = LayoutState.RUNNING
            self.trigger({"type": EventType.start, "alpha": self._sim.alpha})
        return self

    def refresh_radii(self) -> Self:
        """Repack teams and re-evaluate collision radii from the current policy."""
        self._pack_teams()
        self._parents = {
            member: team_id
            for team_id, packing in self._packings.items()
            for member in packing.member_ids
        }
        self._collide_force.refresh()
        return self

    def stop(self) -> Self:
        """Stop ticking; the layout stays attachable and can be reheated."""
        if self._state is LayoutState.RUNNING:
            self._state = LayoutState.QUIESCENT
            self.trigger({"type": EventType.end, "alpha": self._sim.alpha})
        return self

    def dispose(self) -> None:
        """Release the simulation and its forces. Safe to call more than once."""
        if self._state is LayoutState.DISPOSED:
            return
        self._state = LayoutState.DISPOSED
        self._sim.stop()
        self._sim.clear_forces()
        self.trigger({"type": EventType.dispose})
        self._events.clear()
        self._observer = None

    @property
    def disposed(self) -> bool:
        return self._state is LayoutState.DISPOSED


__all__ = ["OrgChartLayout"]
