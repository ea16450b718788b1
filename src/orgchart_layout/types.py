"""
Common types for the org chart layout engine.

This module provides the fundamental types shared by every component:
- NodeType: Discriminant for the Person/Team node union
- PersonNode, TeamNode: Immutable identity/display records
- Link: Undirected connection between two top-level node ids
- SimState: Mutable simulation state owned by the simulations
- SimNode: A node bound to its simulation state
- LayoutFrame: Per-tick snapshot of positions
- LayoutState, EventType, Event: Lifecycle and event payloads
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable, Mapping, Optional, Sequence, TypedDict, Union

#: Default face radius for a person, in scene units.
DEFAULT_NODE_RADIUS = 20.0


class NodeType(Enum):
    """Discriminant for the node union."""

    PERSON = "person"
    TEAM = "team"


@dataclass(frozen=True)
class PersonNode:
    """
    A person in the organisation.

    Attributes:
        id: Unique identity, shared with DOM/scene bindings and links
        name: Display name, wrapped into the label under the face
        picture_url: Optional picture used to texture the face
        location: Optional facility tag
        radius: Base face radius (constant per node)
    """

    id: str
    name: str
    picture_url: Optional[str] = None
    location: Optional[str] = None
    radius: float = DEFAULT_NODE_RADIUS
    type: NodeType = field(default=NodeType.PERSON, init=False)


@dataclass(frozen=True)
class TeamNode:
    """
    A team grouping people at the bottom of the hierarchy.

    The team's collision radius is not stored here; it is derived from the
    packed children and the label metrics every time it is needed.
    """

    id: str
    name: str
    children: tuple[PersonNode, ...] = ()
    type: NodeType = field(default=NodeType.TEAM, init=False)

    def __post_init__(self) -> None:
        # Accept any sequence, store an immutable tuple
        object.__setattr__(self, "children", tuple(self.children))


Node = Union[PersonNode, TeamNode]


@dataclass(frozen=True)
class Link:
    """Undirected link between two top-level node ids."""

    source: str
    target: str

    def __post_init__(self) -> None:
        if self.source is None:
            raise ValueError("Link source cannot be None")
        if self.target is None:
            raise ValueError("Link target cannot be None")

    def touches(self, node_id: str) -> bool:
        """True if either endpoint is ``node_id``."""
        return self.source == node_id or self.target == node_id


@dataclass
class SimState:
    """
    Mutable simulation state for one node.

    Only the simulations write to this struct; renderers read it.
    Unplaced nodes carry NaN coordinates until the simulation seeds them.

    Attributes:
        x, y: Current position
        vx, vy: Current velocity
        fx, fy: Fixed position, or None when free
    """

    x: float = math.nan
    y: float = math.nan
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None
    fy: Optional[float] = None

    @property
    def fixed(self) -> bool:
        return self.fx is not None or self.fy is not None

    def is_placed(self) -> bool:
        """True if both coordinates are finite."""
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(eq=False)
class SimNode:
    """A node record bound to the simulation state that positions it."""

    node: Node
    state: SimState = field(default_factory=SimState)
    index: int = -1

    @property
    def id(self) -> str:
        return self.node.id

    def __repr__(self) -> str:
        return f"SimNode(id={self.node.id!r}, x={self.state.x:.2f}, y={self.state.y:.2f})"


@dataclass(frozen=True, eq=False)
class ResolvedLink:
    """A link whose endpoints have been resolved to live simulation nodes."""

    link: Link
    source: SimNode
    target: SimNode
    index: int = -1


@dataclass(frozen=True)
class LayoutFrame:
    """
    Per-tick snapshot of the layout.

    Attributes:
        tick: Number of ticks completed when the frame was taken
        alpha: Simulation energy at that tick
        positions: Top-level node id -> (x, y)
        offsets: Team member id -> (dx, dy) relative to its team origin
        parents: Team member id -> team id
    """

    tick: int = 0
    alpha: float = 0.0
    positions: Mapping[str, tuple[float, float]] = field(default_factory=dict)
    offsets: Mapping[str, tuple[float, float]] = field(default_factory=dict)
    parents: Mapping[str, str] = field(default_factory=dict)

    def absolute(self, node_id: str) -> Optional[tuple[float, float]]:
        """Scene position of any node, resolving members through their team."""
        if node_id in self.positions:
            return self.positions[node_id]
        parent = self.parents.get(node_id)
        if parent is None or parent not in self.positions:
            return None
        px, py = self.positions[parent]
        dx, dy = self.offsets[node_id]
        return px + dx, py + dy

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.positions or node_id in self.parents


class LayoutState(Enum):
    """Outer simulation lifecycle."""

    INITIALIZING = "initializing"
    RUNNING = "running"
    QUIESCENT = "quiescent"
    DISPOSED = "disposed"


class EventType(IntEnum):
    """
    Layout lifecycle and interaction events.

    - start: Layout iterations have begun
    - tick: Fired once per iteration, carrying the new frame
    - end: Layout has converged or stopped
    - quiescent: Outer simulation settled below alpha_min
    - dispose: Engine released its simulation
    - render: Scene graph updated from a frame
    - focus: Viewport focus requested
    - highlight: Highlight changed
    """

    start = 0
    tick = 1
    end = 2
    quiescent = 3
    dispose = 4
    render = 5
    focus = 6
    highlight = 7


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    alpha: float
    frame: Optional[LayoutFrame]
    node_id: Optional[str]
    transform: Any


EventCallback = Callable[[Optional[Event]], None]

NodeLike = Union[PersonNode, TeamNode]
"""Input type for nodes: the tagged union records."""

LinkLike = Union[Link, Mapping[str, Any], Any]
"""Input type for links: Link records, dicts, or objects with source/target."""

SizeType = Union[tuple[float, float], list[float], Sequence[float]]
"""Canvas size: (width, height) tuple, list, or sequence."""


def as_node_id(node: Union[Node, str, None]) -> Optional[str]:
    """Id of a node record, passing ids and None through."""
    if node is None or isinstance(node, str):
        return node
    return node.id


def is_team(node: Node) -> bool:
    """True if the node is tagged as a team."""
    return node.type is NodeType.TEAM


def is_person(node: Node) -> bool:
    """True if the node is tagged as a person."""
    return node.type is NodeType.PERSON


__all__ = [
    "DEFAULT_NODE_RADIUS",
    "NodeType",
    "PersonNode",
    "TeamNode",
    "Node",
    "Link",
    "SimState",
    "SimNode",
    "ResolvedLink",
    "LayoutFrame",
    "LayoutState",
    "EventType",
    "Event",
    "EventCallback",
    "NodeLike",
    "LinkLike",
    "SizeType",
    "as_node_id",
    "is_team",
    "is_person",
]
