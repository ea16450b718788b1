"""
orgchart-layout: Two-level force layout and SVG rendering for org charts.

People and teams are positioned by a continuously running force
simulation; each team's members are packed once, up front, into a
non-overlapping cluster sized by their wrapped labels.

Components:
- geometry: Label wrapping and minimal enclosing circles
- radius: Label-aware radius policy
- team: Inner simulation packing a team's members
- layout: Outer simulation positioning people and teams
- scheduler: Host-independent tick scheduling
- render: Scene graph and render binder
- viewport: Pan/zoom, focus and highlight
- chart: Mount point wiring everything together
"""

__version__ = "0.1.0"

# Base classes for building layouts
from .base import BaseLayout, IterativeLayout

# Mount point
from .chart import OrgChart

# Forces and simulation
from .force import (
    CenterForce,
    CollideForce,
    ForceSimulation,
    LinkForce,
    ManyBodyForce,
    PositionForce,
)

# Geometry
from .geometry import Circle, enclose, line_count, text_width, wrap_label

# Outer layout
from .layout import OrgChartLayout

# Metrics for layout quality evaluation
from .metrics import (
    edge_crossings,
    edge_length_uniformity,
    layout_quality_summary,
    link_length_deviation,
    overlaps,
    team_containment,
)
from .radius import DEFAULT_POLICY, RadiusPolicy

# Rendering
from .render import RenderBinder, Scene, SceneNode, render_svg
from .scheduler import AsyncioHost, FrameHost, ManualHost, TickScheduler

# Spatial data structures
from .spatial import Body, QuadTree, QuadTreeNode
from .team import TeamPacking, pack_team

# Shared types
from .types import (
    Event,
    EventType,
    LayoutFrame,
    LayoutState,
    Link,
    LinkLike,
    Node,
    NodeLike,
    NodeType,
    PersonNode,
    SimNode,
    SimState,
    SizeType,
    TeamNode,
    is_person,
    is_team,
)

# Validation utilities
from .validation import (
    DegenerateLabelWarning,
    DuplicateNodeWarning,
    EmptyTeamWarning,
    InvalidCanvasSizeError,
    InvalidGraphError,
    LayoutWarning,
    MalformedGraphWarning,
    ValidationError,
    validate_canvas_size,
)
from .viewport import IDENTITY, Transform, ViewportController

__all__ = [
    # Version
    "__version__",
    # Shared types
    "NodeType",
    "PersonNode",
    "TeamNode",
    "Node",
    "Link",
    "SimState",
    "SimNode",
    "LayoutFrame",
    "LayoutState",
    "EventType",
    "Event",
    "is_person",
    "is_team",
    # Type aliases for API
    "NodeLike",
    "LinkLike",
    "SizeType",
    # Base classes
    "BaseLayout",
    "IterativeLayout",
    # Geometry
    "Circle",
    "enclose",
    "text_width",
    "wrap_label",
    "line_count",
    # Radius policy
    "RadiusPolicy",
    "DEFAULT_POLICY",
    # Simulation
    "ForceSimulation",
    "LinkForce",
    "ManyBodyForce",
    "CollideForce",
    "CenterForce",
    "PositionForce",
    # Layouts
    "TeamPacking",
    "pack_team",
    "OrgChartLayout",
    # Scheduling
    "FrameHost",
    "ManualHost",
    "AsyncioHost",
    "TickScheduler",
    # Rendering
    "Scene",
    "SceneNode",
    "RenderBinder",
    "render_svg",
    # Viewport
    "Transform",
    "IDENTITY",
    "ViewportController",
    # Mount point
    "OrgChart",
    # Metrics
    "overlaps",
    "edge_crossings",
    "link_length_deviation",
    "edge_length_uniformity",
    "team_containment",
    "layout_quality_summary",
    # Spatial data structures
    "Body",
    "QuadTree",
    "QuadTreeNode",
    # Validation
    "ValidationError",
    "InvalidCanvasSizeError",
    "InvalidGraphError",
    "LayoutWarning",
    "MalformedGraphWarning",
    "DegenerateLabelWarning",
    "EmptyTeamWarning",
    "DuplicateNodeWarning",
    "validate_canvas_size",
]
