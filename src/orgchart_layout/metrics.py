"""
Layout quality metrics.

Provides quantitative measures of an org chart layout:
- Overlaps: Top-level node pairs whose effective circles intersect
- Link length deviation: How far links are from their target distance
- Edge crossings: Number of intersecting links
- Team containment: Slack between packed members and the team envelope

All metrics read the current positions of an OrgChartLayout.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

import numpy as np

from .team import TeamPacking

if TYPE_CHECKING:
    from .layout import OrgChartLayout


def _positions(layout: OrgChartLayout) -> tuple[list[str], np.ndarray, np.ndarray]:
    """Ids, (n, 2) positions and effective radii of the top-level nodes."""
    ids = [sn.id for sn in layout.sim_nodes]
    pos = np.array([(sn.state.x, sn.state.y) for sn in layout.sim_nodes], dtype=float)
    radii = np.array([layout.effective_radius(i) for i in ids], dtype=float)
    return ids, pos.reshape(-1, 2), radii


def overlaps(layout: OrgChartLayout, padding: float = 0.0) -> list[tuple[str, str, float]]:
    """
    Find top-level node pairs whose circles overlap.

    Args:
        layout: Layout to inspect
        padding: Added to every radius before testing

    Returns:
        (id_a, id_b, depth) per overlapping pair, deepest first
    """
    ids, pos, radii = _positions(layout)
    n = len(ids)
    if n < 2:
        return []
    delta = pos[:, None, :] - pos[None, :, :]
    dist = np.sqrt((delta**2).sum(axis=-1))
    reach = radii[:, None] + radii[None, :] + 2 * padding
    depth = reach - dist
    rows, cols = np.triu_indices(n, k=1)
    hits = [
        (ids[i], ids[j], float(depth[i, j]))
        for i, j in zip(rows.tolist(), cols.tolist())
        if depth[i, j] > 1e-9
    ]
    return sorted(hits, key=lambda h: -h[2])


def link_lengths(layout: OrgChartLayout) -> list[float]:
    """Current length of every resolved link."""
    return [
        math.hypot(rl.target.state.x - rl.source.state.x, rl.target.state.y - rl.source.state.y)
        for rl in layout.links
    ]


def link_length_deviation(layout: OrgChartLayout, target: float) -> float:
    """
    Mean absolute difference between link lengths and ``target``.

    Returns:
        0.0 when there are no links
    """
    lengths = link_lengths(layout)
    if not lengths:
        return 0.0
    return float(np.mean(np.abs(np.asarray(lengths) - target)))


def edge_length_uniformity(layout: OrgChartLayout) -> float:
    """
    Compute link length uniformity (0-1, higher is better).

    Returns:
        1 - (std_dev / mean), clamped to [0, 1]
    """
    lengths = np.asarray(link_lengths(layout), dtype=float)
    if lengths.size == 0:
        return 1.0
    mean = float(lengths.mean())
    if mean == 0:
        return 0.0
    return max(0.0, min(1.0, 1.0 - float(lengths.std()) / mean))


def edge_crossings(layout: OrgChartLayout) -> int:
    """
    Count the number of link crossings in the layout.

    Two links cross if their segments intersect (excluding shared
    endpoints).

    Time Complexity: O(m^2) where m = number of links
    """
    segments = []
    for rl in layout.links:
        s, t = rl.source.state, rl.target.state
        segments.append((rl.source.id, rl.target.id, (s.x, s.y), (t.x, t.y)))
    crossings = 0
    for i in range(len(segments)):
        s1, t1, p1, p2 = segments[i]
        for j in range(i + 1, len(segments)):
            s2, t2, p3, p4 = segments[j]
            if s1 in (s2, t2) or t1 in (s2, t2):
                continue
            if _segments_intersect(p1, p2, p3, p4):
                crossings += 1
    return crossings


def _segments_intersect(
    p1: tuple[float, float],
    p2: tuple[float, float],
    p3: tuple[float, float],
    p4: tuple[float, float],
) -> bool:
    """Check if line segments (p1,p2) and (p3,p4) intersect."""

    def ccw(a: tuple[float, float], b: tuple[float, float], c: tuple[float, float]) -> bool:
        return (c[1] - a[1]) * (b[0] - a[0]) > (b[1] - a[1]) * (c[0] - a[0])

    return ccw(p1, p3, p4) != ccw(p2, p3, p4) and ccw(p1, p2, p3) != ccw(p1, p2, p4)


def packing_slack(packing: TeamPacking) -> float:
    """
    Smallest gap between a member circle and the team's collision edge.

    Negative when some member pokes outside the envelope.
    """
    if not packing.member_ids:
        return math.inf
    offsets = np.asarray(packing.offsets, dtype=float).reshape(-1, 2)
    reach = np.hypot(offsets[:, 0], offsets[:, 1]) + np.asarray(packing.radii, dtype=float)
    return float(packing.collision_radius - reach.max())


def member_overlaps(packing: TeamPacking, padding: float = 0.0) -> int:
    """Number of member pairs closer than their radii plus ``2 * padding``."""
    n = len(packing.member_ids)
    if n < 2:
        return 0
    offsets = np.asarray(packing.offsets, dtype=float)
    radii = np.asarray(packing.radii, dtype=float)
    delta = offsets[:, None, :] - offsets[None, :, :]
    dist = np.sqrt((delta**2).sum(axis=-1))
    need = radii[:, None] + radii[None, :] + 2 * padding
    rows, cols = np.triu_indices(n, k=1)
    return int(np.count_nonzero(dist[rows, cols] < need[rows, cols] - 1e-9))


def team_containment(layout: OrgChartLayout) -> float:
    """Smallest packing slack over all teams; inf without teams."""
    slacks = [packing_slack(p) for p in layout.packings.values()]
    return min(slacks) if slacks else math.inf


def layout_quality_summary(layout: OrgChartLayout, link_distance: float = 120.0) -> dict[str, Any]:
    """
    Compute a summary of layout quality metrics.

    Returns:
        Dictionary with:
        - overlaps: Number of overlapping top-level pairs
        - edge_crossings: Number of link crossings
        - link_length_deviation: Mean distance from ``link_distance``
        - edge_length_uniformity: Uniformity score (0-1)
        - team_containment: Smallest member slack inside a team envelope
    """
    return {
        "overlaps": len(overlaps(layout)),
        "edge_crossings": edge_crossings(layout),
        "link_length_deviation": link_length_deviation(layout, link_distance),
        "edge_length_uniformity": edge_length_uniformity(layout),
        "team_containment": team_containment(layout),
    }


__all__ = [
    "overlaps",
    "link_lengths",
    "link_length_deviation",
    "edge_length_uniformity",
    "edge_crossings",
    "packing_slack",
    "member_overlaps",
    "team_containment",
    "layout_quality_summary",
]
