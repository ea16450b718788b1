"""
Quadtree implementation for Barnes-Hut charge approximation.

The quadtree recursively subdivides 2D space into quadrants, enabling
O(n log n) approximate many-body forces. Each region aggregates the total
charge of its bodies and their charge-weighted centre.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..types import SimNode


@dataclass
class Body:
    """A body with position and charge for force calculations."""

    x: float
    y: float
    strength: float = -30.0
    index: int = -1  # Simulation node index


@dataclass
class QuadTreeNode:
    """
    A node in the quadtree.

    Attributes:
        x, y: Center of this region
        half_size: Half the width/height of this region
        center_x/center_y: Charge-weighted centre of bodies in this subtree
        total_strength: Sum of charges in this subtree
        weight: Sum of absolute charges (weights the centre)
        bodies: Bodies held by a leaf; coincident bodies share a leaf
        children: Four child quadrants [NW, NE, SW, SE] if internal
    """

    x: float
    y: float
    half_size: float

    # Aggregated properties
    center_x: float = 0.0
    center_y: float = 0.0
    total_strength: float = 0.0
    weight: float = 0.0

    # Content
    bodies: Optional[List[Body]] = None
    children: Optional[List[Optional[QuadTreeNode]]] = None

    def is_leaf(self) -> bool:
        """True if this node has no children."""
        return self.children is None

    def is_empty(self) -> bool:
        """True if this node contains no bodies."""
        return not self.bodies and self.children is None

    def contains(self, x: float, y: float) -> bool:
        """Check if point (x, y) is within this node's region."""
        return abs(x - self.x) <= self.half_size and abs(y - self.y) <= self.half_size

    def get_quadrant(self, x: float, y: float) -> int:
        """
        Get quadrant index for a point.

        Returns:
            0=NW, 1=NE, 2=SW, 3=SE
        """
        east = x >= self.x
        south = y >= self.y
        return (2 if south else 0) + (1 if east else 0)


class QuadTree:
    """
    Barnes-Hut quadtree for approximate charge forces.

    For distant clusters the algorithm treats the cluster as a single body
    at its charge-weighted centre, reducing complexity from O(n^2) to
    O(n log n).

    Usage:
        tree = QuadTree.from_nodes(sim_nodes, strengths, theta=0.9)
        dvx, dvy = tree.calculate_force(body, alpha=0.5)

    The theta parameter controls the accuracy/speed tradeoff:
    - theta = 0: Exact calculation (no approximation)
    - theta = 0.9: Default for many-body charge
    """

    # Subdivision stops below this region size; closer bodies share a leaf
    MIN_HALF_SIZE = 1e-6

    def __init__(
        self,
        bounds: Tuple[float, float, float, float],
        theta: float = 0.9,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
    ):
        """
        Initialize quadtree.

        Args:
            bounds: (min_x, min_y, max_x, max_y) bounding box
            theta: Barnes-Hut threshold (0 = exact, higher = more approximation)
            distance_min: Distances below this are clamped (avoids blow-ups)
            distance_max: Bodies farther than this exert no force
        """
        min_x, min_y, max_x, max_y = bounds
        center_x = (min_x + max_x) / 2
        center_y = (min_y + max_y) / 2
        # Use max dimension to ensure square region
        half_size = max(max_x - min_x, max_y - min_y) / 2

        self.root = QuadTreeNode(center_x, center_y, half_size)
        self.theta = theta
        self.distance_min2 = distance_min * distance_min
        self.distance_max2 = distance_max * distance_max
        self.body_count = 0

    def insert(self, body: Body) -> None:
        """Insert a body into the quadtree."""
        self._insert_into(self.root, body)
        self.body_count += 1

    def _insert_into(self, node: QuadTreeNode, body: Body) -> None:
        """Recursively insert body into subtree rooted at node."""
        if node.is_empty():
            node.bodies = [body]
            return

        if node.is_leaf():
            assert node.bodies is not None
            first = node.bodies[0]
            if (first.x == body.x and first.y == body.y) or node.half_size < self.MIN_HALF_SIZE:
                node.bodies.append(body)
                return
            # Leaf with existing bodies - must subdivide
            existing = node.bodies
            node.bodies = None
            node.children = [None, None, None, None]
            for item in existing:
                self._insert_into_child(node, item)

        self._insert_into_child(node, body)

    def _insert_into_child(self, node: QuadTreeNode, body: Body) -> None:
        """Insert body into the appropriate child of node."""
        quadrant = node.get_quadrant(body.x, body.y)
        assert node.children is not None

        child = node.children[quadrant]
        if child is None:
            hs = node.half_size / 2
            cx = node.x + hs * (1 if quadrant & 1 else -1)
            cy = node.y + hs * (1 if quadrant & 2 else -1)
            child = QuadTreeNode(cx, cy, hs)
            node.children[quadrant] = child

        self._insert_into(child, body)

    def compute_mass_distribution(self) -> None:
        """Compute charge totals and centres for all nodes (post-order traversal)."""
        self._compute_mass(self.root)

    def _compute_mass(self, node: QuadTreeNode) -> None:
        """Recursively compute charge distribution."""
        if node.is_leaf():
            if node.bodies:
                node.total_strength = sum(b.strength for b in node.bodies)
                node.weight = sum(abs(b.strength) for b in node.bodies)
                node.center_x = node.bodies[0].x
                node.center_y = node.bodies[0].y
            return

        total = 0.0
        weight = 0.0
        weighted_x = 0.0
        weighted_y = 0.0

        assert node.children is not None
        for child in node.children:
            if child is not None:
                self._compute_mass(child)
                total += child.total_strength
                weight += child.weight
                weighted_x += child.center_x * child.weight
                weighted_y += child.center_y * child.weight

        node.total_strength = total
        node.weight = weight
        if weight > 0:
            node.center_x = weighted_x / weight
            node.center_y = weighted_y / weight

    def calculate_force(self, body: Body, alpha: float) -> Tuple[float, float]:
        """
        Calculate the approximate velocity change on a body.

        Uses Barnes-Hut approximation: if a region is sufficiently far away
        (size/distance < theta), its charge acts from its weighted centre.
        Negative charge repels.

        Args:
            body: The body to calculate force on
            alpha: Current simulation alpha

        Returns:
            (dvx, dvy) velocity change
        """
        return self._calculate_force(self.root, body, alpha)

    def _calculate_force(
        self,
        node: QuadTreeNode,
        body: Body,
        alpha: float,
    ) -> Tuple[float, float]:
        """Recursively calculate force contribution from node."""
        if node.is_empty() or node.weight == 0:
            return 0.0, 0.0

        dx = node.center_x - body.x
        dy = node.center_y - body.y
        dist_sq = dx * dx + dy * dy
        width = node.half_size * 2

        # Barnes-Hut criterion: s/d < theta
        if not node.is_leaf() and width * width < self.theta * self.theta * dist_sq:
            if dist_sq >= self.distance_max2 or dist_sq == 0:
                return 0.0, 0.0
            if dist_sq < self.distance_min2:
                dist_sq = math.sqrt(self.distance_min2 * dist_sq)
            w = node.total_strength * alpha / dist_sq
            return dx * w, dy * w

        if node.is_leaf():
            fx, fy = 0.0, 0.0
            assert node.bodies is not None
            for other in node.bodies:
                if other.index == body.index:
                    continue
                ox = other.x - body.x
                oy = other.y - body.y
                d2 = ox * ox + oy * oy
                if d2 == 0 or d2 >= self.distance_max2:
                    # Coincident bodies are left to the collide force
                    continue
                if d2 < self.distance_min2:
                    d2 = math.sqrt(self.distance_min2 * d2)
                w = other.strength * alpha / d2
                fx += ox * w
                fy += oy * w
            return fx, fy

        # Region is too close - recurse into children
        fx, fy = 0.0, 0.0
        assert node.children is not None
        for child in node.children:
            if child is not None:
                cfx, cfy = self._calculate_force(child, body, alpha)
                fx += cfx
                fy += cfy

        return fx, fy

    @classmethod
    def from_nodes(
        cls,
        nodes: Sequence[SimNode],
        strengths: Sequence[float],
        padding: float = 10.0,
        theta: float = 0.9,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
    ) -> QuadTree:
        """
        Build quadtree from simulation nodes.

        Args:
            nodes: Simulation nodes with placed states
            strengths: Charge per node, indexed like nodes
            padding: Padding around bounding box
            theta: Barnes-Hut threshold
            distance_min: Minimum interaction distance
            distance_max: Maximum interaction distance

        Returns:
            QuadTree with all nodes inserted and charge distribution computed
        """
        if not nodes:
            return cls((0, 0, 100, 100), theta=theta)

        min_x = min(n.state.x for n in nodes) - padding
        min_y = min(n.state.y for n in nodes) - padding
        max_x = max(n.state.x for n in nodes) + padding
        max_y = max(n.state.y for n in nodes) + padding

        tree = cls(
            (min_x, min_y, max_x, max_y),
            theta=theta,
            distance_min=distance_min,
            distance_max=distance_max,
        )

        for i, node in enumerate(nodes):
            tree.insert(Body(node.state.x, node.state.y, strength=strengths[i], index=i))

        tree.compute_mass_distribution()
        return tree


__all__ = ["Body", "QuadTree", "QuadTreeNode"]
