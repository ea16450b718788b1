"""Tests for QuadTree implementation and Barnes-Hut charge approximation."""

import math

from orgchart_layout import PersonNode, SimNode, SimState
from orgchart_layout.spatial.quadtree import Body, QuadTree, QuadTreeNode


def create_sim_nodes(points):
    return [
        SimNode(node=PersonNode(str(i), f"P{i}"), state=SimState(x=x, y=y), index=i)
        for i, (x, y) in enumerate(points)
    ]


class TestBody:
    """Tests for the Body dataclass."""

    def test_body_creation(self):
        """Test basic body creation."""
        body = Body(x=10.0, y=20.0, strength=-15.0, index=5)
        assert body.x == 10.0
        assert body.y == 20.0
        assert body.strength == -15.0
        assert body.index == 5

    def test_body_defaults(self):
        """Test body default values."""
        body = Body(x=0.0, y=0.0)
        assert body.strength == -30.0
        assert body.index == -1


class TestQuadTreeNode:
    """Tests for QuadTreeNode."""

    def test_node_creation(self):
        """Test node creation with bounds."""
        node = QuadTreeNode(x=50.0, y=50.0, half_size=50.0)
        assert node.half_size == 50.0
        assert node.is_empty()
        assert node.is_leaf()

    def test_contains(self):
        """Test point containment check."""
        node = QuadTreeNode(x=50.0, y=50.0, half_size=50.0)

        assert node.contains(25.0, 75.0)
        # Boundary is inclusive
        assert node.contains(0.0, 100.0)
        assert not node.contains(-1.0, 50.0)
        assert not node.contains(50.0, 101.0)

    def test_get_quadrant(self):
        """Test quadrant determination."""
        node = QuadTreeNode(x=50.0, y=50.0, half_size=50.0)
        assert node.get_quadrant(25.0, 25.0) == 0
        assert node.get_quadrant(75.0, 25.0) == 1
        assert node.get_quadrant(25.0, 75.0) == 2
        assert node.get_quadrant(75.0, 75.0) == 3


class TestQuadTreeInsertion:
    """Tests for QuadTree insertion operations."""

    def test_empty_tree(self):
        """Test empty tree state."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        assert tree.body_count == 0
        assert tree.root.is_empty()

    def test_two_bodies_subdivide(self):
        """Test a second distinct body splits the leaf."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        tree.insert(Body(10.0, 10.0, index=0))
        tree.insert(Body(90.0, 90.0, index=1))
        assert tree.body_count == 2
        assert not tree.root.is_leaf()

    def test_coincident_bodies_share_leaf(self):
        """Test bodies at the same point stay in one leaf."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        tree.insert(Body(30.0, 30.0, index=0))
        tree.insert(Body(30.0, 30.0, index=1))
        assert tree.root.is_leaf()
        assert len(tree.root.bodies) == 2


class TestChargeDistribution:
    """Tests for charge aggregation."""

    def test_totals(self):
        """Test total and absolute charge are summed."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        tree.insert(Body(20.0, 50.0, strength=-10.0, index=0))
        tree.insert(Body(80.0, 50.0, strength=-30.0, index=1))
        tree.compute_mass_distribution()
        assert tree.root.total_strength == -40.0
        assert tree.root.weight == 40.0

    def test_weighted_centre(self):
        """Test the centre is weighted by absolute charge."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        tree.insert(Body(0.0, 0.0, strength=-30.0, index=0))
        tree.insert(Body(100.0, 0.0, strength=-10.0, index=1))
        tree.compute_mass_distribution()
        assert abs(tree.root.center_x - 25.0) < 1e-10
        assert abs(tree.root.center_y - 0.0) < 1e-10


class TestChargeForce:
    """Tests for the approximate charge."""

    def test_two_body_repulsion(self):
        """Test a pair of equal negative charges."""
        tree = QuadTree(bounds=(-20, -20, 20, 20))
        tree.insert(Body(0.0, 0.0, index=0))
        tree.insert(Body(10.0, 0.0, index=1))
        tree.compute_mass_distribution()

        dvx, dvy = tree.calculate_force(Body(0.0, 0.0, index=0), alpha=1.0)
        assert abs(dvx - (-3.0)) < 1e-10
        assert abs(dvy) < 1e-10

    def test_alpha_scales_force(self):
        """Test the velocity change is proportional to alpha."""
        tree = QuadTree(bounds=(-20, -20, 20, 20))
        tree.insert(Body(0.0, 0.0, index=0))
        tree.insert(Body(10.0, 0.0, index=1))
        tree.compute_mass_distribution()

        full, _ = tree.calculate_force(Body(0.0, 0.0, index=0), alpha=1.0)
        half, _ = tree.calculate_force(Body(0.0, 0.0, index=0), alpha=0.5)
        assert abs(half - full / 2) < 1e-10

    def test_no_self_force(self):
        """Test a lone body feels nothing from itself."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        tree.insert(Body(50.0, 50.0, index=0))
        tree.compute_mass_distribution()
        assert tree.calculate_force(Body(50.0, 50.0, index=0), alpha=1.0) == (0.0, 0.0)

    def test_distance_max_cutoff(self):
        """Test bodies beyond distance_max exert no force."""
        tree = QuadTree(bounds=(0, 0, 100, 100), distance_max=5.0)
        tree.insert(Body(0.0, 0.0, index=0))
        tree.insert(Body(50.0, 0.0, index=1))
        tree.compute_mass_distribution()
        assert tree.calculate_force(Body(0.0, 0.0, index=0), alpha=1.0) == (0.0, 0.0)

    def test_distant_cluster_approximated(self):
        """Test a far cluster acts like its aggregated charge."""
        tree = QuadTree(bounds=(0, 0, 1000, 1000), theta=0.9)
        tree.insert(Body(900.0, 900.0, index=0))
        tree.insert(Body(902.0, 900.0, index=1))
        tree.insert(Body(901.0, 902.0, index=2))
        tree.compute_mass_distribution()

        body = Body(0.0, 0.0, index=3)
        dvx, dvy = tree.calculate_force(body, alpha=1.0)

        exact_x = exact_y = 0.0
        for x, y in ((900.0, 900.0), (902.0, 900.0), (901.0, 902.0)):
            d2 = x * x + y * y
            exact_x += x * -30.0 / d2
            exact_y += y * -30.0 / d2
        assert math.isclose(dvx, exact_x, rel_tol=0.01)
        assert math.isclose(dvy, exact_y, rel_tol=0.01)


class TestFromNodes:
    """Tests for building trees from simulation nodes."""

    def test_from_nodes_empty(self):
        """Test an empty node list yields an empty tree."""
        tree = QuadTree.from_nodes([], [])
        assert tree.body_count == 0
        assert tree.calculate_force(Body(0.0, 0.0), alpha=1.0) == (0.0, 0.0)

    def test_from_nodes_basic(self):
        """Test every node becomes a body with its charge."""
        nodes = create_sim_nodes([(0.0, 0.0), (10.0, 0.0), (0.0, 10.0)])
        tree = QuadTree.from_nodes(nodes, [-30.0, -30.0, -30.0])
        assert tree.body_count == 3
        assert tree.root.total_strength == -90.0

    def test_from_nodes_theta(self):
        """Test theta is passed through."""
        nodes = create_sim_nodes([(0.0, 0.0), (10.0, 0.0)])
        tree = QuadTree.from_nodes(nodes, [-30.0, -30.0], theta=0.5)
        assert tree.theta == 0.5
