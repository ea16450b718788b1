"""Tests for the radius policy."""

import pytest

from orgchart_layout import PersonNode, RadiusPolicy, TeamNode, enclose, pack_team
from orgchart_layout.radius import DEFAULT_POLICY


def create_team(names=("A", "B", "C", "D"), team_id="t"):
    """Create a team with one member per name."""
    children = [PersonNode(f"{team_id}-{i}", name) for i, name in enumerate(names)]
    return TeamNode(team_id, "Platform", children)


class TestRadiusPolicyDefaults:
    """Tests for policy constants."""

    def test_defaults(self):
        """Test default constants."""
        policy = RadiusPolicy()
        assert policy.base_radius == 20.0
        assert policy.line_height == 14.0
        assert policy.max_label_width == 80.0
        assert policy.label_margin == policy.team_padding + policy.team_label_size

    def test_label_width_bounded_by_base(self):
        """Test the wrap width never drops below the base radius."""
        policy = RadiusPolicy(base_radius=50.0, max_label_width=-10.0)
        assert policy.label_width == 50.0

    def test_frozen(self):
        """Test policies are immutable."""
        with pytest.raises(Exception):
            DEFAULT_POLICY.base_radius = 5.0  # type: ignore[misc]


class TestPersonRadius:
    """Tests for person sizing."""

    def test_single_line(self):
        """Test one line adds one line height."""
        assert DEFAULT_POLICY.effective_radius(PersonNode("1", "Ada")) == pytest.approx(34.0)

    def test_wrapped_name(self):
        """Test each wrapped line adds a line height."""
        assert DEFAULT_POLICY.effective_radius(PersonNode("1", "Ada Lovelace")) == pytest.approx(
            48.0
        )

    def test_blank_name_falls_back_to_base(self):
        """Test a blank name gives the base radius."""
        assert DEFAULT_POLICY.effective_radius(PersonNode("1", "")) == 20.0
        assert DEFAULT_POLICY.effective_radius(PersonNode("1", "   ")) == 20.0

    def test_uses_node_radius(self):
        """Test the node's own face radius is the base."""
        node = PersonNode("1", "Ada", radius=30.0)
        assert DEFAULT_POLICY.effective_radius(node) == pytest.approx(44.0)

    def test_never_below_base(self):
        """Test wrapping never shrinks a person below the face size."""
        names = ["", "A", "Ada Lovelace", "x" * 60, "Head of Platform Engineering", " \n "]
        for name in names:
            node = PersonNode("1", name)
            assert DEFAULT_POLICY.effective_radius(node) >= node.radius

    def test_deterministic(self):
        """Test the same name always gives the same radius."""
        node = PersonNode("1", "Margaret Hamilton")
        assert DEFAULT_POLICY.effective_radius(node) == DEFAULT_POLICY.effective_radius(node)


class TestTeamRadius:
    """Tests for team sizing."""

    def test_single_member(self):
        """Test a one-member team wraps that member plus the label margin."""
        team = create_team(names=("Ada",))
        expected = 34.0 + DEFAULT_POLICY.label_margin
        assert DEFAULT_POLICY.effective_radius(team) == pytest.approx(expected)

    def test_encloses_packed_members(self):
        """Test the team radius covers every packed member circle."""
        team = create_team()
        packing = pack_team(team.children)
        radius = DEFAULT_POLICY.effective_radius(team, packing)
        assert radius >= enclose(packing.circles()).r
        for (dx, dy), r in zip(packing.offsets, packing.radii):
            assert (dx * dx + dy * dy) ** 0.5 + r <= radius + 1e-9

    def test_computed_packing_matches_supplied(self):
        """Test omitting the packing gives the same radius."""
        team = create_team(names=("Ada", "Grace", "Katherine Johnson"))
        packing = pack_team(team.children)
        assert DEFAULT_POLICY.effective_radius(team) == DEFAULT_POLICY.effective_radius(
            team, packing
        )

    def test_empty_team_sized_as_leaf(self):
        """Test an empty team is sized like a person with the base radius."""
        team = TeamNode("t", "Ghost Team", ())
        assert DEFAULT_POLICY.effective_radius(team) == DEFAULT_POLICY.person_radius(team)
        assert DEFAULT_POLICY.effective_radius(team) >= DEFAULT_POLICY.base_radius

    def test_policy_change_changes_radius(self):
        """Test a larger label margin grows the team radius."""
        team = create_team(names=("A", "B"))
        wide = RadiusPolicy(team_label_size=40.0)
        assert wide.effective_radius(team) > DEFAULT_POLICY.effective_radius(team)
