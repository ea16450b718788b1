"""Tests for team packing."""

import math

import pytest

from orgchart_layout import PersonNode, RadiusPolicy, ValidationError, enclose, pack_team
from orgchart_layout.metrics import member_overlaps, packing_slack
from orgchart_layout.radius import DEFAULT_POLICY


def create_members(names):
    return [PersonNode(f"m{i}", name) for i, name in enumerate(names)]


def assert_no_member_overlap(packing, padding):
    n = len(packing.offsets)
    for i in range(n):
        for j in range(i + 1, n):
            (xi, yi), (xj, yj) = packing.offsets[i], packing.offsets[j]
            need = packing.radii[i] + packing.radii[j] + padding
            assert math.hypot(xj - xi, yj - yi) >= need - 1e-9


class TestPackTeamEdgeCases:
    """Tests for degenerate teams."""

    def test_empty_team(self):
        """Test an empty team packs to nothing."""
        packing = pack_team([])
        assert packing.offsets == ()
        assert packing.enclosing.r == 0.0
        assert packing_slack(packing) == math.inf

    def test_single_member_at_origin(self):
        """Test a lone member sits on the team origin."""
        packing = pack_team(create_members(["Ada"]))
        assert packing.offsets == ((0.0, 0.0),)
        assert packing.enclosing.r == pytest.approx(34.0)

    def test_invalid_iterations(self):
        """Test zero relaxation ticks are rejected."""
        with pytest.raises(ValidationError):
            pack_team(create_members(["A", "B"]), iterations=0)


class TestPackTeam:
    """Tests for multi-member packing."""

    def test_four_members_do_not_overlap(self):
        """Test equal members keep at least twice the radius plus padding apart."""
        packing = pack_team(create_members(["A", "B", "C", "D"]))
        r = DEFAULT_POLICY.effective_radius(PersonNode("x", "A"))
        for i in range(4):
            for j in range(i + 1, 4):
                (xi, yi), (xj, yj) = packing.offsets[i], packing.offsets[j]
                assert math.hypot(xj - xi, yj - yi) >= 2 * r + DEFAULT_POLICY.member_padding - 1e-9

    def test_enclosing_contains_members(self):
        """Test the enclosing circle contains every member circle."""
        packing = pack_team(create_members(["A", "B", "C", "D"]))
        for c in packing.circles():
            assert packing.enclosing.contains(c)

    def test_centred_on_origin(self):
        """Test the enclosure of the members is centred on the team origin."""
        packing = pack_team(create_members(["Ada", "Grace", "Barbara Liskov"]))
        e = enclose(packing.circles())
        assert (e.x, e.y) == pytest.approx((0.0, 0.0), abs=1e-6)
        assert e.r == pytest.approx(packing.enclosing.r)

    def test_mixed_label_sizes(self):
        """Test members with wrapped names get larger circles and still fit."""
        names = ["Al", "Margaret Hamilton", "Jo", "Head of Platform Engineering", "Kay"]
        packing = pack_team(create_members(names))
        assert packing.radii[1] > packing.radii[0]
        assert_no_member_overlap(packing, DEFAULT_POLICY.member_padding)
        assert member_overlaps(packing, DEFAULT_POLICY.member_padding) == 0

    def test_deterministic(self):
        """Test identical members pack identically."""
        members = create_members(["A", "B", "C", "D", "E", "F"])
        assert pack_team(members).offsets == pack_team(members).offsets

    def test_large_team(self):
        """Test a crowded team is still separated."""
        packing = pack_team(create_members([f"Person {i}" for i in range(15)]))
        assert_no_member_overlap(packing, DEFAULT_POLICY.member_padding)
        assert packing_slack(packing) >= 0.0

    def test_policy_padding(self):
        """Test the member padding of the policy is honoured."""
        policy = RadiusPolicy(member_padding=10.0)
        packing = pack_team(create_members(["A", "B", "C"]), policy)
        assert_no_member_overlap(packing, 10.0)


class TestTeamPacking:
    """Tests for TeamPacking accessors."""

    def test_offset_lookup(self):
        """Test offsets are addressable by member id."""
        packing = pack_team(create_members(["A", "B"]))
        assert packing.offset("m1") == packing.offsets[1]
        assert packing.as_dict() == {"m0": packing.offsets[0], "m1": packing.offsets[1]}

    def test_radii_derived(self):
        """Test bound and collision radii add the policy margins."""
        packing = pack_team(create_members(["A", "B"]))
        assert packing.bound_radius == pytest.approx(
            packing.enclosing.r + DEFAULT_POLICY.team_padding
        )
        assert packing.collision_radius == pytest.approx(
            packing.enclosing.r + DEFAULT_POLICY.label_margin
        )
