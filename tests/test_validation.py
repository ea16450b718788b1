"""Tests for input validation."""

import warnings

import pytest

from orgchart_layout import Link, PersonNode, TeamNode
from orgchart_layout.validation import (
    DegenerateLabelWarning,
    DuplicateNodeWarning,
    EmptyTeamWarning,
    InvalidCanvasSizeError,
    InvalidGraphError,
    LayoutWarning,
    MalformedGraphWarning,
    ValidationError,
    check_labels,
    check_teams,
    coerce_link,
    coerce_links,
    dedupe_nodes,
    validate_canvas_size,
    validate_graph_present,
    validate_iterations,
    validate_link_ids,
)


class TestCanvasSizeValidation:
    """Tests for canvas size validation."""

    def test_valid_size(self):
        """Test valid canvas size passes."""
        assert validate_canvas_size([800, 600]) == (800.0, 600.0)

    def test_valid_size_floats(self):
        """Test float canvas size passes."""
        assert validate_canvas_size((800.5, 600.5)) == (800.5, 600.5)

    def test_zero_width_raises(self):
        """Test zero width raises."""
        with pytest.raises(InvalidCanvasSizeError, match="width"):
            validate_canvas_size([0, 600])

    def test_negative_height_raises(self):
        """Test negative height raises."""
        with pytest.raises(InvalidCanvasSizeError, match="height"):
            validate_canvas_size([800, -1])

    def test_single_element_raises(self):
        """Test single element size raises."""
        with pytest.raises(InvalidCanvasSizeError, match="2 elements"):
            validate_canvas_size([800])


class TestGraphPresent:
    """Tests for missing collections."""

    def test_empty_collections_valid(self):
        """Test empty collections are accepted."""
        validate_graph_present([], [])

    def test_missing_nodes(self):
        """Test None nodes raise."""
        with pytest.raises(InvalidGraphError, match="Node"):
            validate_graph_present(None, [])

    def test_missing_links(self):
        """Test None links raise."""
        with pytest.raises(InvalidGraphError, match="Link"):
            validate_graph_present([], None)


class TestLinkValidation:
    """Tests for link endpoint validation."""

    def test_valid_links(self):
        """Test links between known ids report nothing."""
        assert validate_link_ids([Link("a", "b")], ["a", "b"]) == []

    def test_non_strict_returns_issues(self):
        """Test unknown endpoints are listed."""
        issues = validate_link_ids([Link("a", "x"), Link("y", "b")], ["a", "b"])
        assert [i for i, _ in issues] == [0, 1]
        assert "'x'" in issues[0][1]

    def test_strict_raises(self):
        """Test strict mode raises."""
        with pytest.raises(InvalidGraphError):
            validate_link_ids([Link("a", "x")], ["a"], strict=True)

    def test_coerce_link(self):
        """Test links are built from records, dicts and objects."""

        class Edge:
            source = 1
            target = 2

        assert coerce_link(Link("a", "b")) == Link("a", "b")
        assert coerce_link({"source": "a", "target": "b"}) == Link("a", "b")
        assert coerce_link(Edge()) == Link("1", "2")

    def test_coerce_link_missing_endpoint(self):
        """Test an object without endpoints is rejected."""
        with pytest.raises(ValueError):
            coerce_link(object())

    def test_coerce_link_dict_missing_endpoint(self):
        """Test a dict without a target is rejected with ValueError."""
        with pytest.raises(ValueError, match="target"):
            coerce_link({"source": "a"})

    def test_coerce_link_none_endpoint(self):
        """Test a None endpoint is rejected instead of becoming the id 'None'."""
        with pytest.raises(ValueError, match="source"):
            coerce_link({"source": None, "target": "b"})

    def test_coerce_links_skips_malformed(self):
        """Test malformed records are reported and dropped, the rest kept."""
        records = [{"source": "a", "target": "b"}, {"source": "a"}, {"source": None, "target": "b"}]
        with pytest.warns(MalformedGraphWarning, match="2 malformed"):
            links = coerce_links(records)
        assert links == [Link("a", "b")]

    def test_coerce_links_clean(self):
        """Test well-formed records pass silently."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert coerce_links([Link("a", "b"), {"source": 1, "target": 2}]) == [
                Link("a", "b"),
                Link("1", "2"),
            ]


class TestNodeChecks:
    """Tests for recoverable node problems."""

    def test_dedupe_keeps_first(self):
        """Test the first node with an id wins."""
        nodes = [PersonNode("1", "Ada"), PersonNode("1", "Other"), PersonNode("2", "Grace")]
        with pytest.warns(DuplicateNodeWarning, match="'1'"):
            kept = dedupe_nodes(nodes)
        assert [n.name for n in kept] == ["Ada", "Grace"]

    def test_dedupe_team_members(self):
        """Test a team whose member reuses an id is dropped."""
        nodes = [PersonNode("m", "Ada"), TeamNode("t", "Team", [PersonNode("m", "Grace")])]
        with pytest.warns(DuplicateNodeWarning):
            kept = dedupe_nodes(nodes)
        assert [n.id for n in kept] == ["m"]

    def test_dedupe_clean(self):
        """Test unique ids pass silently."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert len(dedupe_nodes([PersonNode("1", "A"), PersonNode("2", "B")])) == 2

    def test_blank_labels(self):
        """Test blank names on nodes and members are reported."""
        nodes = [PersonNode("1", ""), TeamNode("t", "Team", [PersonNode("m", " ")])]
        with pytest.warns(DegenerateLabelWarning):
            assert check_labels(nodes) == ["1", "m"]

    def test_empty_teams(self):
        """Test teams without members are reported."""
        nodes = [TeamNode("t", "Team"), TeamNode("u", "Other", [PersonNode("m", "A")])]
        with pytest.warns(EmptyTeamWarning):
            assert check_teams(nodes) == ["t"]

    def test_warning_hierarchy(self):
        """Test every warning derives from LayoutWarning."""
        for warning in (
            MalformedGraphWarning,
            DegenerateLabelWarning,
            EmptyTeamWarning,
            DuplicateNodeWarning,
        ):
            assert issubclass(warning, LayoutWarning)
            assert issubclass(warning, UserWarning)


class TestIterationsValidation:
    """Tests for iterations validation."""

    def test_valid_iterations(self):
        """Test valid iterations passes."""
        assert validate_iterations(60) == 60

    def test_zero_iterations_raises(self):
        """Test zero iterations raises."""
        with pytest.raises(ValidationError, match="iterations"):
            validate_iterations(0)


class TestLinkConstructorValidation:
    """Tests for Link construction."""

    def test_link_none_source_raises(self):
        """Test None source raises."""
        with pytest.raises(ValueError, match="source"):
            Link(None, "b")

    def test_link_none_target_raises(self):
        """Test None target raises."""
        with pytest.raises(ValueError, match="target"):
            Link("a", None)

    def test_validation_errors_are_value_errors(self):
        """Test the error hierarchy."""
        assert issubclass(InvalidGraphError, ValidationError)
        assert issubclass(InvalidCanvasSizeError, ValueError)
