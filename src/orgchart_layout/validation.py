"""
Input validation utilities for the org chart layout engine.

Provides the error taxonomy and the checks run when an engine ingests a
graph. Caller-visible problems raise descriptive exceptions; recoverable
ones are reported with warnings and repaired with a safe default.
"""

from __future__ import annotations

import warnings
from typing import Any, Optional, Sequence

from .types import Link, Node, NodeType


class ValidationError(ValueError):
    """Base exception for layout validation errors."""

    pass


class InvalidCanvasSizeError(ValidationError):
    """Raised when canvas dimensions are invalid."""

    pass


class InvalidGraphError(ValidationError):
    """Raised when the node or link collection is missing altogether."""

    pass


class LayoutWarning(UserWarning):
    """Base warning for problems the engine repairs locally."""

    pass


class MalformedGraphWarning(LayoutWarning):
    """A link lacks an endpoint or names an id that is not a top-level node; it is skipped."""

    pass


class DegenerateLabelWarning(LayoutWarning):
    """A node name is empty or whitespace; it is laid out as one empty line."""

    pass


class EmptyTeamWarning(LayoutWarning):
    """A team has no members; it is laid out as a leaf."""

    pass


class DuplicateNodeWarning(LayoutWarning):
    """A node id is already in use; the later node is dropped."""

    pass


def validate_canvas_size(size: Sequence[float]) -> tuple[float, float]:
    """
    Validate canvas size dimensions.

    Args:
        size: [width, height] sequence

    Returns:
        Validated (width, height) tuple

    Raises:
        InvalidCanvasSizeError: If dimensions are invalid
    """
    if len(size) < 2:
        raise InvalidCanvasSizeError(
            f"Canvas size must have 2 elements [width, height], got {len(size)}"
        )

    width, height = float(size[0]), float(size[1])

    if width <= 0:
        raise InvalidCanvasSizeError(f"Canvas width must be positive, got {width}")
    if height <= 0:
        raise InvalidCanvasSizeError(f"Canvas height must be positive, got {height}")

    return width, height


def validate_graph_present(nodes: Optional[Sequence[Any]], links: Optional[Sequence[Any]]) -> None:
    """
    Fail fast when a collection is missing.

    An empty collection is valid (the layout quiesces immediately); only
    ``None`` is rejected.

    Raises:
        InvalidGraphError: If nodes or links is None
    """
    if nodes is None:
        raise InvalidGraphError("Node collection is missing (got None)")
    if links is None:
        raise InvalidGraphError("Link collection is missing (got None)")


def validate_iterations(iterations: int) -> int:
    """
    Validate iteration count is positive.

    Raises:
        ValidationError: If iterations < 1
    """
    if iterations < 1:
        raise ValidationError(f"iterations must be >= 1, got {iterations}")
    return iterations


def dedupe_nodes(nodes: Sequence[Node], *, stacklevel: int = 3) -> list[Node]:
    """
    Drop nodes whose id is already used by a top-level node or a team member.

    Ids must be unique across top-level nodes and all team children. The
    first occurrence wins; every later one is reported and dropped.

    Returns:
        Nodes with unique ids, in input order
    """
    seen: set[str] = set()
    kept: list[Node] = []
    for node in nodes:
        ids = [node.id]
        if node.type is NodeType.TEAM:
            ids.extend(child.id for child in node.children)
        clash = [i for i in ids if i in seen]
        if clash:
            warnings.warn(
                f"Node {node.id!r} reuses id(s) {clash!r}; dropping it.",
                DuplicateNodeWarning,
                stacklevel=stacklevel,
            )
            continue
        seen.update(ids)
        kept.append(node)
    return kept


def check_labels(nodes: Sequence[Node], *, stacklevel: int = 3) -> list[str]:
    """
    Report blank names on nodes and team members.

    Returns:
        Ids of nodes whose name is empty or whitespace-only
    """
    blank: list[str] = []
    for node in nodes:
        members = node.children if node.type is NodeType.TEAM else ()
        for item in (node, *members):
            if not (item.name or "").strip():
                blank.append(item.id)
    if blank:
        warnings.warn(
            f"{len(blank)} node(s) have blank names: {blank!r}. "
            "They are laid out as a single empty line.",
            DegenerateLabelWarning,
            stacklevel=stacklevel,
        )
    return blank


def check_teams(nodes: Sequence[Node], *, stacklevel: int = 3) -> list[str]:
    """
    Report teams without members.

    Returns:
        Ids of empty teams
    """
    empty = [n.id for n in nodes if n.type is NodeType.TEAM and not n.children]
    if empty:
        warnings.warn(
            f"{len(empty)} team(s) have no members: {empty!r}. They are laid out as leaves.",
            EmptyTeamWarning,
            stacklevel=stacklevel,
        )
    return empty


def validate_link_ids(
    links: Sequence[Link],
    node_ids: Sequence[str],
    strict: bool = False,
) -> list[tuple[int, str]]:
    """
    Validate that all link endpoints name a top-level node.

    Args:
        links: Sequence of Link records
        node_ids: Ids of the top-level nodes
        strict: If True, raises on invalid. If False, returns list of issues.

    Returns:
        List of (link_index, issue_description) tuples

    Raises:
        InvalidGraphError: If strict=True and invalid links found
    """
    issues: list[tuple[int, str]] = []
    known = set(node_ids)

    for i, link in enumerate(links):
        if link.source not in known:
            issues.append((i, f"Link {i}: source {link.source!r} is not a top-level node"))
        if link.target not in known:
            issues.append((i, f"Link {i}: target {link.target!r} is not a top-level node"))

    if strict and issues:
        msg = "Invalid links:\n" + "\n".join(issue[1] for issue in issues)
        raise InvalidGraphError(msg)

    return issues


def _endpoint(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def coerce_link(link_data: Any) -> Link:
    """
    Build a Link from a Link, a dict, or an object with source/target.

    Raises:
        ValueError: If an endpoint is missing or None
    """
    if isinstance(link_data, Link):
        return link_data
    if isinstance(link_data, dict):
        source = link_data.get("source")
        target = link_data.get("target")
    else:
        source = getattr(link_data, "source", None)
        target = getattr(link_data, "target", None)
    return Link(source=_endpoint(source), target=_endpoint(target))  # type: ignore[arg-type]


def coerce_links(links: Sequence[Any], *, stacklevel: int = 3) -> list[Link]:
    """
    Build Links from link records, skipping records without both endpoints.

    Returns:
        Links in input order
    """
    coerced: list[Link] = []
    malformed: list[str] = []
    for i, link_data in enumerate(links):
        try:
            coerced.append(coerce_link(link_data))
        except ValueError as e:
            malformed.append(f"Link {i}: {e}")
    if malformed:
        warnings.warn(
            f"Skipping {len(malformed)} malformed link(s): " + "; ".join(malformed),
            MalformedGraphWarning,
            stacklevel=stacklevel,
        )
    return coerced


__all__ = [
    "ValidationError",
    "InvalidCanvasSizeError",
    "InvalidGraphError",
    "LayoutWarning",
    "MalformedGraphWarning",
    "DegenerateLabelWarning",
    "EmptyTeamWarning",
    "DuplicateNodeWarning",
    "validate_canvas_size",
    "validate_graph_present",
    "validate_iterations",
    "dedupe_nodes",
    "check_labels",
    "check_teams",
    "validate_link_ids",
    "coerce_link",
    "coerce_links",
]
