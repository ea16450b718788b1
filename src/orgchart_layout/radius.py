"""
Radius policy: effective collision/display radius of a node.

- Person: face radius plus one line height per wrapped label line.
- Team: radius of the circle enclosing its packed members (each with its
  own effective radius) plus a margin for the bounding ring and the arced
  team title.

Every method is pure and deterministic for a given name and width budget,
so inner packing and outer collision always agree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

from .geometry.enclose import Circle, enclose
from .geometry.labels import DEFAULT_CHAR_WIDTH, line_count, wrap_label
from .types import DEFAULT_NODE_RADIUS, Node, NodeType, PersonNode

if TYPE_CHECKING:
    from .team import TeamPacking


@dataclass(frozen=True)
class RadiusPolicy:
    """
    Constants and rules for label-aware node sizing.

    Attributes:
        base_radius: Default face radius; lower bound of the label width
        font_size: Label font size
        line_height: Vertical space per label line
        char_width: Average glyph width as a fraction of font_size
        max_label_width: Width budget per label line
        team_padding: Gap between packed members and the team bounding ring
        team_label_size: Room reserved outside the ring for the arced title
        member_padding: Extra collision spacing between packed members
    """

    base_radius: float = DEFAULT_NODE_RADIUS
    font_size: float = 12.0
    line_height: float = 14.0
    char_width: float = DEFAULT_CHAR_WIDTH
    max_label_width: float = 80.0
    team_padding: float = 6.0
    team_label_size: float = 18.0
    member_padding: float = 2.0

    @property
    def label_width(self) -> float:
        """Width budget per line, never below the base radius."""
        return max(self.max_label_width, self.base_radius)

    @property
    def label_margin(self) -> float:
        """Distance from the member enclosure to a team's collision edge."""
        return self.team_padding + self.team_label_size

    def wrap(self, name: str) -> list[str]:
        """Wrapped label lines for ``name``."""
        return wrap_label(name, self.label_width, self.font_size, self.char_width)

    def line_count(self, name: str) -> int:
        """Number of wrapped label lines; at least 1."""
        return line_count(name, self.label_width, self.font_size, self.char_width)

    def person_radius(self, node: PersonNode) -> float:
        """Effective radius of a person (or of a team laid out as a leaf)."""
        base = node.radius if node.type is NodeType.PERSON else self.base_radius
        if not (node.name or "").strip():
            return base
        return base + self.line_height * self.line_count(node.name)

    def team_radius(self, circles: Iterable[Circle]) -> float:
        """Collision radius of a team from its members' packed circles."""
        return enclose(circles).r + self.label_margin

    def effective_radius(self, node: Node, packing: Optional[TeamPacking] = None) -> float:
        """
        Effective collision/display radius of any node.

        Args:
            node: Person or team
            packing: Packed member offsets for a team. Computed on demand
                when omitted; packing is deterministic, so the result is the
                same either way.

        Returns:
            Radius in scene units
        """
        if node.type is NodeType.PERSON:
            return self.person_radius(node)
        if not node.children:
            # Empty team: sized like a leaf, no packing
            return self.person_radius(node)  # type: ignore[arg-type]
        if packing is None:
            from .team import pack_team

            packing = pack_team(node.children, policy=self)
        return self.team_radius(packing.circles())


DEFAULT_POLICY = RadiusPolicy()


__all__ = ["RadiusPolicy", "DEFAULT_POLICY"]
