"""
Render/tick binder: projects layout frames onto the scene graph.

This is the only place where layout state becomes visual primitives.
Every node gets a group translated to its position holding:

- a bounding circle (class ``bound``) sized by the radius policy
- a face circle textured with the node's picture, or a flat fill
- a wrapped, multi-line label under the face

Teams additionally get a title arced along their bounding circle and one
member group per child, translated to the child's packed offset.

Rendering is idempotent. Elements are keyed by node id, so rendering the
same frame twice leaves the scene unchanged, and classes added by other
components (such as highlight marks) are preserved.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Union

from ..geometry.enclose import Circle, enclose
from ..radius import DEFAULT_POLICY, RadiusPolicy
from ..types import LayoutFrame, Link, Node, NodeType, PersonNode, ResolvedLink, TeamNode
from .scene import Scene, SceneNode

if TYPE_CHECKING:
    from ..layout import OrgChartLayout

LinkInput = Union[Link, ResolvedLink]

#: Id prefix of image patterns in ``<defs>``.
IMAGE_PATTERN_PREFIX = "node-image-"
#: Id prefix of team title arcs in ``<defs>``.
TEAM_ARC_PREFIX = "team-arc-"


def image_pattern_id(node_id: str) -> str:
    return f"{IMAGE_PATTERN_PREFIX}{node_id}"


def team_arc_id(node_id: str) -> str:
    return f"{TEAM_ARC_PREFIX}{node_id}"


def _translate(x: float, y: float) -> str:
    return f"translate({x:.2f},{y:.2f})"


def _link_endpoints(link: LinkInput) -> tuple[str, str]:
    if isinstance(link, ResolvedLink):
        return link.source.id, link.target.id
    return link.source, link.target


class RenderBinder:
    """
    Writes node positions, shapes and labels into a Scene.

    Args:
        scene: Scene to draw into
        policy: Radius policy; must be the one the layout sized nodes with
        face_fill: Face fill when a person has no picture
        face_stroke: Face outline color
        face_stroke_width: Face outline width
        bound_fill: Fill of team bounding circles
        bound_stroke: Outline of bounding circles
        link_color: Link stroke color
        link_opacity: Link stroke opacity
        link_width: Link stroke width
        label_color: Label text color
        team_label_color: Team title and member label color
        font_family: Label font family
    """

    def __init__(
        self,
        scene: Scene,
        policy: Optional[RadiusPolicy] = None,
        *,
        face_fill: str = "#eee",
        face_stroke: str = "#e70000",
        face_stroke_width: float = 1.5,
        bound_fill: str = "#fff",
        bound_stroke: str = "none",
        link_color: str = "#999",
        link_opacity: float = 0.6,
        link_width: float = math.sqrt(2),
        label_color: str = "#fff",
        team_label_color: str = "#333",
        font_family: str = "sans-serif",
    ) -> None:
        self.scene = scene
        self.policy = policy or DEFAULT_POLICY
        self.face_fill = face_fill
        self.face_stroke = face_stroke
        self.face_stroke_width = face_stroke_width
        self.bound_fill = bound_fill
        self.bound_stroke = bound_stroke
        self.link_color = link_color
        self.link_opacity = link_opacity
        self.link_width = link_width
        self.label_color = label_color
        self.team_label_color = team_label_color
        self.font_family = font_family
        self._renders = 0

    @property
    def render_count(self) -> int:
        """Number of completed render passes."""
        return self._renders

    # -------------------------------------------------------------------------
    # Render pass
    # -------------------------------------------------------------------------

    def render(
        self,
        nodes: Sequence[Node],
        links: Iterable[LinkInput],
        frame: LayoutFrame,
    ) -> None:
        """
        Bring the scene in line with ``frame``.

        Nodes missing from the frame, and links with an endpoint missing
        from the frame, are not drawn.
        """
        drawn_nodes: list[str] = []
        used_defs: list[str] = []

        for node in nodes:
            pos = frame.positions.get(node.id)
            if pos is None or not (math.isfinite(pos[0]) and math.isfinite(pos[1])):
                continue
            group = self.scene.nodes.join("g", node.id)
            group.add_class("node")
            group.set(data_id=node.id, data_type=node.type.value, transform=_translate(*pos))
            if node.type is NodeType.TEAM and node.children:
                self._draw_team(group, node, frame, used_defs)
            else:
                self._draw_leaf(group, node, used_defs)
            drawn_nodes.append(node.id)

        self.scene.nodes.prune(drawn_nodes, tag="g")
        self._draw_links(links, frame)
        self.scene.defs.prune(used_defs)
        self.scene.set_loading(False)
        self._renders += 1

    def _draw_links(self, links: Iterable[LinkInput], frame: LayoutFrame) -> None:
        drawn: list[str] = []
        for i, link in enumerate(links):
            source, target = _link_endpoints(link)
            a = frame.positions.get(source)
            b = frame.positions.get(target)
            if a is None or b is None:
                continue
            key = f"{i}:{source}:{target}"
            line = self.scene.links.join("line", key)
            line.add_class("link")
            line.set(
                data_source=source,
                data_target=target,
                x1=a[0],
                y1=a[1],
                x2=b[0],
                y2=b[1],
                stroke=self.link_color,
                stroke_opacity=self.link_opacity,
                stroke_width=self.link_width,
            )
            drawn.append(key)
        self.scene.links.prune(drawn, tag="line")

    # -------------------------------------------------------------------------
    # Shapes
    # -------------------------------------------------------------------------

    def _draw_leaf(
        self,
        group: SceneNode,
        node: Union[PersonNode, TeamNode],
        used_defs: list[str],
        label_color: Optional[str] = None,
    ) -> None:
        """Bound, face and label for a person, or for an empty team drawn as one."""
        radius = self.policy.person_radius(node)  # type: ignore[arg-type]
        face_radius = node.radius if node.type is NodeType.PERSON else self.policy.base_radius
        picture = node.picture_url if node.type is NodeType.PERSON else None

        group.join("circle", "bound").add_class("bound").set(
            data_id=node.id, r=radius, cx=0.0, cy=0.0, fill="none", stroke=self.bound_stroke
        )
        self._draw_face(group, node.id, face_radius, picture, used_defs)
        self._draw_label(group, node.name, face_radius, label_color or self.label_color)

    def _draw_face(
        self,
        group: SceneNode,
        node_id: str,
        face_radius: float,
        picture: Optional[str],
        used_defs: list[str],
    ) -> None:
        if picture:
            pattern_id = image_pattern_id(node_id)
            self._image_pattern(pattern_id, picture, face_radius)
            used_defs.append(pattern_id)
            fill = f"url(#{pattern_id})"
        else:
            fill = self.face_fill
        group.join("circle", "face").add_class("face").set(
            r=face_radius,
            cx=0.0,
            cy=0.0,
            fill=fill,
            stroke=self.face_stroke,
            stroke_width=self.face_stroke_width,
        )

    def _image_pattern(self, pattern_id: str, href: str, face_radius: float) -> None:
        size = face_radius * 2
        pattern = self.scene.defs.join("pattern", pattern_id)
        pattern.set(id=pattern_id, patternUnits="objectBoundingBox", width=1, height=1)
        pattern.join("image").set(href=href, x=0.0, y=0.0, width=size, height=size)

    def _draw_label(self, group: SceneNode, name: str, face_radius: float, color: str) -> None:
        """Wrapped label, one tspan per line, starting under the face."""
        lines = self.policy.wrap(name or "")
        text = group.join("text", "label").add_class("label")
        text.set(
            text_anchor="middle",
            font_size=self.policy.font_size,
            font_family=self.font_family,
            fill=color,
        )
        top = face_radius + self.policy.font_size
        for i, line in enumerate(lines):
            tspan = text.join("tspan", str(i))
            tspan.set(x=0.0, y=top + i * self.policy.line_height)
            tspan.text = line
        text.prune([str(i) for i in range(len(lines))], tag="tspan")

    def _draw_team(
        self,
        group: SceneNode,
        team: TeamNode,
        frame: LayoutFrame,
        used_defs: list[str],
    ) -> None:
        policy = self.policy
        members = [c for c in team.children if c.id in frame.offsets]
        circles = [Circle(*frame.offsets[c.id], policy.effective_radius(c)) for c in members]
        bound_radius = enclose(circles).r + policy.team_padding

        group.join("circle", "bound").add_class("bound", "team-bound").set(
            data_id=team.id,
            r=bound_radius,
            cx=0.0,
            cy=0.0,
            fill=self.bound_fill,
            stroke=self.bound_stroke,
        )

        arc_id = team_arc_id(team.id)
        arc_radius = bound_radius + 5
        self.scene.defs.join("path", arc_id).set(
            id=arc_id,
            d=f"M {-arc_radius:.2f},0 A {arc_radius:.2f},{arc_radius:.2f} 0 0,1 {arc_radius:.2f},0",
            fill="none",
        )
        used_defs.append(arc_id)

        title = group.join("text", "team-label").add_class("team-label")
        title.set(
            font_size=policy.team_label_size,
            font_family=self.font_family,
            fill=self.team_label_color,
        )
        path = title.join("textPath", "arc")
        path.set(href=f"#{arc_id}", startOffset="50%", text_anchor="middle")
        path.text = team.name

        holder = group.join("g", "members").add_class("members")
        drawn: list[str] = []
        for child in members:
            dx, dy = frame.offsets[child.id]
            member = holder.join("g", child.id).add_class("node", "member")
            member.set(data_id=child.id, data_parent=team.id, transform=_translate(dx, dy))
            self._draw_leaf(member, child, used_defs, self.team_label_color)
            drawn.append(child.id)
        holder.prune(drawn, tag="g")


def render_svg(
    layout: OrgChartLayout,
    size: tuple[float, float] = (800.0, 600.0),
    *,
    policy: Optional[RadiusPolicy] = None,
    **style: object,
) -> str:
    """
    Render a layout's current frame to an SVG document.

    Args:
        layout: Layout to draw; typically after run()
        size: Viewport (width, height)
        policy: Radius policy; defaults to the layout's
        style: Keyword styling passed to RenderBinder

    Returns:
        SVG string
    """
    scene = Scene(size)
    binder = RenderBinder(scene, policy or layout.radius_policy, **style)  # type: ignore[arg-type]
    binder.render(layout.nodes, layout.links, layout.frame())
    return scene.to_svg()


__all__ = [
    "RenderBinder",
    "render_svg",
    "image_pattern_id",
    "team_arc_id",
    "IMAGE_PATTERN_PREFIX",
    "TEAM_ARC_PREFIX",
]
