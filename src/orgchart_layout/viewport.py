"""
Viewport controller: pan/zoom transform, focus transitions and highlight.

The viewport transform is composited over the rendered scene by writing
the ``transform`` attribute of the scene's ``g.viewport`` group. Focus
transitions are time-based interpolations, independent of the layout
tick rate; starting a new transition discards the one in flight and
starts from the current interpolated transform.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .render.scene import Scene, SceneNode
from .types import Event, EventCallback, EventType, Node, as_node_id

#: Class marking highlighted bounds and links.
HIGHLIGHT_CLASS = "highlighted"

Locator = Callable[[str], Optional[tuple[float, float]]]
Clock = Callable[[], float]


@dataclass(frozen=True)
class Transform:
    """
    Uniform scale followed by a translation: ``p -> k * p + (x, y)``.

    Attributes:
        k: Scale factor
        x, y: Translation
    """

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, point: tuple[float, float]) -> tuple[float, float]:
        return self.k * point[0] + self.x, self.k * point[1] + self.y

    def invert(self, point: tuple[float, float]) -> tuple[float, float]:
        return (point[0] - self.x) / self.k, (point[1] - self.y) / self.k

    def translate(self, tx: float, ty: float) -> Transform:
        """Translate by (tx, ty) in the transformed coordinate space."""
        return Transform(self.k, self.x + self.k * tx, self.y + self.k * ty)

    def scale(self, factor: float) -> Transform:
        return Transform(self.k * factor, self.x, self.y)

    @property
    def is_identity(self) -> bool:
        return self.k == 1.0 and self.x == 0.0 and self.y == 0.0

    def to_svg(self) -> str:
        return f"translate({self.x:.2f},{self.y:.2f}) scale({self.k:.4f})"


IDENTITY = Transform()


def interpolate(a: Transform, b: Transform, t: float) -> Transform:
    """Linear interpolation between two transforms; exact at t = 0 and t = 1."""
    if t <= 0:
        return a
    if t >= 1:
        return b
    return Transform(
        a.k + (b.k - a.k) * t,
        a.x + (b.x - a.x) * t,
        a.y + (b.y - a.y) * t,
    )


def ease_cubic_in_out(t: float) -> float:
    """Symmetric cubic easing on [0, 1]."""
    t = max(0.0, min(1.0, t)) * 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


@dataclass(frozen=True)
class Transition:
    """An in-flight interpolation between two transforms."""

    start: Transform
    end: Transform
    started_at: float
    duration: float
    ease: Callable[[float], float] = ease_cubic_in_out

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return max(0.0, min(1.0, (now - self.started_at) / self.duration))

    def value_at(self, now: float) -> Transform:
        return interpolate(self.start, self.end, self.ease(self.progress(now)))

    def done(self, now: float) -> bool:
        return self.progress(now) >= 1.0


class ViewportController:
    """
    Pan, zoom, focus and highlight over a Scene.

    Example:
        viewport = ViewportController(scene, layout.position)
        viewport.focus("42")
        viewport.advance()      # once per frame while animating
        viewport.focus(None)    # back to identity, highlight cleared
    """

    def __init__(
        self,
        scene: Scene,
        locate: Locator,
        *,
        focus_scale: float = 2.0,
        duration: float = 0.75,
        scale_extent: tuple[float, float] = (0.1, 8.0),
        clock: Clock = time.monotonic,
        observer: Optional[EventCallback] = None,
    ) -> None:
        """
        Args:
            scene: Scene whose viewport group is transformed
            locate: Node id -> current scene position, or None if unknown
            focus_scale: Zoom scale applied by focus
            duration: Focus transition length in seconds
            scale_extent: (min, max) zoom scale
            clock: Monotonic time source in seconds
            observer: Callback receiving focus and highlight events
        """
        self.scene = scene
        self.locate = locate
        self.focus_scale = float(focus_scale)
        self.duration = max(0.0, float(duration))
        self.scale_extent = (float(scale_extent[0]), float(scale_extent[1]))
        self.clock = clock
        self.observer = observer

        self._transform: Transform = IDENTITY
        self._transition: Optional[Transition] = None
        self._focused: Optional[str] = None
        self._highlighted: Optional[str] = None
        self._write(self._transform)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def transform(self) -> Transform:
        """Transform as of the last advance."""
        return self._transform

    @property
    def target(self) -> Transform:
        """Transform the viewport is heading to (or sits at)."""
        if self._transition is not None:
            return self._transition.end
        return self._transform

    @property
    def is_animating(self) -> bool:
        return self._transition is not None

    @property
    def focused(self) -> Optional[str]:
        return self._focused

    @property
    def highlighted(self) -> Optional[str]:
        return self._highlighted

    # -------------------------------------------------------------------------
    # Transform
    # -------------------------------------------------------------------------

    def _clamp_scale(self, k: float) -> float:
        lo, hi = self.scale_extent
        return max(lo, min(hi, k))

    def set_transform(self, transform: Transform) -> None:
        """Jump to ``transform``, cancelling any transition."""
        self._transition = None
        self._transform = Transform(self._clamp_scale(transform.k), transform.x, transform.y)
        self._write(self._transform)

    def pan(self, dx: float, dy: float) -> None:
        """Shift the view by (dx, dy) screen units."""
        current = self.current()
        self.set_transform(Transform(current.k, current.x + dx, current.y + dy))

    def zoom(self, factor: float, center: tuple[float, float] = (0.0, 0.0)) -> None:
        """Scale by ``factor`` keeping the screen point ``center`` fixed."""
        current = self.current()
        k = self._clamp_scale(current.k * factor)
        cx, cy = center
        ratio = k / current.k
        x = cx - (cx - current.x) * ratio
        y = cy - (cy - current.y) * ratio
        self.set_transform(Transform(k, x, y))

    def current(self, now: Optional[float] = None) -> Transform:
        """Interpolated transform at ``now`` without writing it to the scene."""
        if self._transition is None:
            return self._transform
        return self._transition.value_at(self.clock() if now is None else now)

    def transition_to(self, target: Transform, now: Optional[float] = None) -> None:
        """Animate from the current interpolated transform to ``target``."""
        now = self.clock() if now is None else now
        start = self.current(now)
        self._transform = start
        if self.duration <= 0:
            self.set_transform(target)
            return
        self._transition = Transition(start, target, now, self.duration)

    def advance(self, now: Optional[float] = None) -> bool:
        """
        Write the transform for ``now`` into the scene.

        Returns:
            True while a transition is still in flight
        """
        if self._transition is None:
            return False
        now = self.clock() if now is None else now
        self._transform = self._transition.value_at(now)
        if self._transition.done(now):
            self._transform = self._transition.end
            self._transition = None
        self._write(self._transform)
        return self._transition is not None

    def _write(self, transform: Transform) -> None:
        self.scene.viewport.set(transform=transform.to_svg())

    # -------------------------------------------------------------------------
    # Focus and highlight
    # -------------------------------------------------------------------------

    def focus(self, node: Union[Node, str, None], now: Optional[float] = None) -> Transform:
        """
        Center and zoom on a node, or reset to identity for None.

        The target position comes from ``locate`` at call time, so team
        members resolve through their team. Focusing the node already
        targeted does not restart the transition.

        Returns:
            The target transform
        """
        node_id = as_node_id(node)
        if node_id is None:
            target = IDENTITY
        else:
            pos = self.locate(node_id)
            if pos is None:
                return self.target
            k = self._clamp_scale(self.focus_scale)
            target = Transform(k, -k * pos[0], -k * pos[1])

        if target != self.target:
            self.transition_to(target, now)
        self._focused = node_id
        self.highlight(node_id)
        self._emit({"type": EventType.focus, "node_id": node_id, "transform": target})
        return target

    def highlight(self, node: Union[Node, str, None]) -> list[SceneNode]:
        """
        Mark a node's bounding shape and its incident links.

        Any previous highlight is cleared first; None only clears.

        Returns:
            The marked elements
        """
        node_id = as_node_id(node)
        for el in self.scene.root.select(class_=HIGHLIGHT_CLASS):
            el.remove_class(HIGHLIGHT_CLASS)
        self._highlighted = node_id
        marked = self._mark(node_id) if node_id is not None else []
        self._emit({"type": EventType.highlight, "node_id": node_id})
        return marked

    def refresh_highlight(self) -> list[SceneNode]:
        """Re-apply the current highlight to elements created since it was set."""
        if self._highlighted is None:
            return []
        return self._mark(self._highlighted)

    def _mark(self, node_id: str) -> list[SceneNode]:
        bounds = self.scene.nodes.select(
            tag="circle", class_="bound", where=lambda n: n.get("data-id") == node_id
        )
        links = self.scene.links.select(
            tag="line",
            where=lambda n: n.get("data-source") == node_id or n.get("data-target") == node_id,
        )
        marked = bounds + links
        for el in marked:
            el.add_class(HIGHLIGHT_CLASS)
        return marked

    def _emit(self, event: Event) -> None:
        if self.observer is not None:
            self.observer(event)


__all__ = [
    "Transform",
    "IDENTITY",
    "Transition",
    "ViewportController",
    "interpolate",
    "ease_cubic_in_out",
    "HIGHLIGHT_CLASS",
]
