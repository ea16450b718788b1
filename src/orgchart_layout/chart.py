"""
Mount point wiring the layout engine, tick scheduler, render binder and
viewport controller together.

Mounting new data disposes the previous engine and builds a new one;
there is no incremental patching. Until data arrives the scene shows a
neutral loading state.
"""

from __future__ import annotations

import time
from typing import Any, Optional, Sequence, Union

from .layout import OrgChartLayout
from .radius import DEFAULT_POLICY, RadiusPolicy
from .render.binder import RenderBinder
from .render.scene import Scene
from .scheduler import FrameHost, ManualHost, TickScheduler
from .types import (
    Event,
    EventCallback,
    EventType,
    LayoutState,
    LinkLike,
    Node,
    NodeLike,
    SizeType,
    as_node_id,
)
from .viewport import Clock, ViewportController

# Default for mount(searched_node=...): keep the current search
_KEEP: Any = object()


class OrgChart:
    """
    Interactive org chart bound to a frame host.

    Example:
        host = ManualHost()
        chart = OrgChart((800, 600), host=host)
        chart.mount(nodes, links)
        host.flush()
        chart.set_searched_node("42")
        svg = chart.to_svg()
    """

    def __init__(
        self,
        size: SizeType = (800.0, 600.0),
        *,
        host: Optional[FrameHost] = None,
        radius_policy: Optional[RadiusPolicy] = None,
        layout_options: Optional[dict[str, Any]] = None,
        style: Optional[dict[str, Any]] = None,
        focus_scale: float = 2.0,
        duration: float = 0.75,
        clock: Clock = time.monotonic,
        observer: Optional[EventCallback] = None,
    ) -> None:
        """
        Args:
            size: Viewport (width, height)
            host: Frame host driving ticks; defaults to a ManualHost
            radius_policy: Label and team sizing rules
            layout_options: Extra keyword arguments for OrgChartLayout
            style: Keyword styling for RenderBinder
            focus_scale: Zoom scale applied by focus
            duration: Focus transition length in seconds
            clock: Monotonic time source for viewport transitions
            observer: Callback receiving every layout, render and viewport event

        Raises:
            InvalidCanvasSizeError: If width or height is not positive
        """
        self._policy = radius_policy or DEFAULT_POLICY
        self._layout_options: dict[str, Any] = dict(layout_options or {})
        self._host: FrameHost = host if host is not None else ManualHost()
        self.observer = observer

        self._scene = Scene(size)
        self._binder = RenderBinder(self._scene, self._policy, **(style or {}))
        self._viewport = ViewportController(
            self._scene,
            self._locate,
            focus_scale=focus_scale,
            duration=duration,
            clock=clock,
            observer=self._emit,
        )
        self._layout: Optional[OrgChartLayout] = None
        self._scheduler: Optional[TickScheduler] = None
        self._searched: Optional[str] = None
        self._scene.set_loading(True)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def scene(self) -> Scene:
        return self._scene

    @property
    def layout(self) -> Optional[OrgChartLayout]:
        """Engine for the mounted data, or None while loading."""
        return self._layout

    @property
    def viewport(self) -> ViewportController:
        return self._viewport

    @property
    def binder(self) -> RenderBinder:
        return self._binder

    @property
    def scheduler(self) -> Optional[TickScheduler]:
        return self._scheduler

    @property
    def searched_node(self) -> Optional[str]:
        return self._searched

    @property
    def size(self) -> tuple[float, float]:
        return self._scene.size

    # -------------------------------------------------------------------------
    # Mounting
    # -------------------------------------------------------------------------

    def mount(
        self,
        nodes: Optional[Sequence[NodeLike]],
        links: Optional[Sequence[LinkLike]],
        searched_node: Union[Node, str, None] = _KEEP,
    ) -> Optional[OrgChartLayout]:
        """
        Replace the displayed graph.

        Passing None for both collections shows the loading state. The
        previous engine and its pending frame are released either way.
        Without ``searched_node`` the current search (possibly set while
        loading) is focused on the new graph; pass None to clear it.

        Returns:
            The new layout, or None while loading

        Raises:
            InvalidGraphError: If exactly one of nodes and links is None
        """
        if searched_node is _KEEP:
            searched_node = self._searched
        self._release()
        self._scene.clear()

        if nodes is None and links is None:
            self._scene.set_loading(True)
            self._searched = as_node_id(searched_node)
            return None

        layout = OrgChartLayout(
            nodes=nodes,
            links=links,
            radius_policy=self._policy,
            observer=self._emit,
            **self._layout_options,
        )
        self._layout = layout
        self._render()
        self._scheduler = TickScheduler(self._on_frame, self._host)
        self._scheduler.start()
        self.set_searched_node(searched_node)
        return layout

    def set_searched_node(self, node: Union[Node, str, None]) -> None:
        """Focus and highlight a node, or reset the viewport for None."""
        self._searched = as_node_id(node)
        if self._layout is None:
            return
        self._viewport.focus(self._searched)
        self._wake()

    def resize(self, size: SizeType) -> None:
        """
        Update the viewport dimensions and redraw at current positions.

        The simulation is not restarted.

        Raises:
            InvalidCanvasSizeError: If width or height is not positive
        """
        self._scene.resize(size)
        if self._layout is not None:
            self._render()

    def dispose(self) -> None:
        """Release the engine and any pending frame."""
        self._release()

    def _release(self) -> None:
        if self._scheduler is not None:
            self._scheduler.dispose()
            self._scheduler = None
        if self._layout is not None:
            self._layout.dispose()
            self._layout = None
        self._viewport.highlight(None)

    # -------------------------------------------------------------------------
    # Frame loop
    # -------------------------------------------------------------------------

    def _on_frame(self) -> bool:
        """One host frame: tick, render, advance the viewport."""
        layout = self._layout
        if layout is None:
            return True
        settled = layout.state is LayoutState.QUIESCENT
        done = layout.tick()
        self._render()
        if done and not settled and self._searched is not None:
            # Re-target the search at its settled position
            self._viewport.focus(self._searched)
        animating = self._viewport.advance()
        return done and not animating

    def _wake(self) -> None:
        if self._scheduler is not None and not self._scheduler.is_disposed:
            self._scheduler.start()

    def _render(self) -> None:
        layout = self._layout
        if layout is None:
            return
        frame = layout.frame()
        self._binder.render(layout.nodes, layout.links, frame)
        self._viewport.refresh_highlight()
        self._emit({"type": EventType.render, "frame": frame})

    def _locate(self, node_id: str) -> Optional[tuple[float, float]]:
        if self._layout is None:
            return None
        return self._layout.position(node_id)

    def _emit(self, event: Optional[Event]) -> None:
        if self.observer is not None:
            self.observer(event)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def to_svg(self) -> str:
        """Serialize the current scene."""
        return self._scene.to_svg()


__all__ = ["OrgChart"]
