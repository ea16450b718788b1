"""
Retained visual scene graph with SVG serialization.

The scene is a tree of keyed elements. Renderers address children by
``(tag, key)`` through ``join``, which returns the existing element or
creates it, so repeated renders update elements in place instead of
appending duplicates. ``prune`` drops children that were not joined in
the latest pass.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Optional
from xml.sax.saxutils import escape

from ..types import SizeType
from ..validation import validate_canvas_size

_ATTR_ENTITIES = {'"': "&quot;"}


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = f"{value:.2f}"
        return "0.00" if text == "-0.00" else text
    if isinstance(value, (list, tuple)):
        return " ".join(_format_value(v) for v in value)
    return str(value)


class SceneNode:
    """
    One element of the scene graph.

    Attributes:
        tag: Element name (``g``, ``circle``, ``text``, ...)
        key: Identity among siblings of the same tag
        attrs: Attribute values, serialized in insertion order
        text: Character data, if any
    """

    def __init__(
        self,
        tag: str,
        key: Optional[str] = None,
        attrs: Optional[dict[str, Any]] = None,
        text: Optional[str] = None,
    ) -> None:
        self.tag = tag
        self.key = key
        self.attrs: dict[str, Any] = dict(attrs or {})
        self.text = text
        self.parent: Optional[SceneNode] = None
        self._classes: list[str] = []
        self._children: list[SceneNode] = []
        self._by_key: dict[tuple[str, Optional[str]], SceneNode] = {}

    def __repr__(self) -> str:
        return f"SceneNode({self.tag!r}, key={self.key!r}, children={len(self._children)})"

    # -------------------------------------------------------------------------
    # Attributes and classes
    # -------------------------------------------------------------------------

    def set(self, **attrs: Any) -> SceneNode:
        """Set attributes; underscores in names become hyphens. None removes."""
        for name, value in attrs.items():
            name = name.rstrip("_").replace("_", "-")
            if value is None:
                self.attrs.pop(name, None)
            else:
                self.attrs[name] = value
        return self

    def get(self, name: str, default: Any = None) -> Any:
        return self.attrs.get(name, default)

    @property
    def classes(self) -> tuple[str, ...]:
        return tuple(self._classes)

    def add_class(self, *names: str) -> SceneNode:
        for name in names:
            if name not in self._classes:
                self._classes.append(name)
        return self

    def remove_class(self, *names: str) -> SceneNode:
        for name in names:
            if name in self._classes:
                self._classes.remove(name)
        return self

    def has_class(self, name: str) -> bool:
        return name in self._classes

    def classed(self, name: str, flag: bool) -> SceneNode:
        """Add or remove a class depending on ``flag``."""
        return self.add_class(name) if flag else self.remove_class(name)

    # -------------------------------------------------------------------------
    # Children
    # -------------------------------------------------------------------------

    @property
    def children(self) -> tuple[SceneNode, ...]:
        return tuple(self._children)

    def __iter__(self) -> Iterator[SceneNode]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def join(self, tag: str, key: Optional[str] = None) -> SceneNode:
        """Get the child with this tag and key, creating it if absent."""
        child = self._by_key.get((tag, key))
        if child is None:
            child = SceneNode(tag, key)
            child.parent = self
            self._children.append(child)
            self._by_key[(tag, key)] = child
        return child

    def child(self, tag: str, key: Optional[str] = None) -> Optional[SceneNode]:
        """Existing child with this tag and key, or None."""
        return self._by_key.get((tag, key))

    def remove(self, child: SceneNode) -> None:
        self._children.remove(child)
        del self._by_key[(child.tag, child.key)]
        child.parent = None

    def prune(self, keep: Iterable[Optional[str]], tag: Optional[str] = None) -> int:
        """
        Remove children whose key is not in ``keep``.

        Args:
            keep: Keys to retain
            tag: Only consider children with this tag

        Returns:
            Number of children removed
        """
        keep_set = set(keep)
        stale = [
            c for c in self._children if (tag is None or c.tag == tag) and c.key not in keep_set
        ]
        for c in stale:
            self.remove(c)
        return len(stale)

    def clear(self) -> None:
        for c in list(self._children):
            self.remove(c)

    def walk(self) -> Iterator[SceneNode]:
        """Depth-first iteration over this element and its descendants."""
        yield self
        for c in self._children:
            yield from c.walk()

    def select(
        self,
        tag: Optional[str] = None,
        class_: Optional[str] = None,
        where: Optional[Callable[[SceneNode], bool]] = None,
    ) -> list[SceneNode]:
        """Descendants matching a tag, a class and a predicate."""
        return [
            n
            for n in self.walk()
            if n is not self
            and (tag is None or n.tag == tag)
            and (class_ is None or n.has_class(class_))
            and (where is None or where(n))
        ]

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_svg(self, indent: int = 0) -> str:
        """Serialize this element and its subtree."""
        pad = "  " * indent
        parts = []
        if self._classes:
            parts.append(f'class="{escape(" ".join(self._classes), _ATTR_ENTITIES)}"')
        for name, value in self.attrs.items():
            parts.append(f'{name}="{escape(_format_value(value), _ATTR_ENTITIES)}"')
        opening = f"<{self.tag}" + ("" if not parts else " " + " ".join(parts))

        if not self._children and self.text is None:
            return f"{pad}{opening}/>"
        if not self._children:
            return f"{pad}{opening}>{escape(self.text or '')}</{self.tag}>"

        lines = [f"{pad}{opening}>"]
        if self.text:
            lines.append(f"{pad}  {escape(self.text)}")
        for c in self._children:
            lines.append(c.to_svg(indent + 1))
        lines.append(f"{pad}</{self.tag}>")
        return "\n".join(lines)


class Scene:
    """
    Top-level SVG scene for an org chart.

    Structure::

        svg (viewBox centred on the origin)
          defs            image patterns and team title arcs
          rect.background
          text.loading    shown until data arrives
          g.viewport      pan/zoom transform
            g.links
            g.nodes
    """

    def __init__(
        self,
        size: SizeType = (800.0, 600.0),
        *,
        background: str = "#666",
        font_family: str = "sans-serif",
    ) -> None:
        """
        Build an empty scene.

        Raises:
            InvalidCanvasSizeError: If width or height is not positive
        """
        self._size = validate_canvas_size(size)
        self.background_color = background
        self.font_family = font_family

        self.root = SceneNode("svg")
        self.root.set(xmlns="http://www.w3.org/2000/svg")
        self.defs = self.root.join("defs")
        self.background = self.root.join("rect", "background").add_class("background")
        self.loading = self.root.join("text", "loading").add_class("loading")
        self.viewport = self.root.join("g", "viewport").add_class("viewport")
        self.links = self.viewport.join("g", "links").add_class("links")
        self.nodes = self.viewport.join("g", "nodes").add_class("nodes")

        self._is_loading = False
        self._apply_size()
        self.set_loading(False)

    @property
    def size(self) -> tuple[float, float]:
        """Viewport size as (width, height)."""
        return self._size

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def resize(self, size: SizeType) -> None:
        """
        Update the viewport dimensions; element positions are untouched.

        Raises:
            InvalidCanvasSizeError: If width or height is not positive
        """
        self._size = validate_canvas_size(size)
        self._apply_size()

    def _apply_size(self) -> None:
        width, height = self._size
        self.root.set(
            width=width,
            height=height,
            viewBox=(-width / 2, -height / 2, width, height),
        )
        self.background.set(
            x=-width / 2, y=-height / 2, width=width, height=height, fill=self.background_color
        )

    def set_loading(self, loading: bool, message: str = "Loading…") -> None:
        """Show or hide the neutral loading state."""
        self._is_loading = bool(loading)
        if loading:
            self.loading.text = message
            self.loading.set(
                x=0.0,
                y=0.0,
                text_anchor="middle",
                dominant_baseline="central",
                font_family=self.font_family,
                fill="#fff",
                display=None,
            )
        else:
            self.loading.text = None
            self.loading.set(display="none")

    def clear(self) -> None:
        """Remove every rendered link, node and definition."""
        self.links.clear()
        self.nodes.clear()
        self.defs.clear()

    def find(self, node_id: str) -> Optional[SceneNode]:
        """Group element bound to a node id (top-level or team member)."""
        hits = self.nodes.select(where=lambda n: n.get("data-id") == node_id and n.tag == "g")
        return hits[0] if hits else None

    def to_svg(self) -> str:
        """Serialize the whole scene."""
        return self.root.to_svg()


__all__ = ["SceneNode", "Scene"]
