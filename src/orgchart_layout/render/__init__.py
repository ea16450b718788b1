"""
Scene graph and render binder.

- Scene, SceneNode: Retained, keyed scene graph serialized to SVG
- RenderBinder: Projects layout frames onto a Scene
- render_svg: One-shot SVG export of a layout's current frame
"""

from .binder import RenderBinder, image_pattern_id, render_svg, team_arc_id
from .scene import Scene, SceneNode

__all__ = [
    "Scene",
    "SceneNode",
    "RenderBinder",
    "render_svg",
    "image_pattern_id",
    "team_arc_id",
]
