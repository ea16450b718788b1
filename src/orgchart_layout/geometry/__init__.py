"""
Geometry utilities: label wrapping and minimal enclosing circles.

Pure functions with no state.
"""

from .enclose import Circle, enclose
from .labels import DEFAULT_CHAR_WIDTH, line_count, text_width, wrap_label

__all__ = [
    "Circle",
    "enclose",
    "DEFAULT_CHAR_WIDTH",
    "line_count",
    "text_width",
    "wrap_label",
]
