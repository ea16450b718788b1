"""
Label measurement and line wrapping.

Text width is estimated from the character count and an average glyph
width expressed as a fraction of the font size. The estimate does not
depend on any font backend, so wrapping is deterministic and agrees
between team packing and outer collision sizing.
"""

from __future__ import annotations

#: Average glyph width as a fraction of the font size.
DEFAULT_CHAR_WIDTH = 0.6


def text_width(
    text: str,
    font_size: float = 12.0,
    char_width: float = DEFAULT_CHAR_WIDTH,
) -> float:
    """
    Estimate the rendered width of a single line.

    Args:
        text: Line of text
        font_size: Font size in scene units
        char_width: Average glyph width as a fraction of font_size

    Returns:
        Estimated width in scene units
    """
    return len(text) * font_size * char_width


def wrap_label(
    text: str,
    max_width: float,
    font_size: float = 12.0,
    char_width: float = DEFAULT_CHAR_WIDTH,
) -> list[str]:
    """
    Wrap a label into lines no wider than ``max_width``.

    Words are packed greedily. A word wider than ``max_width`` is kept
    whole on its own line rather than split.

    Args:
        text: Label text
        max_width: Width budget per line
        font_size: Font size in scene units
        char_width: Average glyph width as a fraction of font_size

    Returns:
        Wrapped lines. A label with no words yields a single empty line.
    """
    words = (text or "").split()
    if not words:
        return [""]

    lines: list[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if not current or text_width(candidate, font_size, char_width) <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def line_count(
    text: str,
    max_width: float,
    font_size: float = 12.0,
    char_width: float = DEFAULT_CHAR_WIDTH,
) -> int:
    """Number of wrapped lines for ``text``; never less than 1."""
    return max(1, len(wrap_label(text, max_width, font_size, char_width)))


__all__ = ["DEFAULT_CHAR_WIDTH", "text_width", "wrap_label", "line_count"]
