"""Tests for label measurement and wrapping."""

import pytest

from orgchart_layout.geometry import line_count, text_width, wrap_label


class TestTextWidth:
    """Tests for text_width."""

    def test_width_scales_with_length(self):
        """Test width is characters times font size times glyph fraction."""
        assert text_width("abc", font_size=10, char_width=0.5) == pytest.approx(15.0)

    def test_empty_text(self):
        """Test empty text has zero width."""
        assert text_width("") == 0.0


class TestWrapLabel:
    """Tests for wrap_label."""

    def test_short_name_single_line(self):
        """Test a name within budget stays on one line."""
        assert wrap_label("Grace", 80) == ["Grace"]

    def test_long_name_wraps(self):
        """Test a name over budget wraps at word boundaries."""
        # 12 chars * 12 * 0.6 = 86.4 > 80
        assert wrap_label("Ada Lovelace", 80) == ["Ada", "Lovelace"]

    def test_greedy_packing(self):
        """Test words are packed greedily onto lines."""
        assert wrap_label("Jo Li Mo", 80) == ["Jo Li Mo"]
        assert wrap_label("Jo Li Mo", 40) == ["Jo Li", "Mo"]

    def test_overlong_word_kept_whole(self):
        """Test a word wider than the budget gets its own unsplit line."""
        lines = wrap_label("a Supercalifragilistic b", 80)
        assert lines == ["a", "Supercalifragilistic", "b"]

    def test_empty_and_whitespace(self):
        """Test labels without words yield one empty line."""
        assert wrap_label("", 80) == [""]
        assert wrap_label("   ", 80) == [""]

    def test_collapses_whitespace(self):
        """Test runs of whitespace do not create empty lines."""
        assert wrap_label("  Ada   Lovelace  ", 200) == ["Ada Lovelace"]

    def test_deterministic(self):
        """Test wrapping the same name twice gives the same lines."""
        name = "Head of Platform Engineering"
        assert wrap_label(name, 80) == wrap_label(name, 80)


class TestLineCount:
    """Tests for line_count."""

    def test_never_zero(self):
        """Test a blank name counts as one line."""
        assert line_count("", 80) == 1
        assert line_count(" \t ", 80) == 1

    def test_counts_wrapped_lines(self):
        """Test count matches the wrapped lines."""
        assert line_count("Ada Lovelace", 80) == 2
        assert line_count("Head of Platform Engineering", 80) == len(
            wrap_label("Head of Platform Engineering", 80)
        )
